"""
Pure domain layer.

This module contains the entity model, value objects and the clock
abstraction with NO dependencies on:
- Storage
- Time/clock (except through an injected Clock)
- I/O

All domain objects are immutable and deterministic.
"""

from staffing_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from staffing_kernel.domain.models import (
    Assignment,
    Priority,
    Project,
    ProjectStatus,
    Skill,
    SkillLevel,
    Staff,
    StaffStatus,
)
from staffing_kernel.domain.values import DateRange, round_money, to_decimal

__all__ = [
    "Assignment",
    "Clock",
    "DateRange",
    "DeterministicClock",
    "Priority",
    "Project",
    "ProjectStatus",
    "Skill",
    "SkillLevel",
    "Staff",
    "StaffStatus",
    "SystemClock",
    "round_money",
    "to_decimal",
]
