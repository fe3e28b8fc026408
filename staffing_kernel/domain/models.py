"""
Staffing Domain Models (``staffing_kernel.domain.models``).

Responsibility
--------------
Frozen dataclass value objects representing the nouns of resource staffing:
projects, staff members with their skills, and the assignments joining them.

Architecture position
---------------------
**Kernel > Domain** -- pure data definitions with ZERO I/O.  Stored by
``StaffingStore`` and consumed by the engines.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields and hour counts are ``Decimal`` -- NEVER ``float``.
* Every dated entity satisfies ``end_date >= start_date``.
* ``Assignment.total_cost`` is always ``billable_hours * hourly_rate``; it
  is computed, never stored, so no edit can leave it stale.

Failure modes
-------------
* InvalidRangeError for reversed date ranges.
* InvalidAllocationError / InvalidPercentageError / NegativeAmountError for
  out-of-domain field values.
* ValueError for unknown enum values.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from staffing_kernel.domain.values import (
    DateRange,
    ZERO,
    non_negative,
    percentage,
)
from staffing_kernel.exceptions import InvalidAllocationError


class ProjectStatus(str, Enum):
    """Lifecycle state of a project."""

    PLANNING = "planning"
    ACTIVE = "active"
    ON_HOLD = "on-hold"
    COMPLETED = "completed"


class Priority(str, Enum):
    """Project priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class StaffStatus(str, Enum):
    """Booking state of a staff member."""

    AVAILABLE = "available"
    PARTIALLY_BOOKED = "partially-booked"
    FULLY_BOOKED = "fully-booked"
    ON_LEAVE = "on-leave"


class SkillLevel(str, Enum):
    """Seniority on a single skill."""

    JUNIOR = "junior"
    MID = "mid"
    SENIOR = "senior"
    EXPERT = "expert"


def _set(obj: Any, name: str, value: Any) -> None:
    object.__setattr__(obj, name, value)


@dataclass(frozen=True)
class Skill:
    """A named skill with level and experience."""

    name: str
    level: SkillLevel
    years_of_experience: Decimal = ZERO

    def __post_init__(self) -> None:
        _set(self, "level", SkillLevel(self.level))
        _set(
            self,
            "years_of_experience",
            non_negative(self.years_of_experience, "years_of_experience"),
        )


@dataclass(frozen=True)
class Project:
    """
    A client project.

    ``team_size`` is not a field: it is derived from the project's active
    assignments by the store snapshot.
    """

    id: str
    name: str
    client: str
    status: ProjectStatus
    priority: Priority
    start_date: date
    end_date: date
    budget: Decimal = ZERO
    received_amount: Decimal = ZERO
    spent: Decimal = ZERO
    progress: int = 0
    team_lead: str | None = None
    description: str = ""
    tech_stack: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _set(self, "status", ProjectStatus(self.status))
        _set(self, "priority", Priority(self.priority))
        DateRange(self.start_date, self.end_date)
        for name in ("budget", "received_amount", "spent"):
            _set(self, name, non_negative(getattr(self, name), name))
        percentage(self.progress, "progress")
        _set(self, "tech_stack", tuple(self.tech_stack))

    @property
    def date_range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @property
    def is_active(self) -> bool:
        return self.status == ProjectStatus.ACTIVE

    def with_changes(self, **changes: Any) -> Project:
        """Return a copy with ``changes`` applied and re-validated."""
        return replace(self, **changes)


@dataclass(frozen=True)
class Staff:
    """
    A staff member.

    ``client_rate`` is typically >= ``internal_rate``; that is not enforced.
    """

    id: str
    name: str
    role: str
    department: str
    status: StaffStatus
    availability: int
    billable_utilization: int
    client_rate: Decimal
    internal_rate: Decimal = ZERO
    skills: tuple[Skill, ...] = ()
    current_projects: tuple[str, ...] = ()
    email: str = ""
    location: str = ""

    def __post_init__(self) -> None:
        _set(self, "status", StaffStatus(self.status))
        percentage(self.availability, "availability")
        percentage(self.billable_utilization, "billable_utilization")
        _set(self, "client_rate", non_negative(self.client_rate, "client_rate"))
        _set(self, "internal_rate", non_negative(self.internal_rate, "internal_rate"))
        _set(self, "skills", tuple(self.skills))
        _set(self, "current_projects", tuple(self.current_projects))

    @property
    def initials(self) -> str:
        return "".join(part[0] for part in self.name.split() if part)

    def with_changes(self, **changes: Any) -> Staff:
        """Return a copy with ``changes`` applied and re-validated."""
        return replace(self, **changes)


@dataclass(frozen=True)
class Assignment:
    """
    One staff member's booking on one project.

    Contract:
        ``allocation`` is the percent of the staff member's capacity this
        project consumes.  ``billable_hours`` is hours per week.
    Guarantees:
        - ``total_cost == billable_hours * hourly_rate`` exactly.
        - ``end_date >= start_date``.
    Non-goals:
        - Does not check that ``project_id`` / ``staff_id`` resolve; the
          store does that at write time.
    """

    id: str
    project_id: str
    staff_id: str
    role: str
    allocation: int
    start_date: date
    end_date: date
    billable_hours: Decimal
    hourly_rate: Decimal
    is_team_lead: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.allocation, bool) or not isinstance(self.allocation, int):
            raise InvalidAllocationError(self.allocation, "must be an integer")
        if not 0 <= self.allocation <= 100:
            raise InvalidAllocationError(self.allocation)
        DateRange(self.start_date, self.end_date)
        _set(self, "billable_hours", non_negative(self.billable_hours, "billable_hours"))
        _set(self, "hourly_rate", non_negative(self.hourly_rate, "hourly_rate"))

    @property
    def total_cost(self) -> Decimal:
        """Weekly cost: billable hours times hourly rate."""
        return self.billable_hours * self.hourly_rate

    @property
    def date_range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    def with_changes(self, **changes: Any) -> Assignment:
        """Return a copy with ``changes`` applied; total cost follows."""
        return replace(self, **changes)
