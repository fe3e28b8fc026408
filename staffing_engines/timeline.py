"""
Module: staffing_engines.timeline
Responsibility:
    Lay projects out on a week grid for the calendar view: the Monday-start
    weeks covering a year, and for each project which weeks it touches and
    which weeks hold its first and last day.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Uses staffing_engines.overlap for the week/project intersection.

Invariants enforced:
    - Weeks start on Monday and span seven days.
    - The first week starts on the Monday on or before January 1; the last
      week starts on the Monday on or before December 31.
    - A slot overlaps iff the project's inclusive range intersects the week.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from staffing_engines.overlap import overlaps
from staffing_kernel.domain.models import Project, ProjectStatus
from staffing_kernel.domain.values import DateRange

_WEEK = timedelta(days=7)


@dataclass(frozen=True)
class WeekSlot:
    """One project's position within one week."""

    index: int
    week_start: date
    week_end: date
    overlaps: bool
    is_start: bool
    is_end: bool


@dataclass(frozen=True)
class TimelineRow:
    """A project and its week slots."""

    project_id: str
    name: str
    status: ProjectStatus
    slots: tuple[WeekSlot, ...]

    @property
    def active_weeks(self) -> tuple[WeekSlot, ...]:
        return tuple(s for s in self.slots if s.overlaps)


def _monday_on_or_before(day: date) -> date:
    return day - timedelta(days=day.weekday())


def year_weeks(year: int) -> tuple[DateRange, ...]:
    """Monday-to-Sunday weeks covering ``year``."""
    start = _monday_on_or_before(date(year, 1, 1))
    last = _monday_on_or_before(date(year, 12, 31))
    weeks = []
    current = start
    while current <= last:
        weeks.append(DateRange(current, current + timedelta(days=6)))
        current += _WEEK
    return tuple(weeks)


def project_timeline(project: Project, weeks: Sequence[DateRange]) -> TimelineRow:
    """Week slots for one project."""
    slots = tuple(
        WeekSlot(
            index=i,
            week_start=week.start,
            week_end=week.end,
            overlaps=overlaps(week.start, week.end, project.start_date, project.end_date),
            is_start=week.contains(project.start_date),
            is_end=week.contains(project.end_date),
        )
        for i, week in enumerate(weeks)
    )
    return TimelineRow(
        project_id=project.id,
        name=project.name,
        status=project.status,
        slots=slots,
    )


def build_timeline(
    projects: Sequence[Project],
    year: int,
    status: ProjectStatus | None = None,
) -> tuple[TimelineRow, ...]:
    """Timeline rows for ``year``, optionally restricted to one status."""
    weeks = year_weeks(year)
    if status is not None:
        status = ProjectStatus(status)
        projects = [p for p in projects if p.status == status]
    return tuple(project_timeline(p, weeks) for p in projects)
