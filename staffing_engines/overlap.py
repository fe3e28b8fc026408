"""
Module: staffing_engines.overlap
Responsibility:
    Decide whether a dated entity (assignment, project) intersects a
    reporting window, and resolve period selections ("current quarter",
    "previous month", "all time") into concrete windows.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Leaf module: depends only
    on kernel value objects.  The metrics aggregator, allocation validator
    and timeline build on it.

Invariants enforced:
    - Inclusive intersection: [a, b] and [c, d] overlap iff c <= b and d >= a.
    - Reversed ranges fail fast with InvalidRangeError; nothing is swapped.
    - Purity: "now" is always a parameter, never read from the system clock.

Failure modes:
    - InvalidRangeError when any supplied range ends before it starts.
    - UnknownPeriodError for unrecognised units or selectors.

Usage:
    from staffing_engines.overlap import PeriodSelection, resolve_window

    window = resolve_window(PeriodSelection("quarter", "current", 2024), today)
    window.overlaps_range(assignment.start_date, assignment.end_date)
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Protocol, TypeVar

from staffing_kernel.domain.values import DateRange
from staffing_kernel.exceptions import InvalidRangeError, UnknownPeriodError
from staffing_kernel.logging_config import get_logger

logger = get_logger("engines.overlap")


class PeriodUnit(str, Enum):
    """Calendar unit a reporting window spans."""

    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


class RelativePeriod(str, Enum):
    """Which unit relative to the reference date."""

    CURRENT = "current"
    PREVIOUS = "previous"
    ALL = "all"


# Simplified week counts per period; not derived from calendar days.
DEFAULT_WEEKS_PER_PERIOD: Mapping[str, int] = {
    "month": 4,
    "quarter": 13,
    "year": 52,
    "all": 52,
}


@dataclass(frozen=True)
class PeriodSelection:
    """
    Filter selection coming from the presentation layer.

    ``reference_year`` of None means the year of the supplied "today".
    """

    unit: PeriodUnit = PeriodUnit.QUARTER
    relative: RelativePeriod = RelativePeriod.CURRENT
    reference_year: int | None = None

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "unit", PeriodUnit(self.unit))
        except ValueError as e:
            raise UnknownPeriodError(str(self.unit), "unit") from e
        try:
            object.__setattr__(self, "relative", RelativePeriod(self.relative))
        except ValueError as e:
            raise UnknownPeriodError(str(self.relative), "selector") from e


@dataclass(frozen=True)
class ReportingWindow:
    """
    A [start, end] window where either bound may be open.

    ``ReportingWindow.unbounded()`` is the "all time" window: it overlaps
    every well-formed range.
    """

    start: date | None
    end: date | None

    def __post_init__(self) -> None:
        if self.start is not None and self.end is not None and self.end < self.start:
            raise InvalidRangeError(self.start.isoformat(), self.end.isoformat(), "window")

    @classmethod
    def unbounded(cls) -> ReportingWindow:
        return cls(None, None)

    @classmethod
    def from_range(cls, date_range: DateRange) -> ReportingWindow:
        return cls(date_range.start, date_range.end)

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, day: date) -> bool:
        if self.start is not None and day < self.start:
            return False
        return self.end is None or day <= self.end

    def overlaps_range(self, start: date, end: date) -> bool:
        """Inclusive overlap with [start, end]; open bounds always pass."""
        if end < start:
            raise InvalidRangeError(start.isoformat(), end.isoformat(), "entity")
        if self.end is not None and start > self.end:
            return False
        if self.start is not None and end < self.start:
            return False
        return True

    def __str__(self) -> str:
        lo = self.start.isoformat() if self.start else "-inf"
        hi = self.end.isoformat() if self.end else "+inf"
        return f"{lo}..{hi}"


def overlaps(
    window_start: date,
    window_end: date,
    entity_start: date,
    entity_end: date,
) -> bool:
    """
    True iff [entity_start, entity_end] intersects [window_start, window_end].

    Both ends inclusive, so ranges that merely touch overlap.

    Raises:
        InvalidRangeError: If either range is reversed.
    """
    if window_end < window_start:
        raise InvalidRangeError(window_start.isoformat(), window_end.isoformat(), "window")
    if entity_end < entity_start:
        raise InvalidRangeError(entity_start.isoformat(), entity_end.isoformat(), "entity")
    return entity_start <= window_end and entity_end >= window_start


class _Dated(Protocol):
    start_date: date
    end_date: date


_D = TypeVar("_D", bound=_Dated)


def filter_overlapping(items: Iterable[_D], window: ReportingWindow) -> tuple[_D, ...]:
    """Items whose [start_date, end_date] overlaps ``window``, input order kept."""
    return tuple(i for i in items if window.overlaps_range(i.start_date, i.end_date))


# ---------------------------------------------------------------------------
# Period resolution
# ---------------------------------------------------------------------------


def _month_range(year: int, month: int) -> DateRange:
    last_day = calendar.monthrange(year, month)[1]
    return DateRange(date(year, month, 1), date(year, month, last_day))


def _quarter_range(year: int, month: int) -> DateRange:
    first_month = 3 * ((month - 1) // 3) + 1
    return DateRange(
        date(year, first_month, 1),
        _month_range(year, first_month + 2).end,
    )


def _year_range(year: int) -> DateRange:
    return DateRange(date(year, 1, 1), date(year, 12, 31))


def reference_date(selection: PeriodSelection, today: date) -> date:
    """
    Today's month and day moved into the selection's reference year.

    Feb 29 becomes Feb 28 when the reference year is not a leap year.
    """
    year = selection.reference_year or today.year
    last_day = calendar.monthrange(year, today.month)[1]
    return date(year, today.month, min(today.day, last_day))


def resolve_window(selection: PeriodSelection, today: date) -> ReportingWindow:
    """
    Concrete window for a period selection.

    ``current`` is the unit containing the reference date, ``previous`` the
    unit immediately before it, ``all`` an unbounded window.
    """
    if selection.relative == RelativePeriod.ALL:
        return ReportingWindow.unbounded()

    ref = reference_date(selection, today)
    previous = selection.relative == RelativePeriod.PREVIOUS

    if selection.unit == PeriodUnit.MONTH:
        year, month = ref.year, ref.month
        if previous:
            year, month = (year - 1, 12) if month == 1 else (year, month - 1)
        rng = _month_range(year, month)
    elif selection.unit == PeriodUnit.QUARTER:
        year, month = ref.year, ref.month
        if previous:
            month -= 3
            if month < 1:
                year, month = year - 1, month + 12
        rng = _quarter_range(year, month)
    else:
        rng = _year_range(ref.year - 1 if previous else ref.year)

    logger.debug(
        "window_resolved",
        extra={
            "unit": selection.unit.value,
            "relative": selection.relative.value,
            "window_start": rng.start,
            "window_end": rng.end,
        },
    )
    return ReportingWindow.from_range(rng)


def approximate_weeks(
    selection: PeriodSelection,
    weeks_per_period: Mapping[str, int] = DEFAULT_WEEKS_PER_PERIOD,
) -> int:
    """
    Approximate number of weeks in the selected period.

    A fixed lookup (month 4, quarter 13, year 52, all time 52 by default),
    not a count of calendar days in the resolved window.
    """
    key = "all" if selection.relative == RelativePeriod.ALL else selection.unit.value
    try:
        return weeks_per_period[key]
    except KeyError as e:
        raise UnknownPeriodError(key, "week table entry") from e


def period_label(selection: PeriodSelection) -> str:
    """Human label, e.g. "Current Quarter", "Previous Month", "All Time"."""
    if selection.relative == RelativePeriod.ALL:
        return "All Time"
    return f"{selection.relative.value.title()} {selection.unit.value.title()}"
