"""
Tests for the interval overlap resolver and period resolution.

Covers inclusive boundary semantics, fail-fast on reversed ranges, the
unbounded "all time" window, month/quarter/year resolution with year
wrap-around and the leap-day clamp, and the week-count lookup.
"""

from datetime import date

import pytest

from staffing_engines.overlap import (
    PeriodSelection,
    PeriodUnit,
    RelativePeriod,
    ReportingWindow,
    approximate_weeks,
    filter_overlapping,
    overlaps,
    period_label,
    reference_date,
    resolve_window,
)
from staffing_kernel.exceptions import InvalidRangeError, UnknownPeriodError
from tests.conftest import make_assignment

JAN_1 = date(2024, 1, 1)
JAN_31 = date(2024, 1, 31)


class TestOverlaps:
    """Window fixed at 2024-01-01..2024-01-31."""

    @pytest.mark.parametrize(
        "start, end, expected",
        [
            (date(2024, 1, 15), date(2024, 2, 15), True),    # straddles end
            (date(2023, 12, 15), date(2024, 1, 15), True),   # straddles start
            (date(2023, 12, 1), date(2024, 1, 1), True),     # ends on window start
            (date(2023, 12, 1), date(2023, 12, 31), False),  # entirely before
            (date(2024, 1, 31), date(2024, 2, 28), True),    # touches end day
            (date(2024, 2, 1), date(2024, 2, 28), False),    # entirely after
            (date(2023, 12, 31), date(2024, 1, 1), True),    # touches start day
            (date(2023, 1, 1), date(2025, 1, 1), True),      # encloses window
            (date(2024, 1, 10), date(2024, 1, 10), True),    # single day inside
        ],
    )
    def test_inclusive_boundaries(self, start, end, expected):
        assert overlaps(JAN_1, JAN_31, start, end) is expected

    def test_reversed_entity_range_raises(self):
        with pytest.raises(InvalidRangeError) as exc_info:
            overlaps(JAN_1, JAN_31, date(2024, 1, 20), date(2024, 1, 10))
        assert exc_info.value.subject == "entity"

    def test_reversed_window_raises(self):
        with pytest.raises(InvalidRangeError) as exc_info:
            overlaps(JAN_31, JAN_1, JAN_1, JAN_31)
        assert exc_info.value.subject == "window"


class TestReportingWindow:

    def test_unbounded_overlaps_everything(self):
        window = ReportingWindow.unbounded()
        assert window.is_unbounded
        assert window.overlaps_range(date(1999, 1, 1), date(1999, 1, 2))
        assert window.overlaps_range(date(2099, 1, 1), date(2099, 1, 2))

    def test_bounded_matches_function(self):
        window = ReportingWindow(JAN_1, JAN_31)
        assert window.overlaps_range(date(2024, 1, 31), date(2024, 2, 5))
        assert not window.overlaps_range(date(2024, 2, 1), date(2024, 2, 5))

    def test_half_open(self):
        window = ReportingWindow(JAN_1, None)
        assert window.overlaps_range(date(2030, 1, 1), date(2030, 1, 1))
        assert not window.overlaps_range(date(2023, 1, 1), date(2023, 12, 31))

    def test_reversed_window_rejected(self):
        with pytest.raises(InvalidRangeError):
            ReportingWindow(JAN_31, JAN_1)

    def test_reversed_entity_on_unbounded_still_raises(self):
        with pytest.raises(InvalidRangeError):
            ReportingWindow.unbounded().overlaps_range(JAN_31, JAN_1)

    def test_str(self):
        assert str(ReportingWindow(JAN_1, JAN_31)) == "2024-01-01..2024-01-31"
        assert str(ReportingWindow.unbounded()) == "-inf..+inf"

    def test_filter_overlapping_keeps_order(self):
        items = [
            make_assignment("a1", start_date=date(2024, 1, 20), end_date=date(2024, 2, 10)),
            make_assignment("a2", start_date=date(2024, 2, 1), end_date=date(2024, 2, 10)),
            make_assignment("a3", start_date=date(2023, 12, 1), end_date=date(2024, 1, 1)),
        ]
        kept = filter_overlapping(items, ReportingWindow(JAN_1, JAN_31))
        assert [a.id for a in kept] == ["a1", "a3"]


class TestPeriodSelection:

    def test_string_values_coerced(self):
        sel = PeriodSelection("month", "previous", 2023)
        assert sel.unit is PeriodUnit.MONTH
        assert sel.relative is RelativePeriod.PREVIOUS

    def test_unknown_unit(self):
        with pytest.raises(UnknownPeriodError) as exc_info:
            PeriodSelection("fortnight")
        assert exc_info.value.kind == "unit"

    def test_unknown_selector(self):
        with pytest.raises(UnknownPeriodError):
            PeriodSelection("month", "next")


class TestResolveWindow:

    TODAY = date(2024, 6, 15)

    def _window(self, unit, relative, year=None, today=None):
        return resolve_window(PeriodSelection(unit, relative, year), today or self.TODAY)

    def test_current_month(self):
        w = self._window("month", "current", 2024)
        assert (w.start, w.end) == (date(2024, 6, 1), date(2024, 6, 30))

    def test_previous_month_wraps_year(self):
        w = self._window("month", "previous", 2024, today=date(2024, 1, 10))
        assert (w.start, w.end) == (date(2023, 12, 1), date(2023, 12, 31))

    def test_current_quarter(self):
        w = self._window("quarter", "current", 2024)
        assert (w.start, w.end) == (date(2024, 4, 1), date(2024, 6, 30))

    def test_previous_quarter_wraps_year(self):
        w = self._window("quarter", "previous", 2024, today=date(2024, 2, 10))
        assert (w.start, w.end) == (date(2023, 10, 1), date(2023, 12, 31))

    def test_current_and_previous_year(self):
        assert self._window("year", "current", 2023).start == date(2023, 1, 1)
        w = self._window("year", "previous", 2023)
        assert (w.start, w.end) == (date(2022, 1, 1), date(2022, 12, 31))

    def test_reference_year_keeps_month_and_day(self):
        w = self._window("month", "current", 2022)
        assert (w.start, w.end) == (date(2022, 6, 1), date(2022, 6, 30))

    def test_default_reference_year_is_today(self):
        w = self._window("quarter", "current")
        assert w.start == date(2024, 4, 1)

    def test_all_is_unbounded(self):
        assert self._window("year", "all", 2024).is_unbounded

    def test_leap_day_clamped(self):
        sel = PeriodSelection("month", "current", 2023)
        assert reference_date(sel, date(2024, 2, 29)) == date(2023, 2, 28)
        w = resolve_window(sel, date(2024, 2, 29))
        assert (w.start, w.end) == (date(2023, 2, 1), date(2023, 2, 28))

    def test_february_in_leap_year(self):
        w = self._window("month", "current", 2024, today=date(2024, 2, 10))
        assert w.end == date(2024, 2, 29)


class TestWeeksAndLabels:

    @pytest.mark.parametrize(
        "unit, relative, weeks",
        [
            ("month", "current", 4),
            ("quarter", "previous", 13),
            ("year", "current", 52),
            ("month", "all", 52),
        ],
    )
    def test_approximate_weeks(self, unit, relative, weeks):
        assert approximate_weeks(PeriodSelection(unit, relative)) == weeks

    def test_custom_table(self):
        table = {"month": 5, "quarter": 13, "year": 52, "all": 104}
        assert approximate_weeks(PeriodSelection("month", "current"), table) == 5
        assert approximate_weeks(PeriodSelection("month", "all"), table) == 104

    def test_missing_table_entry(self):
        with pytest.raises(UnknownPeriodError):
            approximate_weeks(PeriodSelection("month", "current"), {"year": 52})

    def test_labels(self):
        assert period_label(PeriodSelection("quarter", "current")) == "Current Quarter"
        assert period_label(PeriodSelection("month", "previous")) == "Previous Month"
        assert period_label(PeriodSelection("year", "all")) == "All Time"
