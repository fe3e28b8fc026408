"""
Analytics service over the demo dataset.

The clock is pinned to 2024-06-15, so "current quarter" is 2024-04-01 to
2024-06-30 and the week multiplier is 13.
"""

from datetime import date
from decimal import Decimal

import pytest

from staffing_engines.overlap import PeriodSelection
from staffing_kernel.domain.clock import DeterministicClock
from staffing_kernel.exceptions import UnknownPeriodError
from staffing_services import AnalyticsService

CURRENT_QUARTER = PeriodSelection("quarter", "current", 2024)


@pytest.fixture
def service(store, clock, config):
    return AnalyticsService(store, clock, config)


class _CountingClock(DeterministicClock):
    """Counts today() reads."""

    def __init__(self, day):
        super().__init__(day)
        self.reads = 0

    def today(self):
        self.reads += 1
        return super().today()


def _by_id(records):
    return {r.staff_id: r for r in records}


class TestStaffMetrics:

    def test_current_quarter_figures(self, service):
        records = _by_id(service.staff_metrics(CURRENT_QUARTER))

        # a1 only (a6 ended 2024-02-29): 20h x 150 x 13 weeks
        assert records["s1"].total_revenue == Decimal("39000")
        assert records["s1"].total_hours == Decimal("260")
        assert records["s1"].project_count == 1

        # a2 + a3 on two projects
        assert records["s2"].total_revenue == Decimal("62400")
        assert records["s2"].project_count == 2
        assert records["s2"].average_hourly_rate == Decimal("120.00")

    def test_staff_without_work_in_window_uses_client_rate(self, service):
        records = _by_id(service.staff_metrics(CURRENT_QUARTER))
        # a5 starts 2024-07-01, after the window
        assert records["s3"].total_revenue == Decimal("0")
        assert records["s3"].project_count == 0
        assert records["s3"].average_hourly_rate == Decimal("130.00")

    def test_previous_quarter(self, service):
        records = _by_id(service.staff_metrics(PeriodSelection("quarter", "previous", 2024)))
        # Q1 2024: a1 and a6 overlap for s1
        assert records["s1"].project_count == 2
        assert records["s1"].average_hourly_rate == Decimal("147.50")

    def test_all_time_counts_everything(self, service):
        records = _by_id(service.staff_metrics(PeriodSelection("year", "all")))
        assert records["s3"].project_count == 1
        assert records["s3"].total_hours == Decimal("20") * 52

    def test_reference_year_moves_window(self, service):
        records = service.staff_metrics(PeriodSelection("quarter", "current", 2022))
        assert all(r.total_revenue == Decimal("0") for r in records)

    def test_default_selection_is_current_quarter(self, service):
        window, weeks = service.resolve()
        assert (window.start, window.end) == (date(2024, 4, 1), date(2024, 6, 30))
        assert weeks == 13

    def test_orphans_reported_under_orphan_policy(self, seed, clock, config):
        from staffing_kernel.store import DeletePolicy, StaffingStore

        store = StaffingStore(
            seed.projects, seed.staff, seed.assignments,
            delete_policy=DeletePolicy.ORPHAN,
        )
        store.delete_project("p2")
        records = _by_id(AnalyticsService(store, clock, config).staff_metrics(CURRENT_QUARTER))
        assert records["s4"].orphaned_assignment_ids == ("a4",)
        assert records["s4"].total_revenue == Decimal("0")

    def test_unknown_period_rejected(self):
        with pytest.raises(UnknownPeriodError):
            PeriodSelection("decade", "current")


class TestLeaderboards:

    def test_rankings(self, service):
        boards = service.leaderboards(CURRENT_QUARTER)

        assert boards.label == "Current Quarter"
        assert boards.weeks_in_window == 13
        assert [r.staff_id for r in boards.top_earners] == ["s2", "s5", "s1", "s4", "s3", "s6"]
        assert [r.staff_id for r in boards.most_available][:2] == ["s3", "s4"]
        # five members tie at the cap; store order is kept
        assert [r.staff_id for r in boards.top_performers] == ["s1", "s2", "s4", "s5", "s6", "s3"]

    def test_summary(self, service):
        summary = service.leaderboards(CURRENT_QUARTER).summary
        assert summary.top_revenue_total == Decimal("186680")
        assert summary.top_hours_total == Decimal("1456")
        assert summary.billing_staff_count == 4
        assert summary.average_rate == Decimal("124.17")

    def test_size_limit(self, service):
        boards = service.leaderboards(CURRENT_QUARTER, size=3)
        assert len(boards.top_earners) == 3
        assert boards.summary.top_revenue_total == Decimal("62400") + Decimal("50960") + Decimal("39000")

    def test_zero_size_is_honoured(self, service):
        boards = service.leaderboards(CURRENT_QUARTER, size=0)
        assert boards.top_earners == ()
        assert boards.summary.top_revenue_total == Decimal("0")

    def test_negative_size_rejected(self, service):
        with pytest.raises(ValueError):
            service.leaderboards(CURRENT_QUARTER, size=-1)

    def test_clock_read_once_per_build(self, store, config):
        clock = _CountingClock(date(2024, 6, 30))
        boards = AnalyticsService(store, clock, config).leaderboards(CURRENT_QUARTER)
        assert clock.reads == 1
        assert boards.label == "Current Quarter"

    def test_logged(self, service, captured_logs):
        service.leaderboards(CURRENT_QUARTER)
        logged = next(r for r in captured_logs() if r["message"] == "leaderboards_built")
        assert logged["window"] == "2024-04-01..2024-06-30"
        assert logged["staff_count"] == 6
