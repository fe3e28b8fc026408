"""Tests for portfolio KPIs: dashboard totals, risk lists, departments, financials."""

from datetime import date
from decimal import Decimal

from staffing_engines.portfolio import PortfolioCalculator, RiskPolicy
from staffing_kernel.domain.models import Priority
from tests.conftest import make_assignment, make_project, make_staff

TODAY = date(2024, 6, 15)


class TestDashboard:

    def setup_method(self):
        self.calc = PortfolioCalculator()

    def test_totals_and_margin(self):
        projects = [
            make_project("p1", budget=1000, received_amount=600, spent=400),
            make_project("p2", budget=500, received_amount=400, spent=450, status="planning"),
        ]
        staff = [
            make_staff("s1", availability=20, billable_utilization=70),
            make_staff("s2", availability=100, billable_utilization=0, status="available"),
            make_staff("s3", availability=0, billable_utilization=90, status="fully-booked"),
        ]

        m = self.calc.dashboard(projects, staff, today=TODAY)

        assert m.total_projects == 2
        assert m.active_projects == 1
        assert m.total_staff == 3
        assert m.available_staff == 2
        assert m.total_budget == Decimal("1500")
        assert m.gross_profit == Decimal("150")
        assert m.gross_margin == Decimal("15.00")
        assert m.average_utilization == Decimal("60.00")
        assert m.average_billable_utilization == Decimal("53.33")

    def test_nothing_received_has_no_margin(self):
        projects = [make_project("p1", received_amount=0, spent=100)]
        m = self.calc.dashboard(projects, [], today=TODAY)
        assert m.gross_margin is None
        assert m.gross_profit == Decimal("-100")

    def test_no_staff_averages_zero(self):
        m = self.calc.dashboard([], [], today=TODAY)
        assert m.average_utilization == Decimal("0")
        assert m.average_billable_utilization == Decimal("0")
        assert m.total_projects == 0

    def test_at_risk(self):
        projects = [
            make_project("p1", progress=49, priority="high"),
            make_project("p2", progress=50, priority="critical"),
            make_project("p3", progress=10, priority="medium"),
            make_project("p4", progress=0, priority="critical"),
        ]
        m = self.calc.dashboard(projects, [], today=TODAY)
        assert m.projects_at_risk == ("p1", "p4")
        assert m.at_risk_count == 2

    def test_upcoming_deadlines(self):
        projects = [
            make_project("late", end_date=date(2024, 7, 20)),
            make_project("soon", end_date=date(2024, 7, 1)),
            make_project("today", end_date=TODAY),
            make_project("past", end_date=date(2024, 6, 14)),
            make_project("done", end_date=date(2024, 6, 20), status="completed"),
            make_project("edge", end_date=date(2024, 7, 15)),
        ]
        m = self.calc.dashboard(projects, [], today=TODAY)
        assert m.upcoming_deadlines == ("today", "soon", "edge")

    def test_custom_policy(self):
        calc = PortfolioCalculator(
            RiskPolicy(at_risk_progress_below=80, at_risk_priorities=(Priority.MEDIUM,))
        )
        assert calc.is_at_risk(make_project(progress=70, priority="medium"))
        assert not calc.is_at_risk(make_project(progress=70, priority="high"))


class TestStaffViews:

    def test_department_breakdown_first_seen_order(self):
        staff = [
            make_staff("s1", department="Engineering"),
            make_staff("s2", department="Design"),
            make_staff("s3", department="Engineering"),
        ]
        shares = PortfolioCalculator().department_breakdown(staff)
        assert [(d.department, d.headcount, d.share) for d in shares] == [
            ("Engineering", 2, Decimal("66.67")),
            ("Design", 1, Decimal("33.33")),
        ]

    def test_department_breakdown_empty(self):
        assert PortfolioCalculator().department_breakdown([]) == ()

    def test_bench_candidates(self):
        staff = [
            make_staff("s1", status="available", availability=10),
            make_staff("s2", status="partially-booked", availability=51),
            make_staff("s3", status="partially-booked", availability=50),
        ]
        bench = PortfolioCalculator().bench_candidates(staff)
        assert [s.id for s in bench] == ["s1", "s2"]


class TestProjectFinancials:

    def test_financials(self):
        projects = [
            make_project("p1", budget=1000, spent=250, received_amount=300),
            make_project("p2", budget=0, spent=10, received_amount=0),
        ]
        assignments = [
            make_assignment("a1", "p1", billable_hours=10, hourly_rate=50),
            make_assignment(
                "a2", "p1", billable_hours=5, hourly_rate=100,
                start_date=date(2024, 3, 1), end_date=date(2024, 3, 31),
            ),
        ]

        p1, p2 = PortfolioCalculator().project_financials(
            projects, assignments, as_of=date(2024, 1, 10)
        )

        assert p1.remaining_budget == Decimal("750")
        assert p1.budget_consumed == Decimal("25.00")
        assert p1.weekly_staffing_cost == Decimal("1000")
        assert p1.team_size == 1
        assert p2.budget_consumed is None
        assert p2.is_over_budget
        assert p2.team_size == 0

    def test_team_size_without_date_counts_all(self):
        projects = [make_project("p1")]
        assignments = [make_assignment("a1", "p1"), make_assignment("a2", "p1")]
        (row,) = PortfolioCalculator().project_financials(projects, assignments)
        assert row.team_size == 2
