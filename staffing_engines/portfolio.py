"""
Module: staffing_engines.portfolio
Responsibility:
    Portfolio-level KPIs for the dashboard: project and staff counts,
    budget/received/spent totals, gross profit and margin, average
    utilization, at-risk projects, upcoming deadlines, department headcount
    shares, bench candidates, and per-project financials.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - gross_profit = total_received - total_spent.
    - gross_margin is None when nothing has been received (no division by
      zero); otherwise gross_profit / total_received * 100.
    - Averages over an empty staff list are 0.
    - weekly_staffing_cost = sum of the project's assignment total costs.
    - "today" is a parameter; no clock access.

Failure modes:
    - None beyond the entity model's own validation.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from staffing_engines.tracer import traced_engine
from staffing_kernel.domain.models import (
    Assignment,
    Priority,
    Project,
    ProjectStatus,
    Staff,
    StaffStatus,
)
from staffing_kernel.domain.values import HUNDRED, ZERO, round_percent
from staffing_kernel.logging_config import get_logger

logger = get_logger("engines.portfolio")


@dataclass(frozen=True)
class RiskPolicy:
    """Thresholds for the dashboard's risk and bench lists."""

    at_risk_progress_below: int = 50
    at_risk_priorities: tuple[Priority, ...] = (Priority.HIGH, Priority.CRITICAL)
    deadline_horizon_days: int = 30
    bench_availability_above: int = 50


@dataclass(frozen=True)
class DashboardMetrics:
    """Headline KPIs for the dashboard cards."""

    total_projects: int
    active_projects: int
    total_staff: int
    available_staff: int
    total_budget: Decimal
    total_received: Decimal
    total_spent: Decimal
    gross_profit: Decimal
    gross_margin: Decimal | None
    average_utilization: Decimal
    average_billable_utilization: Decimal
    projects_at_risk: tuple[str, ...] = ()
    upcoming_deadlines: tuple[str, ...] = ()

    @property
    def at_risk_count(self) -> int:
        return len(self.projects_at_risk)

    @property
    def upcoming_deadline_count(self) -> int:
        return len(self.upcoming_deadlines)


@dataclass(frozen=True)
class DepartmentShare:
    """Headcount of one department and its percent of all staff."""

    department: str
    headcount: int
    share: Decimal


@dataclass(frozen=True)
class ProjectFinancials:
    """Budget position of one project."""

    project_id: str
    name: str
    budget: Decimal
    received_amount: Decimal
    spent: Decimal
    remaining_budget: Decimal
    budget_consumed: Decimal | None
    weekly_staffing_cost: Decimal
    team_size: int

    @property
    def is_over_budget(self) -> bool:
        return self.spent > self.budget


class PortfolioCalculator:
    """
    Dashboard KPI calculator.

    Contract:
        Pure functions over the supplied collections.
    Non-goals:
        - Does not forecast; projections are a presentation concern.
    """

    def __init__(self, policy: RiskPolicy | None = None):
        self.policy = policy or RiskPolicy()

    def is_at_risk(self, project: Project) -> bool:
        """Behind on progress and high enough priority to matter."""
        return (
            project.progress < self.policy.at_risk_progress_below
            and project.priority in self.policy.at_risk_priorities
        )

    def upcoming_deadlines(
        self,
        projects: Sequence[Project],
        today: date,
    ) -> tuple[Project, ...]:
        """Unfinished projects ending between today and the horizon, soonest first."""
        horizon = today + timedelta(days=self.policy.deadline_horizon_days)
        due = [
            p for p in projects
            if p.status != ProjectStatus.COMPLETED and today <= p.end_date <= horizon
        ]
        return tuple(sorted(due, key=lambda p: p.end_date))

    @traced_engine("portfolio", "1.0", fingerprint_fields=("today",))
    def dashboard(
        self,
        projects: Sequence[Project],
        staff: Sequence[Staff],
        today: date,
    ) -> DashboardMetrics:
        """Compute the dashboard KPI set."""
        total_budget = sum((p.budget for p in projects), ZERO)
        total_received = sum((p.received_amount for p in projects), ZERO)
        total_spent = sum((p.spent for p in projects), ZERO)
        gross_profit = total_received - total_spent
        gross_margin = (
            round_percent(gross_profit / total_received * HUNDRED)
            if total_received > ZERO else None
        )

        headcount = len(staff)
        if headcount:
            avg_util = sum((Decimal(100 - s.availability) for s in staff), ZERO) / headcount
            avg_billable = sum((Decimal(s.billable_utilization) for s in staff), ZERO) / headcount
        else:
            avg_util = avg_billable = ZERO

        return DashboardMetrics(
            total_projects=len(projects),
            active_projects=sum(1 for p in projects if p.status == ProjectStatus.ACTIVE),
            total_staff=headcount,
            available_staff=sum(1 for s in staff if s.status == StaffStatus.AVAILABLE),
            total_budget=total_budget,
            total_received=total_received,
            total_spent=total_spent,
            gross_profit=gross_profit,
            gross_margin=gross_margin,
            average_utilization=round_percent(avg_util),
            average_billable_utilization=round_percent(avg_billable),
            projects_at_risk=tuple(p.id for p in projects if self.is_at_risk(p)),
            upcoming_deadlines=tuple(p.id for p in self.upcoming_deadlines(projects, today)),
        )

    def department_breakdown(self, staff: Sequence[Staff]) -> tuple[DepartmentShare, ...]:
        """Headcount per department, in order of first appearance."""
        counts: dict[str, int] = {}
        for member in staff:
            counts[member.department] = counts.get(member.department, 0) + 1
        total = len(staff)
        return tuple(
            DepartmentShare(
                department=dept,
                headcount=n,
                share=round_percent(Decimal(n) / total * HUNDRED),
            )
            for dept, n in counts.items()
        )

    def bench_candidates(self, staff: Sequence[Staff]) -> tuple[Staff, ...]:
        """Staff who are available or have most of their capacity free."""
        return tuple(
            s for s in staff
            if s.status == StaffStatus.AVAILABLE
            or s.availability > self.policy.bench_availability_above
        )

    def project_financials(
        self,
        projects: Sequence[Project],
        assignments: Sequence[Assignment],
        as_of: date | None = None,
    ) -> tuple[ProjectFinancials, ...]:
        """
        Budget position per project.

        ``team_size`` counts assignments active on ``as_of`` (all of the
        project's assignments when no date is given).
        """
        rows = []
        for project in projects:
            own = [a for a in assignments if a.project_id == project.id]
            if as_of is not None:
                active = [a for a in own if a.start_date <= as_of <= a.end_date]
            else:
                active = own
            consumed = (
                round_percent(project.spent / project.budget * HUNDRED)
                if project.budget > ZERO else None
            )
            rows.append(
                ProjectFinancials(
                    project_id=project.id,
                    name=project.name,
                    budget=project.budget,
                    received_amount=project.received_amount,
                    spent=project.spent,
                    remaining_budget=project.budget - project.spent,
                    budget_consumed=consumed,
                    weekly_staffing_cost=sum((a.total_cost for a in own), ZERO),
                    team_size=len(active),
                )
            )
        over = [r.project_id for r in rows if r.is_over_budget]
        if over:
            logger.info("projects_over_budget", extra={"project_ids": over})
        return tuple(rows)
