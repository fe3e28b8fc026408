"""
staffing_services.portfolio_service -- Dashboard KPIs, project financials, calendar.

Responsibility:
    Feed the dashboard, the project financials table and the calendar
    timeline from the current store snapshot, using the clock for "today"
    and the configured risk thresholds.

Architecture position:
    Services -- orchestration over the store + PortfolioCalculator and the
    timeline engine.
"""

from __future__ import annotations

from staffing_config.schema import StaffingConfig
from staffing_engines.portfolio import (
    DashboardMetrics,
    DepartmentShare,
    PortfolioCalculator,
    ProjectFinancials,
)
from staffing_engines.timeline import TimelineRow, build_timeline
from staffing_kernel.domain.clock import Clock, SystemClock
from staffing_kernel.domain.models import ProjectStatus, Staff
from staffing_kernel.store import StaffingStore


class PortfolioService:
    """Read-only portfolio views."""

    def __init__(
        self,
        store: StaffingStore,
        clock: Clock | None = None,
        config: StaffingConfig | None = None,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._config = config or StaffingConfig()
        self._calculator = PortfolioCalculator(self._config.portfolio.risk_policy())

    def dashboard(self) -> DashboardMetrics:
        snapshot = self._store.snapshot()
        return self._calculator.dashboard(
            snapshot.projects, snapshot.staff, today=self._clock.today()
        )

    def department_breakdown(self) -> tuple[DepartmentShare, ...]:
        return self._calculator.department_breakdown(self._store.snapshot().staff)

    def bench(self) -> tuple[Staff, ...]:
        return self._calculator.bench_candidates(self._store.snapshot().staff)

    def project_financials(self) -> tuple[ProjectFinancials, ...]:
        """Financials per project; team size counts assignments active today."""
        snapshot = self._store.snapshot()
        return self._calculator.project_financials(
            snapshot.projects, snapshot.assignments, as_of=self._clock.today()
        )

    def timeline(
        self,
        year: int | None = None,
        status: ProjectStatus | str | None = None,
    ) -> tuple[TimelineRow, ...]:
        """Calendar rows for ``year`` (the clock's year by default)."""
        year = year or self._clock.today().year
        return build_timeline(self._store.snapshot().projects, year, status)
