"""
staffing_services.analytics_service -- Per-staff revenue analytics and leaderboards.

Responsibility:
    Resolve a period selection against the injected clock, aggregate every
    staff member's assignments in the resulting window, and build the
    three leaderboards (top earners, most available, top performers) with
    their headline summary.

Architecture position:
    Services -- orchestration over the store + engines.
    Composes MetricsAggregator and the overlap resolver; reads one store
    snapshot per call so every figure comes from the same state.

Invariants enforced:
    - The window's "today" is the clock's date moved into the selection's
      reference year (Feb 29 clamps to Feb 28).
    - Assignments whose project no longer exists are excluded and reported
      on each StaffMetrics record.
    - Leaderboard ties keep the store's staff order.

Failure modes:
    - UnknownPeriodError from PeriodSelection for unknown units/selectors.
    - InvalidRangeError if a stored assignment has a reversed range.

Usage:
    service = AnalyticsService(store, clock, config)
    boards = service.leaderboards(PeriodSelection("quarter", "current", 2024))
    boards.top_earners[0].staff_name
"""

from __future__ import annotations

from dataclasses import dataclass

from staffing_config.schema import StaffingConfig
from staffing_engines.metrics import (
    LeaderboardSummary,
    MetricsAggregator,
    RankingField,
    StaffMetrics,
)
from staffing_engines.overlap import (
    PeriodSelection,
    ReportingWindow,
    approximate_weeks,
    period_label,
    resolve_window,
)
from staffing_kernel.domain.clock import Clock, SystemClock
from staffing_kernel.logging_config import get_logger
from staffing_kernel.store import StaffingStore

logger = get_logger("services.analytics")


@dataclass(frozen=True)
class Leaderboards:
    """Everything the analytics page shows for one period selection."""

    window: ReportingWindow
    label: str
    weeks_in_window: int
    top_earners: tuple[StaffMetrics, ...]
    most_available: tuple[StaffMetrics, ...]
    top_performers: tuple[StaffMetrics, ...]
    summary: LeaderboardSummary


class AnalyticsService:
    """
    Staff analytics over the store.

    Contract:
        Receives store, clock and config via constructor injection.
    Non-goals:
        - Does not cache; every call recomputes from the current snapshot.
    """

    def __init__(
        self,
        store: StaffingStore,
        clock: Clock | None = None,
        config: StaffingConfig | None = None,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._config = config or StaffingConfig()
        self._aggregator = MetricsAggregator(
            money_places=self._config.analytics.money_places
        )

    def resolve(self, selection: PeriodSelection | None = None) -> tuple[ReportingWindow, int]:
        """Window and week multiplier for ``selection`` (current quarter by default)."""
        selection = selection or PeriodSelection()
        window = resolve_window(selection, self._clock.today())
        weeks = approximate_weeks(selection, self._config.analytics.weeks_per_period)
        return window, weeks

    def staff_metrics(
        self,
        selection: PeriodSelection | None = None,
    ) -> tuple[StaffMetrics, ...]:
        """One metrics record per staff member, in store order."""
        window, weeks = self.resolve(selection)
        return self._metrics_for(window, weeks)

    def _metrics_for(
        self, window: ReportingWindow, weeks: int,
    ) -> tuple[StaffMetrics, ...]:
        snapshot = self._store.snapshot()
        known = snapshot.project_ids
        return tuple(
            self._aggregator.staff_metrics(
                member,
                snapshot.assignments_for_staff(member.id),
                window,
                weeks,
                known_project_ids=known,
            )
            for member in snapshot.staff
        )

    def leaderboards(
        self,
        selection: PeriodSelection | None = None,
        size: int | None = None,
    ) -> Leaderboards:
        """Ranked leaderboards and summary for ``selection``."""
        selection = selection or PeriodSelection()
        if size is None:
            size = self._config.analytics.leaderboard_size
        if size < 0:
            raise ValueError(f"size cannot be negative: {size}")
        window, weeks = self.resolve(selection)
        records = self._metrics_for(window, weeks)
        rank = self._aggregator.rank

        boards = Leaderboards(
            window=window,
            label=period_label(selection),
            weeks_in_window=weeks,
            top_earners=rank(records, RankingField.REVENUE, size),
            most_available=rank(records, RankingField.AVAILABILITY, size),
            top_performers=rank(records, RankingField.UTILIZATION, size),
            summary=self._aggregator.summarize(records, top_n=size),
        )
        logger.info(
            "leaderboards_built",
            extra={
                "period": boards.label,
                "window": str(window),
                "staff_count": len(records),
                "top_revenue_total": boards.summary.top_revenue_total,
            },
        )
        return boards
