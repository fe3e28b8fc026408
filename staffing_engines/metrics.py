"""
Module: staffing_engines.metrics
Responsibility:
    Reduce a staff member's (or project's) assignments into summary figures
    for a reporting window: revenue, hours, average hourly rate and distinct
    project count.  Also provides the utilization heuristic and stable
    leaderboard ranking.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Depends on staffing_engines.overlap for window membership.

Invariants enforced:
    - total_revenue = sum(total_cost * weeks) over assignments in the window.
    - total_hours = sum(billable_hours * weeks) over the same set.
    - Additivity: for disjoint assignment sets with disjoint projects,
      revenue, hours and project_count add.  average_hourly_rate is a mean
      and does NOT add.
    - Empty set: average_hourly_rate is the supplied default, never a
      division by zero.
    - Ranking is a stable descending sort; ties keep input order.
    - Decimal-only arithmetic for money and hours.

Failure modes:
    - ValueError when weeks_in_window is negative.
    - InvalidRangeError propagated from malformed assignment ranges.

Usage:
    from staffing_engines.metrics import MetricsAggregator

    aggregator = MetricsAggregator()
    result = aggregator.aggregate(
        assignments=staff_assignments,
        window=window,
        weeks_in_window=13,
        default_rate=staff.client_rate,
    )
"""

from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from operator import attrgetter

from staffing_engines.overlap import ReportingWindow
from staffing_engines.tracer import traced_engine
from staffing_kernel.domain.models import Assignment, Staff
from staffing_kernel.domain.values import DEFAULT_MONEY_PLACES, ZERO, round_money, to_decimal
from staffing_kernel.logging_config import get_logger

logger = get_logger("engines.metrics")


class RankingField(str, Enum):
    """Numeric field a leaderboard is ordered by."""

    REVENUE = "total_revenue"
    AVAILABILITY = "availability"
    UTILIZATION = "utilization_score"


@dataclass(frozen=True)
class AggregateResult:
    """
    Summary of the assignments that fell inside a window.

    ``orphaned_assignment_ids`` lists assignments excluded because their
    project no longer exists; they contribute to no total.
    """

    total_revenue: Decimal
    total_hours: Decimal
    average_hourly_rate: Decimal
    project_count: int
    assignment_ids: tuple[str, ...] = ()
    orphaned_assignment_ids: tuple[str, ...] = ()

    @property
    def assignment_count(self) -> int:
        return len(self.assignment_ids)


@dataclass(frozen=True)
class StaffMetrics:
    """Per-staff analytics record used by leaderboards and tables."""

    staff_id: str
    staff_name: str
    role: str
    department: str
    total_revenue: Decimal
    total_hours: Decimal
    average_hourly_rate: Decimal
    project_count: int
    utilization_score: int | Decimal
    availability: int
    billable_utilization: int
    assignments: tuple[Assignment, ...] = ()
    orphaned_assignment_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class LeaderboardSummary:
    """Headline figures shown beside the leaderboards."""

    top_revenue_total: Decimal
    top_hours_total: Decimal
    billing_staff_count: int
    average_rate: Decimal


def utilization_score(
    availability: int | Decimal,
    billable_utilization: int | Decimal,
) -> int | Decimal:
    """
    Additive busy-and-billable heuristic, capped at 100.

    ``(100 - availability) + billable_utilization``.  Not a probability: the
    two inputs can overlap, which is accepted.
    """
    return min(100, (100 - availability) + billable_utilization)


class MetricsAggregator:
    """
    Pure aggregation over in-memory assignments.

    Contract:
        No I/O, no clock access; identical inputs give identical outputs.
    Guarantees:
        - ``average_hourly_rate`` is rounded half-up to ``money_places``.
        - Totals are exact Decimal products and sums (no rounding).
    Non-goals:
        - Does not pick the window or week count; callers resolve them from
          a period selection.
    """

    def __init__(self, money_places: int = DEFAULT_MONEY_PLACES):
        self.money_places = money_places

    @traced_engine(
        "metrics", "1.0",
        fingerprint_fields=("window", "weeks_in_window", "default_rate"),
    )
    def aggregate(
        self,
        assignments: Sequence[Assignment],
        window: ReportingWindow,
        weeks_in_window: int,
        default_rate: Decimal,
        known_project_ids: Collection[str] | None = None,
    ) -> AggregateResult:
        """
        Aggregate the assignments overlapping ``window``.

        Args:
            assignments: Assignments already filtered to one staff member or
                project.
            window: Reporting window; unbounded windows take everything.
            weeks_in_window: Week multiplier for weekly cost and hours.
            default_rate: Average rate reported when nothing is in the window
                (normally the staff member's client rate).
            known_project_ids: When given, assignments whose project is not
                in this collection are excluded and reported as orphans.

        Returns:
            AggregateResult
        """
        if weeks_in_window < 0:
            raise ValueError(f"weeks_in_window cannot be negative: {weeks_in_window}")

        included: list[Assignment] = []
        orphaned: list[str] = []
        for assignment in assignments:
            if known_project_ids is not None and assignment.project_id not in known_project_ids:
                orphaned.append(assignment.id)
                continue
            if window.overlaps_range(assignment.start_date, assignment.end_date):
                included.append(assignment)

        if orphaned:
            logger.warning(
                "orphaned_assignments_excluded",
                extra={"assignment_ids": orphaned, "count": len(orphaned)},
            )

        weeks = Decimal(weeks_in_window)
        total_revenue = sum((a.total_cost * weeks for a in included), ZERO)
        total_hours = sum((a.billable_hours * weeks for a in included), ZERO)
        if included:
            mean_rate = sum((a.hourly_rate for a in included), ZERO) / len(included)
        else:
            mean_rate = to_decimal(default_rate, "default_rate")

        return AggregateResult(
            total_revenue=total_revenue,
            total_hours=total_hours,
            average_hourly_rate=round_money(mean_rate, self.money_places),
            project_count=len({a.project_id for a in included}),
            assignment_ids=tuple(a.id for a in included),
            orphaned_assignment_ids=tuple(orphaned),
        )

    def staff_metrics(
        self,
        staff: Staff,
        assignments: Sequence[Assignment],
        window: ReportingWindow,
        weeks_in_window: int,
        known_project_ids: Collection[str] | None = None,
    ) -> StaffMetrics:
        """Aggregate one staff member's assignments and attach profile figures."""
        own = [a for a in assignments if a.staff_id == staff.id]
        result = self.aggregate(
            assignments=own,
            window=window,
            weeks_in_window=weeks_in_window,
            default_rate=staff.client_rate,
            known_project_ids=known_project_ids,
        )
        included = set(result.assignment_ids)
        return StaffMetrics(
            staff_id=staff.id,
            staff_name=staff.name,
            role=staff.role,
            department=staff.department,
            total_revenue=result.total_revenue,
            total_hours=result.total_hours,
            average_hourly_rate=result.average_hourly_rate,
            project_count=result.project_count,
            utilization_score=utilization_score(staff.availability, staff.billable_utilization),
            availability=staff.availability,
            billable_utilization=staff.billable_utilization,
            assignments=tuple(a for a in own if a.id in included),
            orphaned_assignment_ids=result.orphaned_assignment_ids,
        )

    @staticmethod
    def rank(
        records: Sequence[StaffMetrics],
        field: RankingField,
        limit: int | None = None,
    ) -> tuple[StaffMetrics, ...]:
        """
        Records ordered by ``field`` descending.

        ``sorted`` is stable even with ``reverse=True``, so equal values keep
        their input order.
        """
        ordered = sorted(records, key=attrgetter(RankingField(field).value), reverse=True)
        if limit is not None:
            ordered = ordered[:limit]
        return tuple(ordered)

    def summarize(
        self,
        records: Sequence[StaffMetrics],
        top_n: int = 10,
    ) -> LeaderboardSummary:
        """
        Headline figures: top-N revenue and hours, number of staff billing
        anything, and the mean of everyone's average rate.
        """
        top = self.rank(records, RankingField.REVENUE, top_n)
        mean_rate = sum((r.average_hourly_rate for r in records), ZERO) / max(1, len(records))
        return LeaderboardSummary(
            top_revenue_total=sum((r.total_revenue for r in top), ZERO),
            top_hours_total=sum((r.total_hours for r in top), ZERO),
            billing_staff_count=sum(1 for r in records if r.total_revenue > ZERO),
            average_rate=round_money(mean_rate, self.money_places),
        )
