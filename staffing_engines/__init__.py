"""
Module: staffing_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for
    staffing_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import staffing_kernel (domain, exceptions, logging).
    MUST NOT import staffing_services or staffing_config.

Invariants enforced:
    - Purity: engines NEVER call ``date.today()``; dates are parameters.
    - Decimal-only arithmetic for money and hours.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from staffing_engines import MetricsAggregator, AllocationValidator
    from staffing_engines import PeriodSelection, resolve_window, overlaps
"""

from staffing_engines.allocation import (
    AllocationMatrix,
    AllocationValidator,
    CapacityRecord,
    CapacityStatus,
    classify_allocation,
    is_assignable,
    total_allocation,
)
from staffing_engines.metrics import (
    AggregateResult,
    LeaderboardSummary,
    MetricsAggregator,
    RankingField,
    StaffMetrics,
    utilization_score,
)
from staffing_engines.overlap import (
    DEFAULT_WEEKS_PER_PERIOD,
    PeriodSelection,
    PeriodUnit,
    RelativePeriod,
    ReportingWindow,
    approximate_weeks,
    filter_overlapping,
    overlaps,
    period_label,
    resolve_window,
)
from staffing_engines.portfolio import (
    DashboardMetrics,
    DepartmentShare,
    PortfolioCalculator,
    ProjectFinancials,
    RiskPolicy,
)
from staffing_engines.timeline import (
    TimelineRow,
    WeekSlot,
    build_timeline,
    project_timeline,
    year_weeks,
)

__all__ = [
    "AggregateResult",
    "AllocationMatrix",
    "AllocationValidator",
    "CapacityRecord",
    "CapacityStatus",
    "DEFAULT_WEEKS_PER_PERIOD",
    "DashboardMetrics",
    "DepartmentShare",
    "LeaderboardSummary",
    "MetricsAggregator",
    "PeriodSelection",
    "PeriodUnit",
    "PortfolioCalculator",
    "ProjectFinancials",
    "RankingField",
    "RelativePeriod",
    "ReportingWindow",
    "RiskPolicy",
    "StaffMetrics",
    "TimelineRow",
    "WeekSlot",
    "approximate_weeks",
    "build_timeline",
    "classify_allocation",
    "filter_overlapping",
    "is_assignable",
    "overlaps",
    "period_label",
    "project_timeline",
    "resolve_window",
    "total_allocation",
    "utilization_score",
    "year_weeks",
]
