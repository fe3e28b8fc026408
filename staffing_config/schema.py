"""
StaffingConfig schema.

Typed, frozen rendering of the YAML configuration.  The loader parses the
YAML document into these types; services receive a ``StaffingConfig`` and
never read the file themselves.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from staffing_engines.overlap import DEFAULT_WEEKS_PER_PERIOD
from staffing_engines.portfolio import RiskPolicy
from staffing_kernel.domain.models import Priority
from staffing_kernel.store import DeletePolicy

# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnalyticsConfig:
    """Leaderboard and aggregation settings."""

    leaderboard_size: int = 10
    money_places: int = 2
    weeks_per_period: Mapping[str, int] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_WEEKS_PER_PERIOD))
    )


@dataclass(frozen=True)
class PortfolioConfig:
    """Dashboard risk thresholds."""

    at_risk_progress_below: int = 50
    at_risk_priorities: tuple[Priority, ...] = (Priority.HIGH, Priority.CRITICAL)
    deadline_horizon_days: int = 30
    bench_availability_above: int = 50

    def risk_policy(self) -> RiskPolicy:
        return RiskPolicy(
            at_risk_progress_below=self.at_risk_progress_below,
            at_risk_priorities=self.at_risk_priorities,
            deadline_horizon_days=self.deadline_horizon_days,
            bench_availability_above=self.bench_availability_above,
        )


@dataclass(frozen=True)
class StoreConfig:
    """In-memory store behaviour."""

    delete_policy: DeletePolicy = DeletePolicy.CASCADE
    enforce_unique_pairs: bool = False


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StaffingConfig:
    """Complete runtime configuration."""

    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)
    portfolio: PortfolioConfig = field(default_factory=PortfolioConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    checksum: str = ""
