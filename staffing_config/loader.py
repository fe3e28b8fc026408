"""
Configuration Loader (``staffing_config.loader``).

Responsibility
--------------
Loads YAML files and parses them into typed ``staffing_config.schema``
dataclasses and domain entities.  Two documents are understood: the
runtime configuration (``defaults.yaml``) and a seed dataset of projects,
staff and assignments (``seed/demo.yaml``).  Services obtain configuration
through ``staffing_config.get_active_config()``; the parse functions here
are also used directly by tests and ``scripts/staffing_report.py``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling above the kernel and engines.
Nothing in ``staffing_kernel`` or ``staffing_engines`` imports it.

Invariants enforced
-------------------
* Every parsed config object is a frozen dataclass from ``schema.py``.
* Out-of-range or unknown configuration values raise
  ``InvalidConfigError`` naming the offending key; there are no silent
  fallbacks for values that are present but wrong.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the raw
  document for configuration identity.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid configuration value  -> ``InvalidConfigError``.
* Missing required entity keys in a seed file  -> ``KeyError`` propagates.
* Invalid entity values  -> the domain model's own errors propagate.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from staffing_config.schema import (
    AnalyticsConfig,
    LoggingConfig,
    PortfolioConfig,
    StaffingConfig,
    StoreConfig,
)
from staffing_kernel.domain.models import (
    Assignment,
    Priority,
    Project,
    Skill,
    Staff,
)
from staffing_kernel.exceptions import InvalidConfigError
from staffing_kernel.logging_config import get_logger
from staffing_kernel.store import DeletePolicy, StaffingStore

logger = get_logger("config.loader")

_PACKAGE_DIR = Path(__file__).parent
DEFAULT_CONFIG_PATH = _PACKAGE_DIR / "defaults.yaml"
DEFAULT_SEED_PATH = _PACKAGE_DIR / "seed" / "demo.yaml"

_REQUIRED_WEEK_KEYS = ("month", "quarter", "year", "all")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_date(value: Any) -> date:
    """Parse a date from YAML (string or date object)."""
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def _positive_int(section: str, data: dict[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidConfigError(f"{section}.{key}", f"must be a positive integer, got {value!r}")
    return value


def _bounded_int(
    section: str, data: dict[str, Any], key: str, default: int, lo: int, hi: int,
) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or not lo <= value <= hi:
        raise InvalidConfigError(
            f"{section}.{key}", f"must be an integer in {lo}..{hi}, got {value!r}"
        )
    return value


# ---------------------------------------------------------------------------
# Configuration sections
# ---------------------------------------------------------------------------


def parse_analytics(data: dict[str, Any]) -> AnalyticsConfig:
    """Parse the ``analytics`` section."""
    weeks_raw = data.get("weeks_per_period")
    if weeks_raw is None:
        weeks = dict(AnalyticsConfig().weeks_per_period)
    else:
        if not isinstance(weeks_raw, dict):
            raise InvalidConfigError("analytics.weeks_per_period", "must be a mapping")
        missing = [k for k in _REQUIRED_WEEK_KEYS if k not in weeks_raw]
        if missing:
            raise InvalidConfigError(
                "analytics.weeks_per_period", f"missing entries: {', '.join(missing)}"
            )
        weeks = {
            k: _positive_int("analytics.weeks_per_period", weeks_raw, k, 0)
            for k in weeks_raw
        }
    return AnalyticsConfig(
        leaderboard_size=_positive_int("analytics", data, "leaderboard_size", 10),
        money_places=_bounded_int("analytics", data, "money_places", 2, 0, 6),
        weeks_per_period=MappingProxyType(weeks),
    )


def parse_portfolio(data: dict[str, Any]) -> PortfolioConfig:
    """Parse the ``portfolio`` section."""
    raw_priorities = data.get("at_risk_priorities", ["high", "critical"])
    try:
        priorities = tuple(Priority(p) for p in raw_priorities)
    except (TypeError, ValueError) as e:
        raise InvalidConfigError("portfolio.at_risk_priorities", str(e)) from e
    return PortfolioConfig(
        at_risk_progress_below=_bounded_int(
            "portfolio", data, "at_risk_progress_below", 50, 0, 100
        ),
        at_risk_priorities=priorities,
        deadline_horizon_days=_positive_int("portfolio", data, "deadline_horizon_days", 30),
        bench_availability_above=_bounded_int(
            "portfolio", data, "bench_availability_above", 50, 0, 100
        ),
    )


def parse_store(data: dict[str, Any]) -> StoreConfig:
    """Parse the ``store`` section."""
    raw_policy = data.get("delete_policy", DeletePolicy.CASCADE.value)
    try:
        policy = DeletePolicy(raw_policy)
    except ValueError as e:
        raise InvalidConfigError(
            "store.delete_policy", f"expected cascade or orphan, got {raw_policy!r}"
        ) from e
    unique = data.get("enforce_unique_pairs", False)
    if not isinstance(unique, bool):
        raise InvalidConfigError("store.enforce_unique_pairs", "must be true or false")
    return StoreConfig(delete_policy=policy, enforce_unique_pairs=unique)


def parse_logging(data: dict[str, Any]) -> LoggingConfig:
    """Parse the ``logging`` section."""
    level = str(data.get("level", "INFO")).upper()
    if level not in _LOG_LEVELS:
        raise InvalidConfigError("logging.level", f"unknown level {level!r}")
    return LoggingConfig(level=level)


def parse_config(data: dict[str, Any]) -> StaffingConfig:
    """
    Parse a whole configuration document.

    Absent sections take their defaults; present values are validated.

    Raises:
        InvalidConfigError: if any value is out of range or unknown.
    """
    for section in ("analytics", "portfolio", "store", "logging"):
        if data.get(section) is not None and not isinstance(data[section], dict):
            raise InvalidConfigError(section, "must be a mapping")
    return StaffingConfig(
        analytics=parse_analytics(data.get("analytics") or {}),
        portfolio=parse_portfolio(data.get("portfolio") or {}),
        store=parse_store(data.get("store") or {}),
        logging=parse_logging(data.get("logging") or {}),
        checksum=compute_checksum(data),
    )


def load_config(path: Path | None = None) -> StaffingConfig:
    """Load and parse a configuration file (packaged defaults when None)."""
    return parse_config(load_yaml_file(path or DEFAULT_CONFIG_PATH))


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SeedData:
    """Entities parsed from a seed file, in file order."""

    projects: tuple[Project, ...] = ()
    staff: tuple[Staff, ...] = ()
    assignments: tuple[Assignment, ...] = ()


def parse_project(data: dict[str, Any]) -> Project:
    """Parse a Project from a dict."""
    return Project(
        id=str(data["id"]),
        name=data["name"],
        client=data["client"],
        status=data["status"],
        priority=data["priority"],
        start_date=parse_date(data["start_date"]),
        end_date=parse_date(data["end_date"]),
        budget=data.get("budget", 0),
        received_amount=data.get("received_amount", 0),
        spent=data.get("spent", 0),
        progress=data.get("progress", 0),
        team_lead=data.get("team_lead"),
        description=data.get("description", ""),
        tech_stack=tuple(data.get("tech_stack", ())),
    )


def parse_skill(data: dict[str, Any]) -> Skill:
    return Skill(
        name=data["name"],
        level=data["level"],
        years_of_experience=data.get("years_of_experience", 0),
    )


def parse_staff(data: dict[str, Any]) -> Staff:
    """Parse a Staff member from a dict."""
    return Staff(
        id=str(data["id"]),
        name=data["name"],
        role=data["role"],
        department=data["department"],
        status=data["status"],
        availability=data["availability"],
        billable_utilization=data["billable_utilization"],
        client_rate=data["client_rate"],
        internal_rate=data.get("internal_rate", 0),
        skills=tuple(parse_skill(s) for s in data.get("skills", ())),
        current_projects=tuple(str(p) for p in data.get("current_projects", ())),
        email=data.get("email", ""),
        location=data.get("location", ""),
    )


def parse_assignment(data: dict[str, Any]) -> Assignment:
    """Parse an Assignment from a dict."""
    return Assignment(
        id=str(data["id"]),
        project_id=str(data["project_id"]),
        staff_id=str(data["staff_id"]),
        role=data["role"],
        allocation=data["allocation"],
        start_date=parse_date(data["start_date"]),
        end_date=parse_date(data["end_date"]),
        billable_hours=data["billable_hours"],
        hourly_rate=data["hourly_rate"],
        is_team_lead=bool(data.get("is_team_lead", False)),
    )


def parse_seed(data: dict[str, Any]) -> SeedData:
    return SeedData(
        projects=tuple(parse_project(p) for p in data.get("projects") or ()),
        staff=tuple(parse_staff(s) for s in data.get("staff") or ()),
        assignments=tuple(parse_assignment(a) for a in data.get("assignments") or ()),
    )


def load_seed_data(path: Path | None = None) -> SeedData:
    """Load a seed dataset (the packaged demo data when None)."""
    return parse_seed(load_yaml_file(path or DEFAULT_SEED_PATH))


def build_store(seed: SeedData, config: StaffingConfig | None = None) -> StaffingStore:
    """
    A populated store configured from ``config``.

    Entities are added projects first, then staff, then assignments, so
    every assignment's references are checked on the way in.
    """
    store_config = (config or StaffingConfig()).store
    store = StaffingStore(
        seed.projects,
        seed.staff,
        seed.assignments,
        delete_policy=store_config.delete_policy,
        enforce_unique_pairs=store_config.enforce_unique_pairs,
    )
    logger.info(
        "store_seeded",
        extra={
            "project_count": len(seed.projects),
            "staff_count": len(seed.staff),
            "assignment_count": len(seed.assignments),
        },
    )
    return store
