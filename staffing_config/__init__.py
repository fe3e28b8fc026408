"""
staffing_config -- single public entrypoint for staffing configuration.

Responsibility:
    Provides the way to obtain configuration at runtime through
    ``get_active_config()``, which returns a frozen ``StaffingConfig``.
    Also exposes the seed-data loader used to populate a demo store.

Architecture position:
    Configuration -- YAML-driven settings, validated at load time.
    This package sits above ``staffing_kernel`` / ``staffing_engines`` and
    below ``staffing_services``.  The kernel and engines MUST NEVER import
    from ``staffing_config``.

Invariants enforced:
    - Single entrypoint: services receive a ``StaffingConfig`` and never
      read configuration files themselves.
    - Validation on load: out-of-range values raise ``InvalidConfigError``.
    - Deterministic identity: the same YAML document always produces the
      same checksum.

Failure modes:
    - ``FileNotFoundError`` -- the requested file does not exist.
    - ``InvalidConfigError`` -- a value is present but invalid.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``STAFFING_CONFIG_TRACE`` log entry with the source path, checksum and
    the effective store policy.
"""

from __future__ import annotations

import logging
from pathlib import Path

from staffing_config.loader import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_SEED_PATH,
    SeedData,
    build_store,
    load_config,
    load_seed_data,
)
from staffing_config.schema import (
    AnalyticsConfig,
    LoggingConfig,
    PortfolioConfig,
    StaffingConfig,
    StoreConfig,
)

_logger = logging.getLogger("staffing_kernel.config")


def get_active_config(path: Path | None = None) -> StaffingConfig:
    """The public configuration entrypoint.

    Args:
        path: Override configuration file.  Defaults to the packaged
            ``staffing_config/defaults.yaml``.

    Returns:
        StaffingConfig -- validated and frozen.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        InvalidConfigError: If a value fails validation.
    """
    source = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    config = load_config(source)

    _logger.info(
        "STAFFING_CONFIG_TRACE",
        extra={
            "trace_type": "STAFFING_CONFIG_TRACE",
            "source": str(source),
            "checksum": config.checksum,
            "delete_policy": config.store.delete_policy.value,
            "enforce_unique_pairs": config.store.enforce_unique_pairs,
            "leaderboard_size": config.analytics.leaderboard_size,
        },
    )
    return config


__all__ = [
    "AnalyticsConfig",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_SEED_PATH",
    "LoggingConfig",
    "PortfolioConfig",
    "SeedData",
    "StaffingConfig",
    "StoreConfig",
    "build_store",
    "get_active_config",
    "load_seed_data",
]
