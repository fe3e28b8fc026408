"""
staffing_engines.tracer -- Engine invocation tracer emitting STAFFING_ENGINE_TRACE.

Responsibility:
    ``@traced_engine`` wraps an engine entry point and logs one
    STAFFING_ENGINE_TRACE record per call: engine name and version, a
    fingerprint of the inputs that decide the result (reporting window,
    week multiplier, as-of date) and the duration.

Architecture position:
    Engines -- infrastructure support for the pure calculation layer.
    Emits a log record only; never touches the inputs or the result.

Invariants enforced:
    - Fingerprint fields are resolved by parameter name whether the caller
      passed them positionally or by keyword, so ``staff_metrics`` calling
      ``aggregate(assignments, window, weeks, rate)`` fingerprints the same
      as a keyword call.
    - Identical inputs give identical fingerprints across processes.

Failure modes:
    - A field that is neither passed nor defaulted is recorded as "null".

Usage:
    @traced_engine("allocation", "1.0", fingerprint_fields=("window",))
    def capacity(self, staff_id, assignments, window=None):
        ...
"""

from __future__ import annotations

import functools
import hashlib
import inspect
import time
from collections.abc import Callable
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from staffing_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")


def _canonicalize(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, Decimal):
        return format(value.normalize(), "f")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    # ReportingWindow renders as "start..end" / "-inf..+inf"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: dict[str, Any],
) -> str:
    """16-hex-char SHA-256 prefix over ``field=value`` pairs in field order."""
    canonical = "|".join(
        f"{name}={_canonicalize(arguments.get(name))}" for name in fingerprint_fields
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorator that emits STAFFING_ENGINE_TRACE around an engine call."""

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fp = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs)
                bound.apply_defaults()
                fp = compute_input_fingerprint(fingerprint_fields, bound.arguments)

            t0 = time.monotonic()
            result = func(*args, **kwargs)
            duration_ms = round((time.monotonic() - t0) * 1000, 2)

            _logger.info(
                "STAFFING_ENGINE_TRACE",
                extra={
                    "trace_type": "STAFFING_ENGINE_TRACE",
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fp,
                    "duration_ms": duration_ms,
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
