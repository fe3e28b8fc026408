"""
Pytest fixtures for the staffing test suite.

Provides:
- Structured logging setup and a JSON log capture fixture
- A deterministic clock pinned to 2024-06-15
- The packaged configuration and demo dataset, loaded into a fresh store
- Small entity factories for hand-built scenarios
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest

from staffing_config import StaffingConfig, build_store, get_active_config, load_seed_data
from staffing_kernel.domain.clock import DeterministicClock
from staffing_kernel.domain.models import Assignment, Project, Staff
from staffing_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

TODAY = date(2024, 6, 15)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture staffing_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, store):
            store.delete_project("p1")
            logs = captured_logs()
            assert any(r["message"] == "project_deleted" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("staffing_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock, config, store
# =============================================================================


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(TODAY)


@pytest.fixture(scope="session")
def config() -> StaffingConfig:
    return get_active_config()


@pytest.fixture(scope="session")
def seed():
    return load_seed_data()


@pytest.fixture
def store(seed, config):
    """A fresh store holding the demo dataset."""
    return build_store(seed, config)


# =============================================================================
# Entity factories
# =============================================================================


def make_project(project_id: str = "p-x", **overrides) -> Project:
    fields = dict(
        id=project_id,
        name=f"Project {project_id}",
        client="Acme",
        status="active",
        priority="medium",
        start_date=date(2024, 1, 1),
        end_date=date(2024, 12, 31),
        budget=Decimal("100000"),
        received_amount=Decimal("50000"),
        spent=Decimal("40000"),
        progress=50,
    )
    fields.update(overrides)
    return Project(**fields)


def make_staff(staff_id: str = "s-x", **overrides) -> Staff:
    fields = dict(
        id=staff_id,
        name=f"Staff {staff_id}",
        role="Developer",
        department="Engineering",
        status="available",
        availability=100,
        billable_utilization=0,
        client_rate=Decimal("100"),
        internal_rate=Decimal("60"),
    )
    fields.update(overrides)
    return Staff(**fields)


def make_assignment(
    assignment_id: str = "a-x",
    project_id: str = "p-x",
    staff_id: str = "s-x",
    **overrides,
) -> Assignment:
    fields = dict(
        id=assignment_id,
        project_id=project_id,
        staff_id=staff_id,
        role="Developer",
        allocation=50,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 31),
        billable_hours=Decimal("20"),
        hourly_rate=Decimal("100"),
    )
    fields.update(overrides)
    return Assignment(**fields)
