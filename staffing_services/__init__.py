"""
staffing_services -- Package init and public API.

Responsibility:
    Orchestration services that compose the pure calculation engines
    (staffing_engines/) with the in-memory store, the clock and the
    configuration.  This is the **only** layer that reads the clock.

Architecture position:
    Services -- orchestration over engines + kernel.

    Dependency direction (enforced by tests/architecture/test_layer_boundaries.py):
        staffing_services/ -> staffing_engines/  (allowed)
        staffing_services/ -> staffing_kernel/   (allowed)
        staffing_services/ -> staffing_config/   (allowed)
        staffing_engines/  -> staffing_services/ (FORBIDDEN)
        staffing_kernel/   -> staffing_services/ (FORBIDDEN)

Invariants enforced:
    - Layer isolation: staffing_kernel and staffing_engines must never
      import from this package.
    - DI transparency: services receive store, clock and config through
      their constructors; none builds its own store.
"""

from staffing_services.analytics_service import AnalyticsService, Leaderboards
from staffing_services.assignment_service import AssignmentService
from staffing_services.portfolio_service import PortfolioService

__all__ = [
    "AnalyticsService",
    "AssignmentService",
    "Leaderboards",
    "PortfolioService",
]
