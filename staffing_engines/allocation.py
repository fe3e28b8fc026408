"""
Module: staffing_engines.allocation
Responsibility:
    Sum each staff member's allocation across their assignments, classify
    the resulting capacity (free / partial / over-committed), and project a
    staff x project allocation matrix for rendering.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Shares the entity model with the metrics aggregator; the optional
    window filter goes through staffing_engines.overlap.

Invariants enforced:
    - Classification: total 0 -> FREE, 1..99 -> PARTIAL, >= 100 ->
      OVER_COMMITTED.
    - Report-only: over-commitment is detected and reported, never rejected.
    - The matrix is a pure projection of its inputs; no hidden state.

Failure modes:
    - InvalidAllocationError when asked to classify a negative total.

Usage:
    from staffing_engines.allocation import AllocationValidator

    validator = AllocationValidator()
    record = validator.capacity(staff_id="s-1", assignments=assignments)
    record.status  # CapacityStatus.PARTIAL
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from staffing_engines.overlap import ReportingWindow, filter_overlapping
from staffing_engines.tracer import traced_engine
from staffing_kernel.domain.models import Assignment, Project, Staff
from staffing_kernel.exceptions import InvalidAllocationError
from staffing_kernel.logging_config import get_logger

logger = get_logger("engines.allocation")


class CapacityStatus(str, Enum):
    """Capacity state derived from total allocation."""

    FREE = "free"
    PARTIAL = "partial"
    OVER_COMMITTED = "over-committed"


def total_allocation(assignments: Sequence[Assignment]) -> int:
    """Sum of allocation percentages."""
    return sum(a.allocation for a in assignments)


def classify_allocation(total: int) -> CapacityStatus:
    """
    Classify a total allocation.

    Raises:
        InvalidAllocationError: If ``total`` is negative.
    """
    if total < 0:
        raise InvalidAllocationError(total, "total cannot be negative")
    if total == 0:
        return CapacityStatus.FREE
    if total < 100:
        return CapacityStatus.PARTIAL
    return CapacityStatus.OVER_COMMITTED


def is_assignable(staff: Staff) -> bool:
    """A staff member can take new work while any availability remains."""
    return staff.availability > 0


@dataclass(frozen=True)
class CapacityRecord:
    """One staff member's allocation total and classification."""

    staff_id: str
    total_allocation: int
    status: CapacityStatus
    assignment_ids: tuple[str, ...] = ()

    @property
    def is_over_committed(self) -> bool:
        return self.status == CapacityStatus.OVER_COMMITTED

    @property
    def headroom(self) -> int:
        """Percent still unallocated; 0 once at or over capacity."""
        return max(0, 100 - self.total_allocation)


@dataclass(frozen=True)
class AllocationMatrix:
    """
    Staff x project grid of allocation percentages.

    ``cells[staff_id][project_id]`` is the allocation, or ``None`` when the
    staff member has no assignment on that project.  Row and column order
    follow the inputs.
    """

    staff_ids: tuple[str, ...]
    project_ids: tuple[str, ...]
    cells: dict[str, dict[str, int | None]] = field(default_factory=dict)
    rows: dict[str, CapacityRecord] = field(default_factory=dict)

    def cell(self, staff_id: str, project_id: str) -> int | None:
        return self.cells[staff_id][project_id]

    def row_total(self, staff_id: str) -> int:
        return self.rows[staff_id].total_allocation

    def row_status(self, staff_id: str) -> CapacityStatus:
        return self.rows[staff_id].status


class AllocationValidator:
    """
    Read-side capacity checks.

    Contract:
        Pure functions over the supplied assignments.  Nothing is rejected;
        callers decide what to do with an over-committed record.
    Non-goals:
        - Does not enforce a capacity ceiling at write time.
    """

    def capacity(
        self,
        staff_id: str,
        assignments: Sequence[Assignment],
        window: ReportingWindow | None = None,
    ) -> CapacityRecord:
        """
        Capacity record for one staff member.

        Args:
            staff_id: Staff member to total.
            assignments: Any assignments; only the member's are counted.
            window: When given, only assignments overlapping it count
                (concurrent allocation in that period).
        """
        own = [a for a in assignments if a.staff_id == staff_id]
        if window is not None:
            own = list(filter_overlapping(own, window))
        total = total_allocation(own)
        return CapacityRecord(
            staff_id=staff_id,
            total_allocation=total,
            status=classify_allocation(total),
            assignment_ids=tuple(a.id for a in own),
        )

    @traced_engine("allocation", "1.0", fingerprint_fields=("window",))
    def capacity_report(
        self,
        staff: Sequence[Staff],
        assignments: Sequence[Assignment],
        window: ReportingWindow | None = None,
    ) -> tuple[CapacityRecord, ...]:
        """Capacity records for every staff member, in input order."""
        records = tuple(self.capacity(s.id, assignments, window) for s in staff)
        over = [r.staff_id for r in records if r.is_over_committed]
        if over:
            logger.info(
                "over_committed_staff_detected",
                extra={"staff_ids": over, "count": len(over)},
            )
        return records

    @traced_engine("allocation_matrix", "1.0")
    def matrix(
        self,
        staff: Sequence[Staff],
        projects: Sequence[Project],
        assignments: Sequence[Assignment],
    ) -> AllocationMatrix:
        """
        Build the allocation grid.

        Row totals cover ALL of a member's assignments, including projects
        outside the supplied columns.  When a member has more than one
        assignment on the same project, the cell shows the first.
        """
        project_ids = tuple(p.id for p in projects)
        cells: dict[str, dict[str, int | None]] = {}
        rows: dict[str, CapacityRecord] = {}
        for member in staff:
            own = [a for a in assignments if a.staff_id == member.id]
            row: dict[str, int | None] = {}
            for project_id in project_ids:
                match = next((a for a in own if a.project_id == project_id), None)
                row[project_id] = match.allocation if match is not None else None
            cells[member.id] = row
            rows[member.id] = self.capacity(member.id, own)
        return AllocationMatrix(
            staff_ids=tuple(s.id for s in staff),
            project_ids=project_ids,
            cells=cells,
            rows=rows,
        )
