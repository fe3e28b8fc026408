"""
staffing_services.assignment_service -- Create and edit assignments, report capacity.

Responsibility:
    The write path behind the assignment form: fill in defaults (role from
    the staff member, hourly rate from their client rate, generated id),
    validate through the store, move the team-lead flag, and expose the
    capacity report and allocation matrix.

Architecture position:
    Services -- orchestration over the store + AllocationValidator.

Invariants enforced:
    - A new assignment's hourly rate defaults to the staff member's client
      rate; changing the staff member on an edit without an explicit rate
      resets it to the new member's client rate.
    - total_cost always follows hours and rate (it is derived on the model).
    - Over-commitment is reported, never rejected.

Failure modes:
    - ProjectNotFoundError / StaffNotFoundError for unknown references.
    - AssignmentNotFoundError when editing an unknown assignment.
    - TeamLeadConflictError / DuplicateAssignmentError from the store.
    - InvalidAllocationError / InvalidRangeError from the model.

Usage:
    service = AssignmentService(store, clock, config)
    assignment = service.create_assignment(
        project_id="p1", staff_id="s3", allocation=50,
        start_date=date(2024, 7, 1), end_date=date(2024, 9, 30),
        billable_hours=20,
    )
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any
from uuid import uuid4

from staffing_config.schema import StaffingConfig
from staffing_engines.allocation import (
    AllocationMatrix,
    AllocationValidator,
    CapacityRecord,
    is_assignable,
)
from staffing_engines.overlap import ReportingWindow
from staffing_kernel.domain.clock import Clock, SystemClock
from staffing_kernel.domain.models import Assignment, ProjectStatus, Staff
from staffing_kernel.logging_config import LogContext, get_logger
from staffing_kernel.store import StaffingStore

logger = get_logger("services.assignment")

_MATRIX_STATUSES = (ProjectStatus.PLANNING, ProjectStatus.ACTIVE)


class AssignmentService:
    """
    Assignment write path and capacity views.

    Contract:
        Receives store, clock and config via constructor injection.
    Guarantees:
        - Every write goes through the store, so reference and team-lead
          checks always apply.
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
        self._validator = AllocationValidator()

    def create_assignment(
        self,
        *,
        project_id: str,
        staff_id: str,
        allocation: int,
        start_date: date,
        end_date: date,
        billable_hours: Decimal | int | str,
        role: str | None = None,
        hourly_rate: Decimal | int | str | None = None,
        is_team_lead: bool = False,
        assignment_id: str | None = None,
    ) -> Assignment:
        """
        Create and store an assignment.

        ``role`` defaults to the staff member's role and ``hourly_rate`` to
        their client rate.
        """
        self._store.get_project(project_id)
        member = self._store.get_staff(staff_id)
        assignment = Assignment(
            id=assignment_id or f"a-{uuid4().hex[:12]}",
            project_id=project_id,
            staff_id=staff_id,
            role=role or member.role,
            allocation=allocation,
            start_date=start_date,
            end_date=end_date,
            billable_hours=billable_hours,
            hourly_rate=member.client_rate if hourly_rate is None else hourly_rate,
            is_team_lead=is_team_lead,
        )
        with LogContext.bind(entity_id=assignment.id):
            self._store.add_assignment(assignment)
            self._log_capacity(staff_id)
        return assignment

    def update_assignment(self, assignment_id: str, **changes: Any) -> Assignment:
        """
        Apply ``changes`` to an existing assignment.

        When ``staff_id`` changes and no ``hourly_rate`` is given, the rate
        resets to the new staff member's client rate.
        """
        current = self._store.get_assignment(assignment_id)
        new_staff_id = changes.get("staff_id", current.staff_id)
        if new_staff_id != current.staff_id and "hourly_rate" not in changes:
            changes["hourly_rate"] = self._store.get_staff(new_staff_id).client_rate
        updated = current.with_changes(**changes)
        with LogContext.bind(entity_id=assignment_id):
            self._store.update_assignment(updated)
            self._log_capacity(updated.staff_id)
        return updated

    def delete_assignment(self, assignment_id: str) -> Assignment:
        return self._store.delete_assignment(assignment_id)

    def set_team_lead(self, project_id: str, assignment_id: str) -> Assignment:
        """Make the assignment the project's only team lead."""
        return self._store.set_team_lead(project_id, assignment_id)

    def capacity_report(self, as_of: date | None = None) -> tuple[CapacityRecord, ...]:
        """
        Capacity per staff member.

        With ``as_of`` only assignments active on that day count; without
        it every assignment counts.
        """
        snapshot = self._store.snapshot()
        window = ReportingWindow(as_of, as_of) if as_of is not None else None
        return self._validator.capacity_report(
            snapshot.staff, snapshot.assignments, window=window
        )

    def allocation_matrix(self) -> AllocationMatrix:
        """Staff x project grid over projects in planning or active status."""
        snapshot = self._store.snapshot()
        projects = [p for p in snapshot.projects if p.status in _MATRIX_STATUSES]
        return self._validator.matrix(snapshot.staff, projects, snapshot.assignments)

    def assignable_staff(self) -> tuple[Staff, ...]:
        """Staff with any availability left."""
        return tuple(s for s in self._store.snapshot().staff if is_assignable(s))

    def _log_capacity(self, staff_id: str) -> None:
        snapshot = self._store.snapshot()
        record = self._validator.capacity(staff_id, snapshot.assignments)
        if record.is_over_committed:
            logger.warning(
                "staff_over_committed",
                extra={"staff_id": staff_id, "total_allocation": record.total_allocation},
            )
