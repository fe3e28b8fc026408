"""
StaffingStore -- In-memory repository for projects, staff and assignments.

Responsibility:
    Owns the three entity collections and exposes CRUD operations plus a
    consistent read view (``StoreSnapshot``).  Constructed once at process
    start and passed by reference to services; there is no module-level
    dataset.

Architecture position:
    Kernel -- the only mutable object in the system.  Engines never see the
    store, only snapshots or plain sequences taken from it.

Invariants enforced:
    - All-or-nothing writes: the whole state is one frozen ``StoreSnapshot``;
      a mutation builds a new snapshot and swaps the reference once, so a
      reader never observes a half-applied change (e.g. a cascade delete
      that removed the project but not yet its assignments).
    - Referential integrity on write: assignments must reference an existing
      project and staff member.
    - At most one ``is_team_lead`` assignment per project.
    - Adding an assignment appends its project to ``Staff.current_projects``;
      a project id is dropped only when the last assignment backing that
      (staff, project) pair goes away.  Other ids are left alone.

Failure modes:
    - ProjectNotFoundError / StaffNotFoundError / AssignmentNotFoundError.
    - EntityAlreadyExistsError on duplicate ids.
    - TeamLeadConflictError on a second team lead.
    - DuplicateAssignmentError when unique pairs are enforced.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum

from staffing_kernel.domain.models import Assignment, Project, Staff
from staffing_kernel.exceptions import (
    AssignmentNotFoundError,
    DuplicateAssignmentError,
    EntityAlreadyExistsError,
    ProjectNotFoundError,
    StaffNotFoundError,
    TeamLeadConflictError,
)
from staffing_kernel.logging_config import get_logger

logger = get_logger("store")


class DeletePolicy(str, Enum):
    """What happens to assignments when their project or staff is deleted."""

    CASCADE = "cascade"
    ORPHAN = "orphan"


@dataclass(frozen=True)
class StoreSnapshot:
    """
    Immutable view of the store at one instant.

    Lookups return ``None`` for unknown ids rather than raising; callers
    decide whether a missing reference is an error or an orphan to skip.
    """

    projects: tuple[Project, ...] = ()
    staff: tuple[Staff, ...] = ()
    assignments: tuple[Assignment, ...] = ()

    def project(self, project_id: str) -> Project | None:
        return next((p for p in self.projects if p.id == project_id), None)

    def staff_member(self, staff_id: str) -> Staff | None:
        return next((s for s in self.staff if s.id == staff_id), None)

    def assignment(self, assignment_id: str) -> Assignment | None:
        return next((a for a in self.assignments if a.id == assignment_id), None)

    def assignments_for_staff(self, staff_id: str) -> tuple[Assignment, ...]:
        return tuple(a for a in self.assignments if a.staff_id == staff_id)

    def assignments_for_project(self, project_id: str) -> tuple[Assignment, ...]:
        return tuple(a for a in self.assignments if a.project_id == project_id)

    @property
    def project_ids(self) -> frozenset[str]:
        return frozenset(p.id for p in self.projects)

    @property
    def staff_ids(self) -> frozenset[str]:
        return frozenset(s.id for s in self.staff)

    def team_size(self, project_id: str, as_of: date | None = None) -> int:
        """
        Number of assignments on the project active on ``as_of``.

        With no date every assignment on the project counts.
        """
        assignments = self.assignments_for_project(project_id)
        if as_of is None:
            return len(assignments)
        return sum(1 for a in assignments if a.start_date <= as_of <= a.end_date)

    def team_lead_assignment(self, project_id: str) -> Assignment | None:
        return next(
            (a for a in self.assignments_for_project(project_id) if a.is_team_lead),
            None,
        )

    def orphaned_assignments(self) -> tuple[Assignment, ...]:
        """Assignments whose project or staff member no longer exists."""
        project_ids = self.project_ids
        staff_ids = self.staff_ids
        return tuple(
            a for a in self.assignments
            if a.project_id not in project_ids or a.staff_id not in staff_ids
        )


class StaffingStore:
    """
    Replace-on-write in-memory store.

    Contract:
        Every public mutator either commits fully or raises without changing
        state.
    Non-goals:
        - No persistence and no locking; single-threaded use is assumed.
    """

    def __init__(
        self,
        projects: Iterable[Project] = (),
        staff: Iterable[Staff] = (),
        assignments: Iterable[Assignment] = (),
        *,
        delete_policy: DeletePolicy = DeletePolicy.CASCADE,
        enforce_unique_pairs: bool = False,
    ):
        self.delete_policy = DeletePolicy(delete_policy)
        self.enforce_unique_pairs = enforce_unique_pairs
        self._state = StoreSnapshot()
        for project in projects:
            self.add_project(project)
        for member in staff:
            self.add_staff(member)
        for assignment in assignments:
            self.add_assignment(assignment)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def snapshot(self) -> StoreSnapshot:
        """Current state; later writes do not affect the returned object."""
        return self._state

    def get_project(self, project_id: str) -> Project:
        project = self._state.project(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    def get_staff(self, staff_id: str) -> Staff:
        member = self._state.staff_member(staff_id)
        if member is None:
            raise StaffNotFoundError(staff_id)
        return member

    def get_assignment(self, assignment_id: str) -> Assignment:
        assignment = self._state.assignment(assignment_id)
        if assignment is None:
            raise AssignmentNotFoundError(assignment_id)
        return assignment

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def add_project(self, project: Project) -> Project:
        state = self._state
        if state.project(project.id) is not None:
            raise EntityAlreadyExistsError("Project", project.id)
        self._commit(replace(state, projects=state.projects + (project,)))
        logger.info("project_added", extra={"project_id": project.id})
        return project

    def update_project(self, project: Project) -> Project:
        state = self._state
        self.get_project(project.id)
        projects = tuple(project if p.id == project.id else p for p in state.projects)
        self._commit(replace(state, projects=projects))
        logger.info("project_updated", extra={"project_id": project.id})
        return project

    def delete_project(self, project_id: str) -> tuple[Assignment, ...]:
        """
        Remove a project.

        Returns:
            The assignments removed with it (empty under ORPHAN policy).
        """
        state = self._state
        self.get_project(project_id)
        projects = tuple(p for p in state.projects if p.id != project_id)
        removed: tuple[Assignment, ...] = ()
        assignments = state.assignments
        staff = state.staff
        if self.delete_policy == DeletePolicy.CASCADE:
            removed = state.assignments_for_project(project_id)
            assignments = tuple(a for a in assignments if a.project_id != project_id)
            for a in removed:
                staff = _detach_if_unassigned(staff, a.staff_id, project_id, assignments)
        self._commit(replace(state, projects=projects, assignments=assignments, staff=staff))
        logger.info(
            "project_deleted",
            extra={
                "project_id": project_id,
                "delete_policy": self.delete_policy.value,
                "assignments_removed": len(removed),
            },
        )
        return removed

    # ------------------------------------------------------------------
    # Staff
    # ------------------------------------------------------------------

    def add_staff(self, member: Staff) -> Staff:
        state = self._state
        if state.staff_member(member.id) is not None:
            raise EntityAlreadyExistsError("Staff", member.id)
        self._commit(replace(state, staff=state.staff + (member,)))
        logger.info("staff_added", extra={"staff_id": member.id})
        return member

    def update_staff(self, member: Staff) -> Staff:
        state = self._state
        self.get_staff(member.id)
        staff = tuple(member if s.id == member.id else s for s in state.staff)
        self._commit(replace(state, staff=staff))
        logger.info("staff_updated", extra={"staff_id": member.id})
        return member

    def delete_staff(self, staff_id: str) -> tuple[Assignment, ...]:
        """
        Remove a staff member.

        Under CASCADE the member's assignments go too, and any project that
        named the member as team lead has ``team_lead`` cleared.
        """
        state = self._state
        self.get_staff(staff_id)
        staff = tuple(s for s in state.staff if s.id != staff_id)
        removed: tuple[Assignment, ...] = ()
        assignments = state.assignments
        projects = state.projects
        if self.delete_policy == DeletePolicy.CASCADE:
            removed = state.assignments_for_staff(staff_id)
            assignments = tuple(a for a in assignments if a.staff_id != staff_id)
            projects = tuple(
                replace(p, team_lead=None) if p.team_lead == staff_id else p
                for p in projects
            )
        self._commit(replace(state, staff=staff, assignments=assignments, projects=projects))
        logger.info(
            "staff_deleted",
            extra={
                "staff_id": staff_id,
                "delete_policy": self.delete_policy.value,
                "assignments_removed": len(removed),
            },
        )
        return removed

    # ------------------------------------------------------------------
    # Assignments
    # ------------------------------------------------------------------

    def add_assignment(self, assignment: Assignment) -> Assignment:
        state = self._state
        if state.assignment(assignment.id) is not None:
            raise EntityAlreadyExistsError("Assignment", assignment.id)
        self._check_references(state, assignment)
        self._check_team_lead(state, assignment)
        if self.enforce_unique_pairs:
            self._check_unique_pair(state, assignment)

        assignments = state.assignments + (assignment,)
        new_state = replace(
            state,
            assignments=assignments,
            staff=_attach_project(state.staff, assignment.staff_id, assignment.project_id),
            projects=_apply_team_lead(state.projects, assignment),
        )
        self._commit(new_state)
        logger.info(
            "assignment_added",
            extra={
                "assignment_id": assignment.id,
                "project_id": assignment.project_id,
                "staff_id": assignment.staff_id,
                "allocation": assignment.allocation,
            },
        )
        return assignment

    def update_assignment(self, assignment: Assignment) -> Assignment:
        state = self._state
        previous = self.get_assignment(assignment.id)
        self._check_references(state, assignment)
        self._check_team_lead(state, assignment)
        if self.enforce_unique_pairs:
            self._check_unique_pair(state, assignment)

        assignments = tuple(
            assignment if a.id == assignment.id else a for a in state.assignments
        )
        staff = state.staff
        if (previous.staff_id, previous.project_id) != (assignment.staff_id, assignment.project_id):
            staff = _detach_if_unassigned(
                staff, previous.staff_id, previous.project_id, assignments
            )
            staff = _attach_project(staff, assignment.staff_id, assignment.project_id)
        projects = state.projects
        lead_moved = previous.project_id != assignment.project_id or not assignment.is_team_lead
        if previous.is_team_lead and lead_moved:
            projects = _clear_team_lead(projects, previous.project_id, previous.staff_id)
        projects = _apply_team_lead(projects, assignment)
        self._commit(replace(state, assignments=assignments, staff=staff, projects=projects))
        logger.info(
            "assignment_updated",
            extra={
                "assignment_id": assignment.id,
                "allocation": assignment.allocation,
                "total_cost": assignment.total_cost,
            },
        )
        return assignment

    def delete_assignment(self, assignment_id: str) -> Assignment:
        state = self._state
        removed = self.get_assignment(assignment_id)
        assignments = tuple(a for a in state.assignments if a.id != assignment_id)
        projects = state.projects
        if removed.is_team_lead:
            projects = _clear_team_lead(projects, removed.project_id, removed.staff_id)
        self._commit(
            replace(
                state,
                assignments=assignments,
                staff=_detach_if_unassigned(
                    state.staff, removed.staff_id, removed.project_id, assignments
                ),
                projects=projects,
            )
        )
        logger.info("assignment_deleted", extra={"assignment_id": assignment_id})
        return removed

    def set_team_lead(self, project_id: str, assignment_id: str) -> Assignment:
        """
        Make ``assignment_id`` the project's only team lead.

        Clears the flag on every other assignment of the project and points
        ``Project.team_lead`` at the lead's staff member.
        """
        state = self._state
        project = self.get_project(project_id)
        lead = self.get_assignment(assignment_id)
        if lead.project_id != project_id:
            raise AssignmentNotFoundError(assignment_id)

        assignments = tuple(
            replace(a, is_team_lead=(a.id == assignment_id))
            if a.project_id == project_id else a
            for a in state.assignments
        )
        projects = tuple(
            replace(p, team_lead=lead.staff_id) if p.id == project.id else p
            for p in state.projects
        )
        self._commit(replace(state, assignments=assignments, projects=projects))
        logger.info(
            "team_lead_set",
            extra={"project_id": project_id, "assignment_id": assignment_id},
        )
        return self.get_assignment(assignment_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _commit(self, new_state: StoreSnapshot) -> None:
        self._state = new_state

    @staticmethod
    def _check_references(state: StoreSnapshot, assignment: Assignment) -> None:
        if state.project(assignment.project_id) is None:
            raise ProjectNotFoundError(assignment.project_id)
        if state.staff_member(assignment.staff_id) is None:
            raise StaffNotFoundError(assignment.staff_id)

    @staticmethod
    def _check_team_lead(state: StoreSnapshot, assignment: Assignment) -> None:
        if not assignment.is_team_lead:
            return
        current = state.team_lead_assignment(assignment.project_id)
        if current is not None and current.id != assignment.id:
            raise TeamLeadConflictError(assignment.project_id, current.id)

    @staticmethod
    def _check_unique_pair(state: StoreSnapshot, assignment: Assignment) -> None:
        existing = next(
            (
                a for a in state.assignments
                if a.id != assignment.id
                and a.staff_id == assignment.staff_id
                and a.project_id == assignment.project_id
            ),
            None,
        )
        if existing is not None:
            raise DuplicateAssignmentError(
                assignment.staff_id, assignment.project_id, existing.id
            )


def _attach_project(
    staff: tuple[Staff, ...],
    staff_id: str,
    project_id: str,
) -> tuple[Staff, ...]:
    """Append ``project_id`` to the member's current projects unless present."""
    return tuple(
        replace(s, current_projects=s.current_projects + (project_id,))
        if s.id == staff_id and project_id not in s.current_projects else s
        for s in staff
    )


def _detach_if_unassigned(
    staff: tuple[Staff, ...],
    staff_id: str,
    project_id: str,
    assignments: tuple[Assignment, ...],
) -> tuple[Staff, ...]:
    """Drop ``project_id`` from the member once no assignment backs the pair."""
    if any(a.staff_id == staff_id and a.project_id == project_id for a in assignments):
        return staff
    return tuple(
        replace(
            s,
            current_projects=tuple(p for p in s.current_projects if p != project_id),
        )
        if s.id == staff_id and project_id in s.current_projects else s
        for s in staff
    )


def _apply_team_lead(projects: tuple[Project, ...], assignment: Assignment) -> tuple[Project, ...]:
    if not assignment.is_team_lead:
        return projects
    return _map_project(
        projects,
        assignment.project_id,
        lambda p: replace(p, team_lead=assignment.staff_id),
    )


def _clear_team_lead(
    projects: tuple[Project, ...],
    project_id: str,
    staff_id: str,
) -> tuple[Project, ...]:
    return _map_project(
        projects,
        project_id,
        lambda p: replace(p, team_lead=None) if p.team_lead == staff_id else p,
    )


def _map_project(
    projects: tuple[Project, ...],
    project_id: str,
    fn: Callable[[Project], Project],
) -> tuple[Project, ...]:
    return tuple(fn(p) if p.id == project_id else p for p in projects)
