"""
Typed Exception Hierarchy for the Staffing Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the metrics and allocation computations are presentation layers
that need to react to specific failures (a reversed date range on a form, an
assignment pointing at a deleted project).  Parsing message strings for that
is fragile, so:
  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        store.add_assignment(assignment)
    except ProjectNotFoundError as e:
        form.error("projectId", f"No project {e.project_id}")
        api_response(code=e.code, project_id=e.project_id)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from StaffingKernelError:

    StaffingKernelError (base)
    |
    +-- RangeError
    |   +-- InvalidRangeError
    |
    +-- PeriodError
    |   +-- UnknownPeriodError
    |
    +-- EntityNotFoundError
    |   +-- ProjectNotFoundError
    |   +-- StaffNotFoundError
    |   +-- AssignmentNotFoundError
    |
    +-- IntegrityError
    |   +-- EntityAlreadyExistsError
    |   +-- DuplicateAssignmentError
    |   +-- TeamLeadConflictError
    |
    +-- ValidationError
    |   +-- InvalidAllocationError
    |   +-- InvalidPercentageError
    |   +-- NegativeAmountError
    |
    +-- ConfigError
        +-- InvalidConfigError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Range           | INVALID_RANGE               | End date precedes start date
Period          | UNKNOWN_PERIOD              | Unit/selector not month|quarter|year etc.
Not found       | PROJECT_NOT_FOUND           | Project id has no record
                | STAFF_NOT_FOUND             | Staff id has no record
                | ASSIGNMENT_NOT_FOUND        | Assignment id has no record
Integrity       | ENTITY_ALREADY_EXISTS       | Duplicate id on insert
                | DUPLICATE_ASSIGNMENT        | Second (staff, project) pair (opt-in)
                | TEAM_LEAD_CONFLICT          | Second team lead on one project
Validation      | INVALID_ALLOCATION          | Allocation outside 0..100 / negative total
                | INVALID_PERCENTAGE          | Percent field outside 0..100
                | NEGATIVE_AMOUNT             | Money or hours below zero
Config          | INVALID_CONFIG              | Config value missing or out of range

===============================================================================
DESIGN DECISIONS
===============================================================================

1. Domain exceptions inherit from Exception, not ValueError, so they can be
   caught as a group without also catching programming errors.

2. ``code`` is a class attribute: static per type, usable without
   instantiation.

3. Empty-set averages never raise; the aggregator falls back to a
   caller-supplied default instead.
"""


class StaffingKernelError(Exception):
    """
    Base exception for all staffing kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "STAFFING_KERNEL_ERROR"


# Range exceptions


class RangeError(StaffingKernelError):
    """Base exception for date range errors."""

    code: str = "RANGE_ERROR"


class InvalidRangeError(RangeError):
    """End date precedes start date."""

    code: str = "INVALID_RANGE"

    def __init__(self, start: str, end: str, subject: str = "range"):
        self.start = start
        self.end = end
        self.subject = subject
        super().__init__(f"Invalid {subject}: end {end} precedes start {start}")


# Period exceptions


class PeriodError(StaffingKernelError):
    """Base exception for reporting-period errors."""

    code: str = "PERIOD_ERROR"


class UnknownPeriodError(PeriodError):
    """Period unit or relative selector is not recognised."""

    code: str = "UNKNOWN_PERIOD"

    def __init__(self, value: str, kind: str):
        self.value = value
        self.kind = kind
        super().__init__(f"Unknown period {kind}: {value!r}")


# Lookup exceptions


class EntityNotFoundError(StaffingKernelError):
    """Base exception for references with no matching record."""

    code: str = "NOT_FOUND"


class ProjectNotFoundError(EntityNotFoundError):
    """Project with given ID was not found."""

    code: str = "PROJECT_NOT_FOUND"

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")


class StaffNotFoundError(EntityNotFoundError):
    """Staff member with given ID was not found."""

    code: str = "STAFF_NOT_FOUND"

    def __init__(self, staff_id: str):
        self.staff_id = staff_id
        super().__init__(f"Staff member not found: {staff_id}")


class AssignmentNotFoundError(EntityNotFoundError):
    """Assignment with given ID was not found."""

    code: str = "ASSIGNMENT_NOT_FOUND"

    def __init__(self, assignment_id: str):
        self.assignment_id = assignment_id
        super().__init__(f"Assignment not found: {assignment_id}")


# Integrity exceptions


class IntegrityError(StaffingKernelError):
    """Base exception for writes that would break a store invariant."""

    code: str = "INTEGRITY_ERROR"


class EntityAlreadyExistsError(IntegrityError):
    """An entity with the same ID is already stored."""

    code: str = "ENTITY_ALREADY_EXISTS"

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} already exists: {entity_id}")


class DuplicateAssignmentError(IntegrityError):
    """
    Staff member is already assigned to the project.

    Only raised when unique (staff, project) pairs are enforced by config.
    """

    code: str = "DUPLICATE_ASSIGNMENT"

    def __init__(self, staff_id: str, project_id: str, existing_assignment_id: str):
        self.staff_id = staff_id
        self.project_id = project_id
        self.existing_assignment_id = existing_assignment_id
        super().__init__(
            f"Staff {staff_id} already assigned to project {project_id} "
            f"({existing_assignment_id})"
        )


class TeamLeadConflictError(IntegrityError):
    """Project already has a team-lead assignment."""

    code: str = "TEAM_LEAD_CONFLICT"

    def __init__(self, project_id: str, existing_assignment_id: str):
        self.project_id = project_id
        self.existing_assignment_id = existing_assignment_id
        super().__init__(
            f"Project {project_id} already has team lead assignment "
            f"{existing_assignment_id}"
        )


# Validation exceptions


class ValidationError(StaffingKernelError):
    """Base exception for field values outside their domain."""

    code: str = "VALIDATION_ERROR"


class InvalidAllocationError(ValidationError):
    """Allocation outside 0..100 (or a negative total)."""

    code: str = "INVALID_ALLOCATION"

    def __init__(self, allocation: int, reason: str = "must be between 0 and 100"):
        self.allocation = allocation
        self.reason = reason
        super().__init__(f"Invalid allocation {allocation}: {reason}")


class InvalidPercentageError(ValidationError):
    """Percentage field outside 0..100."""

    code: str = "INVALID_PERCENTAGE"

    def __init__(self, field_name: str, value: object):
        self.field_name = field_name
        self.value = value
        super().__init__(f"{field_name} must be between 0 and 100, got {value}")


class NegativeAmountError(ValidationError):
    """Monetary amount or hour count below zero."""

    code: str = "NEGATIVE_AMOUNT"

    def __init__(self, field_name: str, value: object):
        self.field_name = field_name
        self.value = value
        super().__init__(f"{field_name} cannot be negative, got {value}")


# Configuration exceptions


class ConfigError(StaffingKernelError):
    """Base exception for configuration errors."""

    code: str = "CONFIG_ERROR"


class InvalidConfigError(ConfigError):
    """A configuration value is missing or out of range."""

    code: str = "INVALID_CONFIG"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid config {key}: {reason}")
