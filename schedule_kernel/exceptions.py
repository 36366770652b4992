"""
Typed Exception Hierarchy for the Schedule Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A schedule build either produces a complete, consistent set of dated
activities or it produces nothing. Callers (the project-creation
orchestrator, API handlers) must be able to tell *why* without parsing
message strings:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example - RIGHT way:
    try:
        service.create_project(...)
    except InvalidPhaseDurationError as e:
        api_response(code=e.code, phase=e.phase, value=e.value)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ScheduleKernelError (base)
    |
    +-- InvalidInputError
    |   +-- InvalidPhaseDurationError
    |   +-- InvalidDateError
    |   +-- DurationDateMismatchError
    |
    +-- ConsistencyViolationError
    |
    +-- AuthorizationError
    |
    +-- HolidayError
    |   +-- DuplicateHolidayError
    |   +-- HolidayNotFoundError
    |
    +-- ProjectError
    |   +-- ProjectNotFoundError
    |   +-- DuplicateProjectCodeError
    |
    +-- AuditChainBrokenError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Input           | INVALID_INPUT               | Generic malformed engine input
                | INVALID_PHASE_DURATION      | Phase duration not a positive integer
                | INVALID_DATE                | Value cannot become a calendar date
                | DURATION_DATE_MISMATCH      | Dates set on a milestone, or missing
                |                             | on an activity with a duration
----------------|-----------------------------|-----------------------------------------
Consistency     | CONSISTENCY_VIOLATION       | Scaled phase total != requested total
----------------|-----------------------------|-----------------------------------------
Authorization   | AUTHORIZATION_DENIED        | Actor role not in the allowed set
----------------|-----------------------------|-----------------------------------------
Holiday         | DUPLICATE_HOLIDAY           | A holiday already exists on that date
                | HOLIDAY_NOT_FOUND           | Holiday ID doesn't exist
----------------|-----------------------------|-----------------------------------------
Project         | PROJECT_NOT_FOUND           | Project ID doesn't exist
                | DUPLICATE_PROJECT_CODE      | Project code already in use
----------------|-----------------------------|-----------------------------------------
Audit           | AUDIT_CHAIN_BROKEN          | Audit hash chain validation failed

Missing holiday data is deliberately NOT an exception: schedule computation
degrades to "no holidays" for years that have not been imported and logs a
``holiday_data_missing`` warning instead.

===============================================================================
"""


class ScheduleKernelError(Exception):
    """
    Base exception for all schedule kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "SCHEDULE_KERNEL_ERROR"


# Input validation exceptions


class InvalidInputError(ScheduleKernelError):
    """Engine input is malformed. Raised before any partial result exists."""

    code: str = "INVALID_INPUT"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class InvalidPhaseDurationError(InvalidInputError):
    """A requested phase duration is not a positive integer."""

    code: str = "INVALID_PHASE_DURATION"

    def __init__(self, phase: str, value: object):
        self.phase = phase
        self.value = value
        super().__init__(
            f"Phase duration for {phase} must be a positive integer, got {value!r}",
            field=phase,
        )


class InvalidDateError(InvalidInputError):
    """A value could not be interpreted as a calendar date."""

    code: str = "INVALID_DATE"

    def __init__(self, value: object, reason: str = "not a calendar date"):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid date {value!r}: {reason}")


class DurationDateMismatchError(InvalidInputError):
    """
    Activity dates disagree with its duration.

    Milestones (duration 0) carry no dates; every other activity carries
    both a start and an end date.
    """

    code: str = "DURATION_DATE_MISMATCH"

    def __init__(
        self,
        activity_code: str,
        duration_days: int,
        start_date: str | None,
        end_date: str | None,
    ):
        self.activity_code = activity_code
        self.duration_days = duration_days
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"Activity {activity_code}: duration {duration_days} does not match "
            f"dates start={start_date} end={end_date}",
            field="duration_days",
        )


# Internal consistency


class ConsistencyViolationError(ScheduleKernelError):
    """
    Scaled phase durations do not add up to the requested phase total.

    Guards the scaler's reconciliation pass. Should never surface to callers.
    """

    code: str = "CONSISTENCY_VIOLATION"

    def __init__(self, phase: str, expected_total: int, actual_total: int):
        self.phase = phase
        self.expected_total = expected_total
        self.actual_total = actual_total
        super().__init__(
            f"Scaled durations for {phase} sum to {actual_total}, "
            f"expected {expected_total}"
        )


# Authorization


class AuthorizationError(ScheduleKernelError):
    """Actor is not allowed to perform a schedule-affecting operation."""

    code: str = "AUTHORIZATION_DENIED"

    def __init__(self, actor_id: str, role: str, allowed_roles: list[str]):
        self.actor_id = actor_id
        self.role = role
        self.allowed_roles = allowed_roles
        super().__init__(
            f"Actor {actor_id} with role {role} is not in {', '.join(allowed_roles)}"
        )


# Holiday calendar exceptions


class HolidayError(ScheduleKernelError):
    """Base exception for holiday calendar errors."""

    code: str = "HOLIDAY_ERROR"


class DuplicateHolidayError(HolidayError):
    """A holiday is already registered on the given date."""

    code: str = "DUPLICATE_HOLIDAY"

    def __init__(self, holiday_date: str, existing_name: str):
        self.holiday_date = holiday_date
        self.existing_name = existing_name
        super().__init__(
            f"Holiday already exists on {holiday_date}: {existing_name}"
        )


class HolidayNotFoundError(HolidayError):
    """Holiday with given ID was not found."""

    code: str = "HOLIDAY_NOT_FOUND"

    def __init__(self, holiday_id: str):
        self.holiday_id = holiday_id
        super().__init__(f"Holiday not found: {holiday_id}")


# Project exceptions


class ProjectError(ScheduleKernelError):
    """Base exception for project errors."""

    code: str = "PROJECT_ERROR"


class ProjectNotFoundError(ProjectError):
    """Project with given ID was not found."""

    code: str = "PROJECT_NOT_FOUND"

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")


class DuplicateProjectCodeError(ProjectError):
    """Project code is already in use."""

    code: str = "DUPLICATE_PROJECT_CODE"

    def __init__(self, project_code: str):
        self.project_code = project_code
        super().__init__(f"Project code already exists: {project_code}")


# Audit exceptions


class AuditChainBrokenError(ScheduleKernelError):
    """Audit hash chain validation failed."""

    code: str = "AUDIT_CHAIN_BROKEN"

    def __init__(self, audit_event_id: str, expected_hash: str, actual_hash: str):
        self.audit_event_id = audit_event_id
        self.expected_hash = expected_hash
        self.actual_hash = actual_hash
        super().__init__(
            f"Audit chain broken at event {audit_event_id}: "
            f"expected {expected_hash}, got {actual_hash}"
        )
