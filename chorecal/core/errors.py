"""Typed failures raised by chorecal services and their HTTP-facing classification."""

from enum import Enum

from pydantic import BaseModel


class ChorecalError(Exception):
    """Base class for domain failures reported to callers."""


class ChoreNotFoundError(ChorecalError, LookupError):
    """A chore id does not exist in the store."""

    def __init__(self, chore_id: str) -> None:
        self.chore_id = chore_id
        super().__init__(f"Chore not found: {chore_id}")


class ParentChoreNotFoundError(ChorecalError, LookupError):
    """A virtual instance id references an anchor chore that does not exist."""

    def __init__(self, parent_id: str) -> None:
        self.parent_id = parent_id
        super().__init__(f"Parent chore not found: {parent_id}")


class ChoreNotRecurringError(ChorecalError):
    """A chore exists but carries no recurrence rule."""

    def __init__(self, chore_id: str) -> None:
        self.chore_id = chore_id
        super().__init__(f"Chore is not recurring: {chore_id}")


class MalformedInstanceIdError(ChorecalError, ValueError):
    """An id contains the instance separator but is not a valid virtual instance id."""

    def __init__(self, chore_id: str) -> None:
        self.chore_id = chore_id
        super().__init__(f"Invalid virtual instance ID format: {chore_id}")


class TeamMemberNotFoundError(ChorecalError, LookupError):
    """A team member id does not exist in the store."""

    def __init__(self, member_id: str) -> None:
        self.member_id = member_id
        super().__init__(f"Team member not found: {member_id}")


class AssigneeNotFoundError(ChorecalError, ValueError):
    """A chore is being assigned to a team member that does not exist."""

    def __init__(self, assignee_id: str) -> None:
        self.assignee_id = assignee_id
        super().__init__(f"Assignee not found: {assignee_id}")


class TeamMemberInUseError(ChorecalError):
    """A team member cannot be deleted while chores are assigned to them."""

    def __init__(self, member_id: str, assigned_chore_count: int) -> None:
        self.member_id = member_id
        self.assigned_chore_count = assigned_chore_count
        super().__init__(f"Cannot delete team member with assigned chores: {member_id} ({assigned_chore_count})")


class InvalidRecurrenceError(ChorecalError, ValueError):
    """A stored recurrence encoding cannot be parsed."""


class InvalidStatusFilterError(ChorecalError, ValueError):
    """A status filter names a status that does not exist."""

    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(f"Invalid status filter: {raw}")


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ErrorCode:
    """Error codes for specific error conditions."""

    # Chore errors
    ERR_CHORE_NOT_FOUND = "ERR_CHORE_NOT_FOUND"
    ERR_PARENT_CHORE_NOT_FOUND = "ERR_PARENT_CHORE_NOT_FOUND"
    ERR_CHORE_NOT_RECURRING = "ERR_CHORE_NOT_RECURRING"
    ERR_INVALID_INSTANCE_ID = "ERR_INVALID_INSTANCE_ID"
    ERR_INVALID_RECURRENCE_PATTERN = "ERR_INVALID_RECURRENCE_PATTERN"
    ERR_INVALID_STATUS_FILTER = "ERR_INVALID_STATUS_FILTER"

    # Team member errors
    ERR_TEAM_MEMBER_NOT_FOUND = "ERR_TEAM_MEMBER_NOT_FOUND"
    ERR_ASSIGNEE_NOT_FOUND = "ERR_ASSIGNEE_NOT_FOUND"
    ERR_TEAM_MEMBER_IN_USE = "ERR_TEAM_MEMBER_IN_USE"

    # Generic errors
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response returned by the HTTP layer."""

    code: str
    message: str
    status_code: int
    severity: ErrorSeverity


_ERROR_TABLE: dict[type[ChorecalError], tuple[str, str, int, ErrorSeverity]] = {
    ChoreNotFoundError: (ErrorCode.ERR_CHORE_NOT_FOUND, "Chore not found", 404, ErrorSeverity.LOW),
    ParentChoreNotFoundError: (ErrorCode.ERR_PARENT_CHORE_NOT_FOUND, "Parent chore not found", 404, ErrorSeverity.LOW),
    ChoreNotRecurringError: (ErrorCode.ERR_CHORE_NOT_RECURRING, "Chore is not recurring", 400, ErrorSeverity.LOW),
    MalformedInstanceIdError: (
        ErrorCode.ERR_INVALID_INSTANCE_ID,
        "Invalid virtual instance ID format",
        400,
        ErrorSeverity.LOW,
    ),
    InvalidRecurrenceError: (
        ErrorCode.ERR_INVALID_RECURRENCE_PATTERN,
        "Invalid recurrence pattern",
        400,
        ErrorSeverity.MEDIUM,
    ),
    InvalidStatusFilterError: (ErrorCode.ERR_INVALID_STATUS_FILTER, "Invalid status filter", 400, ErrorSeverity.LOW),
    TeamMemberNotFoundError: (ErrorCode.ERR_TEAM_MEMBER_NOT_FOUND, "Team member not found", 404, ErrorSeverity.LOW),
    AssigneeNotFoundError: (ErrorCode.ERR_ASSIGNEE_NOT_FOUND, "Assignee not found", 400, ErrorSeverity.LOW),
    TeamMemberInUseError: (
        ErrorCode.ERR_TEAM_MEMBER_IN_USE,
        "Cannot delete team member with assigned chores",
        409,
        ErrorSeverity.LOW,
    ),
}


def classify_error_with_response(exception: Exception) -> ErrorResponse:
    """Classify an error and return a structured response.

    Args:
        exception: The exception raised during request handling

    Returns:
        ErrorResponse with code, message, HTTP status and severity
    """
    for error_type, (code, message, status_code, severity) in _ERROR_TABLE.items():
        if isinstance(exception, error_type):
            return ErrorResponse(code=code, message=message, status_code=status_code, severity=severity)

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="Internal Server Error",
        status_code=500,
        severity=ErrorSeverity.HIGH,
    )
