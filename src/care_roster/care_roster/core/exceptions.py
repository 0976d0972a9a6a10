from __future__ import annotations

from typing import Iterable, Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    Every subclass carries a machine-readable ``code`` so the HTTP layer can
    map it without parsing messages.
    """

    code: str = "DOMAIN_ERROR"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"


class AuthenticationError(DomainError):
    """Raised when no authenticated principal is available."""

    code = "NOT_AUTHENTICATED"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "FORBIDDEN"


class NotFoundError(DomainError):
    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: object):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class ConflictError(DomainError):
    """A mutation was refused because of the current persisted state."""

    code = "CONFLICT"


class ShiftConflictError(ConflictError):
    code = "SHIFT_CONFLICT"

    def __init__(self, assignee_id: int, conflicting_shift_ids: Iterable[int] = ()):
        self.assignee_id = assignee_id
        self.conflicting_shift_ids = sorted(conflicting_shift_ids)
        super().__init__(f"User {assignee_id} already has a shift during this time")


class DuplicateAttendanceError(ConflictError):
    code = "DUPLICATE_ATTENDANCE"

    def __init__(self, shift_id: int):
        self.shift_id = shift_id
        super().__init__(f"Attendance record already exists for shift {shift_id}")


class AlreadyPublishedError(ConflictError):
    code = "ALREADY_PUBLISHED"

    def __init__(self, roster_id: int):
        self.roster_id = roster_id
        super().__init__(f"Roster {roster_id} is already published")


class InvalidTransitionError(ConflictError):
    code = "INVALID_TRANSITION"

    def __init__(self, entity: str, current: object, target: object):
        self.entity = entity
        self.current = current
        self.target = target
        super().__init__(f"{entity} cannot move from {_label(current)} to {_label(target)}")


class PayrollLockedError(ConflictError):
    code = "PAYROLL_LOCKED"

    def __init__(self, payroll_id: int, status: object):
        self.payroll_id = payroll_id
        self.status = status
        super().__init__(f"Payroll {payroll_id} is {_label(status)}; pay figures are locked")


class ConcurrentModificationError(ConflictError):
    """Optimistic version check failed: someone else wrote first."""

    code = "CONCURRENT_MODIFICATION"

    def __init__(self, entity: str, entity_id: object, expected_version: Optional[int] = None):
        self.entity = entity
        self.entity_id = entity_id
        self.expected_version = expected_version
        super().__init__(f"{entity} {entity_id} was modified concurrently; reload and retry")


def _label(value: object) -> str:
    return str(getattr(value, "value", value))
