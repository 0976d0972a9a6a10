from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles issued by the external auth collaborator."""

    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    ACCOUNTANT = "ACCOUNTANT"
    EMPLOYEE = "EMPLOYEE"


class ShiftStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"


class AttendanceStatus(str, Enum):
    """Approval state of an attendance record."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class PayrollStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    PAID = "PAID"


class OvertimeSplitMode(str, Enum):
    """How the weekly hours threshold is applied across a payroll period."""

    PERIOD = "period"
    WEEKLY = "weekly"
