from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: clock-in/out for exactly one shift.

    ``total_hours`` is set only once ``clock_out`` is known. ``version`` grows
    by one on every write and guards against lost updates.
    """

    attendance_id: int
    shift_id: int
    user_id: int
    company_id: int
    clock_in: datetime
    clock_out: Optional[datetime] = None
    break_duration: Decimal = Decimal(0)
    total_hours: Optional[Decimal] = None
    status: AttendanceStatus = AttendanceStatus.PENDING
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    notes: Optional[str] = None
    version: int = 1


@dataclass(frozen=True)
class AttendanceQuery:
    """Filters for listing; ``None`` means no filter. ``start``/``end`` bound clock_in inclusively."""

    company_id: Optional[int] = None
    user_id: Optional[int] = None
    shift_id: Optional[int] = None
    status: Optional[AttendanceStatus] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None


# PENDING is the only state with outgoing edges.
ATTENDANCE_TRANSITIONS: dict[AttendanceStatus, frozenset[AttendanceStatus]] = {
    AttendanceStatus.PENDING: frozenset({AttendanceStatus.APPROVED, AttendanceStatus.REJECTED}),
    AttendanceStatus.APPROVED: frozenset(),
    AttendanceStatus.REJECTED: frozenset(),
}
