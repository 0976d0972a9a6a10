from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ShiftStatus


@dataclass(frozen=True)
class Interval:
    """Half-open time interval ``[start, end)``."""

    start: datetime
    end: datetime


@dataclass(frozen=True)
class Shift:
    """Domain entity: one scheduled work interval inside a roster."""

    shift_id: int
    roster_id: int
    start_time: datetime
    end_time: datetime
    status: ShiftStatus = ShiftStatus.SCHEDULED
    assigned_user_id: Optional[int] = None
    title: str = ""
    description: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    version: int = 1

    @property
    def interval(self) -> Interval:
        return Interval(self.start_time, self.end_time)


@dataclass(frozen=True)
class ShiftUpdate:
    """Partial update; ``None`` leaves a field unchanged."""

    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    assigned_user_id: Optional[int] = None
    status: Optional[ShiftStatus] = None
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class ShiftQuery:
    """Filters for listing; ``None`` means no filter.

    ``roster_ids`` restricts to those rosters (an empty tuple matches nothing).
    ``start`` bounds start_time from below and ``end`` bounds end_time from above.
    """

    roster_ids: Optional[tuple[int, ...]] = None
    assigned_user_id: Optional[int] = None
    status: Optional[ShiftStatus] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None


# Allowed status moves; CANCELED and COMPLETED are terminal.
SHIFT_TRANSITIONS: dict[ShiftStatus, frozenset[ShiftStatus]] = {
    ShiftStatus.SCHEDULED: frozenset({ShiftStatus.IN_PROGRESS, ShiftStatus.CANCELED}),
    ShiftStatus.IN_PROGRESS: frozenset({ShiftStatus.COMPLETED, ShiftStatus.CANCELED}),
    ShiftStatus.COMPLETED: frozenset(),
    ShiftStatus.CANCELED: frozenset(),
}
