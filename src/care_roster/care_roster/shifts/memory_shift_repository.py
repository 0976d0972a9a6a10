from __future__ import annotations

import dataclasses
import threading
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import ShiftStatus
from ..core.exceptions import ConcurrentModificationError, NotFoundError
from .model import Shift, ShiftQuery
from .repository import ShiftGuard, ShiftRepository


class InMemoryShiftRepository(ShiftRepository):
    """Process-local shift store; one lock serializes every check-and-write."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_id: dict[int, Shift] = {}
        self._next_id = 1

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        return self._by_id.get(int(shift_id))

    def list_active_for_assignee(self, user_id: int) -> Sequence[Shift]:
        with self._lock:
            return self._active_for(int(user_id))

    def find(self, query: ShiftQuery, *, limit: int) -> Sequence[Shift]:
        with self._lock:
            rows = [s for s in self._by_id.values() if _matches(s, query)]
        rows.sort(key=lambda s: (s.start_time, s.shift_id))
        return rows[: int(limit)]

    def create(
        self,
        *,
        roster_id: int,
        start_time: datetime,
        end_time: datetime,
        assigned_user_id: Optional[int],
        title: str,
        description: Optional[str] = None,
        location: Optional[str] = None,
        notes: Optional[str] = None,
        guard: Optional[ShiftGuard] = None,
    ) -> Shift:
        with self._lock:
            if assigned_user_id is not None and guard is not None:
                guard(self._active_for(int(assigned_user_id)))

            shift = Shift(
                shift_id=self._next_id,
                roster_id=int(roster_id),
                start_time=start_time,
                end_time=end_time,
                assigned_user_id=assigned_user_id,
                title=title,
                description=description,
                location=location,
                notes=notes,
            )
            self._by_id[shift.shift_id] = shift
            self._next_id += 1
            return shift

    def save(self, shift: Shift, *, expected_version: int, guard: Optional[ShiftGuard] = None) -> Shift:
        with self._lock:
            current = self._by_id.get(shift.shift_id)
            if current is None:
                raise NotFoundError("Shift", shift.shift_id)
            if current.version != expected_version:
                raise ConcurrentModificationError("Shift", shift.shift_id, expected_version)
            if shift.assigned_user_id is not None and guard is not None:
                guard(self._active_for(int(shift.assigned_user_id)))
            stored = dataclasses.replace(shift, version=current.version + 1)
            self._by_id[stored.shift_id] = stored
            return stored

    def delete(self, shift_id: int) -> bool:
        with self._lock:
            return self._by_id.pop(int(shift_id), None) is not None

    def _active_for(self, user_id: int) -> list[Shift]:
        return sorted(
            (
                s
                for s in self._by_id.values()
                if s.assigned_user_id == user_id and s.status != ShiftStatus.CANCELED
            ),
            key=lambda s: s.start_time,
        )


def _matches(s: Shift, q: ShiftQuery) -> bool:
    if q.roster_ids is not None and s.roster_id not in q.roster_ids:
        return False
    if q.assigned_user_id is not None and s.assigned_user_id != q.assigned_user_id:
        return False
    if q.status is not None and s.status != q.status:
        return False
    if q.start is not None and s.start_time < q.start:
        return False
    if q.end is not None and s.end_time > q.end:
        return False
    return True
