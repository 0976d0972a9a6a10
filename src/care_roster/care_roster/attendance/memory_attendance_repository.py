from __future__ import annotations

import dataclasses
import threading
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..core.exceptions import ConcurrentModificationError, DuplicateAttendanceError, NotFoundError
from .model import AttendanceQuery, AttendanceRecord
from .repository import AttendanceRepository


class InMemoryAttendanceRepository(AttendanceRepository):
    """Thread-safe store keeping one record per shift, like UNIQUE(shift_id)."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_id: dict[int, AttendanceRecord] = {}
        self._by_shift: dict[int, int] = {}
        self._next_id = 1

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self._by_id.get(int(attendance_id))

    def add(self, record: AttendanceRecord) -> AttendanceRecord:
        with self._lock:
            if record.shift_id in self._by_shift:
                raise DuplicateAttendanceError(record.shift_id)
            stored = dataclasses.replace(record, attendance_id=self._next_id, version=1)
            self._by_id[stored.attendance_id] = stored
            self._by_shift[stored.shift_id] = stored.attendance_id
            self._next_id += 1
            return stored

    def save(self, record: AttendanceRecord, *, expected_version: int) -> AttendanceRecord:
        with self._lock:
            current = self._by_id.get(record.attendance_id)
            if current is None:
                raise NotFoundError("Attendance", record.attendance_id)
            if current.version != expected_version:
                raise ConcurrentModificationError("Attendance", record.attendance_id, expected_version)
            stored = dataclasses.replace(record, version=current.version + 1)
            self._by_id[stored.attendance_id] = stored
            return stored

    def delete(self, attendance_id: int) -> bool:
        with self._lock:
            record = self._by_id.pop(int(attendance_id), None)
            if record is None:
                return False
            self._by_shift.pop(record.shift_id, None)
            return True

    def find(self, query: AttendanceQuery, *, limit: int) -> Sequence[AttendanceRecord]:
        with self._lock:
            rows = [r for r in self._by_id.values() if _matches(r, query)]
        rows.sort(key=lambda r: r.clock_in, reverse=True)
        return rows[: int(limit)]

    def list_approved_for_user(self, user_id: int, start: datetime, end: datetime) -> Sequence[AttendanceRecord]:
        query = AttendanceQuery(user_id=user_id, status=AttendanceStatus.APPROVED, start=start, end=end)
        with self._lock:
            rows = [r for r in self._by_id.values() if _matches(r, query)]
        return sorted(rows, key=lambda r: r.clock_in)


def _matches(r: AttendanceRecord, q: AttendanceQuery) -> bool:
    if q.company_id is not None and r.company_id != q.company_id:
        return False
    if q.user_id is not None and r.user_id != q.user_id:
        return False
    if q.shift_id is not None and r.shift_id != q.shift_id:
        return False
    if q.status is not None and r.status != q.status:
        return False
    if q.start is not None and r.clock_in < q.start:
        return False
    if q.end is not None and r.clock_in > q.end:
        return False
    return True
