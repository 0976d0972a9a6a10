from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceQuery, AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def add(self, record: AttendanceRecord) -> AttendanceRecord:
        """Insert ``record`` (its id is ignored) and return it with the assigned id.

        Raises DuplicateAttendanceError when the shift already has a record.
        """

        raise NotImplementedError

    def save(self, record: AttendanceRecord, *, expected_version: int) -> AttendanceRecord:
        """Write ``record`` only if the stored version is ``expected_version``.

        Returns the record with its version bumped. Raises
        ConcurrentModificationError when another writer got there first.
        """

        raise NotImplementedError

    def delete(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def find(self, query: AttendanceQuery, *, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_approved_for_user(self, user_id: int, start: datetime, end: datetime) -> Sequence[AttendanceRecord]:
        """APPROVED records of ``user_id`` whose clock_in lies in ``[start, end]``."""

        raise NotImplementedError
