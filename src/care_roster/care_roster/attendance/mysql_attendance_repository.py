from __future__ import annotations

import dataclasses
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..core.exceptions import ConcurrentModificationError, DuplicateAttendanceError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceQuery, AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, shift_id, user_id, company_id, clock_in, clock_out, break_duration,
    total_hours, status, approved_by, approved_at, notes, version
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        shift_id=int(r["shift_id"]),
        user_id=int(r["user_id"]),
        company_id=int(r["company_id"]),
        clock_in=r["clock_in"],
        clock_out=r.get("clock_out"),
        break_duration=as_decimal(r.get("break_duration")) or Decimal(0),
        total_hours=as_decimal(r.get("total_hours")),
        status=AttendanceStatus(r["status"]),
        approved_by=int(r["approved_by"]) if r.get("approved_by") is not None else None,
        approved_at=r.get("approved_at"),
        notes=r.get("notes"),
        version=int(r["version"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def add(self, record: AttendanceRecord) -> AttendanceRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance(
                        shift_id, user_id, company_id, clock_in, clock_out, break_duration,
                        total_hours, status, notes, version
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                    """,
                    (
                        record.shift_id,
                        record.user_id,
                        record.company_id,
                        record.clock_in,
                        record.clock_out,
                        record.break_duration,
                        record.total_hours,
                        record.status.value,
                        record.notes,
                    ),
                )
                attendance_id = int(cur.lastrowid)
        except Exception as exc:
            # UNIQUE(shift_id) settles concurrent clock-ins for the same shift.
            if is_duplicate_key(exc):
                raise DuplicateAttendanceError(record.shift_id) from exc
            raise
        return dataclasses.replace(record, attendance_id=attendance_id, version=1)

    def save(self, record: AttendanceRecord, *, expected_version: int) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET clock_out=%s, break_duration=%s, total_hours=%s, status=%s,
                    approved_by=%s, approved_at=%s, notes=%s, version=version+1
                WHERE attendance_id=%s AND version=%s
                """,
                (
                    record.clock_out,
                    record.break_duration,
                    record.total_hours,
                    record.status.value,
                    record.approved_by,
                    record.approved_at,
                    record.notes,
                    int(record.attendance_id),
                    int(expected_version),
                ),
            )
            if cur.rowcount == 0:
                cur.execute("SELECT version FROM attendance WHERE attendance_id=%s", (int(record.attendance_id),))
                if not fetchone(cur):
                    raise NotFoundError("Attendance", record.attendance_id)
                raise ConcurrentModificationError("Attendance", record.attendance_id, expected_version)
        return dataclasses.replace(record, version=int(expected_version) + 1)

    def delete(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0

    def find(self, query: AttendanceQuery, *, limit: int) -> Sequence[AttendanceRecord]:
        clauses: list[str] = []
        params: list[object] = []

        if query.company_id is not None:
            clauses.append("company_id=%s")
            params.append(int(query.company_id))
        if query.user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(query.user_id))
        if query.shift_id is not None:
            clauses.append("shift_id=%s")
            params.append(int(query.shift_id))
        if query.status is not None:
            clauses.append("status=%s")
            params.append(query.status.value)
        if query.start is not None:
            clauses.append("clock_in >= %s")
            params.append(query.start)
        if query.end is not None:
            clauses.append("clock_in <= %s")
            params.append(query.end)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                {where}
                ORDER BY clock_in DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_approved_for_user(self, user_id: int, start: datetime, end: datetime) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE user_id=%s AND status=%s AND clock_in BETWEEN %s AND %s
                ORDER BY clock_in
                """,
                (int(user_id), AttendanceStatus.APPROVED.value, start, end),
            )
            return [_to_record(r) for r in fetchall(cur)]
