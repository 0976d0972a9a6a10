from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import ShiftStatus
from ..core.exceptions import ConcurrentModificationError, NotFoundError, ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_referenced_row
from .model import Shift, ShiftQuery
from .repository import ShiftGuard, ShiftRepository

_COLUMNS = (
    "shift_id, roster_id, start_time, end_time, status, assigned_user_id, "
    "title, description, location, notes, version"
)


def _to_shift(r: dict) -> Shift:
    return Shift(
        shift_id=int(r["shift_id"]),
        roster_id=int(r["roster_id"]),
        start_time=r["start_time"],
        end_time=r["end_time"],
        status=ShiftStatus(r["status"]),
        assigned_user_id=int(r["assigned_user_id"]) if r.get("assigned_user_id") is not None else None,
        title=r.get("title") or "",
        description=r.get("description"),
        location=r.get("location"),
        notes=r.get("notes"),
        version=int(r["version"]),
    )


class MySQLShiftRepository(ShiftRepository):
    """Shift storage.

    Writes that assign a worker first take a row lock in
    ``shift_assignee_locks`` for that worker. Concurrent writers for the same
    worker queue behind it, so the conflict check and the write see the same
    data. Different workers never contend.

    ``save`` also locks the shift row and compares its version before the
    guard runs, so a write built from a stale read is refused.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shifts WHERE shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return _to_shift(r) if r else None

    def list_active_for_assignee(self, user_id: int) -> Sequence[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._active_for_assignee(cur, int(user_id), for_update=False)

    def find(self, query: ShiftQuery, *, limit: int) -> Sequence[Shift]:
        if query.roster_ids is not None and not query.roster_ids:
            return []

        clauses: list[str] = []
        params: list[object] = []

        if query.roster_ids is not None:
            clauses.append(f"roster_id IN ({', '.join(['%s'] * len(query.roster_ids))})")
            params.extend(int(r) for r in query.roster_ids)
        if query.assigned_user_id is not None:
            clauses.append("assigned_user_id=%s")
            params.append(int(query.assigned_user_id))
        if query.status is not None:
            clauses.append("status=%s")
            params.append(query.status.value)
        if query.start is not None:
            clauses.append("start_time >= %s")
            params.append(query.start)
        if query.end is not None:
            clauses.append("end_time <= %s")
            params.append(query.end)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shifts
                {where}
                ORDER BY start_time, shift_id
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_shift(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            if assigned_user_id is not None and guard is not None:
                self._lock_assignee(cur, int(assigned_user_id))
                guard(self._active_for_assignee(cur, int(assigned_user_id), for_update=True))

            cur.execute(
                """
                INSERT INTO shifts(roster_id, start_time, end_time, status, assigned_user_id,
                                   title, description, location, notes, version)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (
                    int(roster_id),
                    start_time,
                    end_time,
                    ShiftStatus.SCHEDULED.value,
                    assigned_user_id,
                    title,
                    description,
                    location,
                    notes,
                ),
            )
            shift_id = int(cur.lastrowid)

        return Shift(
            shift_id=shift_id,
            roster_id=int(roster_id),
            start_time=start_time,
            end_time=end_time,
            status=ShiftStatus.SCHEDULED,
            assigned_user_id=assigned_user_id,
            title=title,
            description=description,
            location=location,
            notes=notes,
        )

    def save(self, shift: Shift, *, expected_version: int, guard: Optional[ShiftGuard] = None) -> Shift:
        with db_cursor(self._conn_factory) as (_, cur):
            # Assignee lock before the shift row lock, the same order create uses.
            if shift.assigned_user_id is not None and guard is not None:
                self._lock_assignee(cur, int(shift.assigned_user_id))

            cur.execute("SELECT version FROM shifts WHERE shift_id=%s FOR UPDATE", (int(shift.shift_id),))
            row = fetchone(cur)
            if not row:
                raise NotFoundError("Shift", shift.shift_id)
            if int(row["version"]) != int(expected_version):
                raise ConcurrentModificationError("Shift", shift.shift_id, expected_version)

            if shift.assigned_user_id is not None and guard is not None:
                guard(self._active_for_assignee(cur, int(shift.assigned_user_id), for_update=True))

            cur.execute(
                """
                UPDATE shifts
                SET start_time=%s, end_time=%s, status=%s, assigned_user_id=%s, title=%s,
                    description=%s, location=%s, notes=%s, version=version+1
                WHERE shift_id=%s AND version=%s
                """,
                (
                    shift.start_time,
                    shift.end_time,
                    shift.status.value,
                    shift.assigned_user_id,
                    shift.title,
                    shift.description,
                    shift.location,
                    shift.notes,
                    int(shift.shift_id),
                    int(expected_version),
                ),
            )
        return dataclasses.replace(shift, version=int(expected_version) + 1)

    def delete(self, shift_id: int) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("DELETE FROM shifts WHERE shift_id=%s", (int(shift_id),))
                return cur.rowcount > 0
        except Exception as exc:
            if is_referenced_row(exc):
                raise ValidationError("Shift has attendance records and cannot be deleted") from exc
            raise

    @staticmethod
    def _lock_assignee(cur, user_id: int) -> None:
        cur.execute(
            """
            INSERT INTO shift_assignee_locks(user_id) VALUES(%s)
            ON DUPLICATE KEY UPDATE user_id=VALUES(user_id)
            """,
            (user_id,),
        )
        cur.execute("SELECT user_id FROM shift_assignee_locks WHERE user_id=%s FOR UPDATE", (user_id,))
        fetchone(cur)

    @staticmethod
    def _active_for_assignee(cur, user_id: int, *, for_update: bool) -> list[Shift]:
        lock = "FOR UPDATE" if for_update else ""
        cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM shifts
            WHERE assigned_user_id=%s AND status<>%s
            ORDER BY start_time
            {lock}
            """,
            (user_id, ShiftStatus.CANCELED.value),
        )
        return [_to_shift(r) for r in fetchall(cur)]
