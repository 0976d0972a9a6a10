from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_referenced_row
from .model import Roster, RosterQuery
from .repository import RosterRepository

_COLUMNS = "roster_id, company_id, title, description, start_date, end_date, is_published"


def _to_roster(r: dict) -> Roster:
    return Roster(
        roster_id=int(r["roster_id"]),
        company_id=int(r["company_id"]),
        title=r["title"],
        start_date=r["start_date"],
        end_date=r["end_date"],
        is_published=bool(r["is_published"]),
        description=r.get("description"),
    )


class MySQLRosterRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, roster_id: int) -> Optional[Roster]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM rosters WHERE roster_id=%s", (int(roster_id),))
            r = fetchone(cur)
            return _to_roster(r) if r else None

    def find(self, query: RosterQuery, *, limit: Optional[int] = None) -> Sequence[Roster]:
        clauses: list[str] = []
        params: list[object] = []

        if query.company_id is not None:
            clauses.append("company_id=%s")
            params.append(int(query.company_id))
        if query.is_published is not None:
            clauses.append("is_published=%s")
            params.append(1 if query.is_published else 0)
        if query.start is not None:
            clauses.append("start_date >= %s")
            params.append(query.start)
        if query.end is not None:
            clauses.append("end_date <= %s")
            params.append(query.end)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        page = ""
        if limit is not None:
            page = "LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM rosters
                {where}
                ORDER BY start_date DESC, roster_id DESC
                {page}
                """,
                tuple(params),
            )
            return [_to_roster(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        company_id: int,
        title: str,
        start_date: datetime,
        end_date: datetime,
        description: Optional[str] = None,
    ) -> Roster:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO rosters(company_id, title, description, start_date, end_date, is_published)
                VALUES(%s,%s,%s,%s,%s,0)
                """,
                (int(company_id), title, description, start_date, end_date),
            )
            roster_id = int(cur.lastrowid)
        return Roster(
            roster_id=roster_id,
            company_id=int(company_id),
            title=title,
            start_date=start_date,
            end_date=end_date,
            is_published=False,
            description=description,
        )

    def update_details(
        self,
        roster_id: int,
        *,
        title: str,
        description: Optional[str],
        start_date: datetime,
        end_date: datetime,
    ) -> Optional[Roster]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE rosters
                SET title=%s, description=%s, start_date=%s, end_date=%s
                WHERE roster_id=%s
                """,
                (title, description, start_date, end_date, int(roster_id)),
            )
            cur.execute(f"SELECT {_COLUMNS} FROM rosters WHERE roster_id=%s", (int(roster_id),))
            r = fetchone(cur)
            return _to_roster(r) if r else None

    def mark_published(self, roster_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE rosters SET is_published=1 WHERE roster_id=%s AND is_published=0",
                (int(roster_id),),
            )
            return cur.rowcount > 0

    def delete(self, roster_id: int) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("DELETE FROM rosters WHERE roster_id=%s", (int(roster_id),))
                return cur.rowcount > 0
        except Exception as exc:
            if is_referenced_row(exc):
                raise ValidationError("Roster still has shifts and cannot be deleted") from exc
            raise
