from __future__ import annotations

from decimal import Decimal
from typing import Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchone
from .model import Worker
from .repository import WorkerDirectory


class MySQLWorkerDirectory(WorkerDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[Worker]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, company_id, role, hourly_rate, full_name, is_active
                FROM users
                WHERE user_id=%s
                """,
                (int(user_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Worker(
                user_id=int(row["user_id"]),
                company_id=int(row["company_id"]) if row.get("company_id") is not None else None,
                role=Role(row["role"]),
                hourly_rate=as_decimal(row.get("hourly_rate")) or Decimal(0),
                full_name=row.get("full_name") or "",
                is_active=bool(row.get("is_active", True)),
            )
