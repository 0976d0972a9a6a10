from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchone
from .model import CompanyConfig
from .repository import CompanySettingsProvider


class MySQLCompanySettingsProvider(CompanySettingsProvider):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, company_id: int) -> Optional[CompanyConfig]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT company_id, overtime_multiplier, weekly_hours_threshold
                FROM companies
                WHERE company_id=%s
                """,
                (int(company_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return CompanyConfig(
                company_id=int(r["company_id"]),
                overtime_multiplier=as_decimal(r["overtime_multiplier"]),
                weekly_hours_threshold=as_decimal(r["weekly_hours_threshold"]),
            )
