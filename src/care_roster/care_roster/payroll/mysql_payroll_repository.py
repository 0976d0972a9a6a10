from __future__ import annotations

import dataclasses
from typing import Optional, Sequence

from ..core.enums import PayrollStatus
from ..core.exceptions import ConcurrentModificationError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone
from .model import PayrollQuery, PayrollRecord
from .repository import PayrollRepository

_COLUMNS = """
    payroll_id, user_id, company_id, period_start, period_end, regular_hours, overtime_hours,
    hourly_rate, regular_pay, overtime_pay, bonuses, deductions, net_pay, status,
    approved_by, approved_at, paid_at, notes, version
"""


def _to_record(r: dict) -> PayrollRecord:
    return PayrollRecord(
        payroll_id=int(r["payroll_id"]),
        user_id=int(r["user_id"]),
        company_id=int(r["company_id"]),
        period_start=r["period_start"],
        period_end=r["period_end"],
        regular_hours=as_decimal(r["regular_hours"]),
        overtime_hours=as_decimal(r["overtime_hours"]),
        hourly_rate=as_decimal(r["hourly_rate"]),
        regular_pay=as_decimal(r["regular_pay"]),
        overtime_pay=as_decimal(r["overtime_pay"]),
        bonuses=as_decimal(r["bonuses"]),
        deductions=as_decimal(r["deductions"]),
        net_pay=as_decimal(r["net_pay"]),
        status=PayrollStatus(r["status"]),
        approved_by=int(r["approved_by"]) if r.get("approved_by") is not None else None,
        approved_at=r.get("approved_at"),
        paid_at=r.get("paid_at"),
        notes=r.get("notes"),
        version=int(r["version"]),
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, payroll_id: int) -> Optional[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payrolls WHERE payroll_id=%s", (int(payroll_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def add(self, record: PayrollRecord) -> PayrollRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payrolls(
                    user_id, company_id, period_start, period_end, regular_hours, overtime_hours,
                    hourly_rate, regular_pay, overtime_pay, bonuses, deductions, net_pay, status, notes, version
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (
                    record.user_id,
                    record.company_id,
                    record.period_start,
                    record.period_end,
                    record.regular_hours,
                    record.overtime_hours,
                    record.hourly_rate,
                    record.regular_pay,
                    record.overtime_pay,
                    record.bonuses,
                    record.deductions,
                    record.net_pay,
                    record.status.value,
                    record.notes,
                ),
            )
            payroll_id = int(cur.lastrowid)
        return dataclasses.replace(record, payroll_id=payroll_id, version=1)

    def save(self, record: PayrollRecord, *, expected_version: int) -> PayrollRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payrolls
                SET regular_hours=%s, overtime_hours=%s, regular_pay=%s, overtime_pay=%s,
                    bonuses=%s, deductions=%s, net_pay=%s, status=%s,
                    approved_by=%s, approved_at=%s, paid_at=%s, notes=%s, version=version+1
                WHERE payroll_id=%s AND version=%s
                """,
                (
                    record.regular_hours,
                    record.overtime_hours,
                    record.regular_pay,
                    record.overtime_pay,
                    record.bonuses,
                    record.deductions,
                    record.net_pay,
                    record.status.value,
                    record.approved_by,
                    record.approved_at,
                    record.paid_at,
                    record.notes,
                    int(record.payroll_id),
                    int(expected_version),
                ),
            )
            if cur.rowcount == 0:
                cur.execute("SELECT version FROM payrolls WHERE payroll_id=%s", (int(record.payroll_id),))
                if not fetchone(cur):
                    raise NotFoundError("Payroll", record.payroll_id)
                raise ConcurrentModificationError("Payroll", record.payroll_id, expected_version)
        return dataclasses.replace(record, version=int(expected_version) + 1)

    def delete(self, payroll_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM payrolls WHERE payroll_id=%s", (int(payroll_id),))
            return cur.rowcount > 0

    def find(self, query: PayrollQuery, *, limit: int) -> Sequence[PayrollRecord]:
        clauses: list[str] = []
        params: list[object] = []
        if query.company_id is not None:
            clauses.append("company_id=%s")
            params.append(int(query.company_id))
        if query.user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(query.user_id))
        if query.status is not None:
            clauses.append("status=%s")
            params.append(query.status.value)
        if query.period_from is not None:
            clauses.append("period_start >= %s")
            params.append(query.period_from)
        if query.period_to is not None:
            clauses.append("period_start <= %s")
            params.append(query.period_to)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM payrolls {where} ORDER BY period_start DESC, payroll_id DESC LIMIT %s",
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]
