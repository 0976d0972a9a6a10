from __future__ import annotations

import dataclasses
import threading
from typing import Optional, Sequence

from ..core.exceptions import ConcurrentModificationError, NotFoundError
from .model import PayrollQuery, PayrollRecord
from .repository import PayrollRepository


class InMemoryPayrollRepository(PayrollRepository):
    def __init__(self):
        self._lock = threading.Lock()
        self._by_id: dict[int, PayrollRecord] = {}
        self._next_id = 1

    def get_by_id(self, payroll_id: int) -> Optional[PayrollRecord]:
        return self._by_id.get(int(payroll_id))

    def add(self, record: PayrollRecord) -> PayrollRecord:
        with self._lock:
            stored = dataclasses.replace(record, payroll_id=self._next_id, version=1)
            self._by_id[stored.payroll_id] = stored
            self._next_id += 1
            return stored

    def save(self, record: PayrollRecord, *, expected_version: int) -> PayrollRecord:
        with self._lock:
            current = self._by_id.get(record.payroll_id)
            if current is None:
                raise NotFoundError("Payroll", record.payroll_id)
            if current.version != expected_version:
                raise ConcurrentModificationError("Payroll", record.payroll_id, expected_version)
            stored = dataclasses.replace(record, version=current.version + 1)
            self._by_id[stored.payroll_id] = stored
            return stored

    def delete(self, payroll_id: int) -> bool:
        with self._lock:
            return self._by_id.pop(int(payroll_id), None) is not None

    def find(self, query: PayrollQuery, *, limit: int) -> Sequence[PayrollRecord]:
        with self._lock:
            rows = [
                r
                for r in self._by_id.values()
                if (query.company_id is None or r.company_id == query.company_id)
                and (query.user_id is None or r.user_id == query.user_id)
                and (query.status is None or r.status == query.status)
                and (query.period_from is None or r.period_start >= query.period_from)
                and (query.period_to is None or r.period_start <= query.period_to)
            ]
        rows.sort(key=lambda r: (r.period_start, r.payroll_id), reverse=True)
        return rows[: int(limit)]
