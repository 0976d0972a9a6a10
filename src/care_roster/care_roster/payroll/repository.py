from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import PayrollQuery, PayrollRecord


class PayrollRepository(Protocol):
    def get_by_id(self, payroll_id: int) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def add(self, record: PayrollRecord) -> PayrollRecord:
        raise NotImplementedError

    def save(self, record: PayrollRecord, *, expected_version: int) -> PayrollRecord:
        """Version-checked write; raises ConcurrentModificationError when stale."""

        raise NotImplementedError

    def delete(self, payroll_id: int) -> bool:
        raise NotImplementedError

    def find(self, query: PayrollQuery, *, limit: int) -> Sequence[PayrollRecord]:
        raise NotImplementedError
