from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import PayrollStatus


@dataclass(frozen=True)
class PayrollRecord:
    """Domain entity: one worker's pay for one period.

    After every write ``net_pay == regular_pay + overtime_pay + bonuses - deductions``.
    """

    payroll_id: int
    user_id: int
    company_id: int
    period_start: datetime
    period_end: datetime
    regular_hours: Decimal
    overtime_hours: Decimal
    hourly_rate: Decimal
    regular_pay: Decimal
    overtime_pay: Decimal
    bonuses: Decimal
    deductions: Decimal
    net_pay: Decimal
    status: PayrollStatus = PayrollStatus.DRAFT
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    notes: Optional[str] = None
    version: int = 1

    @property
    def is_finalized(self) -> bool:
        return self.status in (PayrollStatus.APPROVED, PayrollStatus.PAID)


@dataclass(frozen=True)
class PayrollQuery:
    """``period_from``/``period_to`` bound period_start inclusively."""

    company_id: Optional[int] = None
    user_id: Optional[int] = None
    status: Optional[PayrollStatus] = None
    period_from: Optional[datetime] = None
    period_to: Optional[datetime] = None


PAYROLL_TRANSITIONS: dict[PayrollStatus, frozenset[PayrollStatus]] = {
    PayrollStatus.DRAFT: frozenset({PayrollStatus.PENDING_APPROVAL, PayrollStatus.APPROVED}),
    PayrollStatus.PENDING_APPROVAL: frozenset({PayrollStatus.APPROVED}),
    PayrollStatus.APPROVED: frozenset({PayrollStatus.PAID}),
    PayrollStatus.PAID: frozenset(),
}
