from __future__ import annotations

import dataclasses
import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_utc
from ..common.validators import optional_non_negative, optional_text, require_non_negative, require_positive_id
from ..companies.model import CompanyConfig
from ..companies.repository import CompanySettingsProvider
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import PayrollStatus
from ..core.exceptions import (
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    PayrollLockedError,
    ValidationError,
)
from ..core.policy import Action, Actor, authorize, is_allowed
from ..users.model import Worker
from ..users.repository import WorkerDirectory
from .calculator.base import OvertimeSplitStrategy, WorkedHours
from .calculator.pay import compute
from .calculator.period_split import PeriodOvertimeSplit
from .model import PAYROLL_TRANSITIONS, PayrollQuery, PayrollRecord
from .repository import PayrollRepository

logger = logging.getLogger(__name__)


class PayrollService:
    """Manual payroll entry, generation from approved attendance, and the approval lifecycle.

    Pay figures are always derived with ``compute``: callers supply hours,
    bonuses and deductions, never the pay amounts themselves.

    Note: with ``lock_finalized`` off, editing hours/bonuses/deductions on an
    APPROVED or PAID record recomputes its pay and only logs a warning.
    """

    def __init__(
        self,
        payrolls: PayrollRepository,
        attendance: AttendanceRepository,
        workers: WorkerDirectory,
        companies: CompanySettingsProvider,
        *,
        split_strategy: Optional[OvertimeSplitStrategy] = None,
        lock_finalized: bool = False,
    ):
        self._payrolls = payrolls
        self._attendance = attendance
        self._workers = workers
        self._companies = companies
        self._split = split_strategy or PeriodOvertimeSplit()
        self._lock_finalized = bool(lock_finalized)

    def create(
        self,
        actor: Actor,
        *,
        user_id: int,
        company_id: int,
        period_start: datetime,
        period_end: datetime,
        regular_hours: object,
        hourly_rate: object,
        overtime_hours: object = None,
        bonuses: object = None,
        deductions: object = None,
        notes: Optional[str] = None,
    ) -> PayrollRecord:
        company_id = require_positive_id(company_id, "companyId")
        authorize(actor, Action.PAYROLL_CREATE, company_id=company_id)
        worker = self._load_worker(user_id)
        if worker.company_id != company_id:
            raise ValidationError("User must belong to the payroll's company")
        _require_period(period_start, period_end)
        config = self._load_company(company_id)

        regular = require_non_negative(regular_hours, "regularHours")
        overtime = optional_non_negative(overtime_hours, "overtimeHours")
        rate = require_non_negative(hourly_rate, "hourlyRate")
        bonus = optional_non_negative(bonuses, "bonuses")
        deduction = optional_non_negative(deductions, "deductions")
        amounts = compute(rate, regular, overtime, bonus, deduction, config.overtime_multiplier)

        record = self._payrolls.add(
            PayrollRecord(
                payroll_id=0,
                user_id=worker.user_id,
                company_id=company_id,
                period_start=period_start,
                period_end=period_end,
                regular_hours=regular,
                overtime_hours=overtime,
                hourly_rate=rate,
                regular_pay=amounts.regular_pay,
                overtime_pay=amounts.overtime_pay,
                bonuses=bonus,
                deductions=deduction,
                net_pay=amounts.net_pay,
                status=PayrollStatus.DRAFT,
                notes=optional_text(notes),
            )
        )
        logger.info(
            "payroll_created",
            extra={"payroll_id": record.payroll_id, "user_id": record.user_id, "net_pay": str(record.net_pay)},
        )
        return record

    def generate(
        self,
        actor: Actor,
        *,
        user_id: int,
        period_start: datetime,
        period_end: datetime,
    ) -> PayrollRecord:
        """Price a period from the worker's APPROVED attendance.

        Attendance counts when its clock-in lies in ``[period_start, period_end]``.
        The result skips DRAFT and lands in PENDING_APPROVAL.
        """

        worker = self._load_worker(user_id)
        if worker.company_id is None:
            raise ValidationError("User does not belong to a company")
        authorize(actor, Action.PAYROLL_GENERATE, company_id=worker.company_id)
        _require_period(period_start, period_end)
        config = self._load_company(worker.company_id)

        approved = self._attendance.list_approved_for_user(worker.user_id, period_start, period_end)
        worked = [WorkedHours(a.clock_in, a.total_hours) for a in approved if a.total_hours is not None]
        split = self._split.split(worked, config.weekly_hours_threshold)
        amounts = compute(
            worker.hourly_rate,
            split.regular_hours,
            split.overtime_hours,
            Decimal(0),
            Decimal(0),
            config.overtime_multiplier,
        )

        record = self._payrolls.add(
            PayrollRecord(
                payroll_id=0,
                user_id=worker.user_id,
                company_id=worker.company_id,
                period_start=period_start,
                period_end=period_end,
                regular_hours=split.regular_hours,
                overtime_hours=split.overtime_hours,
                hourly_rate=worker.hourly_rate,
                regular_pay=amounts.regular_pay,
                overtime_pay=amounts.overtime_pay,
                bonuses=Decimal(0),
                deductions=Decimal(0),
                net_pay=amounts.net_pay,
                status=PayrollStatus.PENDING_APPROVAL,
            )
        )
        logger.info(
            "payroll_generated",
            extra={
                "payroll_id": record.payroll_id,
                "user_id": record.user_id,
                "attendance_count": len(worked),
                "regular_hours": str(record.regular_hours),
                "overtime_hours": str(record.overtime_hours),
            },
        )
        return record

    def update(
        self,
        actor: Actor,
        payroll_id: int,
        *,
        regular_hours: object = None,
        overtime_hours: object = None,
        bonuses: object = None,
        deductions: object = None,
        notes: Optional[str] = None,
        status: Optional[PayrollStatus] = None,
        expected_version: Optional[int] = None,
    ) -> PayrollRecord:
        current = self._load(payroll_id)
        authorize(actor, Action.PAYROLL_UPDATE, company_id=current.company_id)

        updated = current
        if any(v is not None for v in (regular_hours, overtime_hours, bonuses, deductions)):
            if current.is_finalized:
                if self._lock_finalized:
                    raise PayrollLockedError(current.payroll_id, current.status)
                logger.warning(
                    "finalized_payroll_recomputed",
                    extra={"payroll_id": current.payroll_id, "status": current.status.value, "actor_id": actor.user_id},
                )
            updated = self._reprice(
                current,
                regular_hours=optional_non_negative(regular_hours, "regularHours", current.regular_hours),
                overtime_hours=optional_non_negative(overtime_hours, "overtimeHours", current.overtime_hours),
                bonuses=optional_non_negative(bonuses, "bonuses", current.bonuses),
                deductions=optional_non_negative(deductions, "deductions", current.deductions),
            )

        if notes is not None:
            updated = dataclasses.replace(updated, notes=optional_text(notes))

        if status is not None and status != current.status:
            if status == PayrollStatus.APPROVED and not is_allowed(actor.role, Action.PAYROLL_APPROVE):
                raise AuthorizationError("Only admins and managers can approve payroll")
            updated = self._transition(updated, status, actor)

        saved = self._payrolls.save(updated, expected_version=_version(current, expected_version))
        logger.info(
            "payroll_updated",
            extra={"payroll_id": saved.payroll_id, "status": saved.status.value, "net_pay": str(saved.net_pay)},
        )
        return saved

    def approve(self, actor: Actor, payroll_id: int, *, expected_version: Optional[int] = None) -> PayrollRecord:
        current = self._load(payroll_id)
        authorize(actor, Action.PAYROLL_APPROVE, company_id=current.company_id)

        updated = self._transition(current, PayrollStatus.APPROVED, actor)
        saved = self._payrolls.save(updated, expected_version=_version(current, expected_version))
        logger.info("payroll_approved", extra={"payroll_id": saved.payroll_id, "actor_id": actor.user_id})
        return saved

    def delete(self, actor: Actor, payroll_id: int) -> None:
        current = self._load(payroll_id)
        authorize(actor, Action.PAYROLL_DELETE, company_id=current.company_id)
        if not self._payrolls.delete(current.payroll_id):
            raise NotFoundError("Payroll", payroll_id)
        logger.info("payroll_deleted", extra={"payroll_id": current.payroll_id, "actor_id": actor.user_id})

    def get(self, actor: Actor, payroll_id: int) -> PayrollRecord:
        record = self._load(payroll_id)
        if actor.user_id == record.user_id and actor.company_id == record.company_id:
            return record
        authorize(actor, Action.PAYROLL_VIEW_ALL, company_id=record.company_id)
        return record

    def list(
        self,
        actor: Actor,
        *,
        user_id: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
        period_from: Optional[datetime] = None,
        period_to: Optional[datetime] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[PayrollRecord]:
        if not is_allowed(actor.role, Action.PAYROLL_VIEW_ALL):
            user_id = actor.user_id
        query = PayrollQuery(
            company_id=actor.company_id,
            user_id=user_id,
            status=status,
            period_from=period_from,
            period_to=period_to,
        )
        return self._payrolls.find(query, limit=limit)

    def _reprice(
        self,
        record: PayrollRecord,
        *,
        regular_hours: Decimal,
        overtime_hours: Decimal,
        bonuses: Decimal,
        deductions: Decimal,
    ) -> PayrollRecord:
        config = self._load_company(record.company_id)
        amounts = compute(
            record.hourly_rate,
            regular_hours,
            overtime_hours,
            bonuses,
            deductions,
            config.overtime_multiplier,
        )
        return dataclasses.replace(
            record,
            regular_hours=regular_hours,
            overtime_hours=overtime_hours,
            bonuses=bonuses,
            deductions=deductions,
            regular_pay=amounts.regular_pay,
            overtime_pay=amounts.overtime_pay,
            net_pay=amounts.net_pay,
        )

    @staticmethod
    def _transition(record: PayrollRecord, target: PayrollStatus, actor: Actor) -> PayrollRecord:
        if target not in PAYROLL_TRANSITIONS[record.status]:
            raise InvalidTransitionError("Payroll", record.status, target)
        if target == PayrollStatus.APPROVED:
            return dataclasses.replace(record, status=target, approved_by=actor.user_id, approved_at=now_utc())
        if target == PayrollStatus.PAID:
            return dataclasses.replace(record, status=target, paid_at=now_utc())
        return dataclasses.replace(record, status=target)

    def _load(self, payroll_id: int) -> PayrollRecord:
        record = self._payrolls.get_by_id(int(payroll_id))
        if not record:
            raise NotFoundError("Payroll", payroll_id)
        return record

    def _load_worker(self, user_id: int) -> Worker:
        worker = self._workers.get_by_id(require_positive_id(user_id, "userId"))
        if not worker:
            raise NotFoundError("User", user_id)
        return worker

    def _load_company(self, company_id: int) -> CompanyConfig:
        config = self._companies.get(int(company_id))
        if not config:
            raise NotFoundError("Company", company_id)
        return config


def _require_period(start: datetime, end: datetime) -> None:
    if start > end:
        raise ValidationError("Period start must not be after period end")


def _version(current: PayrollRecord, expected: Optional[int]) -> int:
    return current.version if expected is None else int(expected)
