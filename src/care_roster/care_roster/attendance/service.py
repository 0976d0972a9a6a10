from __future__ import annotations

import dataclasses
import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..common.datetime_utils import hours_between, now_utc
from ..common.validators import optional_text, require_non_negative, require_positive_id
from ..core.constants import DEFAULT_LIST_LIMIT, HOURS_QUANTUM
from ..core.enums import AttendanceStatus
from ..core.exceptions import AuthorizationError, InvalidTransitionError, NotFoundError, ValidationError
from ..core.policy import Action, Actor, authorize, is_allowed, require_self_or
from ..rosters.repository import RosterRepository
from ..shifts.repository import ShiftRepository
from ..users.repository import WorkerDirectory
from .model import ATTENDANCE_TRANSITIONS, AttendanceQuery, AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def billable_hours(clock_in: datetime, clock_out: datetime, break_duration: Decimal) -> Decimal:
    """Worked span in hours minus the break; never negative."""

    if not clock_out > clock_in:
        raise ValidationError("Clock-out must be after clock-in")
    if break_duration < 0:
        raise ValidationError("Break duration cannot be negative")

    span = hours_between(clock_in, clock_out)
    if break_duration > span:
        raise ValidationError("Break duration cannot exceed the worked time")
    return (span - break_duration).quantize(HOURS_QUANTUM)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        shifts: ShiftRepository,
        rosters: RosterRepository,
        workers: WorkerDirectory,
    ):
        self._attendance = attendance
        self._shifts = shifts
        self._rosters = rosters
        self._workers = workers

    def clock_in(
        self,
        actor: Actor,
        *,
        shift_id: int,
        clock_in: datetime,
        user_id: Optional[int] = None,
        clock_out: Optional[datetime] = None,
        break_duration: object = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        shift = self._shifts.get_by_id(require_positive_id(shift_id, "shiftId"))
        if not shift:
            raise NotFoundError("Shift", shift_id)
        roster = self._rosters.get_by_id(shift.roster_id)
        if not roster:
            raise NotFoundError("Roster", shift.roster_id)

        owner_id = require_positive_id(user_id, "userId") if user_id is not None else actor.user_id
        authorize(actor, Action.ATTENDANCE_CLOCK, company_id=roster.company_id)
        require_self_or(actor, Action.ATTENDANCE_DECIDE, owner_id=owner_id)

        worker = self._workers.get_by_id(owner_id)
        if not worker:
            raise NotFoundError("User", owner_id)
        if worker.company_id != roster.company_id:
            raise ValidationError("User must belong to the shift's company")

        brk = require_non_negative(break_duration if break_duration is not None else 0, "breakDuration")
        total = billable_hours(clock_in, clock_out, brk) if clock_out is not None else None

        record = self._attendance.add(
            AttendanceRecord(
                attendance_id=0,
                shift_id=shift.shift_id,
                user_id=owner_id,
                company_id=roster.company_id,
                clock_in=clock_in,
                clock_out=clock_out,
                break_duration=brk,
                total_hours=total,
                notes=optional_text(notes),
            )
        )
        logger.info(
            "attendance_clocked_in",
            extra={"attendance_id": record.attendance_id, "shift_id": record.shift_id, "user_id": owner_id},
        )
        return record

    def clock_out(
        self,
        actor: Actor,
        attendance_id: int,
        *,
        clock_out: datetime,
        break_duration: object = None,
        expected_version: Optional[int] = None,
    ) -> AttendanceRecord:
        return self.update(
            actor,
            attendance_id,
            clock_out=clock_out,
            break_duration=break_duration,
            expected_version=expected_version,
        )

    def update(
        self,
        actor: Actor,
        attendance_id: int,
        *,
        clock_out: Optional[datetime] = None,
        break_duration: object = None,
        notes: Optional[str] = None,
        status: Optional[AttendanceStatus] = None,
        expected_version: Optional[int] = None,
    ) -> AttendanceRecord:
        """Edit clock-out, break or notes; a status change goes through the decision rules.

        Total hours are recomputed whenever clock-out or break changes, using
        the stored clock-out when only the break is supplied.
        """

        current = self._load(attendance_id)
        authorize(actor, Action.ATTENDANCE_EDIT, company_id=current.company_id)
        require_self_or(actor, Action.ATTENDANCE_DECIDE, owner_id=current.user_id)

        status_change = status is not None and status != current.status
        if status_change and not is_allowed(actor.role, Action.ATTENDANCE_DECIDE):
            logger.warning(
                "attendance_status_change_forbidden",
                extra={"attendance_id": current.attendance_id, "actor_id": actor.user_id},
            )
            raise AuthorizationError("Only managers can change attendance status")

        updated = current
        if clock_out is not None or break_duration is not None:
            new_out = clock_out if clock_out is not None else current.clock_out
            new_break = (
                require_non_negative(break_duration, "breakDuration")
                if break_duration is not None
                else current.break_duration
            )
            total = billable_hours(current.clock_in, new_out, new_break) if new_out is not None else None
            updated = dataclasses.replace(updated, clock_out=new_out, break_duration=new_break, total_hours=total)

        if notes is not None:
            updated = dataclasses.replace(updated, notes=optional_text(notes))

        if status_change:
            updated = self._transition(updated, status, actor)

        saved = self._attendance.save(updated, expected_version=_version(current, expected_version))
        logger.info(
            "attendance_updated",
            extra={
                "attendance_id": saved.attendance_id,
                "status": saved.status.value,
                "total_hours": str(saved.total_hours) if saved.total_hours is not None else None,
            },
        )
        return saved

    def approve(self, actor: Actor, attendance_id: int, *, expected_version: Optional[int] = None) -> AttendanceRecord:
        return self._decide(actor, attendance_id, AttendanceStatus.APPROVED, expected_version)

    def reject(self, actor: Actor, attendance_id: int, *, expected_version: Optional[int] = None) -> AttendanceRecord:
        return self._decide(actor, attendance_id, AttendanceStatus.REJECTED, expected_version)

    def delete(self, actor: Actor, attendance_id: int) -> None:
        current = self._load(attendance_id)
        authorize(actor, Action.ATTENDANCE_DELETE, company_id=current.company_id)
        if not self._attendance.delete(current.attendance_id):
            raise NotFoundError("Attendance", attendance_id)
        logger.info("attendance_deleted", extra={"attendance_id": current.attendance_id, "actor_id": actor.user_id})

    def get(self, actor: Actor, attendance_id: int) -> AttendanceRecord:
        record = self._load(attendance_id)
        authorize(actor, Action.ATTENDANCE_CLOCK, company_id=record.company_id)
        require_self_or(actor, Action.ATTENDANCE_VIEW_ALL, owner_id=record.user_id)
        return record

    def list(
        self,
        actor: Actor,
        *,
        user_id: Optional[int] = None,
        shift_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[AttendanceRecord]:
        if not is_allowed(actor.role, Action.ATTENDANCE_VIEW_ALL):
            user_id = actor.user_id

        query = AttendanceQuery(
            company_id=actor.company_id,
            user_id=user_id,
            shift_id=shift_id,
            status=status,
            start=start,
            end=end,
        )
        return self._attendance.find(query, limit=limit)

    def _decide(
        self,
        actor: Actor,
        attendance_id: int,
        target: AttendanceStatus,
        expected_version: Optional[int],
    ) -> AttendanceRecord:
        current = self._load(attendance_id)
        authorize(actor, Action.ATTENDANCE_DECIDE, company_id=current.company_id)

        updated = self._transition(current, target, actor)
        saved = self._attendance.save(updated, expected_version=_version(current, expected_version))
        logger.info(
            "attendance_decided",
            extra={"attendance_id": saved.attendance_id, "status": saved.status.value, "actor_id": actor.user_id},
        )
        return saved

    @staticmethod
    def _transition(record: AttendanceRecord, target: AttendanceStatus, actor: Actor) -> AttendanceRecord:
        if target not in ATTENDANCE_TRANSITIONS[record.status]:
            raise InvalidTransitionError("Attendance", record.status, target)
        if target == AttendanceStatus.APPROVED:
            return dataclasses.replace(record, status=target, approved_by=actor.user_id, approved_at=now_utc())
        return dataclasses.replace(record, status=target)

    def _load(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance", attendance_id)
        return record


def _version(current: AttendanceRecord, expected: Optional[int]) -> int:
    return current.version if expected is None else int(expected)
