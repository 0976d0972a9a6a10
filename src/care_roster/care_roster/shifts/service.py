from __future__ import annotations

import dataclasses
import logging
from datetime import datetime
from typing import Optional, Sequence

from ..attendance.model import AttendanceQuery
from ..attendance.repository import AttendanceRepository
from ..common.validators import optional_text, require_positive_id
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import ShiftStatus
from ..core.exceptions import (
    ConcurrentModificationError,
    InvalidTransitionError,
    NotFoundError,
    ShiftConflictError,
    ValidationError,
)
from ..core.policy import Action, Actor, authorize, is_allowed
from ..rosters.model import Roster, RosterQuery
from ..rosters.repository import RosterRepository
from ..users.repository import WorkerDirectory
from .conflicts import find_conflicts
from .model import SHIFT_TRANSITIONS, Interval, Shift, ShiftQuery, ShiftUpdate
from .repository import ShiftGuard, ShiftRepository

logger = logging.getLogger(__name__)


class ShiftService:
    """Shift scheduling gated by the interval conflict detector.

    Every write that can place a worker on a new interval hands the
    repository a guard. The repository runs it against the worker's current
    shifts inside the same unit of work as the write, so two concurrent
    requests cannot both pass the check.

    Writes to an existing shift carry the version that was read. A write
    built from an outdated read fails with ConcurrentModificationError
    instead of restoring an interval nobody checked.
    """

    def __init__(
        self,
        shifts: ShiftRepository,
        rosters: RosterRepository,
        workers: WorkerDirectory,
        attendance: AttendanceRepository,
    ):
        self._shifts = shifts
        self._rosters = rosters
        self._workers = workers
        self._attendance = attendance

    def create(
        self,
        actor: Actor,
        *,
        roster_id: int,
        start_time: datetime,
        end_time: datetime,
        assigned_user_id: Optional[int] = None,
        title: str = "",
        description: Optional[str] = None,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Shift:
        roster = self._load_roster(roster_id)
        authorize(actor, Action.SHIFT_CREATE, company_id=roster.company_id)
        _require_ordered(start_time, end_time)

        guard = None
        if assigned_user_id is not None:
            assigned_user_id = require_positive_id(assigned_user_id, "assignedUserId")
            self._require_assignable(assigned_user_id, roster)
            guard = _conflict_guard(Interval(start_time, end_time), assigned_user_id)

        shift = self._shifts.create(
            roster_id=roster.roster_id,
            start_time=start_time,
            end_time=end_time,
            assigned_user_id=assigned_user_id,
            title=(title or "").strip(),
            description=optional_text(description),
            location=optional_text(location),
            notes=optional_text(notes),
            guard=guard,
        )
        logger.info(
            "shift_created",
            extra={"shift_id": shift.shift_id, "roster_id": shift.roster_id, "assignee_id": assigned_user_id},
        )
        return shift

    def get(self, actor: Actor, shift_id: int) -> Shift:
        shift = self._load(shift_id)
        roster = self._load_roster(shift.roster_id)
        authorize(actor, Action.SHIFT_VIEW, company_id=roster.company_id)
        if not roster.is_published and not is_allowed(actor.role, Action.SCHEDULE_VIEW_ALL):
            raise NotFoundError("Shift", shift_id)
        return shift

    def list(
        self,
        actor: Actor,
        *,
        roster_id: Optional[int] = None,
        assigned_user_id: Optional[int] = None,
        status: Optional[ShiftStatus] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[Shift]:
        """Shifts in the actor's company.

        Actors without ``SCHEDULE_VIEW_ALL`` see only their own shifts, and
        only inside published rosters.
        """

        authorize(actor, Action.SHIFT_VIEW)
        if actor.company_id is None:
            raise ValidationError("User must belong to a company")

        sees_all = is_allowed(actor.role, Action.SCHEDULE_VIEW_ALL)
        if not sees_all:
            assigned_user_id = actor.user_id

        visible = RosterQuery(company_id=actor.company_id, is_published=None if sees_all else True)
        roster_ids = tuple(r.roster_id for r in self._rosters.find(visible))
        if roster_id is not None:
            roster_ids = tuple(r for r in roster_ids if r == int(roster_id))

        query = ShiftQuery(
            roster_ids=roster_ids,
            assigned_user_id=assigned_user_id,
            status=status,
            start=start,
            end=end,
        )
        return self._shifts.find(query, limit=limit)

    def update(
        self,
        actor: Actor,
        shift_id: int,
        changes: ShiftUpdate,
        *,
        expected_version: Optional[int] = None,
    ) -> Shift:
        current = self._load(shift_id)
        roster = self._load_roster(current.roster_id)
        authorize(actor, Action.SHIFT_UPDATE, company_id=roster.company_id)
        _require_version(current, expected_version)

        status = current.status
        if changes.status is not None and changes.status != current.status:
            if changes.status not in SHIFT_TRANSITIONS[current.status]:
                raise InvalidTransitionError("Shift", current.status, changes.status)
            status = changes.status

        assignee = current.assigned_user_id
        if changes.assigned_user_id is not None:
            assignee = require_positive_id(changes.assigned_user_id, "assignedUserId")
            if assignee != current.assigned_user_id:
                self._require_assignable(assignee, roster)

        updated = dataclasses.replace(
            current,
            start_time=changes.start_time or current.start_time,
            end_time=changes.end_time or current.end_time,
            assigned_user_id=assignee,
            status=status,
            title=changes.title.strip() if changes.title is not None else current.title,
            description=optional_text(changes.description) if changes.description is not None else current.description,
            location=optional_text(changes.location) if changes.location is not None else current.location,
            notes=optional_text(changes.notes) if changes.notes is not None else current.notes,
        )
        _require_ordered(updated.start_time, updated.end_time)

        saved = self._shifts.save(
            updated,
            expected_version=current.version,
            guard=self._guard_for_change(current, updated),
        )
        logger.info(
            "shift_updated",
            extra={"shift_id": saved.shift_id, "status": saved.status.value, "assignee_id": saved.assigned_user_id},
        )
        return saved

    def assign(self, actor: Actor, shift_id: int, user_id: int, *, expected_version: Optional[int] = None) -> Shift:
        current = self._load(shift_id)
        roster = self._load_roster(current.roster_id)
        authorize(actor, Action.SHIFT_ASSIGN, company_id=roster.company_id)
        _require_version(current, expected_version)
        _require_ordered(current.start_time, current.end_time)

        user_id = require_positive_id(user_id, "userId")
        self._require_assignable(user_id, roster)
        if current.status == ShiftStatus.CANCELED:
            raise ValidationError("Cannot assign a canceled shift")

        updated = dataclasses.replace(current, assigned_user_id=user_id)
        saved = self._shifts.save(
            updated,
            expected_version=current.version,
            guard=_conflict_guard(updated.interval, user_id, exclude=current.shift_id),
        )
        logger.info("shift_assigned", extra={"shift_id": saved.shift_id, "assignee_id": user_id})
        return saved

    def delete(self, actor: Actor, shift_id: int) -> None:
        current = self._load(shift_id)
        roster = self._load_roster(current.roster_id)
        authorize(actor, Action.SHIFT_DELETE, company_id=roster.company_id)

        if self._attendance.find(AttendanceQuery(shift_id=current.shift_id), limit=1):
            raise ValidationError("Shift has attendance records and cannot be deleted")
        if not self._shifts.delete(current.shift_id):
            raise NotFoundError("Shift", shift_id)
        logger.info("shift_deleted", extra={"shift_id": current.shift_id, "actor_id": actor.user_id})

    def _guard_for_change(self, before: Shift, after: Shift) -> Optional[ShiftGuard]:
        # ``before`` is the stored row: save refuses to write over any other version.
        if after.assigned_user_id is None or after.status == ShiftStatus.CANCELED:
            return None
        unchanged = (
            before.start_time == after.start_time
            and before.end_time == after.end_time
            and before.assigned_user_id == after.assigned_user_id
            and before.status == after.status
        )
        if unchanged:
            return None
        return _conflict_guard(after.interval, after.assigned_user_id, exclude=after.shift_id)

    def _require_assignable(self, user_id: int, roster: Roster) -> None:
        worker = self._workers.get_by_id(user_id)
        if not worker:
            raise NotFoundError("User", user_id)
        if worker.company_id != roster.company_id:
            raise ValidationError("Assigned user must belong to the same company")
        if not worker.is_active:
            raise ValidationError("Assigned user is not active")

    def _load(self, shift_id: int) -> Shift:
        shift = self._shifts.get_by_id(int(shift_id))
        if not shift:
            raise NotFoundError("Shift", shift_id)
        return shift

    def _load_roster(self, roster_id: int) -> Roster:
        roster = self._rosters.get_by_id(int(roster_id))
        if not roster:
            raise NotFoundError("Roster", roster_id)
        return roster


def _require_ordered(start: datetime, end: datetime) -> None:
    if not start < end:
        raise ValidationError("Start time must be before end time")


def _require_version(current: Shift, expected: Optional[int]) -> None:
    if expected is not None and int(expected) != current.version:
        raise ConcurrentModificationError("Shift", current.shift_id, int(expected))


def _conflict_guard(candidate: Interval, assignee_id: int, *, exclude: Optional[int] = None) -> ShiftGuard:
    def guard(existing: Sequence[Shift]) -> None:
        clashes = find_conflicts(candidate, assignee_id, existing, exclude_shift_id=exclude)
        if clashes:
            logger.warning(
                "shift_conflict",
                extra={"assignee_id": assignee_id, "conflicting_shift_ids": [s.shift_id for s in clashes]},
            )
            raise ShiftConflictError(assignee_id, (s.shift_id for s in clashes))

    return guard
