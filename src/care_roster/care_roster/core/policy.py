"""Capability table: which role may perform which action.

Every service evaluates ``authorize`` before it touches a repository, so the
role rules live here and nowhere else.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .enums import Role
from .exceptions import AuthorizationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    """Authenticated principal making the request."""

    user_id: int
    role: Role
    company_id: Optional[int]


class Action(str, Enum):
    ROSTER_CREATE = "roster.create"
    ROSTER_VIEW = "roster.view"
    ROSTER_PUBLISH = "roster.publish"
    ROSTER_UPDATE = "roster.update"
    ROSTER_DELETE = "roster.delete"

    SHIFT_CREATE = "shift.create"
    SHIFT_UPDATE = "shift.update"
    SHIFT_ASSIGN = "shift.assign"
    SHIFT_VIEW = "shift.view"
    SHIFT_DELETE = "shift.delete"
    # Unpublished rosters and every worker's shifts, not only one's own.
    SCHEDULE_VIEW_ALL = "schedule.view_all"

    ATTENDANCE_CLOCK = "attendance.clock"
    ATTENDANCE_EDIT = "attendance.edit"
    ATTENDANCE_DECIDE = "attendance.decide"
    ATTENDANCE_DELETE = "attendance.delete"
    ATTENDANCE_VIEW_ALL = "attendance.view_all"

    PAYROLL_CREATE = "payroll.create"
    PAYROLL_GENERATE = "payroll.generate"
    PAYROLL_UPDATE = "payroll.update"
    PAYROLL_APPROVE = "payroll.approve"
    PAYROLL_DELETE = "payroll.delete"
    PAYROLL_VIEW_ALL = "payroll.view_all"


_SCHEDULING = {
    Action.ROSTER_CREATE,
    Action.ROSTER_PUBLISH,
    Action.ROSTER_UPDATE,
    Action.ROSTER_DELETE,
    Action.SHIFT_CREATE,
    Action.SHIFT_UPDATE,
    Action.SHIFT_ASSIGN,
    Action.SHIFT_DELETE,
    Action.SCHEDULE_VIEW_ALL,
}

_EVERYONE = {
    Action.ROSTER_VIEW,
    Action.SHIFT_VIEW,
    Action.ATTENDANCE_CLOCK,
    Action.ATTENDANCE_EDIT,
}

CAPABILITIES: dict[Role, frozenset[Action]] = {
    Role.ADMIN: frozenset(Action),
    Role.MANAGER: frozenset(
        _EVERYONE
        | _SCHEDULING
        | {
            Action.ATTENDANCE_DECIDE,
            Action.ATTENDANCE_VIEW_ALL,
            Action.PAYROLL_APPROVE,
            Action.PAYROLL_VIEW_ALL,
        }
    ),
    Role.ACCOUNTANT: frozenset(
        _EVERYONE
        | {
            Action.SCHEDULE_VIEW_ALL,
            Action.ATTENDANCE_DECIDE,
            Action.ATTENDANCE_VIEW_ALL,
            Action.PAYROLL_CREATE,
            Action.PAYROLL_GENERATE,
            Action.PAYROLL_UPDATE,
            Action.PAYROLL_VIEW_ALL,
        }
    ),
    Role.EMPLOYEE: frozenset(_EVERYONE),
}


def is_allowed(role: Role, action: Action) -> bool:
    return action in CAPABILITIES.get(role, frozenset())


def authorize(actor: Actor, action: Action, *, company_id: Optional[int] = None) -> None:
    """Raise AuthorizationError unless ``actor`` may perform ``action``.

    When ``company_id`` is given the actor must also belong to that company.
    """

    if not is_allowed(actor.role, action):
        logger.warning(
            "action_forbidden",
            extra={"actor_id": actor.user_id, "role": actor.role.value, "action": action.value},
        )
        raise AuthorizationError(f"Role {actor.role.value} may not perform {action.value}")

    if company_id is not None and actor.company_id != company_id:
        logger.warning(
            "company_scope_mismatch",
            extra={"actor_id": actor.user_id, "action": action.value, "company_id": company_id},
        )
        raise AuthorizationError("You do not have access to this company's records")


def require_self_or(actor: Actor, action: Action, *, owner_id: int) -> None:
    """Allow the record owner, or anyone holding ``action``."""

    if actor.user_id == owner_id:
        return
    if not is_allowed(actor.role, action):
        raise AuthorizationError("You may only act on your own records")
