from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.validators import optional_text, require_non_empty
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.exceptions import AlreadyPublishedError, NotFoundError, ValidationError
from ..core.policy import Action, Actor, authorize, is_allowed
from ..shifts.model import ShiftQuery
from ..shifts.repository import ShiftRepository
from .model import Roster, RosterQuery
from .repository import RosterRepository

logger = logging.getLogger(__name__)


class RosterService:
    """Roster CRUD and the Draft -> Published state machine.

    Publication only controls visibility; it never touches shift data.
    There is no way back from Published. Actors without
    ``SCHEDULE_VIEW_ALL`` only ever see published rosters.
    """

    def __init__(self, rosters: RosterRepository, shifts: ShiftRepository):
        self._rosters = rosters
        self._shifts = shifts

    def create(
        self,
        actor: Actor,
        *,
        title: str,
        start_date: datetime,
        end_date: datetime,
        description: Optional[str] = None,
    ) -> Roster:
        authorize(actor, Action.ROSTER_CREATE)
        if actor.company_id is None:
            raise ValidationError("User must belong to a company")

        title = require_non_empty(title, "title")
        _require_window(start_date, end_date)

        roster = self._rosters.create(
            company_id=actor.company_id,
            title=title,
            start_date=start_date,
            end_date=end_date,
            description=optional_text(description),
        )
        logger.info("roster_created", extra={"roster_id": roster.roster_id, "company_id": roster.company_id})
        return roster

    def get(self, actor: Actor, roster_id: int) -> Roster:
        roster = self._load(roster_id)
        authorize(actor, Action.ROSTER_VIEW, company_id=roster.company_id)
        if not roster.is_published and not is_allowed(actor.role, Action.SCHEDULE_VIEW_ALL):
            raise NotFoundError("Roster", roster_id)
        return roster

    def list(
        self,
        actor: Actor,
        *,
        is_published: Optional[bool] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[Roster]:
        authorize(actor, Action.ROSTER_VIEW)
        if actor.company_id is None:
            raise ValidationError("User must belong to a company")
        if not is_allowed(actor.role, Action.SCHEDULE_VIEW_ALL):
            if is_published is False:
                return []
            is_published = True
        query = RosterQuery(company_id=actor.company_id, is_published=is_published, start=start, end=end)
        return self._rosters.find(query, limit=limit)

    def update(
        self,
        actor: Actor,
        roster_id: int,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Roster:
        """Edit the descriptive fields. Publication state is left alone."""

        current = self._load(roster_id)
        authorize(actor, Action.ROSTER_UPDATE, company_id=current.company_id)

        new_title = require_non_empty(title, "title") if title is not None else current.title
        new_start = start_date or current.start_date
        new_end = end_date or current.end_date
        _require_window(new_start, new_end)

        updated = self._rosters.update_details(
            current.roster_id,
            title=new_title,
            description=optional_text(description) if description is not None else current.description,
            start_date=new_start,
            end_date=new_end,
        )
        if updated is None:
            raise NotFoundError("Roster", roster_id)
        logger.info("roster_updated", extra={"roster_id": updated.roster_id, "actor_id": actor.user_id})
        return updated

    def publish(self, actor: Actor, roster_id: int) -> Roster:
        roster = self._load(roster_id)
        authorize(actor, Action.ROSTER_PUBLISH, company_id=roster.company_id)

        if roster.is_published or not self._rosters.mark_published(roster.roster_id):
            logger.warning("roster_already_published", extra={"roster_id": roster.roster_id})
            raise AlreadyPublishedError(roster.roster_id)

        logger.info("roster_published", extra={"roster_id": roster.roster_id, "actor_id": actor.user_id})
        return self._load(roster_id)

    def delete(self, actor: Actor, roster_id: int) -> None:
        roster = self._load(roster_id)
        authorize(actor, Action.ROSTER_DELETE, company_id=roster.company_id)

        if self._shifts.find(ShiftQuery(roster_ids=(roster.roster_id,)), limit=1):
            raise ValidationError("Roster still has shifts and cannot be deleted")
        if not self._rosters.delete(roster.roster_id):
            raise NotFoundError("Roster", roster_id)
        logger.info("roster_deleted", extra={"roster_id": roster.roster_id, "actor_id": actor.user_id})

    def _load(self, roster_id: int) -> Roster:
        roster = self._rosters.get_by_id(int(roster_id))
        if not roster:
            raise NotFoundError("Roster", roster_id)
        return roster


def _require_window(start: datetime, end: datetime) -> None:
    if not start < end:
        raise ValidationError("Start date must be before end date")
