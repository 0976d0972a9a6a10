from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Roster, RosterQuery


class RosterRepository(Protocol):
    def get_by_id(self, roster_id: int) -> Optional[Roster]:
        raise NotImplementedError

    def find(self, query: RosterQuery, *, limit: Optional[int] = None) -> Sequence[Roster]:
        raise NotImplementedError

    def create(
        self,
        *,
        company_id: int,
        title: str,
        start_date: datetime,
        end_date: datetime,
        description: Optional[str] = None,
    ) -> Roster:
        raise NotImplementedError

    def update_details(
        self,
        roster_id: int,
        *,
        title: str,
        description: Optional[str],
        start_date: datetime,
        end_date: datetime,
    ) -> Optional[Roster]:
        """Rewrite the descriptive fields; ``is_published`` is never touched here."""

        raise NotImplementedError

    def mark_published(self, roster_id: int) -> bool:
        """Atomically flip ``is_published`` false -> true.

        Returns False when the roster was already published (nothing written).
        """

        raise NotImplementedError

    def delete(self, roster_id: int) -> bool:
        """Remove the roster; False when it did not exist.

        A store backed by foreign keys raises ValidationError while shifts
        still belong to it.
        """

        raise NotImplementedError
