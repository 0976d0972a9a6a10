from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from .model import Roster, RosterQuery
from .repository import RosterRepository


class InMemoryRosterRepository(RosterRepository):
    def __init__(self):
        self._lock = threading.Lock()
        self._by_id: dict[int, Roster] = {}
        self._next_id = 1

    def get_by_id(self, roster_id: int) -> Optional[Roster]:
        return self._by_id.get(int(roster_id))

    def find(self, query: RosterQuery, *, limit: Optional[int] = None) -> Sequence[Roster]:
        with self._lock:
            rows = [r for r in self._by_id.values() if _matches(r, query)]
        rows.sort(key=lambda r: (r.start_date, r.roster_id), reverse=True)
        return rows if limit is None else rows[: int(limit)]

    def create(
        self,
        *,
        company_id: int,
        title: str,
        start_date: datetime,
        end_date: datetime,
        description: Optional[str] = None,
    ) -> Roster:
        with self._lock:
            roster = Roster(
                roster_id=self._next_id,
                company_id=int(company_id),
                title=title,
                start_date=start_date,
                end_date=end_date,
                description=description,
            )
            self._by_id[roster.roster_id] = roster
            self._next_id += 1
            return roster

    def update_details(
        self,
        roster_id: int,
        *,
        title: str,
        description: Optional[str],
        start_date: datetime,
        end_date: datetime,
    ) -> Optional[Roster]:
        with self._lock:
            roster = self._by_id.get(int(roster_id))
            if roster is None:
                return None
            updated = replace(roster, title=title, description=description, start_date=start_date, end_date=end_date)
            self._by_id[updated.roster_id] = updated
            return updated

    def mark_published(self, roster_id: int) -> bool:
        with self._lock:
            roster = self._by_id.get(int(roster_id))
            if roster is None or roster.is_published:
                return False
            self._by_id[roster.roster_id] = replace(roster, is_published=True)
            return True

    def delete(self, roster_id: int) -> bool:
        with self._lock:
            return self._by_id.pop(int(roster_id), None) is not None


def _matches(r: Roster, q: RosterQuery) -> bool:
    if q.company_id is not None and r.company_id != q.company_id:
        return False
    if q.is_published is not None and r.is_published != q.is_published:
        return False
    if q.start is not None and r.start_date < q.start:
        return False
    if q.end is not None and r.end_date > q.end:
        return False
    return True
