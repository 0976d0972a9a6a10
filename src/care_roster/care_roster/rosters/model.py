from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Roster:
    """Scheduling window owning a set of shifts for one company."""

    roster_id: int
    company_id: int
    title: str
    start_date: datetime
    end_date: datetime
    is_published: bool = False
    description: Optional[str] = None


@dataclass(frozen=True)
class RosterQuery:
    """Filters for listing; ``start`` bounds start_date from below, ``end`` bounds end_date from above."""

    company_id: Optional[int] = None
    is_published: Optional[bool] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
