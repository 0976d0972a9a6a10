"""Interval conflict detection for a single worker's shifts.

Pure functions: no I/O and no shared state, so they are safe to call from
any number of request threads.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from ..core.enums import ShiftStatus
from .model import Interval, Shift


def intervals_overlap(s1: datetime, e1: datetime, s2: datetime, e2: datetime) -> bool:
    """``[s1, e1)`` and ``[s2, e2)`` share at least one instant.

    Back-to-back intervals (``e1 == s2``) do not overlap.
    """
    return s1 < e2 and s2 < e1


def find_conflicts(
    candidate: Interval,
    assignee_id: int,
    existing_shifts: Iterable[Shift],
    *,
    exclude_shift_id: Optional[int] = None,
) -> list[Shift]:
    """Shifts of ``assignee_id`` that overlap ``candidate``.

    Canceled shifts and the shift being updated (``exclude_shift_id``) are ignored.
    """

    return [
        s
        for s in existing_shifts
        if s.assigned_user_id == assignee_id
        and s.status != ShiftStatus.CANCELED
        and (exclude_shift_id is None or s.shift_id != exclude_shift_id)
        and intervals_overlap(candidate.start, candidate.end, s.start_time, s.end_time)
    ]


def has_conflict(
    candidate: Interval,
    assignee_id: int,
    existing_shifts: Iterable[Shift],
    exclude_shift_id: Optional[int] = None,
) -> bool:
    return bool(find_conflicts(candidate, assignee_id, existing_shifts, exclude_shift_id=exclude_shift_id))
