from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, Protocol, Sequence

from .model import Shift, ShiftQuery

# Called with the assignee's non-canceled shifts inside the write's
# transaction; raises to abort the write.
ShiftGuard = Callable[[Sequence[Shift]], None]


class ShiftRepository(Protocol):
    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        raise NotImplementedError

    def list_active_for_assignee(self, user_id: int) -> Sequence[Shift]:
        raise NotImplementedError

    def find(self, query: ShiftQuery, *, limit: int) -> Sequence[Shift]:
        raise NotImplementedError

    def create(
        self,
        *,
        roster_id: int,
        start_time: datetime,
        end_time: datetime,
        assigned_user_id: Optional[int],
        title: str,
        description: Optional[str] = None,
        location: Optional[str] = None,
        notes: Optional[str] = None,
        guard: Optional[ShiftGuard] = None,
    ) -> Shift:
        """Insert a shift; ``guard`` runs first under the assignee lock."""

        raise NotImplementedError

    def save(self, shift: Shift, *, expected_version: int, guard: Optional[ShiftGuard] = None) -> Shift:
        """Persist every mutable field of ``shift`` as one check-then-write unit.

        The write only happens if the stored version is ``expected_version``;
        otherwise ConcurrentModificationError is raised and ``guard`` never
        runs. Returns the shift with its version bumped.
        """

        raise NotImplementedError

    def delete(self, shift_id: int) -> bool:
        """Remove the shift; False when it did not exist.

        A store backed by foreign keys raises ValidationError while
        attendance still references it.
        """

        raise NotImplementedError
