from __future__ import annotations

from typing import Optional, Protocol

from .model import Worker


class WorkerDirectory(Protocol):
    """Repository interface for workers.

    Note (DIP): services depend on this interface, never on a concrete store.
    """

    def get_by_id(self, user_id: int) -> Optional[Worker]:
        raise NotImplementedError
