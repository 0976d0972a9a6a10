from __future__ import annotations

from typing import Iterable, Optional

from .model import Worker
from .repository import WorkerDirectory


class InMemoryWorkerDirectory(WorkerDirectory):
    def __init__(self, workers: Iterable[Worker] = ()):
        self._by_id = {w.user_id: w for w in workers}

    def get_by_id(self, user_id: int) -> Optional[Worker]:
        return self._by_id.get(int(user_id))

    def put(self, worker: Worker) -> None:
        self._by_id[worker.user_id] = worker
