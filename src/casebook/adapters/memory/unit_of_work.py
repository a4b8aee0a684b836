"""In-memory Unit of Work for Casebook.

Serializes transactions with a re-entrant lock and restores a snapshot of the
store on rollback, so uncommitted changes never leak to later readers.
"""

from __future__ import annotations

import threading

from casebook.interfaces.unit_of_work import AbstractUnitOfWork, RepositoryBundle

from .repositories import (
    InMemoryArtifactRepository,
    InMemoryFolderRepository,
    InMemoryProjectRepository,
    InMemorySharedStepGroupRepository,
    InMemoryTagRepository,
)
from .store import InMemoryStoreData


class InMemoryUnitOfWork(AbstractUnitOfWork):
    """In-memory Unit of Work.

    Nested ``with`` blocks on the same thread behave like savepoints: each
    level rolls back to the state it entered with unless it committed.
    """

    def __init__(self, data: InMemoryStoreData | None = None) -> None:
        self.data = data if data is not None else InMemoryStoreData()
        self.repos = RepositoryBundle(
            projects=InMemoryProjectRepository(self.data),
            folders=InMemoryFolderRepository(self.data),
            artifacts=InMemoryArtifactRepository(self.data),
            tags=InMemoryTagRepository(self.data),
            shared_steps=InMemorySharedStepGroupRepository(self.data),
        )
        self._lock = threading.RLock()
        self._checkpoints: list[InMemoryStoreData] = []

    def __enter__(self):
        self._lock.acquire()  # pylint: disable=consider-using-with
        self._checkpoints.append(self.data.snapshot())
        return super().__enter__()

    def __exit__(self, *args):
        try:
            super().__exit__(*args)
        finally:
            self._checkpoints.pop()
            self._lock.release()

    def commit(self):
        if self._checkpoints:
            self._checkpoints[-1] = self.data.snapshot()

    def rollback(self):
        if self._checkpoints:
            self.data.restore(self._checkpoints[-1])
