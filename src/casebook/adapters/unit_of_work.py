"""SQLAlchemy-backed Unit of Work for Casebook.

Provides a context-managed UnitOfWork using one SQLAlchemy Connection per
transaction and the SQLAlchemy Core repositories.

One instance is shared by the message bus, the queries and the view engine,
so the open connection and its repositories are kept per thread.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from casebook.adapters.db.repositories import (
    SqlAlchemyArtifactRepository,
    SqlAlchemyFolderRepository,
    SqlAlchemyProjectRepository,
    SqlAlchemySharedStepGroupRepository,
    SqlAlchemyTagRepository,
)
from casebook.interfaces.unit_of_work import AbstractUnitOfWork, RepositoryBundle

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """SQLAlchemy-backed Unit of Work."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._local = threading.local()

    def _stack(self) -> list[tuple[Connection, RepositoryBundle]]:
        stack = getattr(self._local, "stack", None)
        if stack is None:
            stack = self._local.stack = []
        return stack

    @property
    def connection(self) -> Connection:
        """The connection of this thread's innermost open transaction."""
        stack = self._stack()
        if not stack:
            raise RuntimeError("unit of work is not active on this thread")
        return stack[-1][0]

    @property
    def repos(self) -> RepositoryBundle:  # type: ignore[override]
        stack = self._stack()
        if not stack:
            raise RuntimeError("unit of work is not active on this thread")
        return stack[-1][1]

    def __enter__(self):
        connection = self.engine.connect()
        repos = RepositoryBundle(
            projects=SqlAlchemyProjectRepository(connection),
            folders=SqlAlchemyFolderRepository(connection),
            artifacts=SqlAlchemyArtifactRepository(connection),
            tags=SqlAlchemyTagRepository(connection),
            shared_steps=SqlAlchemySharedStepGroupRepository(connection),
        )
        self._stack().append((connection, repos))
        return super().__enter__()

    def __exit__(self, *args):
        try:
            super().__exit__(*args)
        finally:
            connection, _ = self._stack().pop()
            connection.close()

    def commit(self):
        self.connection.commit()

    def rollback(self):
        self.connection.rollback()
