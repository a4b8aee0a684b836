"""Pytest fixtures for repository contract tests.

Provided fixtures
-----------------
- **store**: Parametrized unit of work over every repository backend. Each
  invocation gets a fresh, empty store.
- **stored**: Helpers that build records with `make_records` and persist
  them through `store` in committed transactions.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from casebook.adapters.memory.unit_of_work import InMemoryUnitOfWork
from casebook.adapters.unit_of_work import SqlAlchemyUnitOfWork
from casebook.interfaces.unit_of_work import AbstractUnitOfWork


@pytest.fixture(params=["memory", "sqlite"])
def store(
    request: pytest.FixtureRequest, sqlite_engine_memory
) -> Iterator[AbstractUnitOfWork]:
    """Return a fresh unit of work for the requested backend.

    Current params:
      - `"memory"` → `InMemoryUnitOfWork`
      - `"sqlite"` → `SqlAlchemyUnitOfWork` over in-memory SQLite

    Extend by adding new identifiers to `params` and branching below.
    """
    match request.param:
        case "memory":
            yield InMemoryUnitOfWork()
        case "sqlite":
            yield SqlAlchemyUnitOfWork(sqlite_engine_memory)
        case _:
            raise ValueError(f"unknown store type: {request.param}")


@pytest.fixture
def stored(store: AbstractUnitOfWork, make_records):
    """Persist freshly built records; every helper commits its own transaction."""

    class _Stored:
        @staticmethod
        def project(name: str = "Payments"):
            project, root = make_records.project(name)
            with store:
                store.repos.projects.add(project)
                store.repos.folders.add(root)
                store.commit()
            return project, root

        @staticmethod
        def folder(project, parent, name: str, order: float = 1.0):
            folder = make_records.folder(project, parent, name, order)
            with store:
                store.repos.folders.add(folder)
                store.commit()
            return folder

        @staticmethod
        def artifact(project, folder, **kwargs):
            artifact, version = make_records.artifact(project, folder, **kwargs)
            with store:
                store.repos.artifacts.add(artifact, version)
                store.commit()
            return artifact, version

        @staticmethod
        def tag(name: str):
            tag = make_records.tag(name)
            with store:
                store.repos.tags.add(tag)
                store.commit()
            return tag

    return _Stored()
