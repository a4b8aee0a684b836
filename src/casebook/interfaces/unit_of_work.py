"""Unit of Work interface for Casebook.

Defines the AbstractUnitOfWork contract: a context-managed unit of work
exposing the repository bundle and abstract commit/rollback methods.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass

from . import repositories


@dataclass(frozen=True, slots=True)
class RepositoryBundle:
    """A bundle of repositories used in a unit of work."""

    projects: repositories.ProjectRepository
    folders: repositories.FolderRepository
    artifacts: repositories.ArtifactRepository
    tags: repositories.TagRepository
    shared_steps: repositories.SharedStepGroupRepository


class AbstractUnitOfWork(abc.ABC):
    """Contract for a transactional unit of work."""

    repos: RepositoryBundle

    def __enter__(self) -> AbstractUnitOfWork:
        """Enter the unit of work context and return the unit.

        Implementations may acquire transactional resources here.
        """
        return self

    def __exit__(self, *args):
        """Exit the unit of work context.

        Default behavior is to roll back on exit.
        """
        self.rollback()

    @abc.abstractmethod
    def commit(self):
        """Persist changes and finalize the transaction."""

    @abc.abstractmethod
    def rollback(self):
        """Revert changes and clean up transactional resources."""
