"""Interface for the project repository."""

import abc

from casebook.domain.projects import Project


class ProjectRepository(abc.ABC):
    """Projects keyed by id."""

    @abc.abstractmethod
    def add(self, project: Project) -> None:
        """Insert a new project."""

    @abc.abstractmethod
    def get(self, project_id: str) -> Project | None:
        """Return the project, or None if unknown."""

    @abc.abstractmethod
    def list_all(self) -> list[Project]:
        """Return every project ordered by name."""
