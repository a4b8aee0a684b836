"""Project queries."""

from casebook.domain.errors import NotFoundError
from casebook.domain.projects import Project
from casebook.interfaces.unit_of_work import AbstractUnitOfWork


class ProjectQueries:
    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    def list_all(self) -> list[Project]:
        with self.uow:
            return self.uow.repos.projects.list_all()

    def get(self, project_id: str) -> Project:
        with self.uow:
            project = self.uow.repos.projects.get(project_id)
        if project is None:
            raise NotFoundError("project", project_id)
        return project
