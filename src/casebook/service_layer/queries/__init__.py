"""Read-side queries. Each call runs in its own (rolled back) unit of work."""

from dataclasses import dataclass

from casebook.interfaces.unit_of_work import AbstractUnitOfWork

from .folders import FolderNode, FolderQueries
from .history import HistoryQueries, VersionView
from .projects import ProjectQueries
from .shared_steps import SharedStepQueries
from .tags import TagQueries

__all__ = [
    "FolderNode",
    "FolderQueries",
    "HistoryQueries",
    "ProjectQueries",
    "Queries",
    "SharedStepQueries",
    "TagQueries",
    "VersionView",
]


@dataclass(frozen=True)
class Queries:
    """All query facades over one unit of work."""

    projects: ProjectQueries
    folders: FolderQueries
    history: HistoryQueries
    tags: TagQueries
    shared_steps: SharedStepQueries

    @classmethod
    def over(cls, uow: AbstractUnitOfWork) -> "Queries":
        return cls(
            projects=ProjectQueries(uow),
            folders=FolderQueries(uow),
            history=HistoryQueries(uow),
            tags=TagQueries(uow),
            shared_steps=SharedStepQueries(uow),
        )
