"""Read-side queries over the folder tree."""

from __future__ import annotations

from dataclasses import dataclass

from casebook.domain.errors import NotFoundError
from casebook.domain.folders import Folder, subtree_ids, walk_up
from casebook.interfaces.unit_of_work import AbstractUnitOfWork
from casebook.service_layer.results import DeleteSummary


@dataclass(frozen=True, slots=True)
class FolderNode:
    """A folder with its active children, ordered."""

    folder: Folder
    children: tuple[FolderNode, ...] = ()


class FolderQueries:
    """Active folders only; deleted folders read as not found."""

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    def _get_active(self, folder_id: str) -> Folder:
        folder = self.uow.repos.folders.get(folder_id)
        if folder is None or not folder.is_active:
            raise NotFoundError("folder", folder_id)
        return folder

    def get(self, folder_id: str) -> Folder:
        with self.uow:
            return self._get_active(folder_id)

    def list_children(self, folder_id: str) -> list[Folder]:
        """Return the active children of a folder ordered by `order`."""
        with self.uow:
            self._get_active(folder_id)
            return self.uow.repos.folders.list_children(folder_id)

    def ancestors(self, folder_id: str) -> list[Folder]:
        """Return the breadcrumb path from the root down to `folder_id`."""
        with self.uow:
            folder = self._get_active(folder_id)
            folders = {
                f.folder_id: f
                for f in self.uow.repos.folders.list_project(folder.project_id)
            }
            return list(reversed(walk_up(folders, folder_id)))

    def tree(self, project_id: str) -> FolderNode:
        """Return the project's active folder tree, root first."""
        with self.uow:
            project = self.uow.repos.projects.get(project_id)
            if project is None:
                raise NotFoundError("project", project_id)
            folders = self.uow.repos.folders.list_project(project_id)

        children: dict[str, list[Folder]] = {}
        for folder in folders:
            if folder.parent_id is not None:
                children.setdefault(folder.parent_id, []).append(folder)
        by_id = {f.folder_id: f for f in folders}

        def build(folder: Folder) -> FolderNode:
            kids = sorted(
                children.get(folder.folder_id, ()),
                key=lambda f: (f.order, f.folder_id),
            )
            return FolderNode(folder, tuple(build(kid) for kid in kids))

        return build(by_id[project.root_folder_id])

    def delete_summary(self, folder_id: str) -> DeleteSummary:
        """Report what deleting `folder_id` would affect, changing nothing."""
        with self.uow:
            folder = self._get_active(folder_id)
            folders = {
                f.folder_id: f
                for f in self.uow.repos.folders.list_project(folder.project_id)
            }
            folder_ids = subtree_ids(folders, folder_id)
            artifacts = self.uow.repos.artifacts.list_active_in_folders(folder_ids)
        return DeleteSummary(
            folder_id=folder_id,
            folder_ids=tuple(folder_ids),
            artifact_ids=tuple(a.artifact_id for a in artifacts),
        )
