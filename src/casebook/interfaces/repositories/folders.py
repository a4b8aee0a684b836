"""Interface for the folder repository."""

from __future__ import annotations

import abc
from dataclasses import dataclass, replace

from casebook.domain.folders import Folder, normalize_folder_name
from casebook.domain.value_objects import Document

from ..unsettable import UNSET, Unsettable, resolve

# --- Write Model ---


@dataclass(frozen=True, slots=True)
class FolderPatch:
    """Partial update of a folder's name and documentation."""

    name: Unsettable[str] = UNSET
    documentation: Unsettable[Document] = UNSET

    def apply_to(self, folder: Folder) -> Folder:
        """Return `folder` with the patch applied."""
        name = resolve(
            self.name,
            folder.name,
            clearable=False,
            field="name",
            kind="folder",
            key=folder.folder_id,
        )
        documentation = resolve(
            self.documentation,
            folder.documentation,
            clearable=True,
            field="documentation",
            kind="folder",
            key=folder.folder_id,
        )
        return replace(
            folder,
            name=normalize_folder_name(name, folder.folder_id),
            documentation=documentation,
        )


# --- Interface ---


class FolderRepository(abc.ABC):
    """Flat, id-keyed storage of folder nodes with parent references."""

    @abc.abstractmethod
    def add(self, folder: Folder) -> None:
        """Insert a new folder."""

    @abc.abstractmethod
    def get(self, folder_id: str) -> Folder | None:
        """Return the folder (active or deleted), or None if unknown."""

    @abc.abstractmethod
    def save(self, folder: Folder) -> None:
        """Persist changes to an existing folder."""

    @abc.abstractmethod
    def list_children(self, parent_id: str) -> list[Folder]:
        """Return the active children of `parent_id` ordered by (order, id)."""

    @abc.abstractmethod
    def list_project(
        self, project_id: str, *, for_update: bool = False
    ) -> list[Folder]:
        """Return every active folder of the project.

        Args:
            project_id: The owning project.
            for_update: Lock the returned rows for the rest of the transaction.
                Used by move and delete so a concurrent move cannot re-parent a
                folder in the middle of a cascade.
        """
