"""Folder records and naming rules."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime

from .errors import ValidationError
from .value_objects import Document

MIN_FOLDER_NAME_LENGTH = 2


@dataclass(frozen=True, slots=True)
class Folder:
    """A node of a project's folder tree.

    Conventions:
      - `parent_id` is None only for the project's root folder.
      - `order` sorts active siblings ascending (see `casebook.domain.ordering`).
      - `deleted_at` is set on soft delete; deleted folders are excluded from
        every read except history.
    """

    folder_id: str
    project_id: str
    parent_id: str | None
    name: str
    order: float
    created_at: datetime
    documentation: Document = None
    deleted_at: datetime | None = None

    @property
    def is_root(self) -> bool:
        """True for the project's root folder."""
        return self.parent_id is None

    @property
    def is_active(self) -> bool:
        """True unless the folder has been soft-deleted."""
        return self.deleted_at is None


def normalize_folder_name(name: str, key: str) -> str:
    """Strip `name` and enforce the minimum length.

    Raises:
        ValidationError: If the stripped name is shorter than two characters.
    """
    name = name.strip()
    if len(name) < MIN_FOLDER_NAME_LENGTH:
        raise ValidationError(
            "folder",
            key,
            f"name must be at least {MIN_FOLDER_NAME_LENGTH} characters",
        )
    return name


def name_key(name: str) -> str:
    """Case-insensitive comparison key for sibling names."""
    return name.strip().casefold()


# --- Tree walks over a flat id -> Folder map ---


def walk_up(folders: Mapping[str, Folder], start_id: str) -> list[Folder]:
    """Return `start_id` followed by its ancestors, nearest first.

    The walk follows parent pointers iteratively and stops after
    ``len(folders)`` steps, so a corrupted (cyclic) map cannot loop forever.

    Raises:
        ValueError: If the parent chain revisits a folder.
    """
    chain: list[Folder] = []
    current = folders.get(start_id)
    while current is not None:
        if len(chain) >= len(folders):
            raise ValueError(f"Folder tree corrupted: parent chain of {start_id} loops")
        chain.append(current)
        current = folders.get(current.parent_id) if current.parent_id else None
    return chain


def is_self_or_descendant(
    folders: Mapping[str, Folder], folder_id: str, candidate_id: str
) -> bool:
    """True if `candidate_id` is `folder_id` or lies beneath it."""
    return any(f.folder_id == folder_id for f in walk_up(folders, candidate_id))


def subtree_ids(folders: Mapping[str, Folder], root_id: str) -> list[str]:
    """Return `root_id` and every folder beneath it, breadth first."""
    children: dict[str, list[str]] = {}
    for folder in folders.values():
        if folder.parent_id is not None:
            children.setdefault(folder.parent_id, []).append(folder.folder_id)

    ids = [root_id]
    seen = {root_id}
    for folder_id in ids:  # grows while iterating
        for child_id in children.get(folder_id, ()):
            if child_id not in seen:
                seen.add(child_id)
                ids.append(child_id)
    return ids
