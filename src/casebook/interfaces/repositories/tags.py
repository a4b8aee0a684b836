"""Interface for the tag repository."""

import abc

from casebook.domain.tags import Tag


class TagRepository(abc.ABC):
    """Global tag storage. Deleted tags stay as rows with `deleted_at` set."""

    @abc.abstractmethod
    def add(self, tag: Tag) -> None:
        """Insert a new tag."""

    @abc.abstractmethod
    def get(self, tag_id: str) -> Tag | None:
        """Return the tag (active or deleted), or None if unknown."""

    @abc.abstractmethod
    def save(self, tag: Tag) -> None:
        """Persist changes to an existing tag."""

    @abc.abstractmethod
    def find_active_by_name(self, name: str) -> Tag | None:
        """Return the active tag whose name matches case-insensitively."""

    @abc.abstractmethod
    def find_deleted_by_name(self, name: str) -> Tag | None:
        """Return the most recently deleted tag with this name (case-insensitive)."""

    @abc.abstractmethod
    def list_active(self) -> list[Tag]:
        """Return every active tag ordered case-insensitively by name."""
