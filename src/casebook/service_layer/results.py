"""Values returned by command handlers and queries."""

from __future__ import annotations

from dataclasses import dataclass

from casebook.domain.errors import CasebookError, ErrorKind


@dataclass(frozen=True, slots=True)
class DeleteSummary:
    """What a folder delete affects (or affected).

    `folder_ids` holds the folder itself first, then every descendant.
    """

    folder_id: str
    folder_ids: tuple[str, ...]
    artifact_ids: tuple[str, ...]

    @property
    def descendant_folder_count(self) -> int:
        """Number of folders beneath the deleted folder."""
        return len(self.folder_ids) - 1

    @property
    def artifact_count(self) -> int:
        """Number of active artifacts anywhere in the subtree."""
        return len(self.artifact_ids)


@dataclass(frozen=True, slots=True)
class ItemOutcome:
    """Per-item outcome of a bulk operation."""

    item_id: str
    error_kind: ErrorKind | None = None
    message: str | None = None
    version: int | None = None

    @property
    def ok(self) -> bool:
        """True if the change applied (or was a no-op)."""
        return self.error_kind is None

    @classmethod
    def success(cls, item_id: str, version: int | None = None) -> ItemOutcome:
        return cls(item_id=item_id, version=version)

    @classmethod
    def failure(cls, item_id: str, error: CasebookError) -> ItemOutcome:
        return cls(item_id=item_id, error_kind=error.error_kind, message=str(error))


@dataclass(frozen=True, slots=True)
class BulkEditResult:
    """Outcomes of a bulk edit, in request order."""

    outcomes: tuple[ItemOutcome, ...]

    @property
    def succeeded(self) -> tuple[str, ...]:
        return tuple(o.item_id for o in self.outcomes if o.ok)

    @property
    def failed(self) -> tuple[ItemOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.ok)
