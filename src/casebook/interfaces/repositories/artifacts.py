"""Interface for the artifact repository."""

from __future__ import annotations

import abc
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from casebook.domain.artifacts import Artifact, ArtifactContent, Version
from casebook.domain.value_objects import FieldValue, Step

from ..unsettable import UNSET, Unsettable, is_unset, resolve

# pylint: disable=too-many-instance-attributes

# --- Write Model ---


@dataclass(frozen=True, slots=True)
class ArtifactPatch:
    """Partial update of an artifact's versioned content.

    `custom_fields` is merged into the current values: a field id mapped to
    None removes that field, any other value replaces it.
    """

    name: Unsettable[str] = UNSET
    template_id: Unsettable[str] = UNSET
    state_id: Unsettable[str] = UNSET
    automated: Unsettable[bool] = UNSET
    estimate: Unsettable[int] = UNSET
    steps: Unsettable[Sequence[Step]] = UNSET
    custom_fields: Unsettable[Mapping[str, FieldValue | None]] = UNSET

    @property
    def is_empty(self) -> bool:
        """True if every field is UNSET."""
        return all(
            is_unset(getattr(self, name))
            for name in (
                "name",
                "template_id",
                "state_id",
                "automated",
                "estimate",
                "steps",
                "custom_fields",
            )
        )

    def apply_to(self, content: ArtifactContent, key: str) -> ArtifactContent:
        """Return `content` with the patch applied.

        Args:
            content: The head content being patched.
            key: The artifact id (for error messages).
        """

        def _resolve(field, clearable=False):
            return resolve(
                getattr(self, field),
                getattr(content, field),
                clearable=clearable,
                field=field,
                kind="artifact",
                key=key,
            )

        custom_fields = dict(content.custom_fields)
        if not is_unset(self.custom_fields):
            updates = _resolve("custom_fields")
            for field_id, value in updates.items():
                if value is None:
                    custom_fields.pop(field_id, None)
                else:
                    custom_fields[field_id] = value

        return ArtifactContent(
            name=_resolve("name"),
            template_id=_resolve("template_id"),
            state_id=_resolve("state_id", clearable=True),
            automated=_resolve("automated"),
            estimate=_resolve("estimate", clearable=True),
            steps=tuple(_resolve("steps")),
            custom_fields=custom_fields,
        )


# --- Interface ---


class ArtifactRepository(abc.ABC):
    """Artifacts and their append-only version chains."""

    @abc.abstractmethod
    def add(self, artifact: Artifact, first_version: Version) -> None:
        """Insert a new artifact together with its version 1."""

    @abc.abstractmethod
    def get(self, artifact_id: str) -> Artifact | None:
        """Return the artifact (active or deleted) with its head content."""

    @abc.abstractmethod
    def save(self, artifact: Artifact) -> None:
        """Persist non-versioned bookkeeping.

        Covers folder, order, tags, issue links and `deleted_at`. Content and
        `current_version` only change through `append_version`.
        """

    @abc.abstractmethod
    def append_version(self, version: Version, expected_version: int) -> None:
        """Append `version` and advance the artifact's head to it.

        Args:
            version: The new snapshot; its number must be `expected_version + 1`.
            expected_version: The head version the caller based its edit on.

        Raises:
            ConcurrentModificationError: If the stored head no longer equals
                `expected_version`.
        """

    @abc.abstractmethod
    def get_version(self, artifact_id: str, number: int) -> Version | None:
        """Return one version, or None if it does not exist."""

    @abc.abstractmethod
    def list_versions(self, artifact_id: str) -> list[Version]:
        """Return every version of the artifact, oldest first."""

    @abc.abstractmethod
    def list_active(self, project_id: str) -> list[Artifact]:
        """Return the project's active artifacts ordered by (order, id)."""

    @abc.abstractmethod
    def list_active_in_folders(self, folder_ids: Iterable[str]) -> list[Artifact]:
        """Return active artifacts held directly by any of `folder_ids`."""

    @abc.abstractmethod
    def count_with_tag(self, tag_id: str) -> int:
        """Return the number of active artifacts carrying `tag_id`."""
