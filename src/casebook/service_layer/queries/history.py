"""Version history and diffs.

History stays readable after an artifact is soft-deleted. Tags and issue
links are not versioned: every version view carries the artifact's current
ones.
"""

from __future__ import annotations

from dataclasses import dataclass

from casebook.domain.artifacts import Artifact, Version
from casebook.domain.diff import FieldChange, diff_contents
from casebook.domain.errors import NotFoundError, ValidationError
from casebook.domain.value_objects import IssueLink
from casebook.interfaces.unit_of_work import AbstractUnitOfWork


@dataclass(frozen=True, slots=True)
class VersionView:
    """A version snapshot overlaid with the artifact's live tags and issues."""

    version: Version
    current_version: int
    tags: frozenset[str]
    issues: tuple[IssueLink, ...]

    @property
    def is_current(self) -> bool:
        return self.version.number == self.current_version


class HistoryQueries:
    """Read access to an artifact's version chain."""

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    def _artifact(self, artifact_id: str) -> Artifact:
        artifact = self.uow.repos.artifacts.get(artifact_id)
        if artifact is None:
            raise NotFoundError("artifact", artifact_id)
        return artifact

    def _version(self, artifact: Artifact, number: int) -> Version:
        version = None
        if 1 <= number <= artifact.current_version:
            version = self.uow.repos.artifacts.get_version(artifact.artifact_id, number)
        if version is None:
            raise NotFoundError(
                "version",
                f"{artifact.artifact_id}@{number}",
                f"artifact {artifact.artifact_id} has no version {number} "
                f"(versions 1..{artifact.current_version})",
            )
        return version

    def list_versions(self, artifact_id: str) -> list[Version]:
        """Return every version, oldest first."""
        with self.uow:
            self._artifact(artifact_id)
            return self.uow.repos.artifacts.list_versions(artifact_id)

    def get_version(self, artifact_id: str, number: int) -> VersionView:
        """Return version `number` with the current tags and issues overlaid.

        Raises:
            NotFoundError: If `number` is outside ``1..current_version``.
        """
        with self.uow:
            artifact = self._artifact(artifact_id)
            version = self._version(artifact, number)
        return VersionView(
            version=version,
            current_version=artifact.current_version,
            tags=artifact.tags,
            issues=artifact.issues,
        )

    def diff(
        self, artifact_id: str, number: int, *, include_unchanged: bool = False
    ) -> list[FieldChange]:
        """Compare version `number` with its predecessor.

        Raises:
            NotFoundError: If `number` is 1 (no predecessor) or out of range.
        """
        with self.uow:
            artifact = self._artifact(artifact_id)
            new = self._version(artifact, number)
            if number == 1:
                raise NotFoundError(
                    "version",
                    f"{artifact_id}@0",
                    f"version 1 of artifact {artifact_id} has no predecessor",
                )
            old = self._version(artifact, number - 1)
        return diff_contents(
            old.content, new.content, include_unchanged=include_unchanged
        )

    def diff_between(
        self,
        artifact_id: str,
        older: int,
        newer: int,
        *,
        include_unchanged: bool = False,
    ) -> list[FieldChange]:
        """Compare any two versions; `older` must be below `newer`."""
        if older >= newer:
            raise ValidationError(
                "version",
                artifact_id,
                f"older version ({older}) must precede newer version ({newer})",
            )
        with self.uow:
            artifact = self._artifact(artifact_id)
            old = self._version(artifact, older)
            new = self._version(artifact, newer)
        return diff_contents(
            old.content, new.content, include_unchanged=include_unchanged
        )
