"""Module defining Commands.

Every command names the acting user in `actor_id`; handlers check it against
the permission predicate before changing anything.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field

from casebook.domain.artifacts import StepsReplace
from casebook.domain.value_objects import Document, FieldValue, IssueRef, Step
from casebook.interfaces.repositories import ArtifactPatch
from casebook.interfaces.unsettable import UNSET, Unsettable

# pylint: disable=too-many-instance-attributes


@dataclass(frozen=True)
class Command:
    """Base class for all commands."""


# ============================================================================
#                                 Projects
# ============================================================================


@dataclass(frozen=True)
class CreateProject(Command):
    """Command to create a project together with its root folder."""

    actor_id: str
    name: str


# ============================================================================
#                                 Folders
# ============================================================================


@dataclass(frozen=True)
class CreateFolder(Command):
    """Command to create a folder; `parent_id=None` means the project root."""

    actor_id: str
    project_id: str
    name: str
    parent_id: str | None = None
    documentation: Document = None


@dataclass(frozen=True)
class UpdateFolder(Command):
    """Command to rename a folder or change its documentation."""

    actor_id: str
    folder_id: str
    name: Unsettable[str] = UNSET
    documentation: Unsettable[Document] = UNSET


@dataclass(frozen=True)
class MoveFolder(Command):
    """Command to re-parent and/or reorder a folder.

    `position` is the 0-based index among the new parent's active children
    (the moved folder excluded). None appends.
    """

    actor_id: str
    folder_id: str
    new_parent_id: str
    position: int | None = None


@dataclass(frozen=True)
class DeleteFolder(Command):
    """Command to soft-delete a folder, its descendants and their artifacts."""

    actor_id: str
    folder_id: str


# ============================================================================
#                                 Artifacts
# ============================================================================


@dataclass(frozen=True)
class CreateArtifact(Command):
    """Command to create an artifact and its version 1."""

    actor_id: str
    folder_id: str
    name: str
    template_id: str
    state_id: str | None = None
    automated: bool = False
    estimate: int | None = None
    steps: tuple[Step, ...] = ()
    custom_fields: Mapping[str, FieldValue] = field(default_factory=dict)


@dataclass(frozen=True)
class UpdateArtifact(Command):
    """Command to edit versioned content.

    `expected_version`, when given, must equal the stored head version.
    """

    actor_id: str
    artifact_id: str
    patch: ArtifactPatch
    expected_version: int | None = None


@dataclass(frozen=True)
class MoveArtifact(Command):
    """Command to move an artifact to another folder of the same project."""

    actor_id: str
    artifact_id: str
    folder_id: str


@dataclass(frozen=True)
class DeleteArtifact(Command):
    """Command to soft-delete an artifact. Its history is kept."""

    actor_id: str
    artifact_id: str


@dataclass(frozen=True)
class AttachTag(Command):
    """Command to attach an active tag to an artifact (idempotent)."""

    actor_id: str
    artifact_id: str
    tag_id: str


@dataclass(frozen=True)
class DetachTag(Command):
    """Command to detach a tag from an artifact (idempotent)."""

    actor_id: str
    artifact_id: str
    tag_id: str


@dataclass(frozen=True)
class LinkIssue(Command):
    """Command to link an external issue to an artifact (idempotent)."""

    actor_id: str
    artifact_id: str
    ref: IssueRef
    resolves: bool = True


@dataclass(frozen=True)
class UnlinkIssue(Command):
    """Command to remove an issue link from an artifact (idempotent)."""

    actor_id: str
    artifact_id: str
    ref: IssueRef


@dataclass(frozen=True)
class BulkEditArtifacts(Command):
    """Command to apply one edit to many artifacts of a project.

    Each artifact is changed in its own transaction; the result reports a
    per-artifact outcome.
    """

    actor_id: str
    project_id: str
    artifact_ids: tuple[str, ...]
    patch: ArtifactPatch = ArtifactPatch()
    add_tag_ids: tuple[str, ...] = ()
    remove_tag_ids: tuple[str, ...] = ()
    steps_replace: StepsReplace | None = None


# ============================================================================
#                                   Tags
# ============================================================================


@dataclass(frozen=True)
class CreateTag(Command):
    """Command to create a tag, or restore a soft-deleted one of the same name."""

    actor_id: str
    name: str


@dataclass(frozen=True)
class RenameTag(Command):
    """Command to rename an active tag."""

    actor_id: str
    tag_id: str
    name: str


@dataclass(frozen=True)
class DeleteTag(Command):
    """Command to soft-delete a tag."""

    actor_id: str
    tag_id: str


# ============================================================================
#                             Shared step groups
# ============================================================================


@dataclass(frozen=True)
class CreateSharedStepGroup(Command):
    """Command to create a shared step group in a project."""

    actor_id: str
    project_id: str
    name: str
    steps: tuple[Step, ...] = ()


@dataclass(frozen=True)
class UpdateSharedStepGroup(Command):
    """Command to rename a shared step group or replace its steps."""

    actor_id: str
    group_id: str
    name: Unsettable[str] = UNSET
    steps: Unsettable[tuple[Step, ...]] = UNSET


@dataclass(frozen=True)
class DeleteSharedStepGroup(Command):
    """Command to soft-delete a shared step group. Referencing artifacts keep
    their placeholders."""

    actor_id: str
    group_id: str
