"""Handlers for artifacts: content versions, placement, tags and issue links."""

import logging
from collections.abc import Callable
from dataclasses import replace

from casebook.domain import ordering
from casebook.domain.artifacts import Artifact, ArtifactContent, Version
from casebook.domain.errors import (
    CasebookError,
    ConcurrentModificationError,
    ValidationError,
)
from casebook.domain.value_objects import IssueLink, utc_now
from casebook.interfaces.id_generator import IdGenerator
from casebook.interfaces.permissions import Action, PermissionChecker
from casebook.interfaces.unit_of_work import AbstractUnitOfWork
from casebook.service_layer import commands
from casebook.service_layer.messagebus import CONCURRENCY_RETRIES
from casebook.service_layer.results import BulkEditResult, ItemOutcome

from .lookups import get_active_artifact, get_active_folder, get_active_tag

logger = logging.getLogger(__name__)


def _append_content(
    uow: AbstractUnitOfWork,
    artifact: Artifact,
    content: ArtifactContent,
    actor_id: str,
) -> int:
    """Snapshot `content` as the next version and return its number."""
    number = artifact.current_version + 1
    uow.repos.artifacts.append_version(
        Version(
            artifact_id=artifact.artifact_id,
            number=number,
            content=content,
            created_at=utc_now(),
            created_by=actor_id,
        ),
        expected_version=artifact.current_version,
    )
    return number


# ============================================================================
#                            Create / update content
# ============================================================================


def create_artifact(
    cmd: commands.CreateArtifact,
    uow: AbstractUnitOfWork,
    id_generator: IdGenerator,
    permissions: PermissionChecker,
) -> str:
    """Create an artifact at the end of its folder, with version 1."""

    content = ArtifactContent(
        name=cmd.name,
        template_id=cmd.template_id,
        state_id=cmd.state_id,
        automated=cmd.automated,
        estimate=cmd.estimate,
        steps=cmd.steps,
        custom_fields=cmd.custom_fields,
    )

    with uow:
        folder = get_active_folder(uow, cmd.folder_id)
        permissions.ensure(cmd.actor_id, Action.ARTIFACT_CREATE, folder.folder_id)

        siblings = uow.repos.artifacts.list_active_in_folders([folder.folder_id])
        now = utc_now()
        artifact = Artifact(
            artifact_id=id_generator.new_id(),
            project_id=folder.project_id,
            folder_id=folder.folder_id,
            creator_id=cmd.actor_id,
            order=ordering.next_order(a.order for a in siblings),
            current_version=1,
            content=content,
            created_at=now,
        )
        uow.repos.artifacts.add(
            artifact,
            Version(
                artifact_id=artifact.artifact_id,
                number=1,
                content=content,
                created_at=now,
                created_by=cmd.actor_id,
            ),
        )
        uow.commit()

    logger.info(
        "Created artifact %s (%r) in folder %s",
        artifact.artifact_id,
        content.name,
        folder.folder_id,
    )
    return artifact.artifact_id


def update_artifact(
    cmd: commands.UpdateArtifact,
    uow: AbstractUnitOfWork,
    permissions: PermissionChecker,
) -> int:
    """Apply a content patch; returns the resulting head version number.

    A patch that changes nothing creates no version.
    """

    with uow:
        artifact = get_active_artifact(uow, cmd.artifact_id)
        permissions.ensure(cmd.actor_id, Action.ARTIFACT_UPDATE, artifact.artifact_id)

        if (
            cmd.expected_version is not None
            and cmd.expected_version != artifact.current_version
        ):
            raise ConcurrentModificationError(
                "artifact",
                artifact.artifact_id,
                artifact.current_version,
                cmd.expected_version,
            )

        content = cmd.patch.apply_to(artifact.content, artifact.artifact_id)
        if content == artifact.content:
            logger.debug("UpdateArtifact %s: no changes; noop", artifact.artifact_id)
            return artifact.current_version

        number = _append_content(uow, artifact, content, cmd.actor_id)
        uow.commit()

    logger.info("Artifact %s advanced to version %d", cmd.artifact_id, number)
    return number


# ============================================================================
#                                Move / delete
# ============================================================================


def move_artifact(
    cmd: commands.MoveArtifact, uow: AbstractUnitOfWork, permissions: PermissionChecker
) -> None:
    """Move an artifact to the end of another folder. Creates no version."""

    with uow:
        artifact = get_active_artifact(uow, cmd.artifact_id)
        permissions.ensure(cmd.actor_id, Action.ARTIFACT_MOVE, artifact.artifact_id)
        folder = get_active_folder(uow, cmd.folder_id)
        if folder.project_id != artifact.project_id:
            raise ValidationError(
                "artifact",
                artifact.artifact_id,
                f"folder {folder.folder_id} belongs to another project",
            )
        if folder.folder_id == artifact.folder_id:
            logger.debug("MoveArtifact %s: same folder; noop", artifact.artifact_id)
            return

        siblings = uow.repos.artifacts.list_active_in_folders([folder.folder_id])
        uow.repos.artifacts.save(
            replace(
                artifact,
                folder_id=folder.folder_id,
                order=ordering.next_order(a.order for a in siblings),
            )
        )
        uow.commit()


def delete_artifact(
    cmd: commands.DeleteArtifact,
    uow: AbstractUnitOfWork,
    permissions: PermissionChecker,
) -> None:
    """Soft-delete an artifact; its versions stay."""

    with uow:
        artifact = get_active_artifact(uow, cmd.artifact_id)
        permissions.ensure(cmd.actor_id, Action.ARTIFACT_DELETE, artifact.artifact_id)
        uow.repos.artifacts.save(replace(artifact, deleted_at=utc_now()))
        uow.commit()

    logger.info("Deleted artifact %s", cmd.artifact_id)


# ============================================================================
#                           Tags and issue links
# ============================================================================


def attach_tag(
    cmd: commands.AttachTag, uow: AbstractUnitOfWork, permissions: PermissionChecker
) -> None:
    """Attach an active tag. Attaching a tag already present is a no-op."""

    with uow:
        artifact = get_active_artifact(uow, cmd.artifact_id)
        permissions.ensure(cmd.actor_id, Action.ARTIFACT_TAG, artifact.artifact_id)
        tag = get_active_tag(uow, cmd.tag_id)
        if tag.tag_id in artifact.tags:
            logger.debug(
                "AttachTag %s on %s: already attached; noop",
                tag.tag_id,
                artifact.artifact_id,
            )
            return
        uow.repos.artifacts.save(replace(artifact, tags=artifact.tags | {tag.tag_id}))
        uow.commit()


def detach_tag(
    cmd: commands.DetachTag, uow: AbstractUnitOfWork, permissions: PermissionChecker
) -> None:
    """Detach a tag (active or deleted). Detaching an absent tag is a no-op."""

    with uow:
        artifact = get_active_artifact(uow, cmd.artifact_id)
        permissions.ensure(cmd.actor_id, Action.ARTIFACT_TAG, artifact.artifact_id)
        if cmd.tag_id not in artifact.tags:
            logger.debug(
                "DetachTag %s on %s: not attached; noop",
                cmd.tag_id,
                artifact.artifact_id,
            )
            return
        uow.repos.artifacts.save(replace(artifact, tags=artifact.tags - {cmd.tag_id}))
        uow.commit()


def link_issue(
    cmd: commands.LinkIssue, uow: AbstractUnitOfWork, permissions: PermissionChecker
) -> None:
    """Link an external issue, or update whether an existing link resolves."""

    link = IssueLink(ref=cmd.ref, resolves=cmd.resolves)

    with uow:
        artifact = get_active_artifact(uow, cmd.artifact_id)
        permissions.ensure(
            cmd.actor_id, Action.ARTIFACT_LINK_ISSUE, artifact.artifact_id
        )
        if link in artifact.issues:
            logger.debug(
                "LinkIssue %s on %s: already linked; noop",
                cmd.ref.key,
                artifact.artifact_id,
            )
            return
        uow.repos.artifacts.save(artifact.with_issue(link))
        uow.commit()


def unlink_issue(
    cmd: commands.UnlinkIssue, uow: AbstractUnitOfWork, permissions: PermissionChecker
) -> None:
    """Remove an issue link. Unlinking an absent issue is a no-op."""

    with uow:
        artifact = get_active_artifact(uow, cmd.artifact_id)
        permissions.ensure(
            cmd.actor_id, Action.ARTIFACT_LINK_ISSUE, artifact.artifact_id
        )
        if cmd.ref not in artifact.issue_refs:
            logger.debug(
                "UnlinkIssue %s on %s: not linked; noop",
                cmd.ref.key,
                artifact.artifact_id,
            )
            return
        uow.repos.artifacts.save(artifact.without_issue(cmd.ref))
        uow.commit()


# ============================================================================
#                                 Bulk edit
# ============================================================================


def _bulk_edit_one(
    cmd: commands.BulkEditArtifacts, uow: AbstractUnitOfWork, artifact_id: str
) -> int:
    with uow:
        artifact = get_active_artifact(uow, artifact_id)
        if artifact.project_id != cmd.project_id:
            raise ValidationError(
                "artifact", artifact_id, f"not part of project {cmd.project_id}"
            )

        content = cmd.patch.apply_to(artifact.content, artifact_id)
        if cmd.steps_replace is not None:
            content = replace(content, steps=cmd.steps_replace.apply(content.steps))

        tags = artifact.tags
        for tag_id in cmd.add_tag_ids:
            tags = tags | {get_active_tag(uow, tag_id).tag_id}
        tags = tags - set(cmd.remove_tag_ids)

        number = artifact.current_version
        if content != artifact.content:
            number = _append_content(uow, artifact, content, cmd.actor_id)
        if tags != artifact.tags:
            uow.repos.artifacts.save(replace(artifact, tags=tags))
        uow.commit()
    return number


def bulk_edit_artifacts(
    cmd: commands.BulkEditArtifacts,
    uow: AbstractUnitOfWork,
    permissions: PermissionChecker,
) -> BulkEditResult:
    """Apply one edit to many artifacts, one transaction per artifact.

    The permission check covers the whole batch and runs once, up front; a
    denial fails the batch. Any other error is recorded against its artifact
    and the batch carries on. A concurrent modification is retried once for
    that artifact before it is recorded.
    """

    permissions.ensure(cmd.actor_id, Action.ARTIFACT_BULK_EDIT, cmd.project_id)

    outcomes: list[ItemOutcome] = []
    for artifact_id in dict.fromkeys(cmd.artifact_ids):
        attempt = 0
        while True:
            try:
                number = _bulk_edit_one(cmd, uow, artifact_id)
            except ConcurrentModificationError as exc:
                if attempt < CONCURRENCY_RETRIES:
                    attempt += 1
                    logger.warning("BulkEdit %s: retrying after %s", artifact_id, exc)
                    continue
                outcomes.append(ItemOutcome.failure(artifact_id, exc))
            except CasebookError as exc:
                logger.info("BulkEdit %s: %s", artifact_id, exc)
                outcomes.append(ItemOutcome.failure(artifact_id, exc))
            else:
                outcomes.append(ItemOutcome.success(artifact_id, number))
            break

    result = BulkEditResult(tuple(outcomes))
    logger.info(
        "BulkEdit on project %s: %d succeeded, %d failed",
        cmd.project_id,
        len(result.succeeded),
        len(result.failed),
    )
    return result


COMMAND_HANDLERS: dict[type, Callable[..., object]] = {
    commands.CreateArtifact: create_artifact,
    commands.UpdateArtifact: update_artifact,
    commands.MoveArtifact: move_artifact,
    commands.DeleteArtifact: delete_artifact,
    commands.AttachTag: attach_tag,
    commands.DetachTag: detach_tag,
    commands.LinkIssue: link_issue,
    commands.UnlinkIssue: unlink_issue,
    commands.BulkEditArtifacts: bulk_edit_artifacts,
}
