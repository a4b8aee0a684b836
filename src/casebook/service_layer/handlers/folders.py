"""Handlers for the folder tree."""

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace

from casebook.domain import ordering
from casebook.domain.errors import (
    ConflictError,
    CycleError,
    NotFoundError,
    ValidationError,
)
from casebook.domain.folders import (
    Folder,
    is_self_or_descendant,
    name_key,
    normalize_folder_name,
    subtree_ids,
)
from casebook.domain.value_objects import utc_now
from casebook.interfaces.id_generator import IdGenerator
from casebook.interfaces.permissions import Action, PermissionChecker
from casebook.interfaces.repositories import FolderPatch
from casebook.interfaces.unit_of_work import AbstractUnitOfWork
from casebook.service_layer import commands
from casebook.service_layer.results import DeleteSummary

from .lookups import get_active_folder, get_project

logger = logging.getLogger(__name__)


def _ensure_unique_sibling_name(
    siblings: Iterable[Folder], name: str, parent_id: str, exclude_id: str | None
) -> None:
    key = name_key(name)
    for sibling in siblings:
        if sibling.folder_id != exclude_id and name_key(sibling.name) == key:
            raise ConflictError(
                "folder",
                name,
                f"an active folder named {sibling.name!r} already exists "
                f"under {parent_id}",
            )


def _ensure_not_root(folder: Folder, verb: str) -> None:
    if folder.is_root:
        raise ValidationError(
            "folder", folder.folder_id, f"the root folder cannot be {verb}"
        )


# ============================================================================
#                                   Create
# ============================================================================


def create_folder(
    cmd: commands.CreateFolder,
    uow: AbstractUnitOfWork,
    id_generator: IdGenerator,
    permissions: PermissionChecker,
) -> str:
    """Create a folder, appended after its siblings. Returns the folder id."""

    name = normalize_folder_name(cmd.name, cmd.name)

    with uow:
        project = get_project(uow, cmd.project_id)
        parent = get_active_folder(uow, cmd.parent_id or project.root_folder_id)
        if parent.project_id != project.project_id:
            raise NotFoundError("folder", parent.folder_id)
        permissions.ensure(cmd.actor_id, Action.FOLDER_CREATE, parent.folder_id)

        siblings = uow.repos.folders.list_children(parent.folder_id)
        _ensure_unique_sibling_name(siblings, name, parent.folder_id, None)

        folder = Folder(
            folder_id=id_generator.new_id(),
            project_id=project.project_id,
            parent_id=parent.folder_id,
            name=name,
            order=ordering.next_order(s.order for s in siblings),
            created_at=utc_now(),
            documentation=cmd.documentation,
        )
        uow.repos.folders.add(folder)
        uow.commit()

    logger.info(
        "Created folder %s (%r) under %s", folder.folder_id, name, parent.folder_id
    )
    return folder.folder_id


# ============================================================================
#                                   Update
# ============================================================================


def update_folder(
    cmd: commands.UpdateFolder, uow: AbstractUnitOfWork, permissions: PermissionChecker
) -> None:
    """Rename a folder and/or replace its documentation."""

    patch = FolderPatch(name=cmd.name, documentation=cmd.documentation)

    with uow:
        folder = get_active_folder(uow, cmd.folder_id)
        permissions.ensure(cmd.actor_id, Action.FOLDER_UPDATE, folder.folder_id)

        updated = patch.apply_to(folder)
        if updated == folder:
            logger.debug("UpdateFolder %s: no changes; noop", folder.folder_id)
            return

        if updated.parent_id is not None and name_key(updated.name) != name_key(
            folder.name
        ):
            _ensure_unique_sibling_name(
                uow.repos.folders.list_children(updated.parent_id),
                updated.name,
                updated.parent_id,
                folder.folder_id,
            )

        uow.repos.folders.save(updated)
        uow.commit()


# ============================================================================
#                                    Move
# ============================================================================


def move_folder(
    cmd: commands.MoveFolder, uow: AbstractUnitOfWork, permissions: PermissionChecker
) -> None:
    """Re-parent and/or reorder a folder.

    The project's folder rows are locked for the rest of the transaction so
    the cycle check and the write see the same tree.
    """

    with uow:
        folder = get_active_folder(uow, cmd.folder_id)
        permissions.ensure(cmd.actor_id, Action.FOLDER_MOVE, folder.folder_id)

        folders = {
            f.folder_id: f
            for f in uow.repos.folders.list_project(folder.project_id, for_update=True)
        }
        target = folders.get(cmd.new_parent_id)
        if target is None:
            raise NotFoundError("folder", cmd.new_parent_id)
        if is_self_or_descendant(folders, folder.folder_id, target.folder_id):
            raise CycleError(folder.folder_id, target.folder_id)

        siblings = sorted(
            (
                f
                for f in folders.values()
                if f.parent_id == target.folder_id and f.folder_id != folder.folder_id
            ),
            key=lambda f: (f.order, f.folder_id),
        )
        if target.folder_id != folder.parent_id:
            _ensure_unique_sibling_name(
                siblings, folder.name, target.folder_id, folder.folder_id
            )

        orders = ordering.place(
            [(s.folder_id, s.order) for s in siblings], folder.folder_id, cmd.position
        )
        for sibling in siblings:
            new_order = orders.get(sibling.folder_id)
            if new_order is not None and new_order != sibling.order:
                uow.repos.folders.save(replace(sibling, order=new_order))
        uow.repos.folders.save(
            replace(folder, parent_id=target.folder_id, order=orders[folder.folder_id])
        )
        uow.commit()

    logger.info(
        "Moved folder %s under %s at position %s",
        cmd.folder_id,
        cmd.new_parent_id,
        cmd.position,
    )


# ============================================================================
#                                   Delete
# ============================================================================


def delete_folder(
    cmd: commands.DeleteFolder, uow: AbstractUnitOfWork, permissions: PermissionChecker
) -> DeleteSummary:
    """Soft-delete a folder, every descendant folder and every artifact in them."""

    with uow:
        folder = get_active_folder(uow, cmd.folder_id)
        _ensure_not_root(folder, "deleted")
        permissions.ensure(cmd.actor_id, Action.FOLDER_DELETE, folder.folder_id)

        folders = {
            f.folder_id: f
            for f in uow.repos.folders.list_project(folder.project_id, for_update=True)
        }
        folder_ids = subtree_ids(folders, folder.folder_id)
        artifacts = uow.repos.artifacts.list_active_in_folders(folder_ids)

        now = utc_now()
        for folder_id in folder_ids:
            uow.repos.folders.save(replace(folders[folder_id], deleted_at=now))
        for artifact in artifacts:
            uow.repos.artifacts.save(replace(artifact, deleted_at=now))
        uow.commit()

    summary = DeleteSummary(
        folder_id=folder.folder_id,
        folder_ids=tuple(folder_ids),
        artifact_ids=tuple(a.artifact_id for a in artifacts),
    )
    logger.info(
        "Deleted folder %s with %d descendant folders and %d artifacts",
        folder.folder_id,
        summary.descendant_folder_count,
        summary.artifact_count,
    )
    return summary


COMMAND_HANDLERS: dict[type, Callable[..., object]] = {
    commands.CreateFolder: create_folder,
    commands.UpdateFolder: update_folder,
    commands.MoveFolder: move_folder,
    commands.DeleteFolder: delete_folder,
}
