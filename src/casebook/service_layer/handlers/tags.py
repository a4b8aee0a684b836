"""Handlers for global tags."""

import logging
from collections.abc import Callable
from dataclasses import replace

from casebook.domain.errors import ConflictError
from casebook.domain.tags import Tag, normalize_tag_name
from casebook.domain.value_objects import utc_now
from casebook.interfaces.id_generator import IdGenerator
from casebook.interfaces.permissions import GLOBAL_TARGET, Action, PermissionChecker
from casebook.interfaces.unit_of_work import AbstractUnitOfWork
from casebook.service_layer import commands

from .lookups import get_active_tag

logger = logging.getLogger(__name__)


def create_tag(
    cmd: commands.CreateTag,
    uow: AbstractUnitOfWork,
    id_generator: IdGenerator,
    permissions: PermissionChecker,
) -> str:
    """Create a tag, or restore the soft-deleted tag with the same name.

    Names compare case-insensitively. A restored tag keeps its id and takes
    the spelling given here.
    """

    permissions.ensure(cmd.actor_id, Action.TAG_CREATE, GLOBAL_TARGET)
    name = normalize_tag_name(cmd.name, cmd.name)

    with uow:
        if uow.repos.tags.find_active_by_name(name) is not None:
            raise ConflictError("tag", name)

        deleted = uow.repos.tags.find_deleted_by_name(name)
        if deleted is not None:
            uow.repos.tags.save(replace(deleted, name=name, deleted_at=None))
            uow.commit()
            logger.info("Restored tag %s (%r)", deleted.tag_id, name)
            return deleted.tag_id

        tag = Tag(tag_id=id_generator.new_id(), name=name, created_at=utc_now())
        uow.repos.tags.add(tag)
        uow.commit()

    logger.info("Created tag %s (%r)", tag.tag_id, name)
    return tag.tag_id


def rename_tag(
    cmd: commands.RenameTag, uow: AbstractUnitOfWork, permissions: PermissionChecker
) -> None:
    """Rename an active tag.

    A name held by another active tag is a conflict. A name held only by
    soft-deleted tags is free to take; those tags are left as they are.
    """

    with uow:
        tag = get_active_tag(uow, cmd.tag_id)
        permissions.ensure(cmd.actor_id, Action.TAG_RENAME, tag.tag_id)
        name = normalize_tag_name(cmd.name, tag.tag_id)
        if name == tag.name:
            logger.debug("RenameTag %s: no changes; noop", tag.tag_id)
            return

        holder = uow.repos.tags.find_active_by_name(name)
        if holder is not None and holder.tag_id != tag.tag_id:
            raise ConflictError("tag", name)

        uow.repos.tags.save(replace(tag, name=name))
        uow.commit()

    logger.info("Renamed tag %s to %r", cmd.tag_id, name)


def delete_tag(
    cmd: commands.DeleteTag, uow: AbstractUnitOfWork, permissions: PermissionChecker
) -> None:
    """Soft-delete a tag. Attachments stay but are ignored by listings and views."""

    with uow:
        tag = get_active_tag(uow, cmd.tag_id)
        permissions.ensure(cmd.actor_id, Action.TAG_DELETE, tag.tag_id)
        uow.repos.tags.save(replace(tag, deleted_at=utc_now()))
        uow.commit()

    logger.info("Deleted tag %s", cmd.tag_id)


COMMAND_HANDLERS: dict[type, Callable[..., object]] = {
    commands.CreateTag: create_tag,
    commands.RenameTag: rename_tag,
    commands.DeleteTag: delete_tag,
}
