"""Handlers for shared step groups."""

import logging
from collections.abc import Callable
from dataclasses import replace

from casebook.domain.errors import ValidationError
from casebook.domain.shared_steps import SharedStepGroup, validate_group_steps
from casebook.domain.value_objects import utc_now
from casebook.interfaces.id_generator import IdGenerator
from casebook.interfaces.permissions import Action, PermissionChecker
from casebook.interfaces.repositories import SharedStepGroupPatch
from casebook.interfaces.unit_of_work import AbstractUnitOfWork
from casebook.service_layer import commands

from .lookups import get_active_group, get_project

logger = logging.getLogger(__name__)


def create_shared_step_group(
    cmd: commands.CreateSharedStepGroup,
    uow: AbstractUnitOfWork,
    id_generator: IdGenerator,
    permissions: PermissionChecker,
) -> str:
    """Create a shared step group. Returns the group id."""

    name = cmd.name.strip()
    if not name:
        raise ValidationError("shared_step_group", cmd.name, "name must not be empty")
    steps = validate_group_steps(cmd.steps, name)

    with uow:
        project = get_project(uow, cmd.project_id)
        permissions.ensure(
            cmd.actor_id, Action.SHARED_STEPS_CREATE, project.project_id
        )
        group = SharedStepGroup(
            group_id=id_generator.new_id(),
            project_id=project.project_id,
            name=name,
            steps=steps,
            created_at=utc_now(),
        )
        uow.repos.shared_steps.add(group)
        uow.commit()

    logger.info("Created shared step group %s (%r)", group.group_id, name)
    return group.group_id


def update_shared_step_group(
    cmd: commands.UpdateSharedStepGroup,
    uow: AbstractUnitOfWork,
    permissions: PermissionChecker,
) -> None:
    """Rename a group or replace its steps."""

    patch = SharedStepGroupPatch(name=cmd.name, steps=cmd.steps)

    with uow:
        group = get_active_group(uow, cmd.group_id)
        permissions.ensure(cmd.actor_id, Action.SHARED_STEPS_UPDATE, group.group_id)

        updated = patch.apply_to(group)
        if updated == group:
            logger.debug("UpdateSharedStepGroup %s: no changes; noop", group.group_id)
            return

        uow.repos.shared_steps.save(updated)
        uow.commit()


def delete_shared_step_group(
    cmd: commands.DeleteSharedStepGroup,
    uow: AbstractUnitOfWork,
    permissions: PermissionChecker,
) -> None:
    """Soft-delete a group. Artifact steps that reference it are untouched."""

    with uow:
        group = get_active_group(uow, cmd.group_id)
        permissions.ensure(cmd.actor_id, Action.SHARED_STEPS_DELETE, group.group_id)
        uow.repos.shared_steps.save(replace(group, deleted_at=utc_now()))
        uow.commit()

    logger.info("Deleted shared step group %s", cmd.group_id)


COMMAND_HANDLERS: dict[type, Callable[..., object]] = {
    commands.CreateSharedStepGroup: create_shared_step_group,
    commands.UpdateSharedStepGroup: update_shared_step_group,
    commands.DeleteSharedStepGroup: delete_shared_step_group,
}
