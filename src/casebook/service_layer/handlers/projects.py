"""Handlers for projects."""

import logging
from collections.abc import Callable

from casebook.domain.folders import Folder
from casebook.domain.projects import Project, normalize_project_name
from casebook.domain.value_objects import utc_now
from casebook.interfaces.id_generator import IdGenerator
from casebook.interfaces.permissions import GLOBAL_TARGET, Action, PermissionChecker
from casebook.interfaces.unit_of_work import AbstractUnitOfWork
from casebook.service_layer import commands

logger = logging.getLogger(__name__)

ROOT_FOLDER_ORDER = 1.0


def create_project(
    cmd: commands.CreateProject,
    uow: AbstractUnitOfWork,
    id_generator: IdGenerator,
    permissions: PermissionChecker,
) -> str:
    """Create a project and its root folder. Returns the project id."""

    permissions.ensure(cmd.actor_id, Action.PROJECT_CREATE, GLOBAL_TARGET)
    name = normalize_project_name(cmd.name, cmd.name)

    project_id = id_generator.new_id()
    root_folder_id = id_generator.new_id()
    now = utc_now()

    with uow:
        uow.repos.projects.add(
            Project(
                project_id=project_id,
                name=name,
                root_folder_id=root_folder_id,
                created_at=now,
            )
        )
        uow.repos.folders.add(
            Folder(
                folder_id=root_folder_id,
                project_id=project_id,
                parent_id=None,
                name=name,
                order=ROOT_FOLDER_ORDER,
                created_at=now,
            )
        )
        uow.commit()

    logger.info("Created project %s (%r)", project_id, name)
    return project_id


COMMAND_HANDLERS: dict[type, Callable[..., object]] = {
    commands.CreateProject: create_project,
}
