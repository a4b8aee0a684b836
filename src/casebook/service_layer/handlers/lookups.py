"""Record lookups shared by the command handlers.

Each helper raises `NotFoundError` for unknown ids and for soft-deleted
records, which are invisible to every write path.
"""

from casebook.domain.artifacts import Artifact
from casebook.domain.errors import NotFoundError
from casebook.domain.folders import Folder
from casebook.domain.projects import Project
from casebook.domain.shared_steps import SharedStepGroup
from casebook.domain.tags import Tag
from casebook.interfaces.unit_of_work import AbstractUnitOfWork


def get_project(uow: AbstractUnitOfWork, project_id: str) -> Project:
    project = uow.repos.projects.get(project_id)
    if project is None:
        raise NotFoundError("project", project_id)
    return project


def get_active_folder(uow: AbstractUnitOfWork, folder_id: str) -> Folder:
    folder = uow.repos.folders.get(folder_id)
    if folder is None or not folder.is_active:
        raise NotFoundError("folder", folder_id)
    return folder


def get_active_artifact(uow: AbstractUnitOfWork, artifact_id: str) -> Artifact:
    artifact = uow.repos.artifacts.get(artifact_id)
    if artifact is None or not artifact.is_active:
        raise NotFoundError("artifact", artifact_id)
    return artifact


def get_active_tag(uow: AbstractUnitOfWork, tag_id: str) -> Tag:
    tag = uow.repos.tags.get(tag_id)
    if tag is None or not tag.is_active:
        raise NotFoundError("tag", tag_id)
    return tag


def get_active_group(uow: AbstractUnitOfWork, group_id: str) -> SharedStepGroup:
    group = uow.repos.shared_steps.get(group_id)
    if group is None or not group.is_active:
        raise NotFoundError("shared_step_group", group_id)
    return group
