"""Repository interfaces for Casebook."""

from .artifacts import ArtifactPatch, ArtifactRepository
from .folders import FolderPatch, FolderRepository
from .projects import ProjectRepository
from .shared_steps import SharedStepGroupPatch, SharedStepGroupRepository
from .tags import TagRepository

__all__ = [
    "ArtifactPatch",
    "ArtifactRepository",
    "FolderPatch",
    "FolderRepository",
    "ProjectRepository",
    "SharedStepGroupPatch",
    "SharedStepGroupRepository",
    "TagRepository",
]
