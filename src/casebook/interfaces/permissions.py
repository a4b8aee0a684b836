"""Permission predicate consumed before every mutating operation.

Policy lives outside Casebook; only the enforcement points are defined here.
"""

import abc
from enum import Enum

from casebook.domain.errors import PermissionDeniedError

# pylint: disable=too-few-public-methods

#: Target id for actions that are not scoped to an existing record
#: (creating a project or a global tag).
GLOBAL_TARGET = "global"


class Action(Enum):
    """Mutating actions checked against the permission predicate."""

    PROJECT_CREATE = "project.create"
    FOLDER_CREATE = "folder.create"
    FOLDER_UPDATE = "folder.update"
    FOLDER_MOVE = "folder.move"
    FOLDER_DELETE = "folder.delete"
    ARTIFACT_CREATE = "artifact.create"
    ARTIFACT_UPDATE = "artifact.update"
    ARTIFACT_MOVE = "artifact.move"
    ARTIFACT_DELETE = "artifact.delete"
    ARTIFACT_TAG = "artifact.tag"
    ARTIFACT_LINK_ISSUE = "artifact.link_issue"
    ARTIFACT_BULK_EDIT = "artifact.bulk_edit"
    TAG_CREATE = "tag.create"
    TAG_RENAME = "tag.rename"
    TAG_DELETE = "tag.delete"
    SHARED_STEPS_CREATE = "shared_steps.create"
    SHARED_STEPS_UPDATE = "shared_steps.update"
    SHARED_STEPS_DELETE = "shared_steps.delete"


class PermissionChecker(abc.ABC):
    """Contract for the capability predicate."""

    @abc.abstractmethod
    def can_perform(self, actor_id: str, action: Action, target_id: str) -> bool:
        """Return True if `actor_id` may perform `action` on `target_id`."""

    def ensure(self, actor_id: str, action: Action, target_id: str) -> None:
        """Raise unless the action is permitted.

        Raises:
            PermissionDeniedError: If `can_perform` returns False.
        """
        if not self.can_perform(actor_id, action, target_id):
            raise PermissionDeniedError(actor_id, action.value, target_id)
