"""Service layer handlers."""

from collections.abc import Callable

from .artifacts import COMMAND_HANDLERS as ARTIFACT_COMMAND_HANDLERS
from .folders import COMMAND_HANDLERS as FOLDER_COMMAND_HANDLERS
from .projects import COMMAND_HANDLERS as PROJECT_COMMAND_HANDLERS
from .shared_steps import COMMAND_HANDLERS as SHARED_STEPS_COMMAND_HANDLERS
from .tags import COMMAND_HANDLERS as TAG_COMMAND_HANDLERS

__all__ = ["COMMAND_HANDLERS"]

COMMAND_HANDLERS: dict[type, Callable[..., object]] = {
    **PROJECT_COMMAND_HANDLERS,
    **FOLDER_COMMAND_HANDLERS,
    **ARTIFACT_COMMAND_HANDLERS,
    **TAG_COMMAND_HANDLERS,
    **SHARED_STEPS_COMMAND_HANDLERS,
}
