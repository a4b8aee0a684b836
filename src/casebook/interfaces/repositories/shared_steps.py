"""Interface for the shared step group repository."""

from __future__ import annotations

import abc
from collections.abc import Sequence
from dataclasses import dataclass, replace

from casebook.domain.errors import ValidationError
from casebook.domain.shared_steps import SharedStepGroup, validate_group_steps
from casebook.domain.value_objects import Step

from ..unsettable import UNSET, Unsettable, resolve

# --- Write Model ---


@dataclass(frozen=True, slots=True)
class SharedStepGroupPatch:
    """Partial update of a shared step group."""

    name: Unsettable[str] = UNSET
    steps: Unsettable[Sequence[Step]] = UNSET

    def apply_to(self, group: SharedStepGroup) -> SharedStepGroup:
        """Return `group` with the patch applied."""
        key = group.group_id
        name = resolve(
            self.name,
            group.name,
            clearable=False,
            field="name",
            kind="shared_step_group",
            key=key,
        ).strip()
        if not name:
            raise ValidationError("shared_step_group", key, "name must not be empty")
        steps = resolve(
            self.steps,
            group.steps,
            clearable=False,
            field="steps",
            kind="shared_step_group",
            key=key,
        )
        return replace(group, name=name, steps=validate_group_steps(steps, key))


# --- Interface ---


class SharedStepGroupRepository(abc.ABC):
    """Shared step groups keyed by id."""

    @abc.abstractmethod
    def add(self, group: SharedStepGroup) -> None:
        """Insert a new group."""

    @abc.abstractmethod
    def get(self, group_id: str) -> SharedStepGroup | None:
        """Return the group (active or deleted), or None if unknown."""

    @abc.abstractmethod
    def save(self, group: SharedStepGroup) -> None:
        """Persist changes to an existing group."""

    @abc.abstractmethod
    def list_active(self, project_id: str) -> list[SharedStepGroup]:
        """Return the project's active groups ordered by name."""
