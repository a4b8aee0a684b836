"""Shared step groups."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from .errors import ValidationError
from .value_objects import Step


@dataclass(frozen=True, slots=True)
class SharedStepGroup:
    """An ordered list of steps referenced, not owned, by artifacts."""

    group_id: str
    project_id: str
    name: str
    steps: tuple[Step, ...]
    created_at: datetime
    deleted_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        """True unless the group has been soft-deleted."""
        return self.deleted_at is None


def validate_group_steps(steps: Sequence[Step], key: str) -> tuple[Step, ...]:
    """Reject nested placeholders; groups hold plain steps only."""
    if any(step.shared_group_id is not None for step in steps):
        raise ValidationError(
            "shared_step_group", key, "shared step groups cannot be nested"
        )
    return tuple(steps)
