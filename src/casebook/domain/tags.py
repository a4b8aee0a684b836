"""Tag records."""

from dataclasses import dataclass
from datetime import datetime

from .errors import ValidationError


@dataclass(frozen=True, slots=True)
class Tag:
    """A global label. Names are unique, case-insensitively, among active tags."""

    tag_id: str
    name: str
    created_at: datetime
    deleted_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        """True unless the tag has been soft-deleted."""
        return self.deleted_at is None

    @property
    def name_key(self) -> str:
        """Case-insensitive comparison key."""
        return self.name.casefold()


def normalize_tag_name(name: str, key: str) -> str:
    """Strip `name` and reject empty tag names."""
    name = name.strip()
    if not name:
        raise ValidationError("tag", key, "name must not be empty")
    return name
