"""Artifact columns shared by column filters and sorting."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from casebook.domain.artifacts import CUSTOM_FIELD_PREFIX, Artifact
from casebook.domain.errors import ValidationError

_BUILTIN_COLUMNS = {
    "name": lambda a: a.content.name,
    "order": lambda a: a.order,
    "created_at": lambda a: a.created_at,
    "estimate": lambda a: a.content.estimate,
    "automated": lambda a: a.content.automated,
    "template": lambda a: a.content.template_id,
    "state": lambda a: a.content.state_id,
    "creator": lambda a: a.creator_id,
    "version": lambda a: a.current_version,
}

#: Columns whose values are ids resolved through the label provider for sorting.
LABELLED_COLUMNS = frozenset({"template", "state", "creator"})


def validate_column(column: str) -> str:
    """Return `column` if it names a known column.

    Raises:
        ValidationError: For unknown columns.
    """
    if column in _BUILTIN_COLUMNS:
        return column
    if column.startswith(CUSTOM_FIELD_PREFIX) and len(column) > len(
        CUSTOM_FIELD_PREFIX
    ):
        return column
    raise ValidationError("column", column, "unknown column")


def column_value(artifact: Artifact, column: str) -> Any:
    """Return the artifact's value for `column`; None when it has none."""
    getter = _BUILTIN_COLUMNS.get(column)
    if getter is not None:
        return getter(artifact)
    value = artifact.content.custom_fields.get(column.removeprefix(CUSTOM_FIELD_PREFIX))
    if value is None or not value.has_value:
        return None
    return value.value


def sort_key(value: Any) -> tuple[int, Any]:
    """Make values of mixed types comparable: group by type, then by value."""
    if isinstance(value, bool):
        return (0, value)
    if isinstance(value, (int, float)):
        return (1, value)
    if isinstance(value, str):
        return (2, value.casefold())
    if isinstance(value, datetime):
        return (4, value)
    if isinstance(value, date):
        return (3, value)
    if isinstance(value, tuple):
        return (5, tuple(str(v).casefold() for v in value))
    return (6, repr(value))
