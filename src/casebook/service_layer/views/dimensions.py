"""View dimensions and bucket membership.

Every artifact belongs to a set of bucket keys for a given dimension. Value
buckets use the raw value (template id, tag id, option id...). Synthetic
buckets use the fixed keys below.
"""

from __future__ import annotations

from collections.abc import Set
from dataclasses import dataclass
from enum import Enum

from casebook.domain.artifacts import Artifact
from casebook.domain.errors import ValidationError
from casebook.domain.value_objects import FieldKind

ALL = "all"
ANY = "any"
NONE = "none"
HAS_VALUE = "has-value"
NO_VALUE = "no-value"
AUTOMATED = "true"
MANUAL = "false"
CHECKED = "checked"
UNCHECKED = "unchecked"

#: Synthetic keys listed right after "All", in this order.
PRESENCE_KEYS = (ANY, HAS_VALUE, NONE, NO_VALUE)


class DimensionKind(Enum):
    """Axes artifacts can be grouped by."""

    FOLDER = "folder"
    TEMPLATE = "template"
    STATE = "state"
    CREATOR = "creator"
    AUTOMATION = "automation"
    TAG = "tag"
    ISSUE = "issue"
    CUSTOM_FIELD = "custom_field"


@dataclass(frozen=True, slots=True)
class Dimension:
    """A dimension; custom fields also name the field id and its value kind."""

    kind: DimensionKind
    field_id: str | None = None
    field_kind: FieldKind | None = None

    def __post_init__(self) -> None:
        is_custom = self.kind is DimensionKind.CUSTOM_FIELD
        if is_custom != (self.field_id is not None and self.field_kind is not None):
            raise ValidationError(
                "dimension",
                self.kind.value,
                "field_id and field_kind are required for custom fields only",
            )

    @classmethod
    def custom_field(cls, field_id: str, field_kind: FieldKind) -> Dimension:
        return cls(DimensionKind.CUSTOM_FIELD, field_id, field_kind)

    @property
    def key(self) -> str:
        if self.kind is DimensionKind.CUSTOM_FIELD:
            return f"custom_fields.{self.field_id}"
        return self.kind.value

    @property
    def is_multi_value(self) -> bool:
        """True if one artifact can sit in several value buckets."""
        if self.kind in (DimensionKind.TAG, DimensionKind.ISSUE):
            return True
        return self.field_kind in (FieldKind.MULTI_SELECT, FieldKind.NUMBER)


def number_key(value: int | float) -> str:
    """Bucket key of a number; ``3`` and ``3.0`` share a bucket."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def memberships(
    dimension: Dimension, artifact: Artifact, active_tags: Set[str]
) -> frozenset[str]:
    """Return every bucket key `artifact` belongs to for `dimension`.

    The folder dimension is handled by the engine (it scopes rather than
    filters) and yields the artifact's folder id here.
    """
    content = artifact.content
    match dimension.kind:
        case DimensionKind.FOLDER:
            return frozenset({artifact.folder_id})
        case DimensionKind.TEMPLATE:
            return frozenset({content.template_id})
        case DimensionKind.STATE:
            return frozenset({content.state_id if content.state_id else NONE})
        case DimensionKind.CREATOR:
            return frozenset({artifact.creator_id})
        case DimensionKind.AUTOMATION:
            return frozenset({AUTOMATED if content.automated else MANUAL})
        case DimensionKind.TAG:
            tags = artifact.tags & active_tags
            return frozenset(tags | {ANY}) if tags else frozenset({NONE})
        case DimensionKind.ISSUE:
            keys = {ref.key for ref in artifact.issue_refs}
            return frozenset(keys | {ANY}) if keys else frozenset({NONE})
        case _:
            return _custom_field_memberships(dimension, artifact)


def _custom_field_memberships(
    dimension: Dimension, artifact: Artifact
) -> frozenset[str]:
    value = artifact.content.custom_fields.get(dimension.field_id or "")
    if value is not None and value.kind is not dimension.field_kind:
        value = None  # stored under another kind; treat as empty

    if dimension.field_kind is FieldKind.CHECKBOX:
        return frozenset({CHECKED if value is not None and value.value else UNCHECKED})
    if value is None or not value.has_value:
        return frozenset({NO_VALUE})

    match dimension.field_kind:
        case FieldKind.DROPDOWN:
            return frozenset({value.value})
        case FieldKind.MULTI_SELECT:
            return frozenset(value.value) | {HAS_VALUE}
        case FieldKind.NUMBER:
            return frozenset({number_key(value.value), HAS_VALUE})
        case _:
            return frozenset({HAS_VALUE})


def has_value(dimension: Dimension, artifact: Artifact, active_tags: Set[str]) -> bool:
    """True if the artifact holds a non-null value for the dimension."""
    match dimension.kind:
        case DimensionKind.FOLDER:
            return True
        case DimensionKind.STATE:
            return artifact.content.state_id is not None
        case DimensionKind.TAG:
            return bool(artifact.tags & active_tags)
        case DimensionKind.ISSUE:
            return bool(artifact.issues)
        case DimensionKind.CUSTOM_FIELD:
            value = artifact.content.custom_fields.get(dimension.field_id or "")
            return (
                value is not None
                and value.kind is dimension.field_kind
                and (value.kind is FieldKind.CHECKBOX or value.has_value)
            )
        case _:
            return True
