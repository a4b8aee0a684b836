"""Value objects shared across the domain layer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, TypeAlias

from .errors import ValidationError

#: Opaque rich-content value (plain text or a JSON-compatible document tree).
#: The store only compares documents for equality.
Document: TypeAlias = Any


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


# ============================================================================
#                               Custom fields
# ============================================================================


class FieldKind(Enum):
    """Variants of user-defined custom field values."""

    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    DROPDOWN = "dropdown"
    MULTI_SELECT = "multi_select"
    CHECKBOX = "checkbox"
    LINK = "link"


_STRING_KINDS = {FieldKind.TEXT, FieldKind.DROPDOWN, FieldKind.LINK}


@dataclass(frozen=True, slots=True)
class FieldValue:
    """A tagged custom field value.

    Conventions:
      - TEXT, LINK: `str` (LINK holds the URL; only its presence matters to views).
      - NUMBER: `int` or `float`.
      - DATE: `datetime.date`.
      - DROPDOWN: the selected option id (`str`).
      - MULTI_SELECT: tuple of option ids (lists are converted).
      - CHECKBOX: `bool`.
    """

    kind: FieldKind
    value: Any

    def __post_init__(self) -> None:
        kind, value = self.kind, self.value
        if kind in _STRING_KINDS:
            ok = isinstance(value, str)
        elif kind is FieldKind.NUMBER:
            ok = isinstance(value, (int, float)) and not isinstance(value, bool)
        elif kind is FieldKind.DATE:
            ok = isinstance(value, date)
        elif kind is FieldKind.CHECKBOX:
            ok = isinstance(value, bool)
        else:
            if isinstance(value, list):
                value = tuple(value)
                object.__setattr__(self, "value", value)
            ok = isinstance(value, tuple) and all(isinstance(v, str) for v in value)
        if not ok:
            raise ValidationError(
                "field_value", kind.value, f"unexpected value {value!r}"
            )

    @property
    def has_value(self) -> bool:
        """True unless the value is an empty string or an empty selection."""
        if self.kind in _STRING_KINDS:
            return bool(self.value.strip())
        if self.kind is FieldKind.MULTI_SELECT:
            return bool(self.value)
        return True

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible representation."""
        value = self.value
        if self.kind is FieldKind.DATE:
            value = value.isoformat()
        elif self.kind is FieldKind.MULTI_SELECT:
            value = list(value)
        return {"kind": self.kind.value, "value": value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FieldValue:
        """Rebuild a value from `to_dict` output."""
        kind = FieldKind(data["kind"])
        value = data["value"]
        if kind is FieldKind.DATE and isinstance(value, str):
            value = date.fromisoformat(value)
        return cls(kind=kind, value=value)


# ============================================================================
#                               Issue references
# ============================================================================


@dataclass(frozen=True, slots=True, order=True)
class IssueRef:
    """Reference to an issue held by an external tracker."""

    tracker_kind: str
    external_id: str

    def __post_init__(self) -> None:
        if not self.tracker_kind.strip() or not self.external_id.strip():
            raise ValidationError(
                "issue", f"{self.tracker_kind}:{self.external_id}", "empty reference"
            )

    @property
    def key(self) -> str:
        """Bucket/display key, e.g. ``"jira:CB-12"``."""
        return f"{self.tracker_kind}:{self.external_id}"


@dataclass(frozen=True, slots=True)
class IssueLink:
    """An issue reference attached to an artifact and whether it resolves."""

    ref: IssueRef
    resolves: bool = True


# ============================================================================
#                               Steps
# ============================================================================


@dataclass(frozen=True, slots=True)
class Step:
    """One ordered entry of an artifact's step list.

    A step with `shared_group_id` set is a placeholder that expands to the
    steps of that shared step group on read.
    """

    action: Document = None
    expected_result: Document = None
    step_id: str | None = None
    shared_group_id: str | None = None

    def same_content(self, other: Step) -> bool:
        """Compare everything except the step id."""
        return (
            self.action == other.action
            and self.expected_result == other.expected_result
            and self.shared_group_id == other.shared_group_id
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible representation."""
        return {
            "step_id": self.step_id,
            "action": self.action,
            "expected_result": self.expected_result,
            "shared_group_id": self.shared_group_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Step:
        """Rebuild a step from `to_dict` output."""
        return cls(
            action=data.get("action"),
            expected_result=data.get("expected_result"),
            step_id=data.get("step_id"),
            shared_group_id=data.get("shared_group_id"),
        )
