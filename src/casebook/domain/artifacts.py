"""Artifact (test case) records and their versioned content."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from .errors import ValidationError
from .value_objects import FieldValue, IssueLink, IssueRef, Step

# pylint: disable=too-many-instance-attributes

#: Versioned scalar fields, in diff/display order.
SCALAR_FIELDS = ("name", "template_id", "state_id", "automated", "estimate")

CUSTOM_FIELD_PREFIX = "custom_fields."


# --- Versioned content ---


@dataclass(frozen=True, slots=True)
class ArtifactContent:
    """Everything that is snapshotted by a version.

    Tags and issue links are deliberately absent: they are live references
    on the artifact and are overlaid onto any version when displayed.
    """

    name: str
    template_id: str
    state_id: str | None = None
    automated: bool = False
    estimate: int | None = None  # seconds
    steps: tuple[Step, ...] = ()
    custom_fields: Mapping[str, FieldValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        name = self.name.strip()
        if not name:
            raise ValidationError("artifact", self.name, "name must not be empty")
        if not self.template_id:
            raise ValidationError("artifact", name, "template_id must be set")
        if self.estimate is not None and (
            isinstance(self.estimate, bool)
            or not isinstance(self.estimate, int)
            or self.estimate < 0
        ):
            raise ValidationError(
                "artifact", name, "estimate must be a non-negative number of seconds"
            )
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "steps", tuple(self.steps))
        object.__setattr__(self, "custom_fields", dict(self.custom_fields))

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible representation."""
        return {
            "name": self.name,
            "template_id": self.template_id,
            "state_id": self.state_id,
            "automated": self.automated,
            "estimate": self.estimate,
            "steps": [step.to_dict() for step in self.steps],
            "custom_fields": {
                field_id: value.to_dict()
                for field_id, value in sorted(self.custom_fields.items())
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ArtifactContent:
        """Rebuild content from `to_dict` output."""
        return cls(
            name=data["name"],
            template_id=data["template_id"],
            state_id=data.get("state_id"),
            automated=bool(data.get("automated", False)),
            estimate=data.get("estimate"),
            steps=tuple(Step.from_dict(s) for s in data.get("steps") or ()),
            custom_fields={
                field_id: FieldValue.from_dict(value)
                for field_id, value in (data.get("custom_fields") or {}).items()
            },
        )


# --- Records ---


@dataclass(frozen=True, slots=True)
class Version:
    """Immutable snapshot of an artifact's content. Numbers run 1..N."""

    artifact_id: str
    number: int
    content: ArtifactContent
    created_at: datetime
    created_by: str


@dataclass(frozen=True, slots=True)
class Artifact:
    """A test case as it currently stands.

    `content` is the head content, i.e. that of version `current_version`.
    Everything else is non-versioned bookkeeping.
    """

    artifact_id: str
    project_id: str
    folder_id: str
    creator_id: str
    order: float
    current_version: int
    content: ArtifactContent
    created_at: datetime
    tags: frozenset[str] = frozenset()
    issues: tuple[IssueLink, ...] = ()
    deleted_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        """True unless the artifact has been soft-deleted."""
        return self.deleted_at is None

    @property
    def issue_refs(self) -> frozenset[IssueRef]:
        """The linked issue references, without resolution flags."""
        return frozenset(link.ref for link in self.issues)

    def with_issue(self, link: IssueLink) -> Artifact:
        """Return a copy with `link` attached (replacing any link to the same ref)."""
        links = [existing for existing in self.issues if existing.ref != link.ref]
        links.append(link)
        return replace(self, issues=tuple(sorted(links, key=lambda lnk: lnk.ref)))

    def without_issue(self, ref: IssueRef) -> Artifact:
        """Return a copy with any link to `ref` removed."""
        return replace(
            self, issues=tuple(link for link in self.issues if link.ref != ref)
        )


# --- Bulk step search and replace ---


@dataclass(frozen=True, slots=True)
class StepsReplace:
    """Plain-text search and replace over string-valued step documents."""

    search: str
    replace: str
    case_sensitive: bool = True

    def __post_init__(self) -> None:
        if not self.search:
            raise ValidationError("steps_replace", "search", "must not be empty")

    def _sub(self, document: Any) -> Any:
        if not isinstance(document, str):
            return document
        if self.case_sensitive:
            return document.replace(self.search, self.replace)
        pattern = re.compile(re.escape(self.search), re.IGNORECASE)
        return pattern.sub(lambda _: self.replace, document)

    def apply(self, steps: Sequence[Step]) -> tuple[Step, ...]:
        """Return `steps` with every match replaced."""
        return tuple(
            replace(
                step,
                action=self._sub(step.action),
                expected_result=self._sub(step.expected_result),
            )
            for step in steps
        )
