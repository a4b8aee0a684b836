"""Field-level and step-list diffs between two artifact versions.

The diff is structural only: scalar fields and custom fields are compared by
equality, and the step list is aligned entry by entry. Tags and issue links
are not part of version content and never appear here.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .artifacts import CUSTOM_FIELD_PREFIX, SCALAR_FIELDS, ArtifactContent
from .value_objects import Step

STEPS_FIELD = "steps"


class ChangeKind(Enum):
    """Classification of a single diff record."""

    UNCHANGED = "unchanged"
    CHANGED = "changed"
    ADDED = "added"
    REMOVED = "removed"


@dataclass(frozen=True, slots=True)
class FieldChange:
    """One diff record.

    `position` is only set for step entries: the index in the newer step list,
    or in the older list for removed entries.
    """

    field: str
    kind: ChangeKind
    old_value: Any = None
    new_value: Any = None
    position: int | None = None


def diff_contents(
    old: ArtifactContent, new: ArtifactContent, *, include_unchanged: bool = False
) -> list[FieldChange]:
    """Compare two contents field by field.

    Records come out in a fixed order: scalar fields, custom fields sorted by
    id, then step entries in newer-list order.
    """
    changes: list[FieldChange] = []

    for name in SCALAR_FIELDS:
        old_value, new_value = getattr(old, name), getattr(new, name)
        kind = ChangeKind.UNCHANGED if old_value == new_value else ChangeKind.CHANGED
        changes.append(FieldChange(name, kind, old_value, new_value))

    for field_id in sorted(set(old.custom_fields) | set(new.custom_fields)):
        old_value = old.custom_fields.get(field_id)
        new_value = new.custom_fields.get(field_id)
        if old_value is None:
            kind = ChangeKind.ADDED
        elif new_value is None:
            kind = ChangeKind.REMOVED
        elif old_value == new_value:
            kind = ChangeKind.UNCHANGED
        else:
            kind = ChangeKind.CHANGED
        changes.append(
            FieldChange(CUSTOM_FIELD_PREFIX + field_id, kind, old_value, new_value)
        )

    changes.extend(diff_steps(old.steps, new.steps))

    if include_unchanged:
        return changes
    return [change for change in changes if change.kind is not ChangeKind.UNCHANGED]


def _match_steps(old: Sequence[Step], new: Sequence[Step]) -> list[int | None]:
    """For each new step, the index of its matching old step (or None).

    Steps carrying a `step_id` match the old step with the same id. Steps
    without one match the old step at the same index, provided that old step
    has no id either and is still unmatched.
    """
    old_by_id = {
        step.step_id: i for i, step in enumerate(old) if step.step_id is not None
    }
    taken: set[int] = set()
    matches: list[int | None] = []

    for j, step in enumerate(new):
        match: int | None = None
        if step.step_id is not None:
            match = old_by_id.get(step.step_id)
        elif j < len(old) and old[j].step_id is None:
            match = j
        if match is not None and match in taken:
            match = None
        if match is not None:
            taken.add(match)
        matches.append(match)
    return matches


def diff_steps(old: Sequence[Step], new: Sequence[Step]) -> list[FieldChange]:
    """Align two step lists and classify every entry.

    The result follows the newer list's order. Removed entries are interleaved
    just before the first surviving entry that came after them in the older
    list; any that remain go at the end.
    """
    matches = _match_steps(old, new)
    matched = {i for i in matches if i is not None}
    pending_removed = [i for i in range(len(old)) if i not in matched]

    changes: list[FieldChange] = []

    def flush_removed(before: int | None) -> None:
        while pending_removed and (before is None or pending_removed[0] < before):
            i = pending_removed.pop(0)
            changes.append(
                FieldChange(STEPS_FIELD, ChangeKind.REMOVED, old[i], None, i)
            )

    for j, (step, match) in enumerate(zip(new, matches)):
        if match is None:
            changes.append(FieldChange(STEPS_FIELD, ChangeKind.ADDED, None, step, j))
            continue
        flush_removed(match)
        kind = (
            ChangeKind.UNCHANGED
            if old[match].same_content(step)
            else ChangeKind.CHANGED
        )
        changes.append(FieldChange(STEPS_FIELD, kind, old[match], step, j))

    flush_removed(None)
    return changes
