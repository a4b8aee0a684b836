"""Column-level field filters."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from casebook.domain.artifacts import Artifact
from casebook.domain.errors import ValidationError

from .columns import column_value, sort_key, validate_column


class FilterOperator(Enum):
    EQUALS = "equals"
    CONTAINS = "contains"
    BETWEEN = "between"
    HAS_VALUE = "has-value"
    NO_VALUE = "no-value"


@dataclass(frozen=True, slots=True)
class FieldFilter:
    """One column filter.

    `value` is used by EQUALS and CONTAINS, `low`/`high` (inclusive) by
    BETWEEN. A BETWEEN filter with ``low > high`` is rejected on construction,
    before any query runs.
    """

    column: str
    operator: FilterOperator
    value: Any = None
    low: Any = None
    high: Any = None

    def __post_init__(self) -> None:
        validate_column(self.column)
        if self.operator is FilterOperator.BETWEEN:
            if self.low is None or self.high is None:
                raise ValidationError(
                    "filter", self.column, "between needs both low and high"
                )
            if sort_key(self.low) > sort_key(self.high):
                raise ValidationError(
                    "filter",
                    self.column,
                    f"low ({self.low!r}) must not exceed high ({self.high!r})",
                )
        elif (
            self.operator in (FilterOperator.EQUALS, FilterOperator.CONTAINS)
            and self.value is None
        ):
            raise ValidationError(
                "filter", self.column, f"{self.operator.value} needs a value"
            )

    def matches(self, artifact: Artifact) -> bool:
        actual = column_value(artifact, self.column)
        match self.operator:
            case FilterOperator.HAS_VALUE:
                return actual is not None
            case FilterOperator.NO_VALUE:
                return actual is None
            case _ if actual is None:
                return False
            case FilterOperator.EQUALS:
                if isinstance(actual, tuple):
                    return self.value in actual
                return actual == self.value
            case FilterOperator.CONTAINS:
                needle = str(self.value).casefold()
                if isinstance(actual, tuple):
                    return any(needle in str(v).casefold() for v in actual)
                return needle in str(actual).casefold()
            case _:
                try:
                    return self.low <= actual <= self.high
                except TypeError:
                    return False


def matches_search(artifact: Artifact, text: str) -> bool:
    """Case-insensitive substring match against the artifact name."""
    needle = text.strip().casefold()
    return not needle or needle in artifact.content.name.casefold()
