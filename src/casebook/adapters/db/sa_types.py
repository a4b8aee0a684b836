"""Column types for the Casebook schema.

Version content and step lists are stored as JSON documents (JSONB on
PostgreSQL). The typed columns below convert them to and from the frozen
domain records at the driver boundary, so repositories only ever handle
`ArtifactContent` and `Step` objects.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, BigInteger, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import DateTime, TypeDecorator

from casebook.domain.artifacts import ArtifactContent
from casebook.domain.value_objects import Step

from .engine import DialectName

if TYPE_CHECKING:
    from sqlalchemy.engine.interfaces import Dialect

__all__ = [
    "BIGINT_PK",
    "ID",
    "PORTABLE_JSON",
    "ContentJSON",
    "StepsJSON",
    "UTCDateTime",
]


BIGINT_PK = BigInteger().with_variant(Integer(), "sqlite")

PORTABLE_JSON = JSON(none_as_null=True).with_variant(
    JSONB(none_as_null=True), "postgresql"
)

#: Record ids (ULID is 26 chars, UUIDv4 36).
ID = String(36)


class UTCDateTime(TypeDecorator[datetime]):  # pylint: disable=too-many-ancestors
    """Timezone-aware UTC timestamps (created_at, deleted_at).

    Naive values are taken to be UTC. SQLite has no timezone support, so it
    stores naive UTC and values are re-tagged as UTC on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> Any:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        if dialect.name == DialectName.SQLITE.value:
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: Any, dialect: Dialect) -> datetime | None:
        if not isinstance(value, datetime):
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_literal_param(self, value: datetime | None, dialect: Dialect) -> Any:
        return self.process_bind_param(value, dialect)

    @property
    def python_type(self) -> type[datetime]:
        return datetime


class ContentJSON(TypeDecorator[ArtifactContent]):  # pylint: disable=too-many-ancestors
    """One version's `ArtifactContent` as a JSON document."""

    impl = PORTABLE_JSON
    cache_ok = True

    def process_bind_param(
        self, value: ArtifactContent | None, dialect: Dialect
    ) -> Any:
        return None if value is None else value.to_dict()

    def process_result_value(
        self, value: Any, dialect: Dialect
    ) -> ArtifactContent | None:
        return None if value is None else ArtifactContent.from_dict(value)

    @property
    def python_type(self) -> type[ArtifactContent]:
        return ArtifactContent


class StepsJSON(TypeDecorator[tuple]):  # pylint: disable=too-many-ancestors
    """An ordered tuple of `Step` records as a JSON array."""

    impl = PORTABLE_JSON
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Dialect) -> Any:
        if value is None:
            return None
        return [step.to_dict() for step in value]

    def process_result_value(self, value: Any, dialect: Dialect) -> tuple | None:
        if value is None:
            return None
        return tuple(Step.from_dict(item) for item in value)

    @property
    def python_type(self) -> type[tuple]:
        return tuple
