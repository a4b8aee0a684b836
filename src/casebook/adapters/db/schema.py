"""Casebook relational schema.

One table per record type plus link tables for tags and issues. Version
content is stored as a JSON document per row of `artifact_versions`; the
artifact row only records which version is the head.

Constraints (enforced here):

| Constraint                          | Purpose                                |
|-------------------------------------|----------------------------------------|
| UNIQUE(artifact_id, version)        | one row per version number             |
| CHECK(version >= 1)                 | versioning starts at 1                 |
| CHECK(current_version >= 1)         | every artifact has at least version 1  |
| PK(artifact_id, tag_id)             | attaching a tag twice is a no-op       |
| PK(artifact_id, tracker, external)  | linking an issue twice is a no-op      |

Sibling-name and active-tag-name uniqueness are case-insensitive and scoped
to non-deleted rows; they are enforced by the service layer.
"""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Identity,
    Index,
    Integer,
    String,
    Table,
    UniqueConstraint,
)

from .metadata import metadata
from .sa_types import (
    BIGINT_PK,
    ID,
    PORTABLE_JSON,
    ContentJSON,
    StepsJSON,
    UTCDateTime,
)

__all__ = [
    "artifact_issues",
    "artifact_tags",
    "artifact_versions",
    "artifacts",
    "folders",
    "projects",
    "shared_step_groups",
    "tags",
]

projects = Table(
    "projects",
    metadata,
    Column("project_id", ID, primary_key=True, comment="Project id."),
    Column("name", String(255), nullable=False),
    Column(
        "root_folder_id",
        ID,
        nullable=False,
        comment="Root folder id (no FK: created in the same transaction).",
    ),
    Column("created_at", UTCDateTime(), nullable=False),
    comment="Top-level tenant scope.",
)

folders = Table(
    "folders",
    metadata,
    Column("folder_id", ID, primary_key=True),
    Column("project_id", ID, ForeignKey("projects.project_id"), nullable=False),
    Column(
        "parent_id",
        ID,
        ForeignKey("folders.folder_id"),
        nullable=True,
        comment="NULL only for the project's root folder.",
    ),
    Column("name", String(255), nullable=False),
    Column("sort_order", Float, nullable=False, comment="Sibling order key."),
    Column("documentation", PORTABLE_JSON, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("deleted_at", UTCDateTime(), nullable=True),
    Index(None, "project_id", "parent_id"),
    comment="Folder tree nodes (flat, parent references).",
)

artifacts = Table(
    "artifacts",
    metadata,
    Column("artifact_id", ID, primary_key=True),
    Column("project_id", ID, ForeignKey("projects.project_id"), nullable=False),
    Column("folder_id", ID, ForeignKey("folders.folder_id"), nullable=False),
    Column("creator_id", String(64), nullable=False),
    Column("sort_order", Float, nullable=False),
    Column(
        "current_version",
        Integer,
        nullable=False,
        comment="Head version number; advanced only by a conditional UPDATE.",
    ),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("deleted_at", UTCDateTime(), nullable=True),
    CheckConstraint("current_version >= 1", name="positive_current_version"),
    Index(None, "project_id"),
    Index(None, "folder_id"),
    comment="Test artifacts; versioned content lives in artifact_versions.",
)

artifact_versions = Table(
    "artifact_versions",
    metadata,
    Column("id", BIGINT_PK, Identity(start=1), primary_key=True),
    Column(
        "artifact_id", ID, ForeignKey("artifacts.artifact_id"), nullable=False
    ),
    Column("version", Integer, nullable=False),
    Column("content", ContentJSON(), nullable=False, comment="ArtifactContent JSON."),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("created_by", String(64), nullable=False),
    UniqueConstraint("artifact_id", "version"),
    CheckConstraint("version >= 1", name="positive_version"),
    comment="Append-only version snapshots.",
)

tags = Table(
    "tags",
    metadata,
    Column("tag_id", ID, primary_key=True),
    Column("name", String(255), nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("deleted_at", UTCDateTime(), nullable=True),
    Index(None, "name"),
    comment="Global labels; soft-deleted rows are restored by name.",
)

artifact_tags = Table(
    "artifact_tags",
    metadata,
    Column(
        "artifact_id",
        ID,
        ForeignKey("artifacts.artifact_id"),
        primary_key=True,
    ),
    Column("tag_id", ID, ForeignKey("tags.tag_id"), primary_key=True),
    Index(None, "tag_id"),
)

artifact_issues = Table(
    "artifact_issues",
    metadata,
    Column(
        "artifact_id",
        ID,
        ForeignKey("artifacts.artifact_id"),
        primary_key=True,
    ),
    Column("tracker_kind", String(64), primary_key=True),
    Column("external_id", String(255), primary_key=True),
    Column("resolves", Boolean, nullable=False),
)

shared_step_groups = Table(
    "shared_step_groups",
    metadata,
    Column("group_id", ID, primary_key=True),
    Column("project_id", ID, ForeignKey("projects.project_id"), nullable=False),
    Column("name", String(255), nullable=False),
    Column("steps", StepsJSON(), nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("deleted_at", UTCDateTime(), nullable=True),
    Index(None, "project_id"),
)
