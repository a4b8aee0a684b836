"""Create casebook schema

Revision ID: c4a1e7d2b9f0
Revises:
Create Date: 2026-10-19

"""

# pylint: disable=invalid-name

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from casebook.adapters.db.sa_types import BIGINT_PK, PORTABLE_JSON, UTCDateTime

# deal with alembic stuff
# pylint: disable=no-member

# revision identifiers, used by Alembic.
revision: str = "c4a1e7d2b9f0"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ID_LENGTH = 36


def _id(name: str, **kwargs) -> sa.Column:
    return sa.Column(name, sa.String(length=ID_LENGTH), **kwargs)


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    dialect = bind.dialect.name

    op.create_table(
        "projects",
        _id("project_id", nullable=False, comment="Project id."),
        sa.Column("name", sa.String(length=255), nullable=False),
        _id(
            "root_folder_id",
            nullable=False,
            comment="Root folder id (no FK: created in the same transaction).",
        ),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("project_id", name=op.f("pk_projects")),
        comment="Top-level tenant scope.",
    )

    op.create_table(
        "folders",
        _id("folder_id", nullable=False),
        _id("project_id", nullable=False),
        _id("parent_id", nullable=True, comment="NULL only for the project's root folder."),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("sort_order", sa.Float(), nullable=False, comment="Sibling order key."),
        sa.Column("documentation", PORTABLE_JSON, nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("deleted_at", UTCDateTime(), nullable=True),
        sa.ForeignKeyConstraint(
            ["project_id"],
            ["projects.project_id"],
            name=op.f("fk_folders_project_id_projects"),
        ),
        sa.ForeignKeyConstraint(
            ["parent_id"],
            ["folders.folder_id"],
            name=op.f("fk_folders_parent_id_folders"),
        ),
        sa.PrimaryKeyConstraint("folder_id", name=op.f("pk_folders")),
        comment="Folder tree nodes (flat, parent references).",
    )
    op.create_index(
        op.f("ix_folders_folders_project_id_folders_parent_id"),
        "folders",
        ["project_id", "parent_id"],
        unique=False,
    )

    op.create_table(
        "artifacts",
        _id("artifact_id", nullable=False),
        _id("project_id", nullable=False),
        _id("folder_id", nullable=False),
        sa.Column("creator_id", sa.String(length=64), nullable=False),
        sa.Column("sort_order", sa.Float(), nullable=False),
        sa.Column(
            "current_version",
            sa.Integer(),
            nullable=False,
            comment="Head version number; advanced only by a conditional UPDATE.",
        ),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("deleted_at", UTCDateTime(), nullable=True),
        sa.CheckConstraint(
            "current_version >= 1",
            name=op.f("ck_artifacts_positive_current_version"),
        ),
        sa.ForeignKeyConstraint(
            ["project_id"],
            ["projects.project_id"],
            name=op.f("fk_artifacts_project_id_projects"),
        ),
        sa.ForeignKeyConstraint(
            ["folder_id"],
            ["folders.folder_id"],
            name=op.f("fk_artifacts_folder_id_folders"),
        ),
        sa.PrimaryKeyConstraint("artifact_id", name=op.f("pk_artifacts")),
        comment="Test artifacts; versioned content lives in artifact_versions.",
    )
    op.create_index(
        op.f("ix_artifacts_artifacts_project_id"),
        "artifacts",
        ["project_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_artifacts_artifacts_folder_id"),
        "artifacts",
        ["folder_id"],
        unique=False,
    )

    op.create_table(
        "artifact_versions",
        sa.Column(
            "id", BIGINT_PK, sa.Identity(always=False, start=1), nullable=False
        ),
        _id("artifact_id", nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column(
            "content", PORTABLE_JSON, nullable=False, comment="ArtifactContent JSON."
        ),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("created_by", sa.String(length=64), nullable=False),
        sa.CheckConstraint(
            "version >= 1", name=op.f("ck_artifact_versions_positive_version")
        ),
        sa.ForeignKeyConstraint(
            ["artifact_id"],
            ["artifacts.artifact_id"],
            name=op.f("fk_artifact_versions_artifact_id_artifacts"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_artifact_versions")),
        sa.UniqueConstraint(
            "artifact_id",
            "version",
            name=op.f("uq_artifact_versions_artifact_id_version"),
        ),
        comment="Append-only version snapshots.",
    )

    op.create_table(
        "tags",
        _id("tag_id", nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("deleted_at", UTCDateTime(), nullable=True),
        sa.PrimaryKeyConstraint("tag_id", name=op.f("pk_tags")),
        comment="Global labels; soft-deleted rows are restored by name.",
    )
    op.create_index(op.f("ix_tags_tags_name"), "tags", ["name"], unique=False)

    op.create_table(
        "artifact_tags",
        _id("artifact_id", nullable=False),
        _id("tag_id", nullable=False),
        sa.ForeignKeyConstraint(
            ["artifact_id"],
            ["artifacts.artifact_id"],
            name=op.f("fk_artifact_tags_artifact_id_artifacts"),
        ),
        sa.ForeignKeyConstraint(
            ["tag_id"], ["tags.tag_id"], name=op.f("fk_artifact_tags_tag_id_tags")
        ),
        sa.PrimaryKeyConstraint("artifact_id", "tag_id", name=op.f("pk_artifact_tags")),
    )
    op.create_index(
        op.f("ix_artifact_tags_artifact_tags_tag_id"),
        "artifact_tags",
        ["tag_id"],
        unique=False,
    )

    op.create_table(
        "artifact_issues",
        _id("artifact_id", nullable=False),
        sa.Column("tracker_kind", sa.String(length=64), nullable=False),
        sa.Column("external_id", sa.String(length=255), nullable=False),
        sa.Column("resolves", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(
            ["artifact_id"],
            ["artifacts.artifact_id"],
            name=op.f("fk_artifact_issues_artifact_id_artifacts"),
        ),
        sa.PrimaryKeyConstraint(
            "artifact_id",
            "tracker_kind",
            "external_id",
            name=op.f("pk_artifact_issues"),
        ),
    )

    op.create_table(
        "shared_step_groups",
        _id("group_id", nullable=False),
        _id("project_id", nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("steps", PORTABLE_JSON, nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("deleted_at", UTCDateTime(), nullable=True),
        sa.ForeignKeyConstraint(
            ["project_id"],
            ["projects.project_id"],
            name=op.f("fk_shared_step_groups_project_id_projects"),
        ),
        sa.PrimaryKeyConstraint("group_id", name=op.f("pk_shared_step_groups")),
    )
    op.create_index(
        op.f("ix_shared_step_groups_shared_step_groups_project_id"),
        "shared_step_groups",
        ["project_id"],
        unique=False,
    )

    # ---- APPEND-ONLY VERSION HISTORY ----
    if dialect == "postgresql":  # pylint: disable=magic-value-comparison
        op.execute(
            """
            CREATE OR REPLACE FUNCTION artifact_versions_forbid_mod() RETURNS trigger
            LANGUAGE plpgsql AS $$
            BEGIN
              RAISE EXCEPTION 'artifact_versions is append-only; % not allowed', TG_OP
              USING ERRCODE = '0A000'; -- feature_not_supported
            END;
            $$;
            """
        )
        op.execute(
            """
            CREATE TRIGGER tr_artifact_versions_append_only
            BEFORE UPDATE OR DELETE ON artifact_versions
            FOR EACH ROW
            EXECUTE FUNCTION artifact_versions_forbid_mod();
            """
        )
    else:
        op.execute(
            """
            CREATE TRIGGER tr_artifact_versions_no_update
            BEFORE UPDATE ON artifact_versions
            BEGIN
              SELECT RAISE(ABORT, 'artifact_versions is append-only; UPDATE not allowed');
            END;
            """
        )
        op.execute(
            """
            CREATE TRIGGER tr_artifact_versions_no_delete
            BEFORE DELETE ON artifact_versions
            BEGIN
              SELECT RAISE(ABORT, 'artifact_versions is append-only; DELETE not allowed');
            END;
            """
        )


def downgrade() -> None:
    """Downgrade schema."""
    bind = op.get_bind()
    dialect = bind.dialect.name

    if dialect == "postgresql":  # pylint: disable=magic-value-comparison,R6103
        op.execute(
            "DROP TRIGGER IF EXISTS tr_artifact_versions_append_only ON artifact_versions;"
        )
        op.execute("DROP FUNCTION IF EXISTS artifact_versions_forbid_mod();")
    else:
        op.execute("DROP TRIGGER IF EXISTS tr_artifact_versions_no_delete;")
        op.execute("DROP TRIGGER IF EXISTS tr_artifact_versions_no_update;")

    op.drop_index(
        op.f("ix_shared_step_groups_shared_step_groups_project_id"),
        table_name="shared_step_groups",
    )
    op.drop_table("shared_step_groups")
    op.drop_table("artifact_issues")
    op.drop_index(
        op.f("ix_artifact_tags_artifact_tags_tag_id"), table_name="artifact_tags"
    )
    op.drop_table("artifact_tags")
    op.drop_index(op.f("ix_tags_tags_name"), table_name="tags")
    op.drop_table("tags")
    op.drop_table("artifact_versions")
    op.drop_index(op.f("ix_artifacts_artifacts_folder_id"), table_name="artifacts")
    op.drop_index(op.f("ix_artifacts_artifacts_project_id"), table_name="artifacts")
    op.drop_table("artifacts")
    op.drop_index(
        op.f("ix_folders_folders_project_id_folders_parent_id"), table_name="folders"
    )
    op.drop_table("folders")
    op.drop_table("projects")
