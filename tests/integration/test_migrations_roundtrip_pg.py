"""Alembic round-trip smoke test for PostgreSQL.

Validates that the migrations can *upgrade to head* and *downgrade to base*
cleanly on a real PostgreSQL 17 instance provisioned by Testcontainers:

  1) runs `alembic upgrade head`,
  2) asserts the tables exist and accept typed inserts (JSONB adapts),
  3) runs `alembic downgrade base`,
  4) asserts the tables and the append-only trigger function are gone.
"""

from datetime import datetime, timezone

from alembic import command
from sqlalchemy import create_engine, insert, text

from casebook import config
from casebook.adapters.db.schema import artifact_versions, artifacts, folders, projects
from casebook.domain.artifacts import ArtifactContent

# mypy: disable-error-code=no-untyped-def

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _table_exists(conn, name: str) -> bool:
    return conn.execute(
        text("SELECT to_regclass(:name) IS NOT NULL"), {"name": f"public.{name}"}
    ).scalar()


def test_alembic_downgrade_upgrade_roundtrip_postgres(pg_url_base: str):
    """Upgrade → assert → Downgrade → assert on a fresh Postgres database."""
    command.upgrade(config.build_alembic_config(pg_url_base), "head")
    eng = create_engine(pg_url_base, pool_pre_ping=True)

    with eng.begin() as c:
        assert _table_exists(c, "artifact_versions")
        # Use typed inserts so JSON/JSONB adapts correctly
        c.execute(insert(projects).values(
            project_id="P1", name="Payments", root_folder_id="F1", created_at=NOW
        ))
        c.execute(insert(folders).values(
            folder_id="F1",
            project_id="P1",
            parent_id=None,
            name="Payments",
            sort_order=1.0,
            created_at=NOW,
        ))
        c.execute(insert(artifacts).values(
            artifact_id="A1",
            project_id="P1",
            folder_id="F1",
            creator_id="tester",
            sort_order=1.0,
            current_version=1,
            created_at=NOW,
        ))
        c.execute(insert(artifact_versions).values(
            artifact_id="A1",
            version=1,
            content=ArtifactContent(name="Login", template_id="tpl"),
            created_at=NOW,
            created_by="tester",
        ))

    command.downgrade(config.build_alembic_config(pg_url_base), "base")
    with eng.begin() as c:
        assert not _table_exists(c, "artifact_versions")
        assert not _table_exists(c, "projects")
        function = c.execute(
            text("SELECT to_regproc('artifact_versions_forbid_mod') IS NOT NULL")
        ).scalar()
        assert not function

    eng.dispose()
