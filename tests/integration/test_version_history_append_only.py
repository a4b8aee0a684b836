"""Integration tests for the append-only `artifact_versions` table.

The migrations install database triggers that reject UPDATE and DELETE on
version rows. Runs on Postgres and a migrated SQLite file.
"""

from __future__ import annotations

import pytest
from sqlalchemy import delete, exc, func, select, update

from casebook.adapters.db.schema import artifact_versions
from casebook.adapters.id_generators import SimpleIdGenerator
from casebook.adapters.permissions import AllowAllPermissions
from casebook.adapters.unit_of_work import SqlAlchemyUnitOfWork
from casebook.bootstrap.bootstrap import build_message_bus
from casebook.interfaces.repositories import ArtifactPatch
from casebook.service_layer import commands
from casebook.service_layer.handlers import COMMAND_HANDLERS

# pylint: disable=redefined-outer-name

ENGINES = ["postgres_engine", "sqlite_engine_file"]


@pytest.fixture
def versioned(engine):
    """An artifact with two versions written through the message bus."""
    bus = build_message_bus(
        SqlAlchemyUnitOfWork(engine),
        COMMAND_HANDLERS,
        id_generator=SimpleIdGenerator(length=4),
        permissions=AllowAllPermissions(),
    )
    project_id = bus.handle(commands.CreateProject("tester", "Payments"))
    with bus.uow:
        root = bus.uow.repos.projects.get(project_id).root_folder_id
    artifact_id = bus.handle(
        commands.CreateArtifact("tester", root, "Login", template_id="tpl")
    )
    bus.handle(
        commands.UpdateArtifact(
            "tester", artifact_id, ArtifactPatch(name="Log in"), expected_version=1
        )
    )
    return artifact_id


@pytest.mark.parametrize("engine", ENGINES, indirect=True)
def test_versions_cannot_be_updated(engine, versioned):
    with pytest.raises(exc.DBAPIError):
        with engine.begin() as conn:
            conn.execute(
                update(artifact_versions)
                .where(artifact_versions.c.artifact_id == versioned)
                .values(created_by="mallory")
            )


@pytest.mark.parametrize("engine", ENGINES, indirect=True)
def test_versions_cannot_be_deleted(engine, versioned):
    with pytest.raises(exc.DBAPIError):
        with engine.begin() as conn:
            conn.execute(
                delete(artifact_versions).where(
                    artifact_versions.c.artifact_id == versioned
                )
            )


@pytest.mark.parametrize("engine", ENGINES, indirect=True)
def test_rejected_writes_leave_history_intact(engine, versioned):
    with pytest.raises(exc.DBAPIError):
        with engine.begin() as conn:
            conn.execute(delete(artifact_versions))

    with engine.connect() as conn:
        count = conn.execute(
            select(func.count()).where(artifact_versions.c.artifact_id == versioned)
        ).scalar_one()
    assert count == 2
