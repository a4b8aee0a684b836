"""Integration tests for bootstrapping the application over SQLite."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from casebook.adapters.id_generators import SimpleIdGenerator
from casebook.bootstrap import bootstrap
from casebook.domain.errors import ConcurrentModificationError
from casebook.interfaces.repositories import ArtifactPatch
from casebook.service_layer import commands
from casebook.service_layer.views import ALL, Dimension, DimensionKind

# mypy: disable-error-code=no-untyped-def

ACTOR = "tester"


def test_bootstrap_uses_environment_url(monkeypatch, sqlite_url):
    monkeypatch.setenv("CASEBOOK_DB_URL", sqlite_url)
    app = bootstrap()
    assert str(app.message_bus.uow.engine.url) == sqlite_url
    assert app.queries.projects.list_all() == []


def test_state_survives_a_fresh_bootstrap(sqlite_url):
    first = bootstrap(sqlite_url, id_generator=SimpleIdGenerator(length=4))
    bus = first.message_bus
    project_id = bus.handle(commands.CreateProject(ACTOR, "Payments"))
    folder_id = bus.handle(commands.CreateFolder(ACTOR, project_id, "Auth"))
    artifact_id = bus.handle(
        commands.CreateArtifact(ACTOR, folder_id, "Login", template_id="tpl")
    )
    version = bus.handle(
        commands.UpdateArtifact(ACTOR, artifact_id, ArtifactPatch(name="Log in"))
    )
    assert version == 2

    second = bootstrap(sqlite_url)
    tree = second.queries.folders.tree(project_id)
    assert [child.folder.name for child in tree.children] == ["Auth"]
    history = second.queries.history.list_versions(artifact_id)
    assert [v.content.name for v in history] == ["Login", "Log in"]


def test_stale_expected_version_is_reported(sqlite_url):
    bus = bootstrap(sqlite_url).message_bus
    project_id = bus.handle(commands.CreateProject(ACTOR, "Payments"))
    root = bootstrap(sqlite_url).queries.projects.get(project_id).root_folder_id
    artifact_id = bus.handle(
        commands.CreateArtifact(ACTOR, root, "Login", template_id="tpl")
    )
    bus.handle(
        commands.UpdateArtifact(
            ACTOR, artifact_id, ArtifactPatch(name="Mine"), expected_version=1
        )
    )

    with pytest.raises(ConcurrentModificationError) as excinfo:
        bus.handle(
            commands.UpdateArtifact(
                ACTOR, artifact_id, ArtifactPatch(name="Theirs"), expected_version=1
            )
        )
    assert excinfo.value.head == 2


def test_views_over_sql(sqlite_url):
    app = bootstrap(sqlite_url)
    bus = app.message_bus
    project_id = bus.handle(commands.CreateProject(ACTOR, "Payments"))
    root = app.queries.projects.get(project_id).root_folder_id
    smoke = bus.handle(commands.CreateTag(ACTOR, "smoke"))
    for name in ("Login", "Logout", "Signup"):
        artifact_id = bus.handle(
            commands.CreateArtifact(ACTOR, root, name, template_id="tpl")
        )
        if name.startswith("Log"):
            bus.handle(commands.AttachTag(ACTOR, artifact_id, smoke))

    state = app.views.initial_state(Dimension(DimensionKind.TAG))
    result = app.views.query(project_id, state)
    counts = {bucket.key: bucket.count for bucket in result.buckets}
    assert counts[ALL] == 3
    assert counts[smoke] == 2

    picked = app.views.query(project_id, state.click_bucket(smoke))
    assert [a.content.name for a in picked.page.items] == ["Login", "Logout"]


def test_concurrent_commands_share_one_app(sqlite_url):
    app = bootstrap(sqlite_url)
    bus = app.message_bus
    project_id = bus.handle(commands.CreateProject(ACTOR, "Payments"))
    root = app.queries.projects.get(project_id).root_folder_id
    artifact_ids = [
        bus.handle(commands.CreateArtifact(ACTOR, root, f"Case {i}", template_id="t"))
        for i in range(8)
    ]

    def edit(artifact_id: str) -> int:
        version = 1
        for i in range(15):
            version = bus.handle(
                commands.UpdateArtifact(
                    ACTOR,
                    artifact_id,
                    ArtifactPatch(name=f"Edit {i}"),
                    expected_version=version,
                )
            )
        return version

    with ThreadPoolExecutor(max_workers=8) as pool:
        heads = list(pool.map(edit, artifact_ids))

    assert heads == [16] * 8
    for artifact_id in artifact_ids:
        versions = app.queries.history.list_versions(artifact_id)
        assert [v.number for v in versions] == list(range(1, 17))
