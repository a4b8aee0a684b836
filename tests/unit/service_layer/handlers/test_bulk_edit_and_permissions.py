"""Unit tests for bulk edits and permission enforcement."""

import pytest

from casebook.adapters.id_generators import SimpleIdGenerator
from casebook.adapters.permissions import StaticPermissions
from casebook.bootstrap import bootstrap_in_memory
from casebook.domain.artifacts import StepsReplace
from casebook.domain.errors import ErrorKind, PermissionDeniedError
from casebook.domain.value_objects import Step
from casebook.interfaces.permissions import GLOBAL_TARGET, Action
from casebook.interfaces.repositories import ArtifactPatch
from casebook.service_layer import commands
from tests.fixtures.datagen import ACTOR

# pylint: disable=redefined-outer-name


@pytest.fixture
def batch(seed):
    project_id = seed.project()
    root = seed.root(project_id)
    ids = [
        seed.artifact(root, f"Case {i}", steps=(Step("Open Login page"),))
        for i in range(3)
    ]
    return project_id, ids


def _bulk(app, project_id, ids, **kwargs):
    return app.message_bus.handle(
        commands.BulkEditArtifacts(
            actor_id=ACTOR, project_id=project_id, artifact_ids=tuple(ids), **kwargs
        )
    )


def _content(uow, artifact_id):
    with uow:
        return uow.repos.artifacts.get(artifact_id)


def test_bulk_patch_applies_to_every_item(app, uow, batch):
    project_id, ids = batch
    result = _bulk(app, project_id, ids, patch=ArtifactPatch(state_id="ready"))
    assert result.succeeded == tuple(ids)
    assert not result.failed
    assert {o.version for o in result.outcomes} == {2}
    assert {_content(uow, i).content.state_id for i in ids} == {"ready"}


def test_bulk_failures_do_not_stop_the_batch(app, uow, seed, batch):
    project_id, ids = batch
    app.message_bus.handle(commands.DeleteArtifact(actor_id=ACTOR, artifact_id=ids[1]))
    foreign = seed.artifact(seed.root(seed.project("Other")), "Foreign")

    result = _bulk(
        app,
        project_id,
        [ids[0], ids[1], foreign, ids[2]],
        patch=ArtifactPatch(automated=True),
    )

    assert result.succeeded == (ids[0], ids[2])
    kinds = {o.item_id: o.error_kind for o in result.failed}
    assert kinds == {ids[1]: ErrorKind.NOT_FOUND, foreign: ErrorKind.VALIDATION}
    assert _content(uow, foreign).content.automated is False


def test_bulk_tags_and_step_replace(app, uow, seed, batch):
    project_id, ids = batch
    smoke = seed.tag("smoke")
    result = _bulk(
        app,
        project_id,
        ids,
        add_tag_ids=(smoke,),
        steps_replace=StepsReplace("Login", "Sign-in"),
    )
    assert result.succeeded == tuple(ids)
    stored = _content(uow, ids[0])
    assert stored.tags == {smoke}
    assert stored.content.steps[0].action == "Open Sign-in page"

    result = _bulk(app, project_id, ids, remove_tag_ids=(smoke,))
    assert {o.version for o in result.outcomes} == {2}  # tag-only edits
    assert _content(uow, ids[0]).tags == frozenset()


def test_bulk_with_duplicate_ids_edits_once(app, batch):
    project_id, ids = batch
    result = _bulk(app, project_id, [ids[0], ids[0]], patch=ArtifactPatch(estimate=5))
    assert len(result.outcomes) == 1
    assert result.outcomes[0].version == 2


# --- Permissions ---


@pytest.fixture
def locked_app():
    """Only `alice` may create projects, tags and folders; `bob` may do nothing."""
    grants = [
        ("alice", Action.PROJECT_CREATE, GLOBAL_TARGET),
        ("alice", Action.TAG_CREATE, GLOBAL_TARGET),
        ("alice", Action.FOLDER_CREATE, "*"),
    ]
    return bootstrap_in_memory(
        id_generator=SimpleIdGenerator(length=4),
        permissions=StaticPermissions(grants),
    )


def test_denied_actions_raise_and_change_nothing(locked_app):
    bus = locked_app.message_bus
    with pytest.raises(PermissionDeniedError) as excinfo:
        bus.handle(commands.CreateProject(actor_id="bob", name="Payments"))
    assert excinfo.value.action == Action.PROJECT_CREATE.value
    assert locked_app.queries.projects.list_all() == []

    project_id = bus.handle(commands.CreateProject(actor_id="alice", name="Payments"))
    bus.handle(
        commands.CreateFolder(actor_id="alice", project_id=project_id, name="Auth")
    )
    with pytest.raises(PermissionDeniedError):
        bus.handle(
            commands.CreateFolder(actor_id="bob", project_id=project_id, name="Other")
        )
    with pytest.raises(PermissionDeniedError):
        bus.handle(commands.CreateTag(actor_id="bob", name="smoke"))


def test_bulk_edit_denial_fails_the_whole_batch(locked_app):
    with pytest.raises(PermissionDeniedError):
        locked_app.message_bus.handle(
            commands.BulkEditArtifacts(
                actor_id="alice", project_id="P", artifact_ids=("A",)
            )
        )
