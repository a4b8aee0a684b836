"""Unit tests for artifact handlers: versions, placement, tags and issues."""

import pytest

from casebook.domain.errors import (
    ConcurrentModificationError,
    NotFoundError,
    ValidationError,
)
from casebook.domain.value_objects import (
    FieldKind,
    FieldValue,
    IssueLink,
    IssueRef,
    Step,
)
from casebook.interfaces.repositories import ArtifactPatch
from casebook.service_layer import commands
from tests.fixtures.datagen import ACTOR

# pylint: disable=redefined-outer-name


@pytest.fixture
def folder(seed):
    project_id = seed.project("Payments")
    return seed.folder(project_id, "Auth")


@pytest.fixture
def artifact(seed, folder):
    return seed.artifact(
        folder, "Login", template_id="tpl-1", steps=(Step("open", "shown"),)
    )


def _update(app, artifact_id, expected_version=None, **patch):
    return app.message_bus.handle(
        commands.UpdateArtifact(
            actor_id=ACTOR,
            artifact_id=artifact_id,
            patch=ArtifactPatch(**patch),
            expected_version=expected_version,
        )
    )


def _get(uow, artifact_id):
    with uow:
        return uow.repos.artifacts.get(artifact_id)


# --- Create ---


def test_create_records_version_one(app, uow, artifact, folder):
    stored = _get(uow, artifact)
    assert stored.current_version == 1
    assert stored.folder_id == folder
    assert stored.creator_id == ACTOR
    versions = app.queries.history.list_versions(artifact)
    assert [(v.number, v.created_by) for v in versions] == [(1, ACTOR)]
    assert versions[0].content == stored.content


def test_artifacts_append_within_their_folder(uow, seed, folder, artifact):
    second = seed.artifact(folder, "Logout")
    assert _get(uow, second).order > _get(uow, artifact).order


@pytest.mark.parametrize(
    "kwargs",
    [{"name": "  "}, {"template_id": ""}, {"estimate": -5}],
)
def test_create_rejects_invalid_content(seed, folder, kwargs):
    args = {"name": "Login", "template_id": "tpl-1"} | kwargs
    with pytest.raises(ValidationError):
        seed.artifact(folder, **args)


def test_create_in_unknown_folder_is_not_found(seed):
    with pytest.raises(NotFoundError):
        seed.artifact("missing", "Login")


# --- Update ---


def test_update_appends_a_version(app, uow, artifact):
    assert _update(app, artifact, name="Log in", state_id="ready") == 2
    stored = _get(uow, artifact)
    assert stored.current_version == 2
    assert (stored.content.name, stored.content.state_id) == ("Log in", "ready")
    assert [v.number for v in app.queries.history.list_versions(artifact)] == [1, 2]


def test_update_without_changes_creates_no_version(app, uow, artifact, caplog):
    with caplog.at_level("DEBUG"):
        assert _update(app, artifact, name="Login") == 1
    assert f"UpdateArtifact {artifact}: no changes; noop" in caplog.messages
    assert _get(uow, artifact).current_version == 1


def test_stale_expected_version_is_rejected(app, uow, artifact, caplog):
    _update(app, artifact, name="Log in")
    with pytest.raises(ConcurrentModificationError) as excinfo:
        _update(app, artifact, expected_version=1, name="Sign in")
    assert (excinfo.value.head, excinfo.value.expected) == (2, 1)
    assert _get(uow, artifact).content.name == "Log in"
    # The bus retries once before giving up.
    retries = [r for r in caplog.records if r.levelname == "WARNING"]
    assert len(retries) == 1


def test_matching_expected_version_is_accepted(app, artifact):
    assert _update(app, artifact, expected_version=1, automated=True) == 2


def test_steps_and_custom_fields_are_versioned(app, artifact):
    _update(
        app,
        artifact,
        steps=[Step("open", "shown"), Step("submit", "welcome")],
        custom_fields={"prio": FieldValue(FieldKind.DROPDOWN, "high")},
    )
    v1 = app.queries.history.get_version(artifact, 1).version
    v2 = app.queries.history.get_version(artifact, 2).version
    assert len(v1.content.steps) == 1
    assert len(v2.content.steps) == 2
    assert v2.content.custom_fields["prio"].value == "high"


def test_deleted_artifacts_cannot_be_updated(app, artifact):
    app.message_bus.handle(
        commands.DeleteArtifact(actor_id=ACTOR, artifact_id=artifact)
    )
    with pytest.raises(NotFoundError):
        _update(app, artifact, name="Log in")


# --- Move ---


def test_move_creates_no_version(app, uow, seed, artifact):
    project_id = _get(uow, artifact).project_id
    target = seed.folder(project_id, "Checkout")
    seed.artifact(target, "Pay")
    app.message_bus.handle(
        commands.MoveArtifact(actor_id=ACTOR, artifact_id=artifact, folder_id=target)
    )
    stored = _get(uow, artifact)
    assert stored.folder_id == target
    assert stored.order == 2.0
    assert stored.current_version == 1


def test_move_across_projects_is_rejected(app, seed, artifact):
    other = seed.root(seed.project("Other"))
    with pytest.raises(ValidationError):
        app.message_bus.handle(
            commands.MoveArtifact(actor_id=ACTOR, artifact_id=artifact, folder_id=other)
        )


# --- Tags ---


def test_attach_and_detach_tags(app, uow, seed, artifact):
    smoke = seed.tag("smoke")
    seed.attach(artifact, smoke)
    seed.attach(artifact, smoke)  # idempotent
    stored = _get(uow, artifact)
    assert stored.tags == {smoke}
    assert stored.current_version == 1  # tags are not versioned

    app.message_bus.handle(
        commands.DetachTag(actor_id=ACTOR, artifact_id=artifact, tag_id=smoke)
    )
    app.message_bus.handle(
        commands.DetachTag(actor_id=ACTOR, artifact_id=artifact, tag_id=smoke)
    )
    assert _get(uow, artifact).tags == frozenset()


def test_deleted_tags_cannot_be_attached(app, seed, artifact):
    smoke = seed.tag("smoke")
    app.message_bus.handle(commands.DeleteTag(actor_id=ACTOR, tag_id=smoke))
    with pytest.raises(NotFoundError):
        seed.attach(artifact, smoke)


# --- Issues ---


def test_link_update_and_unlink_issue(app, uow, artifact):
    ref = IssueRef("jira", "CB-7")
    bus = app.message_bus
    bus.handle(commands.LinkIssue(actor_id=ACTOR, artifact_id=artifact, ref=ref))
    bus.handle(
        commands.LinkIssue(
            actor_id=ACTOR, artifact_id=artifact, ref=ref, resolves=False
        )
    )
    stored = _get(uow, artifact)
    assert stored.issues == (IssueLink(ref, resolves=False),)
    assert stored.current_version == 1

    bus.handle(commands.UnlinkIssue(actor_id=ACTOR, artifact_id=artifact, ref=ref))
    bus.handle(commands.UnlinkIssue(actor_id=ACTOR, artifact_id=artifact, ref=ref))
    assert _get(uow, artifact).issues == ()
