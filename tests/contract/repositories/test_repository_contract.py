"""Contract tests for the repository ports.

Every backend must satisfy the same behavior:
- records round-trip unchanged (timestamps as tz-aware UTC)
- listings are ordered and skip soft-deleted rows
- version chains are append-only and guarded by an expected head version
- tag and issue links are replaced as a set on save
- uncommitted work is discarded when the unit of work exits
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from casebook.domain.artifacts import Version
from casebook.domain.errors import ConcurrentModificationError
from casebook.domain.shared_steps import SharedStepGroup
from casebook.domain.value_objects import IssueLink, IssueRef, Step

# pylint: disable=redefined-outer-name

LATER = datetime(2030, 1, 1, tzinfo=timezone.utc)


def _read(store, fn):
    with store:
        return fn(store.repos)


# --- Projects and folders ---


def test_project_round_trip(store, stored):
    project, root = stored.project("Payments")
    got = _read(store, lambda r: r.projects.get(project.project_id))
    assert got == project
    assert got.created_at.tzinfo is not None
    assert _read(store, lambda r: r.folders.get(root.folder_id)) == root


def test_projects_are_listed_by_name(store, stored):
    stored.project("Shop")
    stored.project("Auth")
    names = [p.name for p in _read(store, lambda r: r.projects.list_all())]
    assert names == ["Auth", "Shop"]


def test_unknown_ids_return_none(store):
    with store:
        assert store.repos.projects.get("nope") is None
        assert store.repos.folders.get("nope") is None
        assert store.repos.artifacts.get("nope") is None
        assert store.repos.tags.get("nope") is None
        assert store.repos.shared_steps.get("nope") is None


def test_children_are_ordered_and_exclude_deleted(store, stored):
    project, root = stored.project()
    b = stored.folder(project, root, "B", order=2.0)
    a = stored.folder(project, root, "A", order=1.0)
    gone = stored.folder(project, root, "Gone", order=3.0)
    with store:
        store.repos.folders.save(replace(gone, deleted_at=LATER))
        store.commit()

    children = _read(store, lambda r: r.folders.list_children(root.folder_id))
    assert children == [a, b]
    everything = _read(store, lambda r: r.folders.list_project(project.project_id))
    expected = {root.folder_id, a.folder_id, b.folder_id}
    assert {f.folder_id for f in everything} == expected
    # soft-deleted rows are still readable by id
    assert _read(store, lambda r: r.folders.get(gone.folder_id)).deleted_at == LATER


def test_folder_save_persists_moves_and_documentation(store, stored):
    project, root = stored.project()
    parent = stored.folder(project, root, "Parent")
    child = stored.folder(project, root, "Child", order=2.0)
    moved = replace(
        child, parent_id=parent.folder_id, order=0.5, name="Kid", documentation="# Doc"
    )
    with store:
        store.repos.folders.save(moved)
        store.commit()
    assert _read(store, lambda r: r.folders.get(child.folder_id)) == moved


# --- Artifacts and versions ---


def test_artifact_round_trip(store, stored):
    project, root = stored.project()
    smoke = stored.tag("smoke")
    artifact, v1 = stored.artifact(
        project,
        root,
        tags=frozenset({smoke.tag_id}),
        steps=(Step("open", "shown", step_id="s1"),),
    )
    with store:
        got = store.repos.artifacts.get(artifact.artifact_id)
        versions = store.repos.artifacts.list_versions(artifact.artifact_id)
    assert got == artifact
    assert versions == [v1]


def _next(version: Version, **content) -> Version:
    return replace(
        version,
        number=version.number + 1,
        content=replace(version.content, **content),
    )


def test_append_version_advances_head(store, stored):
    project, root = stored.project()
    artifact, v1 = stored.artifact(project, root)
    v2 = _next(v1, name="Renamed")
    with store:
        store.repos.artifacts.append_version(v2, expected_version=1)
        store.commit()

    with store:
        head = store.repos.artifacts.get(artifact.artifact_id)
        assert (head.current_version, head.content.name) == (2, "Renamed")
        assert store.repos.artifacts.get_version(artifact.artifact_id, 1) == v1
        assert store.repos.artifacts.get_version(artifact.artifact_id, 2) == v2
        assert store.repos.artifacts.get_version(artifact.artifact_id, 3) is None


@pytest.mark.parametrize("stale_number", [2, 3])
def test_stale_expected_version_is_rejected(store, stored, stale_number):
    project, root = stored.project()
    artifact, v1 = stored.artifact(project, root)
    v2 = _next(v1, name="Second")
    with store:
        store.repos.artifacts.append_version(v2, expected_version=1)
        store.commit()

    late = replace(_next(v1, name="Late"), number=stale_number)
    with pytest.raises(ConcurrentModificationError) as excinfo:
        with store:
            store.repos.artifacts.append_version(late, expected_version=1)
    assert excinfo.value.head == 2

    names = [
        v.content.name
        for v in _read(
            store, lambda r: r.artifacts.list_versions(artifact.artifact_id)
        )
    ]
    assert names == ["Login works", "Second"]


def test_save_keeps_content_and_replaces_links(store, stored):
    project, root = stored.project()
    other = stored.folder(project, root, "Other")
    smoke, ui = stored.tag("smoke"), stored.tag("ui")
    artifact, _ = stored.artifact(project, root, tags=frozenset({smoke.tag_id}))

    link = IssueLink(IssueRef("jira", "CB-1"), resolves=False)
    edited = replace(
        artifact,
        folder_id=other.folder_id,
        order=4.0,
        tags=frozenset({ui.tag_id}),
        issues=(link,),
        content=replace(artifact.content, name="Ignored by save"),
    )
    with store:
        store.repos.artifacts.save(edited)
        store.commit()

    got = _read(store, lambda r: r.artifacts.get(artifact.artifact_id))
    assert got.folder_id == other.folder_id
    assert got.order == 4.0
    assert got.tags == {ui.tag_id}
    assert got.issues == (link,)
    assert got.content == artifact.content
    assert got.current_version == 1


def test_active_listings_skip_deleted(store, stored):
    project, root = stored.project()
    folder = stored.folder(project, root, "Auth")
    smoke = stored.tag("smoke")
    tagged = frozenset({smoke.tag_id})
    second, _ = stored.artifact(project, root, order=2.0, tags=tagged)
    first, _ = stored.artifact(project, root, order=1.0, tags=tagged)
    nested, _ = stored.artifact(project, folder, order=1.5)
    deleted, _ = stored.artifact(project, folder, order=2.0, tags=tagged)
    with store:
        store.repos.artifacts.save(replace(deleted, deleted_at=LATER))
        store.commit()

    with store:
        repo = store.repos.artifacts
        active = [a.artifact_id for a in repo.list_active(project.project_id)]
        in_folder = repo.list_active_in_folders([folder.folder_id])
        assert repo.list_active_in_folders([]) == []
        assert repo.count_with_tag(smoke.tag_id) == 2
    assert active == [first.artifact_id, nested.artifact_id, second.artifact_id]
    assert [a.artifact_id for a in in_folder] == [nested.artifact_id]


# --- Tags ---


def test_tag_lookup_is_case_insensitive(store, stored):
    smoke = stored.tag("Smoke")
    with store:
        assert store.repos.tags.find_active_by_name(" SMOKE ") == smoke
        assert store.repos.tags.find_deleted_by_name("smoke") is None


def test_deleted_tags_are_found_separately(store, stored):
    old = stored.tag("nightly")
    with store:
        store.repos.tags.save(replace(old, deleted_at=LATER))
        store.commit()
    stored.tag("alpha")

    with store:
        assert store.repos.tags.find_active_by_name("nightly") is None
        assert store.repos.tags.find_deleted_by_name("NIGHTLY").tag_id == old.tag_id
        assert [t.name for t in store.repos.tags.list_active()] == ["alpha"]


def test_tags_are_listed_case_insensitively(store, stored):
    for name in ("beta", "Alpha", "gamma"):
        stored.tag(name)
    names = [t.name for t in _read(store, lambda r: r.tags.list_active())]
    assert names == ["Alpha", "beta", "gamma"]


# --- Shared step groups ---


def test_shared_step_groups(store, stored):
    project, _ = stored.project()
    login = SharedStepGroup(
        "g1", project.project_id, "Login", (Step("open"), Step("submit")), LATER
    )
    admin = SharedStepGroup("g2", project.project_id, "Admin", (Step("sudo"),), LATER)
    with store:
        store.repos.shared_steps.add(login)
        store.repos.shared_steps.add(admin)
        store.commit()

    assert _read(store, lambda r: r.shared_steps.get("g1")) == login
    groups = _read(store, lambda r: r.shared_steps.list_active(project.project_id))
    names = [g.name for g in groups]
    assert names == ["Admin", "Login"]

    with store:
        store.repos.shared_steps.save(replace(admin, deleted_at=LATER))
        store.repos.shared_steps.save(replace(login, steps=(Step("sso"),)))
        store.commit()
    with store:
        remaining = store.repos.shared_steps.list_active(project.project_id)
    assert [(g.name, g.steps) for g in remaining] == [("Login", (Step("sso"),))]


# --- Transactions ---


def test_uncommitted_work_is_discarded(store, stored, make_records):
    project, root = stored.project()
    artifact, v1 = make_records.artifact(project, root)
    with store:
        store.repos.artifacts.add(artifact, v1)

    assert _read(store, lambda r: r.artifacts.get(artifact.artifact_id)) is None
