"""Fixtures for generating test data."""

import datetime
import itertools
from collections.abc import Callable
from typing import Any

import pytest

from casebook.adapters.id_generators import SimpleIdGenerator
from casebook.adapters.memory import InMemoryUnitOfWork
from casebook.bootstrap import AppContainer, bootstrap_in_memory
from casebook.domain.artifacts import Artifact, ArtifactContent, Version
from casebook.domain.folders import Folder
from casebook.domain.projects import Project
from casebook.domain.tags import Tag
from casebook.service_layer import commands

# pylint: disable=too-many-arguments,redefined-outer-name

ACTOR = "tester"

_counter = itertools.count(1)  # for ulid_like()


def ulid_like() -> str:
    """Return a deterministic 26-character ULID-like string.

    Good enough for tests that assert length/uniqueness; not lexicographically sortable.
    """
    return f"{next(_counter):026d}"


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


# --- Domain records ---------------------------------------------------------


@pytest.fixture
def make_content() -> Callable[..., ArtifactContent]:
    """Factory for artifact content with a name and a template.

    Keyword overrides are passed straight to `ArtifactContent`.
    """

    def _make(**overrides: Any) -> ArtifactContent:
        base: dict[str, Any] = {"name": "Login works", "template_id": "tpl-basic"}
        base.update(overrides)
        return ArtifactContent(**base)

    return _make


@pytest.fixture
def make_records(make_content):
    """Factory for a project, its root folder and records living under it.

    Returns a builder:

        project, root = make_records.project("P1")
        folder = make_records.folder(project, root, "Auth")
        artifact, v1 = make_records.artifact(project, folder, name="Login")
        tag = make_records.tag("smoke")
    """

    class _Records:
        @staticmethod
        def project(name: str = "Payments") -> tuple[Project, Folder]:
            project_id, root_id = ulid_like(), ulid_like()
            project = Project(project_id, name, root_id, _now())
            root = Folder(root_id, project_id, None, name, 1.0, _now())
            return project, root

        @staticmethod
        def folder(
            project: Project, parent: Folder, name: str, order: float = 1.0
        ) -> Folder:
            return Folder(
                ulid_like(), project.project_id, parent.folder_id, name, order, _now()
            )

        @staticmethod
        def artifact(
            project: Project,
            folder: Folder,
            *,
            order: float = 1.0,
            tags: frozenset[str] = frozenset(),
            **content: Any,
        ) -> tuple[Artifact, Version]:
            artifact_id = ulid_like()
            body = make_content(**content)
            artifact = Artifact(
                artifact_id=artifact_id,
                project_id=project.project_id,
                folder_id=folder.folder_id,
                creator_id=ACTOR,
                order=order,
                current_version=1,
                content=body,
                created_at=_now(),
                tags=tags,
            )
            return artifact, Version(artifact_id, 1, body, _now(), ACTOR)

        @staticmethod
        def tag(name: str) -> Tag:
            return Tag(ulid_like(), name, _now())

    return _Records()


# --- Application ------------------------------------------------------------


@pytest.fixture
def app() -> AppContainer:
    """In-memory application with sequential ids and every action allowed."""
    return bootstrap_in_memory(id_generator=SimpleIdGenerator(length=4))


@pytest.fixture
def uow(app: AppContainer) -> InMemoryUnitOfWork:
    """The unit of work shared by `app`'s message bus, queries and views."""
    return app.message_bus.uow  # type: ignore[return-value]


@pytest.fixture
def seed(app: AppContainer):
    """Helpers that drive `app` through commands to build a fixture tree.

    Example:
        project_id = seed.project("Payments")
        auth = seed.folder(project_id, "Auth")
        a1 = seed.artifact(auth, "Login", template_id="tpl-1")
    """

    bus = app.message_bus

    class _Seed:
        @staticmethod
        def project(name: str = "Payments") -> str:
            return bus.handle(commands.CreateProject(actor_id=ACTOR, name=name))

        @staticmethod
        def root(project_id: str) -> str:
            return app.queries.projects.get(project_id).root_folder_id

        @staticmethod
        def folder(project_id: str, name: str, parent_id: str | None = None) -> str:
            return bus.handle(
                commands.CreateFolder(
                    actor_id=ACTOR,
                    project_id=project_id,
                    name=name,
                    parent_id=parent_id,
                )
            )

        @staticmethod
        def artifact(
            folder_id: str,
            name: str,
            template_id: str = "tpl-basic",
            actor_id: str = ACTOR,
            **kwargs: Any,
        ) -> str:
            return bus.handle(
                commands.CreateArtifact(
                    actor_id=actor_id,
                    folder_id=folder_id,
                    name=name,
                    template_id=template_id,
                    **kwargs,
                )
            )

        @staticmethod
        def tag(name: str) -> str:
            return bus.handle(commands.CreateTag(actor_id=ACTOR, name=name))

        @staticmethod
        def attach(artifact_id: str, tag_id: str) -> None:
            bus.handle(
                commands.AttachTag(
                    actor_id=ACTOR, artifact_id=artifact_id, tag_id=tag_id
                )
            )

    return _Seed()
