"""In-memory repository implementations."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from casebook.domain.artifacts import Artifact, Version
from casebook.domain.errors import ConcurrentModificationError
from casebook.domain.folders import Folder
from casebook.domain.projects import Project
from casebook.domain.shared_steps import SharedStepGroup
from casebook.domain.tags import Tag
from casebook.interfaces.repositories import (
    ArtifactRepository,
    FolderRepository,
    ProjectRepository,
    SharedStepGroupRepository,
    TagRepository,
)

from .store import InMemoryStoreData

# pylint: disable=consider-using-assignment-expr


class InMemoryProjectRepository(ProjectRepository):
    """In-memory implementation of the ProjectRepository interface."""

    def __init__(self, data: InMemoryStoreData) -> None:
        self._data = data

    def add(self, project: Project) -> None:
        self._data.projects[project.project_id] = project

    def get(self, project_id: str) -> Project | None:
        return self._data.projects.get(project_id)

    def list_all(self) -> list[Project]:
        return sorted(
            self._data.projects.values(), key=lambda p: (p.name, p.project_id)
        )


class InMemoryFolderRepository(FolderRepository):
    """In-memory implementation of the FolderRepository interface."""

    def __init__(self, data: InMemoryStoreData) -> None:
        self._data = data

    def add(self, folder: Folder) -> None:
        self._data.folders[folder.folder_id] = folder

    def get(self, folder_id: str) -> Folder | None:
        return self._data.folders.get(folder_id)

    def save(self, folder: Folder) -> None:
        self._data.folders[folder.folder_id] = folder

    def list_children(self, parent_id: str) -> list[Folder]:
        children = [
            f
            for f in self._data.folders.values()
            if f.parent_id == parent_id and f.is_active
        ]
        return sorted(children, key=lambda f: (f.order, f.folder_id))

    def list_project(
        self, project_id: str, *, for_update: bool = False
    ) -> list[Folder]:
        # the unit of work already holds the store lock
        return [
            f
            for f in self._data.folders.values()
            if f.project_id == project_id and f.is_active
        ]


class InMemoryArtifactRepository(ArtifactRepository):
    """In-memory implementation of the ArtifactRepository interface."""

    KIND = "artifact"

    def __init__(self, data: InMemoryStoreData) -> None:
        self._data = data

    def add(self, artifact: Artifact, first_version: Version) -> None:
        self._data.artifacts[artifact.artifact_id] = artifact
        self._data.versions[artifact.artifact_id] = [first_version]

    def get(self, artifact_id: str) -> Artifact | None:
        return self._data.artifacts.get(artifact_id)

    def save(self, artifact: Artifact) -> None:
        stored = self._data.artifacts[artifact.artifact_id]
        # content and head are owned by append_version
        self._data.artifacts[artifact.artifact_id] = replace(
            artifact, content=stored.content, current_version=stored.current_version
        )

    def append_version(self, version: Version, expected_version: int) -> None:
        chain = self._data.versions.get(version.artifact_id, [])
        head = chain[-1].number if chain else 0
        if head != expected_version or version.number != head + 1:
            raise ConcurrentModificationError(
                self.KIND, version.artifact_id, head, expected_version
            )
        chain.append(version)
        stored = self._data.artifacts[version.artifact_id]
        self._data.artifacts[version.artifact_id] = replace(
            stored, content=version.content, current_version=version.number
        )

    def get_version(self, artifact_id: str, number: int) -> Version | None:
        chain = self._data.versions.get(artifact_id)
        if chain is None or not 1 <= number <= len(chain):
            return None
        return chain[number - 1]

    def list_versions(self, artifact_id: str) -> list[Version]:
        return list(self._data.versions.get(artifact_id, []))

    def list_active(self, project_id: str) -> list[Artifact]:
        found = [
            a
            for a in self._data.artifacts.values()
            if a.project_id == project_id and a.is_active
        ]
        return sorted(found, key=lambda a: (a.order, a.artifact_id))

    def list_active_in_folders(self, folder_ids: Iterable[str]) -> list[Artifact]:
        wanted = set(folder_ids)
        found = [
            a
            for a in self._data.artifacts.values()
            if a.folder_id in wanted and a.is_active
        ]
        return sorted(found, key=lambda a: (a.order, a.artifact_id))

    def count_with_tag(self, tag_id: str) -> int:
        return sum(
            1
            for a in self._data.artifacts.values()
            if a.is_active and tag_id in a.tags
        )


class InMemoryTagRepository(TagRepository):
    """In-memory implementation of the TagRepository interface."""

    def __init__(self, data: InMemoryStoreData) -> None:
        self._data = data

    def add(self, tag: Tag) -> None:
        self._data.tags[tag.tag_id] = tag

    def get(self, tag_id: str) -> Tag | None:
        return self._data.tags.get(tag_id)

    def save(self, tag: Tag) -> None:
        self._data.tags[tag.tag_id] = tag

    def find_active_by_name(self, name: str) -> Tag | None:
        key = name.strip().casefold()
        for tag in self._data.tags.values():
            if tag.is_active and tag.name_key == key:
                return tag
        return None

    def find_deleted_by_name(self, name: str) -> Tag | None:
        key = name.strip().casefold()
        deleted = [
            t for t in self._data.tags.values() if not t.is_active and t.name_key == key
        ]
        if not deleted:
            return None
        return max(deleted, key=lambda t: (t.deleted_at, t.tag_id))

    def list_active(self) -> list[Tag]:
        active = [t for t in self._data.tags.values() if t.is_active]
        return sorted(active, key=lambda t: (t.name_key, t.tag_id))


class InMemorySharedStepGroupRepository(SharedStepGroupRepository):
    """In-memory implementation of the SharedStepGroupRepository interface."""

    def __init__(self, data: InMemoryStoreData) -> None:
        self._data = data

    def add(self, group: SharedStepGroup) -> None:
        self._data.shared_steps[group.group_id] = group

    def get(self, group_id: str) -> SharedStepGroup | None:
        return self._data.shared_steps.get(group_id)

    def save(self, group: SharedStepGroup) -> None:
        self._data.shared_steps[group.group_id] = group

    def list_active(self, project_id: str) -> list[SharedStepGroup]:
        active = [
            g
            for g in self._data.shared_steps.values()
            if g.project_id == project_id and g.is_active
        ]
        return sorted(active, key=lambda g: (g.name, g.group_id))
