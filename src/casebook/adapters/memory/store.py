"""In-memory shared data store for the in-memory adapters."""

from __future__ import annotations

from dataclasses import dataclass, field

from casebook.domain.artifacts import Artifact, Version
from casebook.domain.folders import Folder
from casebook.domain.projects import Project
from casebook.domain.shared_steps import SharedStepGroup
from casebook.domain.tags import Tag


@dataclass(slots=True)
class InMemoryStoreData:
    """Shared in-memory backing store for in-memory repositories.

    A single shared instance should be passed to all repositories of a unit
    of work so they operate on one data source. Records are frozen, so a
    snapshot only needs to copy the containers.

    `versions` is keyed by artifact id and stores snapshots in ascending
    version order (head is the last item).
    """

    projects: dict[str, Project] = field(default_factory=dict)
    folders: dict[str, Folder] = field(default_factory=dict)
    artifacts: dict[str, Artifact] = field(default_factory=dict)
    versions: dict[str, list[Version]] = field(default_factory=dict)
    tags: dict[str, Tag] = field(default_factory=dict)
    shared_steps: dict[str, SharedStepGroup] = field(default_factory=dict)

    def snapshot(self) -> InMemoryStoreData:
        """Return a copy that shares records but not containers."""
        return InMemoryStoreData(
            projects=dict(self.projects),
            folders=dict(self.folders),
            artifacts=dict(self.artifacts),
            versions={key: list(chain) for key, chain in self.versions.items()},
            tags=dict(self.tags),
            shared_steps=dict(self.shared_steps),
        )

    def restore(self, snapshot: InMemoryStoreData) -> None:
        """Reset this store, in place, to the contents of `snapshot`."""
        copy = snapshot.snapshot()
        self.projects = copy.projects
        self.folders = copy.folders
        self.artifacts = copy.artifacts
        self.versions = copy.versions
        self.tags = copy.tags
        self.shared_steps = copy.shared_steps
