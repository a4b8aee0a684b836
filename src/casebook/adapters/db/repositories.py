"""SQLAlchemy Core repository implementations.

Every repository is bound to the connection owned by the current unit of
work; nothing here commits.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from typing import TYPE_CHECKING

from sqlalchemy import and_, delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError

from casebook.domain.artifacts import Artifact, Version
from casebook.domain.errors import ConcurrentModificationError
from casebook.domain.folders import Folder
from casebook.domain.projects import Project
from casebook.domain.shared_steps import SharedStepGroup
from casebook.domain.tags import Tag
from casebook.domain.value_objects import IssueLink, IssueRef
from casebook.interfaces.repositories import (
    ArtifactRepository,
    FolderRepository,
    ProjectRepository,
    SharedStepGroupRepository,
    TagRepository,
)

from .schema import (
    artifact_issues,
    artifact_tags,
    artifact_versions,
    artifacts,
    folders,
    projects,
    shared_step_groups,
    tags,
)

if TYPE_CHECKING:
    from sqlalchemy import RowMapping, Select
    from sqlalchemy.engine import Connection

# pylint: disable=consider-using-assignment-expr


# ============================================================================
#                               Projects
# ============================================================================


class SqlAlchemyProjectRepository(ProjectRepository):
    """ProjectRepository backed by the `projects` table."""

    def __init__(self, connection: Connection) -> None:
        self.connection = connection

    def add(self, project: Project) -> None:
        self.connection.execute(
            insert(projects).values(
                project_id=project.project_id,
                name=project.name,
                root_folder_id=project.root_folder_id,
                created_at=project.created_at,
            )
        )

    def get(self, project_id: str) -> Project | None:
        row = (
            self.connection.execute(
                select(projects).where(projects.c.project_id == project_id)
            )
            .mappings()
            .one_or_none()
        )
        return None if row is None else Project(**row)

    def list_all(self) -> list[Project]:
        rows = self.connection.execute(
            select(projects).order_by(projects.c.name, projects.c.project_id)
        ).mappings()
        return [Project(**row) for row in rows]


# ============================================================================
#                               Folders
# ============================================================================


def _folder_from_row(row: RowMapping) -> Folder:
    return Folder(
        folder_id=row["folder_id"],
        project_id=row["project_id"],
        parent_id=row["parent_id"],
        name=row["name"],
        order=row["sort_order"],
        documentation=row["documentation"],
        created_at=row["created_at"],
        deleted_at=row["deleted_at"],
    )


class SqlAlchemyFolderRepository(FolderRepository):
    """FolderRepository backed by the `folders` table."""

    def __init__(self, connection: Connection) -> None:
        self.connection = connection

    def add(self, folder: Folder) -> None:
        self.connection.execute(
            insert(folders).values(
                folder_id=folder.folder_id,
                project_id=folder.project_id,
                parent_id=folder.parent_id,
                name=folder.name,
                sort_order=folder.order,
                documentation=folder.documentation,
                created_at=folder.created_at,
                deleted_at=folder.deleted_at,
            )
        )

    def get(self, folder_id: str) -> Folder | None:
        row = (
            self.connection.execute(
                select(folders).where(folders.c.folder_id == folder_id)
            )
            .mappings()
            .one_or_none()
        )
        return None if row is None else _folder_from_row(row)

    def save(self, folder: Folder) -> None:
        self.connection.execute(
            update(folders)
            .where(folders.c.folder_id == folder.folder_id)
            .values(
                parent_id=folder.parent_id,
                name=folder.name,
                sort_order=folder.order,
                documentation=folder.documentation,
                deleted_at=folder.deleted_at,
            )
        )

    def list_children(self, parent_id: str) -> list[Folder]:
        stmt = (
            select(folders)
            .where(folders.c.parent_id == parent_id, folders.c.deleted_at.is_(None))
            .order_by(folders.c.sort_order, folders.c.folder_id)
        )
        rows = self.connection.execute(stmt).mappings()
        return [_folder_from_row(row) for row in rows]

    def list_project(
        self, project_id: str, *, for_update: bool = False
    ) -> list[Folder]:
        stmt = select(folders).where(
            folders.c.project_id == project_id, folders.c.deleted_at.is_(None)
        )
        if for_update:
            # rendered as FOR UPDATE on PostgreSQL, ignored by SQLite
            stmt = stmt.with_for_update()
        rows = self.connection.execute(stmt).mappings()
        return [_folder_from_row(row) for row in rows]


# ============================================================================
#                               Artifacts
# ============================================================================


def _version_from_row(row: RowMapping) -> Version:
    return Version(
        artifact_id=row["artifact_id"],
        number=row["version"],
        content=row["content"],
        created_at=row["created_at"],
        created_by=row["created_by"],
    )


class SqlAlchemyArtifactRepository(ArtifactRepository):
    """ArtifactRepository backed by `artifacts`, `artifact_versions` and link tables."""

    KIND = "artifact"

    def __init__(self, connection: Connection) -> None:
        self.connection = connection

    # --- writes ---

    def add(self, artifact: Artifact, first_version: Version) -> None:
        self.connection.execute(
            insert(artifacts).values(
                artifact_id=artifact.artifact_id,
                project_id=artifact.project_id,
                folder_id=artifact.folder_id,
                creator_id=artifact.creator_id,
                sort_order=artifact.order,
                current_version=first_version.number,
                created_at=artifact.created_at,
                deleted_at=artifact.deleted_at,
            )
        )
        self._insert_version(first_version, expected_version=0)
        self._sync_links(artifact)

    def save(self, artifact: Artifact) -> None:
        self.connection.execute(
            update(artifacts)
            .where(artifacts.c.artifact_id == artifact.artifact_id)
            .values(
                folder_id=artifact.folder_id,
                sort_order=artifact.order,
                deleted_at=artifact.deleted_at,
            )
        )
        self._sync_links(artifact)

    def append_version(self, version: Version, expected_version: int) -> None:
        if version.number != expected_version + 1:
            raise ConcurrentModificationError(
                self.KIND, version.artifact_id, version.number - 1, expected_version
            )
        result = self.connection.execute(
            update(artifacts)
            .where(
                artifacts.c.artifact_id == version.artifact_id,
                artifacts.c.current_version == expected_version,
            )
            .values(current_version=version.number)
        )
        if result.rowcount != 1:
            head = self.connection.execute(
                select(artifacts.c.current_version).where(
                    artifacts.c.artifact_id == version.artifact_id
                )
            ).scalar_one_or_none()
            raise ConcurrentModificationError(
                self.KIND, version.artifact_id, head or 0, expected_version
            )
        self._insert_version(version, expected_version)

    def _insert_version(self, version: Version, expected_version: int) -> None:
        try:
            self.connection.execute(
                insert(artifact_versions).values(
                    artifact_id=version.artifact_id,
                    version=version.number,
                    content=version.content,
                    created_at=version.created_at,
                    created_by=version.created_by,
                )
            )
        except IntegrityError as e:
            # UNIQUE(artifact_id, version): another writer got there first
            raise ConcurrentModificationError(
                self.KIND, version.artifact_id, version.number, expected_version
            ) from e

    def _sync_links(self, artifact: Artifact) -> None:
        artifact_id = artifact.artifact_id
        stored = set(
            self.connection.execute(
                select(artifact_tags.c.tag_id).where(
                    artifact_tags.c.artifact_id == artifact_id
                )
            ).scalars()
        )
        if removed := stored - artifact.tags:
            self.connection.execute(
                delete(artifact_tags).where(
                    artifact_tags.c.artifact_id == artifact_id,
                    artifact_tags.c.tag_id.in_(removed),
                )
            )
        if added := artifact.tags - stored:
            self.connection.execute(
                insert(artifact_tags),
                [{"artifact_id": artifact_id, "tag_id": t} for t in sorted(added)],
            )

        self.connection.execute(
            delete(artifact_issues).where(artifact_issues.c.artifact_id == artifact_id)
        )
        if artifact.issues:
            self.connection.execute(
                insert(artifact_issues),
                [
                    {
                        "artifact_id": artifact_id,
                        "tracker_kind": link.ref.tracker_kind,
                        "external_id": link.ref.external_id,
                        "resolves": link.resolves,
                    }
                    for link in artifact.issues
                ],
            )

    # --- reads ---

    def _head_select(self) -> Select:
        return select(
            artifacts,
            artifact_versions.c.content,
        ).join(
            artifact_versions,
            and_(
                artifact_versions.c.artifact_id == artifacts.c.artifact_id,
                artifact_versions.c.version == artifacts.c.current_version,
            ),
        )

    def _load(self, stmt: Select) -> list[Artifact]:
        rows = self.connection.execute(stmt).mappings().all()
        if not rows:
            return []
        ids = [row["artifact_id"] for row in rows]

        tag_map: dict[str, set[str]] = defaultdict(set)
        for artifact_id, tag_id in self.connection.execute(
            select(artifact_tags.c.artifact_id, artifact_tags.c.tag_id).where(
                artifact_tags.c.artifact_id.in_(ids)
            )
        ):
            tag_map[artifact_id].add(tag_id)

        issue_map: dict[str, list[IssueLink]] = defaultdict(list)
        for row in self.connection.execute(
            select(artifact_issues).where(artifact_issues.c.artifact_id.in_(ids))
        ).mappings():
            issue_map[row["artifact_id"]].append(
                IssueLink(
                    ref=IssueRef(row["tracker_kind"], row["external_id"]),
                    resolves=row["resolves"],
                )
            )

        return [
            self._artifact_from_row(
                row, tag_map[row["artifact_id"]], issue_map[row["artifact_id"]]
            )
            for row in rows
        ]

    @staticmethod
    def _artifact_from_row(
        row: RowMapping, tag_ids: Iterable[str], links: Iterable[IssueLink]
    ) -> Artifact:
        return Artifact(
            artifact_id=row["artifact_id"],
            project_id=row["project_id"],
            folder_id=row["folder_id"],
            creator_id=row["creator_id"],
            order=row["sort_order"],
            current_version=row["current_version"],
            content=row["content"],
            created_at=row["created_at"],
            tags=frozenset(tag_ids),
            issues=tuple(sorted(links, key=lambda link: link.ref)),
            deleted_at=row["deleted_at"],
        )

    def get(self, artifact_id: str) -> Artifact | None:
        found = self._load(
            self._head_select().where(artifacts.c.artifact_id == artifact_id)
        )
        return found[0] if found else None

    def get_version(self, artifact_id: str, number: int) -> Version | None:
        row = (
            self.connection.execute(
                select(artifact_versions).where(
                    artifact_versions.c.artifact_id == artifact_id,
                    artifact_versions.c.version == number,
                )
            )
            .mappings()
            .one_or_none()
        )
        return None if row is None else _version_from_row(row)

    def list_versions(self, artifact_id: str) -> list[Version]:
        rows = self.connection.execute(
            select(artifact_versions)
            .where(artifact_versions.c.artifact_id == artifact_id)
            .order_by(artifact_versions.c.version)
        ).mappings()
        return [_version_from_row(row) for row in rows]

    def list_active(self, project_id: str) -> list[Artifact]:
        return self._load(
            self._head_select()
            .where(
                artifacts.c.project_id == project_id,
                artifacts.c.deleted_at.is_(None),
            )
            .order_by(artifacts.c.sort_order, artifacts.c.artifact_id)
        )

    def list_active_in_folders(self, folder_ids: Iterable[str]) -> list[Artifact]:
        wanted = list(folder_ids)
        if not wanted:
            return []
        return self._load(
            self._head_select()
            .where(
                artifacts.c.folder_id.in_(wanted),
                artifacts.c.deleted_at.is_(None),
            )
            .order_by(artifacts.c.sort_order, artifacts.c.artifact_id)
        )

    def count_with_tag(self, tag_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(artifact_tags.join(artifacts))
            .where(artifact_tags.c.tag_id == tag_id, artifacts.c.deleted_at.is_(None))
        )
        return int(self.connection.execute(stmt).scalar_one())


# ============================================================================
#                               Tags
# ============================================================================


class SqlAlchemyTagRepository(TagRepository):
    """TagRepository backed by the `tags` table.

    Name matching is done in Python with ``str.casefold`` because SQLite's
    ``lower()`` only folds ASCII.
    """

    def __init__(self, connection: Connection) -> None:
        self.connection = connection

    def add(self, tag: Tag) -> None:
        self.connection.execute(
            insert(tags).values(
                tag_id=tag.tag_id,
                name=tag.name,
                created_at=tag.created_at,
                deleted_at=tag.deleted_at,
            )
        )

    def get(self, tag_id: str) -> Tag | None:
        row = (
            self.connection.execute(select(tags).where(tags.c.tag_id == tag_id))
            .mappings()
            .one_or_none()
        )
        return None if row is None else Tag(**row)

    def save(self, tag: Tag) -> None:
        self.connection.execute(
            update(tags)
            .where(tags.c.tag_id == tag.tag_id)
            .values(name=tag.name, deleted_at=tag.deleted_at)
        )

    def _matching(self, name: str, *, active: bool) -> list[Tag]:
        key = name.strip().casefold()
        deleted = (
            tags.c.deleted_at.is_(None) if active else tags.c.deleted_at.is_not(None)
        )
        rows = self.connection.execute(select(tags).where(deleted)).mappings()
        return [tag for tag in (Tag(**row) for row in rows) if tag.name_key == key]

    def find_active_by_name(self, name: str) -> Tag | None:
        found = self._matching(name, active=True)
        return found[0] if found else None

    def find_deleted_by_name(self, name: str) -> Tag | None:
        found = self._matching(name, active=False)
        if not found:
            return None
        return max(found, key=lambda t: (t.deleted_at, t.tag_id))

    def list_active(self) -> list[Tag]:
        rows = self.connection.execute(
            select(tags).where(tags.c.deleted_at.is_(None))
        ).mappings()
        return sorted(
            (Tag(**row) for row in rows), key=lambda t: (t.name_key, t.tag_id)
        )


# ============================================================================
#                               Shared step groups
# ============================================================================


def _group_from_row(row: RowMapping) -> SharedStepGroup:
    return SharedStepGroup(
        group_id=row["group_id"],
        project_id=row["project_id"],
        name=row["name"],
        steps=row["steps"],
        created_at=row["created_at"],
        deleted_at=row["deleted_at"],
    )


class SqlAlchemySharedStepGroupRepository(SharedStepGroupRepository):
    """SharedStepGroupRepository backed by the `shared_step_groups` table."""

    def __init__(self, connection: Connection) -> None:
        self.connection = connection

    def add(self, group: SharedStepGroup) -> None:
        self.connection.execute(
            insert(shared_step_groups).values(
                group_id=group.group_id,
                project_id=group.project_id,
                name=group.name,
                steps=group.steps,
                created_at=group.created_at,
                deleted_at=group.deleted_at,
            )
        )

    def get(self, group_id: str) -> SharedStepGroup | None:
        row = (
            self.connection.execute(
                select(shared_step_groups).where(
                    shared_step_groups.c.group_id == group_id
                )
            )
            .mappings()
            .one_or_none()
        )
        return None if row is None else _group_from_row(row)

    def save(self, group: SharedStepGroup) -> None:
        self.connection.execute(
            update(shared_step_groups)
            .where(shared_step_groups.c.group_id == group.group_id)
            .values(name=group.name, steps=group.steps, deleted_at=group.deleted_at)
        )

    def list_active(self, project_id: str) -> list[SharedStepGroup]:
        rows = self.connection.execute(
            select(shared_step_groups)
            .where(
                shared_step_groups.c.project_id == project_id,
                shared_step_groups.c.deleted_at.is_(None),
            )
            .order_by(shared_step_groups.c.name, shared_step_groups.c.group_id)
        ).mappings()
        return [_group_from_row(row) for row in rows]
