"""The Dynamic View Engine.

Given a project and a `ViewState`, computes the dimension's buckets with
live counts and the filtered, sorted, paginated artifact list. Queries are
read-only; each runs in its own unit of work and sees the latest committed
state.

Composition: the candidate set is the project's active artifacts, narrowed by
search text and column filters. Bucket counts are taken from that set, so
they do not depend on the dimension's own selection. The listed items are the
candidates that also fall inside the folder scope (folder dimension) or match
any selected bucket (every other dimension), sorted and then paginated.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence, Set
from dataclasses import dataclass

from casebook.domain.artifacts import Artifact
from casebook.domain.errors import NotFoundError
from casebook.domain.folders import Folder, subtree_ids
from casebook.domain.tags import Tag
from casebook.domain.value_objects import FieldKind
from casebook.interfaces.labels import LabelProvider
from casebook.interfaces.unit_of_work import AbstractUnitOfWork

from . import dimensions as dims
from .columns import LABELLED_COLUMNS, column_value, sort_key
from .dimensions import Dimension, DimensionKind
from .filters import matches_search
from .pagination import Page, paginate
from .state import DEFAULT_PAGE_SIZE, ViewState

logger = logging.getLogger(__name__)

_DIMENSION_NOUNS = {
    DimensionKind.TAG: ("Any tag", "No tags"),
    DimensionKind.ISSUE: ("Any issue", "No issues"),
    DimensionKind.STATE: (None, "No state"),
}

_FIXED_LABELS = {
    dims.HAS_VALUE: "Has value",
    dims.NO_VALUE: "No value",
    dims.AUTOMATED: "Automated",
    dims.MANUAL: "Manual",
    dims.CHECKED: "Checked",
    dims.UNCHECKED: "Unchecked",
}

_BUILTIN_DIMENSIONS = (
    DimensionKind.FOLDER,
    DimensionKind.TEMPLATE,
    DimensionKind.STATE,
    DimensionKind.CREATOR,
    DimensionKind.AUTOMATION,
    DimensionKind.TAG,
    DimensionKind.ISSUE,
)


@dataclass(frozen=True, slots=True)
class Bucket:
    key: str
    label: str
    count: int
    selected: bool = False


@dataclass(frozen=True, slots=True)
class ViewResult:
    """Buckets (All first) and the requested page of artifacts."""

    state: ViewState
    buckets: tuple[Bucket, ...]
    page: Page[Artifact]


@dataclass(frozen=True, slots=True)
class _Snapshot:
    artifacts: list[Artifact]
    folders: list[Folder]
    active_tags: Mapping[str, Tag]


class _NullLabels(LabelProvider):
    def label_for(self, namespace: str, key: str) -> str | None:
        return None


class ViewEngine:
    """Compute grouped counts and result pages for a project."""

    def __init__(
        self,
        uow: AbstractUnitOfWork,
        labels: LabelProvider | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self.uow = uow
        self.labels = labels or _NullLabels()
        self.page_size = page_size

    def initial_state(self, dimension: Dimension | None = None) -> ViewState:
        """A fresh view with the configured page size."""
        state = ViewState(page_size=self.page_size)
        return state if dimension is None else state.with_dimension(dimension)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load(self, project_id: str) -> _Snapshot:
        with self.uow:
            if self.uow.repos.projects.get(project_id) is None:
                raise NotFoundError("project", project_id)
            return _Snapshot(
                artifacts=self.uow.repos.artifacts.list_active(project_id),
                folders=self.uow.repos.folders.list_project(project_id),
                active_tags={t.tag_id: t for t in self.uow.repos.tags.list_active()},
            )

    # ------------------------------------------------------------------
    # Dimension availability
    # ------------------------------------------------------------------

    def has_data(self, project_id: str, dimension: Dimension) -> bool:
        """True if any active artifact has a non-null value for `dimension`.

        The folder dimension is always available. Other dimensions are hidden
        by the presentation layer while this is False.
        """
        snapshot = self._load(project_id)
        return self._has_data(snapshot, dimension)

    @staticmethod
    def _has_data(snapshot: _Snapshot, dimension: Dimension) -> bool:
        if dimension.kind is DimensionKind.FOLDER:
            return True
        tags = snapshot.active_tags.keys()
        return any(dims.has_value(dimension, a, tags) for a in snapshot.artifacts)

    def available_dimensions(
        self, project_id: str, custom_fields: Iterable[Dimension] = ()
    ) -> list[Dimension]:
        """Return the built-in and custom-field dimensions that have data."""
        snapshot = self._load(project_id)
        candidates = [Dimension(kind) for kind in _BUILTIN_DIMENSIONS]
        candidates.extend(custom_fields)
        return [d for d in candidates if self._has_data(snapshot, d)]

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def query(self, project_id: str, state: ViewState) -> ViewResult:
        """Compute buckets and the requested page for `state`."""
        snapshot = self._load(project_id)
        tags = snapshot.active_tags.keys()
        dimension = state.dimension

        candidates = [
            a
            for a in snapshot.artifacts
            if matches_search(a, state.search)
            and all(f.matches(a) for f in state.filters)
        ]

        if dimension.kind is DimensionKind.FOLDER:
            scope = self._folder_scope(snapshot, state)
            items = [a for a in candidates if scope is None or a.folder_id in scope]
            buckets = self._folder_buckets(snapshot, candidates, state)
        else:
            members = {
                a.artifact_id: dims.memberships(dimension, a, tags) for a in candidates
            }
            if state.selections:
                items = [
                    a for a in candidates if members[a.artifact_id] & state.selections
                ]
            else:
                items = candidates
            buckets = self._value_buckets(snapshot, candidates, members, state)

        page = paginate(self._sort(items, state), state.page, state.page_size)
        logger.debug(
            "View %s on %s: %d candidates, %d items, page %d/%d",
            dimension.key,
            project_id,
            len(candidates),
            page.total_items,
            page.page,
            page.total_pages,
        )
        return ViewResult(state=state, buckets=tuple(buckets), page=page)

    # ------------------------------------------------------------------
    # Folder dimension
    # ------------------------------------------------------------------

    @staticmethod
    def _folder_scope(snapshot: _Snapshot, state: ViewState) -> Set[str] | None:
        if state.folder_id is None:
            return None
        by_id = {f.folder_id: f for f in snapshot.folders}
        if state.folder_id not in by_id:
            raise NotFoundError("folder", state.folder_id)
        if state.include_subfolders:
            return set(subtree_ids(by_id, state.folder_id))
        return {state.folder_id}

    @staticmethod
    def _folder_buckets(
        snapshot: _Snapshot, candidates: Sequence[Artifact], state: ViewState
    ) -> list[Bucket]:
        direct = Counter(a.folder_id for a in candidates)
        children: dict[str | None, list[Folder]] = {}
        for folder in snapshot.folders:
            children.setdefault(folder.parent_id, []).append(folder)

        buckets = [
            Bucket(dims.ALL, "All", len(candidates), selected=state.folder_id is None)
        ]
        stack = sorted(children.get(None, ()), key=lambda f: (f.order, f.folder_id))
        stack.reverse()
        while stack:
            folder = stack.pop()
            buckets.append(
                Bucket(
                    folder.folder_id,
                    folder.name,
                    direct[folder.folder_id],
                    selected=folder.folder_id == state.folder_id,
                )
            )
            kids = sorted(
                children.get(folder.folder_id, ()),
                key=lambda f: (f.order, f.folder_id),
            )
            stack.extend(reversed(kids))
        return buckets

    # ------------------------------------------------------------------
    # Value dimensions
    # ------------------------------------------------------------------

    def _value_buckets(
        self,
        snapshot: _Snapshot,
        candidates: Sequence[Artifact],
        members: Mapping[str, frozenset[str]],
        state: ViewState,
    ) -> list[Bucket]:
        dimension = state.dimension
        tags = snapshot.active_tags.keys()
        counts = Counter(key for keys in members.values() for key in keys)

        # Buckets come from the whole project so they stay put while searching.
        keys: set[str] = set(state.selections)
        for artifact in snapshot.artifacts:
            keys |= dims.memberships(dimension, artifact, tags)
        keys |= self._always_present(dimension)

        if dimension.is_multi_value and state.selections:
            all_count = sum(1 for m in members.values() if m & state.selections)
        else:
            all_count = len(candidates)

        presence = [k for k in dims.PRESENCE_KEYS if k in keys]
        values = sorted(
            (k for k in keys if k not in dims.PRESENCE_KEYS),
            key=lambda k: self._value_sort_key(snapshot, dimension, k),
        )

        buckets = [Bucket(dims.ALL, "All", all_count, selected=not state.selections)]
        for key in presence + values:
            buckets.append(
                Bucket(
                    key,
                    self._label(snapshot, dimension, key),
                    counts[key],
                    selected=key in state.selections,
                )
            )
        return buckets

    @staticmethod
    def _always_present(dimension: Dimension) -> set[str]:
        match dimension.kind:
            case DimensionKind.TAG | DimensionKind.ISSUE:
                return {dims.ANY, dims.NONE}
            case DimensionKind.CUSTOM_FIELD if (
                dimension.field_kind is FieldKind.CHECKBOX
            ):
                return {dims.CHECKED, dims.UNCHECKED}
            case DimensionKind.CUSTOM_FIELD:
                return {dims.NO_VALUE} | (
                    set()
                    if dimension.field_kind is FieldKind.DROPDOWN
                    else {dims.HAS_VALUE}
                )
            case _:
                return set()

    def _label(self, snapshot: _Snapshot, dimension: Dimension, key: str) -> str:
        any_label, none_label = _DIMENSION_NOUNS.get(dimension.kind, (None, None))
        if key == dims.ANY and any_label:
            return any_label
        if key == dims.NONE and none_label:
            return none_label

        match dimension.kind:
            case DimensionKind.TAG:
                tag = snapshot.active_tags.get(key)
                return tag.name if tag else key
            case DimensionKind.ISSUE:
                return key
            case DimensionKind.TEMPLATE | DimensionKind.STATE | DimensionKind.CREATOR:
                return self.labels.label_for(dimension.kind.value, key) or key
            case DimensionKind.AUTOMATION:
                return _FIXED_LABELS.get(key, key)
            case _:
                if key in _FIXED_LABELS:
                    return _FIXED_LABELS[key]
                if dimension.field_kind is FieldKind.NUMBER:
                    return key
                return self.labels.label_for(dimension.key, key) or key

    def _value_sort_key(
        self, snapshot: _Snapshot, dimension: Dimension, key: str
    ) -> tuple:
        if dimension.field_kind is FieldKind.NUMBER:
            try:
                return (float(key), key)
            except ValueError:
                return (math.inf, key)
        if dimension.kind is DimensionKind.AUTOMATION:
            return (key != dims.AUTOMATED, key)
        if dimension.field_kind is FieldKind.CHECKBOX:
            return (key != dims.CHECKED, key)
        return (self._label(snapshot, dimension, key).casefold(), key)

    # ------------------------------------------------------------------
    # Sorting
    # ------------------------------------------------------------------

    def _sort(self, items: Sequence[Artifact], state: ViewState) -> list[Artifact]:
        """Sort on one column with nulls last and ties broken by id."""
        column = state.sort.column

        def value(artifact: Artifact):
            raw = column_value(artifact, column)
            if raw is not None and column in LABELLED_COLUMNS:
                return self.labels.label_for(column, raw) or raw
            return raw

        ordered = sorted(items, key=lambda a: a.artifact_id)
        present = [a for a in ordered if value(a) is not None]
        missing = [a for a in ordered if value(a) is None]
        present.sort(key=lambda a: sort_key(value(a)), reverse=state.sort.descending)
        return present + missing
