"""The runtime view definition and its transitions.

`ViewState` is never persisted. Every transition returns a new state; the
ones that change what is shown (folder, search, filters, bucket selection)
go back to page 1.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from casebook.domain.errors import ValidationError

from .columns import validate_column
from .dimensions import ALL, Dimension, DimensionKind
from .filters import FieldFilter

DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True, slots=True)
class SortSpec:
    column: str = "order"
    descending: bool = False


@dataclass(frozen=True, slots=True)
class ViewState:
    """Dimension, bucket selection, scope, search, filters, sort and page."""

    dimension: Dimension = field(
        default_factory=lambda: Dimension(DimensionKind.FOLDER)
    )
    selections: frozenset[str] = frozenset()
    folder_id: str | None = None
    include_subfolders: bool = False
    search: str = ""
    filters: tuple[FieldFilter, ...] = ()
    sort: SortSpec = SortSpec()
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValidationError("view", "page", "page numbers start at 1")
        if self.page_size < 1:
            raise ValidationError("view", "page_size", "page size must be positive")

    # --- dimension and buckets ---

    def with_dimension(self, dimension: Dimension) -> ViewState:
        """Switch dimension; clears the bucket selection."""
        return replace(self, dimension=dimension, selections=frozenset(), page=1)

    def click_bucket(self, key: str, *, multi: bool = False) -> ViewState:
        """Apply a bucket click.

        A plain click selects only `key`; with the multi-select modifier the
        bucket is toggled and the rest of the selection kept. Clicking "All"
        clears the selection. In the folder dimension a click picks the
        folder to scope to.
        """
        if key == ALL:
            return self.select_all()
        if self.dimension.kind is DimensionKind.FOLDER:
            return self.with_folder(key)
        if multi:
            selections = self.selections ^ {key}
        else:
            selections = frozenset({key})
        return replace(self, selections=selections, page=1)

    def select_all(self) -> ViewState:
        if self.dimension.kind is DimensionKind.FOLDER:
            return replace(self, folder_id=None, selections=frozenset(), page=1)
        return replace(self, selections=frozenset(), page=1)

    # --- scope, search and filters ---

    def with_folder(
        self, folder_id: str | None, *, include_subfolders: bool | None = None
    ) -> ViewState:
        return replace(
            self,
            folder_id=folder_id,
            include_subfolders=(
                self.include_subfolders
                if include_subfolders is None
                else include_subfolders
            ),
            page=1,
        )

    def with_search(self, text: str) -> ViewState:
        return replace(self, search=text, page=1)

    def with_filters(self, filters: Iterable[FieldFilter]) -> ViewState:
        return replace(self, filters=tuple(filters), page=1)

    # --- sort and paging ---

    def with_sort(self, column: str, *, descending: bool = False) -> ViewState:
        return replace(self, sort=SortSpec(validate_column(column), descending))

    def with_page(self, page: int) -> ViewState:
        """Go to `page`; the engine clamps it to the last page."""
        return replace(self, page=page)

    def with_page_size(self, page_size: int) -> ViewState:
        """Change the page size, keeping everything else."""
        return replace(self, page_size=page_size)
