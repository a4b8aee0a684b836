"""Result pages."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Page(Generic[T]):
    """One page of results.

    `page` is clamped to ``1..total_pages``; there is always at least one
    (possibly empty) page. `show_pagination` is False when everything fits on
    one page, in which case pagination controls are omitted altogether.
    """

    items: tuple[T, ...]
    total_items: int
    page: int
    page_size: int
    total_pages: int

    @property
    def show_pagination(self) -> bool:
        return self.total_items > self.page_size


def paginate(items: Sequence[T], page: int, page_size: int) -> Page[T]:
    total_pages = max(1, math.ceil(len(items) / page_size))
    page = min(max(page, 1), total_pages)
    start = (page - 1) * page_size
    return Page(
        items=tuple(items[start : start + page_size]),
        total_items=len(items),
        page=page,
        page_size=page_size,
        total_pages=total_pages,
    )
