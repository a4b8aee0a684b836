"""Dynamic View Engine: grouped counts and paged artifact lists."""

from .dimensions import ALL, ANY, HAS_VALUE, NO_VALUE, NONE, Dimension, DimensionKind
from .engine import Bucket, ViewEngine, ViewResult
from .filters import FieldFilter, FilterOperator
from .pagination import Page, paginate
from .state import DEFAULT_PAGE_SIZE, SortSpec, ViewState

__all__ = [
    "ALL",
    "ANY",
    "DEFAULT_PAGE_SIZE",
    "HAS_VALUE",
    "NONE",
    "NO_VALUE",
    "Bucket",
    "Dimension",
    "DimensionKind",
    "FieldFilter",
    "FilterOperator",
    "Page",
    "SortSpec",
    "ViewEngine",
    "ViewResult",
    "ViewState",
    "paginate",
]
