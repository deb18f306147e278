from .grid import Column, GridLayout, Page, grid_layout
from .pagination import (
    MAX_RECONCILE_PASSES,
    PaginationControl,
    PaginationState,
    Reconciliation,
    reconcile_pagination,
    track_page,
    tracking_index_for_page,
)

__all__ = [
    "Column",
    "GridLayout",
    "MAX_RECONCILE_PASSES",
    "Page",
    "PaginationControl",
    "PaginationState",
    "Reconciliation",
    "grid_layout",
    "reconcile_pagination",
    "track_page",
    "tracking_index_for_page",
]
