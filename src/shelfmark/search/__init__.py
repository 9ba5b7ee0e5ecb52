"""Filtering helpers for the item listing."""

from .filters import (
    FolderFilterMode,
    FolderFilterState,
    ItemQuery,
    apply_filters,
    clear_folder_filters,
    toggle_folder_filter,
)
from .text import normalize_search_text

__all__ = [
    "FolderFilterMode",
    "FolderFilterState",
    "ItemQuery",
    "apply_filters",
    "clear_folder_filters",
    "normalize_search_text",
    "toggle_folder_filter",
]
