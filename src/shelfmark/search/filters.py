"""Narrow a flat item listing by search text, tags and folders."""

from __future__ import annotations

from typing import FrozenSet, Iterable, List, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from shelfmark.catalog.models import Item, ItemRecord

from .text import normalize_search_text

FolderFilterMode = Literal["include", "exclude"]
Entry = TypeVar("Entry", Item, ItemRecord)


class FolderFilterState(BaseModel):
    """Folder paths to include in or exclude from the visible items.

    Instances are immutable; use :func:`toggle_folder_filter` to derive a new
    state. A path is never in both sets.
    """

    model_config = ConfigDict(frozen=True)

    include: FrozenSet[str] = frozenset()
    exclude: FrozenSet[str] = frozenset()

    @model_validator(mode="after")
    def _check_disjoint(self) -> "FolderFilterState":
        overlap = self.include & self.exclude
        if overlap:
            raise ValueError(f"Folders cannot be both included and excluded: {sorted(overlap)}")
        return self


def toggle_folder_filter(
    state: FolderFilterState,
    folder: str,
    mode: FolderFilterMode,
) -> FolderFilterState:
    """Toggle ``folder`` in the ``mode`` set, removing it from the other set.

    Args:
        state: Current filter state.
        folder: Folder path to toggle.
        mode: ``"include"`` or ``"exclude"``.

    Returns:
        FolderFilterState: New state; ``state`` is left unchanged.
    """

    include = set(state.include)
    exclude = set(state.exclude)
    selected, other = (include, exclude) if mode == "include" else (exclude, include)
    if folder in selected:
        selected.discard(folder)
    else:
        selected.add(folder)
        other.discard(folder)
    return FolderFilterState(include=frozenset(include), exclude=frozenset(exclude))


def clear_folder_filters() -> FolderFilterState:
    """Return an empty folder filter state."""

    return FolderFilterState()


class ItemQuery(BaseModel):
    """Query state applied to the item listing.

    Attributes:
        search: Free text matched against title, description and tags.
        tags: Selected tags; an item needs at least one of them.
        folder: Single active folder; items must live under it.
        folder_filters: Folder include/exclude sets.
    """

    search: str = ""
    tags: List[str] = Field(default_factory=list)
    folder: Optional[str] = None
    folder_filters: FolderFilterState = Field(default_factory=FolderFilterState)


def apply_filters(entries: Iterable[Entry], query: ItemQuery) -> list[Entry]:
    """Return the entries that satisfy every active predicate of ``query``.

    Predicates run in a fixed order: search, tags, active folder, include set,
    then the exclude set, which vetoes anything the earlier predicates passed.
    Empty query fields are inactive. Input order is preserved.

    Args:
        entries: Items, or records wrapping items.
        query: Query state.

    Returns:
        list: The matching entries, in input order.
    """

    needle = normalize_search_text(query.search)
    selected_tags = set(query.tags)
    include = query.folder_filters.include
    exclude = query.folder_filters.exclude

    matches: list[Entry] = []
    for entry in entries:
        item = _item_of(entry)
        if needle and not _matches_search(item, needle):
            continue
        if selected_tags and selected_tags.isdisjoint(item.tags):
            continue
        if query.folder and not item.folder.startswith(query.folder):
            continue
        if include and not any(item.folder.startswith(path) for path in include):
            continue
        if exclude and any(item.folder.startswith(path) for path in exclude):
            continue
        matches.append(entry)
    return matches


def _item_of(entry: Union[Item, ItemRecord]) -> Item:
    return entry.item if isinstance(entry, ItemRecord) else entry


def _matches_search(item: Item, needle: str) -> bool:
    if needle in normalize_search_text(item.title):
        return True
    if needle in normalize_search_text(item.description):
        return True
    return any(needle in normalize_search_text(tag) for tag in item.tags)


__all__ = [
    "FolderFilterMode",
    "FolderFilterState",
    "ItemQuery",
    "apply_filters",
    "clear_folder_filters",
    "toggle_folder_filter",
]
