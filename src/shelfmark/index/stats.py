"""Summary statistics over the catalog."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from pydantic import BaseModel

from shelfmark.catalog.models import ItemRecord

from .models import FolderNode, TreeNode


class CollectionStat(BaseModel):
    """Item count for one top-level collection."""

    name: str
    path: str
    item_count: int


def collection_stats(forest: Iterable[TreeNode]) -> list[CollectionStat]:
    """Return the item count of every root folder in ``forest``."""

    return [
        CollectionStat(name=node.name, path=node.path, item_count=node.item_count)
        for node in forest
        if isinstance(node, FolderNode)
    ]


def recent_items(
    records: Iterable[ItemRecord],
    *,
    now: Optional[datetime] = None,
    days: int = 7,
    limit: int = 5,
) -> list[ItemRecord]:
    """Return the most recently updated items within a time window.

    Args:
        records: Items to consider.
        now: Reference time; defaults to the current UTC time.
        days: Size of the window ending at ``now``.
        limit: Maximum number of records returned.

    Returns:
        list[ItemRecord]: Records updated within the window, newest first.
    """

    reference = now or datetime.now(timezone.utc)
    cutoff = reference - timedelta(days=days)
    recent = [record for record in records if _aware(record.item.updated_at) >= cutoff]
    recent.sort(key=lambda record: _aware(record.item.updated_at), reverse=True)
    return recent[:limit]


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


__all__ = ["CollectionStat", "collection_stats", "recent_items"]
