"""Hierarchical index over catalog items."""

from __future__ import annotations

from typing import Mapping, Optional

from shelfmark.catalog import CatalogRepository

from .builder import TreeBuilder, iter_nodes
from .models import FolderNode, ItemNode, TreeNode
from .stats import CollectionStat, collection_stats, recent_items


async def load_forest(
    repository: CatalogRepository,
    folder_icons: Optional[Mapping[str, str]] = None,
) -> list[TreeNode]:
    """List the catalog and build its folder/item forest.

    Args:
        repository: Repository to read items and folders from.
        folder_icons: Optional mapping of folder path to icon asset path.

    Returns:
        list[TreeNode]: Root nodes of the forest.
    """

    records = await repository.list_all()
    folders = await repository.list_known_folders()
    return TreeBuilder().build(records, folders, folder_icons)


__all__ = [
    "CollectionStat",
    "FolderNode",
    "ItemNode",
    "TreeBuilder",
    "TreeNode",
    "collection_stats",
    "iter_nodes",
    "load_forest",
    "recent_items",
]
