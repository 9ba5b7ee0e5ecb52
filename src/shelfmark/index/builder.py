"""Build the folder/item forest from a flat item listing."""

from __future__ import annotations

import locale
import unicodedata
from typing import Iterable, Mapping, Optional

from shelfmark.catalog.models import ItemRecord
from shelfmark.catalog.paths import ancestor_paths, folder_name, normalize_path, parent_path

from .models import FolderNode, ItemNode, TreeNode


class TreeBuilder:
    """Assemble a rooted forest of folder and item nodes.

    Every folder path named by ``known_folders`` or by an item gets a node, and
    missing ancestors are created on demand so each node's parent path also has
    a node. Items in the store root become root-level item nodes. The builder
    never fails.
    """

    def build(
        self,
        records: Iterable[ItemRecord],
        known_folders: Iterable[str],
        folder_icons: Optional[Mapping[str, str]] = None,
    ) -> list[TreeNode]:
        """Return the sorted forest with folder item counts filled in.

        Args:
            records: Items paired with their document paths.
            known_folders: Folder paths present in the store, including empty ones.
            folder_icons: Optional mapping of folder path to icon asset path.

        Returns:
            list[TreeNode]: Root nodes, folders before items, each group ordered by name.
        """

        icons = dict(folder_icons or {})
        folders: dict[str, FolderNode] = {}
        root_items: list[ItemNode] = []

        for path in known_folders:
            normalized = normalize_path(path)
            if normalized:
                self._get_or_create(folders, normalized, icons)

        for record in records:
            item = record.item
            node = ItemNode(name=item.title, path=record.path, icon=item.icon, item=item)
            if item.folder:
                self._get_or_create(folders, item.folder, icons).children.append(node)
            else:
                root_items.append(node)

        roots: list[TreeNode] = [
            node for path, node in folders.items() if parent_path(path) not in folders
        ]
        roots.extend(root_items)

        self._sort(roots)
        for node in roots:
            _count_items(node)
        return roots

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _get_or_create(
        self,
        folders: dict[str, FolderNode],
        path: str,
        icons: Mapping[str, str],
    ) -> FolderNode:
        parent: Optional[FolderNode] = None
        for current in [*ancestor_paths(path), path]:
            node = folders.get(current)
            if node is None:
                node = FolderNode(name=folder_name(current), path=current, icon=icons.get(current))
                folders[current] = node
                if parent is not None:
                    parent.children.append(node)
            parent = node
        return folders[path]

    def _sort(self, nodes: list[TreeNode]) -> None:
        nodes.sort(key=_sort_key)
        for node in nodes:
            if isinstance(node, FolderNode):
                self._sort(node.children)


def _sort_key(node: TreeNode) -> tuple[int, str, str]:
    # list.sort is stable, so identical names keep their input order.
    rank = 0 if isinstance(node, FolderNode) else 1
    folded = unicodedata.normalize("NFKC", node.name).casefold()
    return rank, _strip_accents(folded), locale.strxfrm(folded)


def _strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def _count_items(node: TreeNode) -> int:
    if isinstance(node, ItemNode):
        return 1
    node.item_count = sum(_count_items(child) for child in node.children)
    return node.item_count


def iter_nodes(forest: Iterable[TreeNode]) -> Iterable[TreeNode]:
    """Yield every node of ``forest`` in depth-first pre-order."""

    for node in forest:
        yield node
        if isinstance(node, FolderNode):
            yield from iter_nodes(node.children)


__all__ = ["TreeBuilder", "iter_nodes"]
