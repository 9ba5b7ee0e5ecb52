"""Tree builder tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from shelfmark.catalog import CatalogRepository, Item, ItemRecord, LocalDocumentStore
from shelfmark.catalog.paths import item_document_path
from shelfmark.index import FolderNode, ItemNode, TreeBuilder, iter_nodes, load_forest


def _record(title: str, folder: str, **fields) -> ItemRecord:
    """Return an item record located where the repository would store it."""

    item = Item(title=title, folder=folder, **fields)
    return ItemRecord(item=item, path=item_document_path(folder, title))


def _names(nodes) -> list[str]:
    return [node.name for node in nodes]


def test_build_nests_folders_and_counts_items() -> None:
    records = [_record("x", "A"), _record("y", "A/B"), _record("z", "C")]

    forest = TreeBuilder().build(records, ["A", "A/B", "C"])

    assert _names(forest) == ["A", "C"]
    folder_a, folder_c = forest
    assert isinstance(folder_a, FolderNode)
    assert folder_a.item_count == 2
    assert _names(folder_a.children) == ["B", "x"]
    folder_b = folder_a.children[0]
    assert isinstance(folder_b, FolderNode)
    assert folder_b.path == "A/B"
    assert folder_b.item_count == 1
    assert folder_c.item_count == 1


def test_build_creates_missing_ancestors() -> None:
    forest = TreeBuilder().build([_record("deep", "A/B/C")], [])

    paths = [node.path for node in iter_nodes(forest) if isinstance(node, FolderNode)]
    assert paths == ["A", "A/B", "A/B/C"]
    assert forest[0].item_count == 1


def test_build_keeps_empty_folders() -> None:
    forest = TreeBuilder().build([], ["Empty", "Empty/Nested"])

    assert _names(forest) == ["Empty"]
    assert forest[0].item_count == 0
    assert _names(forest[0].children) == ["Nested"]


def test_folder_count_matches_descendant_items() -> None:
    records = [
        _record("one", "A"),
        _record("two", "A/B"),
        _record("three", "A/B/C"),
        _record("four", "D"),
    ]

    forest = TreeBuilder().build(records, ["A/B/C/Empty"])

    for node in iter_nodes(forest):
        if isinstance(node, FolderNode):
            descendants = [
                child for child in iter_nodes(node.children) if isinstance(child, ItemNode)
            ]
            assert node.item_count == len(descendants)
    items = [node for node in iter_nodes(forest) if isinstance(node, ItemNode)]
    assert len(items) == len(records)


def test_children_sort_folders_first_then_by_name() -> None:
    records = [_record("banana", "Root"), _record("Apple", "Root"), _record("cherry", "Root")]

    forest = TreeBuilder().build(records, ["Root/zeta", "Root/Alpha"])

    assert _names(forest[0].children) == ["Alpha", "zeta", "Apple", "banana", "cherry"]


def test_accented_names_sort_with_their_base_letter() -> None:
    forest = TreeBuilder().build([], ["Zebra", "Éclair", "apple", "Eagle"])

    assert _names(forest) == ["apple", "Eagle", "Éclair", "Zebra"]


def test_identical_names_keep_input_order() -> None:
    first = Item(title="Same", folder="A", description="first")
    second = Item(title="Same", folder="A", description="second")
    records = [
        ItemRecord(item=first, path="A/Same.md"),
        ItemRecord(item=second, path="A/Same copy.md"),
    ]

    forest = TreeBuilder().build(records, [])

    children = forest[0].children
    assert [child.item.description for child in children] == ["first", "second"]


def test_root_items_follow_root_folders() -> None:
    records = [_record("Loose", ""), _record("Filed", "Items")]

    forest = TreeBuilder().build(records, [])

    assert _names(forest) == ["Items", "Loose"]
    assert isinstance(forest[1], ItemNode)
    assert forest[1].path == "Loose.md"


def test_folder_icons_and_item_icons_are_attached() -> None:
    records = [_record("Link", "Items", icon="icons/link.svg")]

    forest = TreeBuilder().build(records, [], {"Items": "icons/folder.svg"})

    assert forest[0].icon == "icons/folder.svg"
    assert forest[0].children[0].icon == "icons/link.svg"


def test_build_with_nothing_returns_empty_forest() -> None:
    assert TreeBuilder().build([], []) == []


@pytest.mark.asyncio
async def test_load_forest_reads_repository(tmp_path: Path) -> None:
    repo = CatalogRepository(LocalDocumentStore(tmp_path))
    await repo.create(Item(title="x", folder="A"))
    await repo.create(Item(title="y", folder="A/B"))
    (tmp_path / "Empty").mkdir()

    forest = await load_forest(repo, {"A": "icons/a.svg"})

    assert _names(forest) == ["A", "Empty"]
    assert forest[0].icon == "icons/a.svg"
    assert forest[0].item_count == 2
    assert forest[1].item_count == 0
