"""Item filtering tests."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from shelfmark.catalog import Item, ItemRecord
from shelfmark.search import (
    FolderFilterState,
    ItemQuery,
    apply_filters,
    clear_folder_filters,
    toggle_folder_filter,
)


@pytest.fixture()
def items() -> list[Item]:
    return [
        Item(title="Python tips", folder="Dev/Python", tags=["foobar", "code"]),
        Item(title="Rust book", folder="Dev/Rust", description="Ownership explained"),
        Item(title="Pasta recipe", folder="Kitchen", tags=["meal"]),
        Item(title="Archive note", folder="Devices", tags=["code"]),
    ]


def _titles(entries) -> list[str]:
    return [entry.title for entry in entries]


def test_empty_query_returns_everything_in_order(items: list[Item]) -> None:
    assert apply_filters(items, ItemQuery()) == items


def test_search_matches_tag_substring(items: list[Item]) -> None:
    result = apply_filters(items, ItemQuery(search="foo"))

    assert _titles(result) == ["Python tips"]


def test_search_is_case_insensitive_over_title_and_description(items: list[Item]) -> None:
    assert _titles(apply_filters(items, ItemQuery(search="PASTA"))) == ["Pasta recipe"]
    assert _titles(apply_filters(items, ItemQuery(search="ownership"))) == ["Rust book"]


def test_tags_require_any_overlap(items: list[Item]) -> None:
    result = apply_filters(items, ItemQuery(tags=["code", "meal"]))

    assert _titles(result) == ["Python tips", "Pasta recipe", "Archive note"]


def test_adding_tags_never_shrinks_the_result(items: list[Item]) -> None:
    narrow = apply_filters(items, ItemQuery(tags=["meal"]))
    wide = apply_filters(items, ItemQuery(tags=["meal", "code"]))

    assert all(item in wide for item in narrow)


def test_folder_prefix_is_plain_string_prefix(items: list[Item]) -> None:
    result = apply_filters(items, ItemQuery(folder="Dev"))

    assert _titles(result) == ["Python tips", "Rust book", "Archive note"]


def test_exclude_wins_over_include(items: list[Item]) -> None:
    state = toggle_folder_filter(FolderFilterState(), "Dev", "include")
    state = toggle_folder_filter(state, "Dev/Rust", "exclude")

    result = apply_filters(items, ItemQuery(folder_filters=state))

    assert _titles(result) == ["Python tips", "Archive note"]


def test_filters_are_idempotent(items: list[Item]) -> None:
    query = ItemQuery(
        search="o",
        tags=["code"],
        folder_filters=FolderFilterState(exclude={"Kitchen"}),
    )

    once = apply_filters(items, query)

    assert apply_filters(once, query) == once


def test_records_are_filtered_by_their_item(items: list[Item]) -> None:
    records = [ItemRecord(item=item, path=f"{item.folder}/{item.title}.md") for item in items]

    result = apply_filters(records, ItemQuery(folder="Kitchen"))

    assert [record.path for record in result] == ["Kitchen/Pasta recipe.md"]


def test_toggle_adds_then_removes() -> None:
    state = toggle_folder_filter(FolderFilterState(), "A", "include")
    assert state.include == frozenset({"A"})

    state = toggle_folder_filter(state, "A", "include")
    assert state == FolderFilterState()


def test_toggle_moves_folder_between_sets() -> None:
    original = toggle_folder_filter(FolderFilterState(), "A", "include")

    moved = toggle_folder_filter(original, "A", "exclude")

    assert moved.include == frozenset()
    assert moved.exclude == frozenset({"A"})
    assert original.include == frozenset({"A"})


def test_clear_folder_filters_empties_both_sets() -> None:
    assert clear_folder_filters() == FolderFilterState()


def test_overlapping_folder_sets_are_rejected() -> None:
    with pytest.raises(ValidationError):
        FolderFilterState(include={"A", "B"}, exclude={"B"})
