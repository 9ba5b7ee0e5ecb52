"""Local document store tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from shelfmark.catalog import (
    AlreadyExistsError,
    LocalDocumentStore,
    NotFoundError,
    StoreIOError,
)


@pytest.mark.asyncio
async def test_create_refuses_to_overwrite(tmp_path: Path) -> None:
    store = LocalDocumentStore(tmp_path)
    await store.create("note.md", "one")

    with pytest.raises(AlreadyExistsError):
        await store.create("note.md", "two")

    assert await store.read("note.md") == "one"


@pytest.mark.asyncio
async def test_write_requires_existing_document(tmp_path: Path) -> None:
    store = LocalDocumentStore(tmp_path)

    with pytest.raises(NotFoundError):
        await store.write("missing.md", "text")


@pytest.mark.asyncio
async def test_rename_refuses_occupied_destination(tmp_path: Path) -> None:
    store = LocalDocumentStore(tmp_path)
    await store.create("a.md", "a")
    await store.create("b.md", "b")

    with pytest.raises(AlreadyExistsError):
        await store.rename("a.md", "b.md")

    assert await store.read("b.md") == "b"


@pytest.mark.asyncio
async def test_listing_skips_hidden_entries(tmp_path: Path) -> None:
    store = LocalDocumentStore(tmp_path)
    await store.ensure_folder("Visible/Nested")
    await store.ensure_folder(".config")
    await store.create("Visible/doc.md", "x")
    (tmp_path / ".config" / "secret.md").write_text("x", encoding="utf-8")

    assert await store.list_documents() == ["Visible/doc.md"]
    assert sorted(await store.list_folders()) == ["Visible", "Visible/Nested"]


@pytest.mark.asyncio
async def test_paths_outside_root_are_rejected(tmp_path: Path) -> None:
    store = LocalDocumentStore(tmp_path / "vault")

    with pytest.raises(StoreIOError):
        await store.read("../escape.md")


@pytest.mark.asyncio
async def test_ensure_folder_over_a_file_raises(tmp_path: Path) -> None:
    store = LocalDocumentStore(tmp_path)
    (tmp_path / "taken").write_text("x", encoding="utf-8")

    with pytest.raises(StoreIOError):
        await store.ensure_folder("taken")
