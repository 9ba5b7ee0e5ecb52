"""Catalog persistence for Shelfmark items."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from .codec import decode_item, encode_item
from .errors import (
    AlreadyExistsError,
    CatalogError,
    ItemValidationError,
    NotFoundError,
    StoreIOError,
)
from .models import Item, ItemRecord, new_item_id
from .paths import folder_name, item_document_path, normalize_path, parent_path
from .store import DocumentStore, LocalDocumentStore
from .validation import merge_tags, validate_item

LOGGER = logging.getLogger(__name__)


class CatalogRepository:
    """Create, update, delete and list item documents in a document store.

    Each call is independent: no locks are held between calls, so concurrent
    writers to the same document race at the store and the last write wins.
    """

    def __init__(self, store: DocumentStore) -> None:
        """Initialize the repository.

        Args:
            store: Document store holding the catalog.
        """
        self._store = store

    @property
    def store(self) -> DocumentStore:
        """Return the underlying document store."""
        return self._store

    async def create(self, item: Item) -> ItemRecord:
        """Write a new document for ``item`` inside its folder.

        Args:
            item: Item to persist.

        Returns:
            ItemRecord: The stored item and its document path.

        Raises:
            ItemValidationError: If the item fails validation.
            AlreadyExistsError: If a document already exists at the target path.
            StoreIOError: If the store fails.
        """
        validate_item(item)
        prepared = self._prepare(item)
        path = item_document_path(prepared.folder, prepared.title)

        await self._store.ensure_folder(prepared.folder)
        await self._store.create(path, encode_item(prepared))
        LOGGER.info("Created item %s at %s", prepared.id, path)
        return ItemRecord(item=prepared, path=path)

    async def update(self, path: str, item: Item) -> ItemRecord:
        """Overwrite the document at ``path`` and move it if its target changed.

        The identifier and creation time of the stored item are preserved.

        Args:
            path: Current document path.
            item: Edited item.

        Returns:
            ItemRecord: The stored item and its (possibly new) document path.

        Raises:
            ItemValidationError: If the item fails validation.
            NotFoundError: If no document exists at ``path``.
            AlreadyExistsError: If the new target path is already occupied.
            StoreIOError: If the store fails.
        """
        validate_item(item)
        path = normalize_path(path)
        if not await self._store.is_document(path):
            raise NotFoundError(f"No document at {path}")

        previous = decode_item(await self._store.read(path), path)
        prepared = self._prepare(item, previous=previous)
        target = item_document_path(prepared.folder, prepared.title)
        if target != path and await self._store.exists(target):
            raise AlreadyExistsError(f"Cannot move {path}: {target} already exists")

        await self._store.write(path, encode_item(prepared))
        if target != path:
            await self._store.ensure_folder(prepared.folder)
            await self._store.rename(path, target)
            LOGGER.info("Moved item %s from %s to %s", prepared.id, path, target)
        return ItemRecord(item=prepared, path=target)

    async def delete(self, path: str) -> None:
        """Remove the document at ``path``; paths that are not documents are ignored."""
        path = normalize_path(path)
        if not await self._store.is_document(path):
            LOGGER.debug("Nothing to delete at %s", path)
            return
        await self._store.delete(path)
        LOGGER.info("Deleted %s", path)

    async def list_all(self, folder: Optional[str] = None) -> list[ItemRecord]:
        """Return every decodable item, optionally limited to a folder prefix.

        Documents that are not items are skipped silently; documents that cannot
        be read are logged and skipped. The order of the result is unspecified.

        Args:
            folder: Optional path prefix that document paths must start with.

        Returns:
            list[ItemRecord]: Decoded items with their document paths.
        """
        prefix = normalize_path(folder) if folder else ""
        records: list[ItemRecord] = []
        for path in await self._store.list_documents():
            if prefix and not path.startswith(prefix):
                continue
            try:
                text = await self._store.read(path)
            except CatalogError as exc:
                LOGGER.warning("Skipping unreadable document %s: %s", path, exc)
                continue
            item = decode_item(text, path)
            if item is not None:
                records.append(ItemRecord(item=item, path=path))
        return records

    async def get_by_path(self, path: str) -> Optional[ItemRecord]:
        """Return the item stored at ``path``, or ``None`` if there is none."""
        path = normalize_path(path)
        if not await self._store.is_document(path):
            return None
        item = decode_item(await self._store.read(path), path)
        if item is None:
            return None
        return ItemRecord(item=item, path=path)

    async def list_known_folders(self) -> list[str]:
        """Return all folders in the store plus folders implied by documents, sorted."""
        folders = set(await self._store.list_folders())
        for path in await self._store.list_documents():
            parent = parent_path(path)
            if parent:
                folders.add(parent)
        return sorted(folders)

    async def list_all_tags(self) -> list[str]:
        """Return the sorted set of tags used by any item."""
        tags: set[str] = set()
        for record in await self.list_all():
            tags.update(record.item.tags)
        return sorted(tags)

    def _prepare(self, item: Item, *, previous: Optional[Item] = None) -> Item:
        now = datetime.now(timezone.utc)
        folder = normalize_path(item.folder)
        updates: dict[str, object] = {
            "updated_at": now,
            "folder": folder,
            "collection_path": folder,
        }
        if previous is not None:
            updates["id"] = previous.id
            updates["created_at"] = previous.created_at
            if previous.folder != folder:
                updates["collection_title"] = folder_name(folder)
        if not item.collection_title:
            updates.setdefault("collection_title", folder_name(folder))
        return item.model_copy(update=updates)


__all__ = [
    "AlreadyExistsError",
    "CatalogError",
    "CatalogRepository",
    "DocumentStore",
    "Item",
    "ItemRecord",
    "ItemValidationError",
    "LocalDocumentStore",
    "NotFoundError",
    "StoreIOError",
    "merge_tags",
    "new_item_id",
    "validate_item",
]
