"""Catalog data models."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .paths import folder_name, normalize_path

DEFAULT_ITEM_TYPE = "link"


def new_item_id() -> str:
    """Return a fresh opaque item identifier."""

    return f"item-{int(time.time() * 1000)}-{uuid4().hex[:6]}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Item(BaseModel):
    """A catalogued entry stored as one document.

    Attributes:
        id: Opaque identifier, stable across edits.
        title: Display name, also used to derive the file name.
        description: Free-form description text.
        link: Source URL.
        banner: Optional banner image URL.
        type: Free-form classification tag.
        icon: Optional icon asset path.
        tags: Short labels attached to the item.
        folder: Path of the folder containing the item document.
        collection_id: Denormalized folder identifier.
        collection_title: Denormalized folder title.
        collection_path: Denormalized folder path, expected to equal ``folder``.
        collection_parent_id: Optional denormalized parent folder identifier.
        created_at: Creation timestamp; never changes after creation.
        updated_at: Timestamp of the most recent write.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_item_id)
    title: str
    description: str = ""
    link: str = ""
    banner: Optional[str] = None
    type: str = DEFAULT_ITEM_TYPE
    icon: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    folder: str = ""
    collection_id: str = ""
    collection_title: str = ""
    collection_path: str = ""
    collection_parent_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("folder")
    @classmethod
    def _normalize_folder(cls, value: str) -> str:
        return normalize_path(value)

    @model_validator(mode="after")
    def _default_collection_fields(self) -> "Item":
        if not self.collection_path:
            self.collection_path = self.folder
        if not self.collection_title:
            self.collection_title = folder_name(self.folder)
        return self


class ItemRecord(BaseModel):
    """An item paired with the document path it was read from or written to."""

    item: Item
    path: str


__all__ = ["DEFAULT_ITEM_TYPE", "Item", "ItemRecord", "new_item_id", "utc_now"]
