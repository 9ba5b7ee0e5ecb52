"""Result shape of the optional link metadata collaborator."""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, ConfigDict

from shelfmark.catalog.models import Item


class LinkMetadata(BaseModel):
    """Best-effort page metadata for a URL; any field may be empty.

    Attributes:
        title: Page title.
        description: Page description.
        banner: Preview image URL.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = ""
    description: str = ""
    banner: str = ""


class LinkMetadataFetcher(Protocol):
    """Fetch metadata for a URL.

    Implementations enforce their own timeout and return an empty
    :class:`LinkMetadata` instead of raising when the page cannot be fetched.
    """

    async def fetch(self, url: str) -> LinkMetadata: ...


def apply_link_metadata(item: Item, metadata: LinkMetadata) -> Item:
    """Return ``item`` with blank title, description and banner filled in.

    Fields the user already set are never overwritten.
    """

    updates: dict[str, str] = {}
    if not item.title and metadata.title:
        updates["title"] = metadata.title
    if not item.description and metadata.description:
        updates["description"] = metadata.description
    if not item.banner and metadata.banner:
        updates["banner"] = metadata.banner
    return item.model_copy(update=updates) if updates else item


__all__ = ["LinkMetadata", "LinkMetadataFetcher", "apply_link_metadata"]
