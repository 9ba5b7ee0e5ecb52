"""Tree node models for the hierarchical item index."""

from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from shelfmark.catalog.models import Item


class FolderNode(BaseModel):
    """A folder in the index.

    Attributes:
        kind: Discriminator, always ``"folder"``.
        name: Last segment of the folder path.
        path: Folder path, unique across the tree.
        icon: Optional icon asset configured for the folder.
        children: Sub-folders followed by items, each group sorted by name.
        item_count: Number of item nodes anywhere below this folder.
    """

    kind: Literal["folder"] = "folder"
    name: str
    path: str
    icon: Optional[str] = None
    children: List["TreeNode"] = Field(default_factory=list)
    item_count: int = 0


class ItemNode(BaseModel):
    """A leaf in the index wrapping one item.

    Attributes:
        kind: Discriminator, always ``"item"``.
        name: Item title.
        path: Document path of the item, unique across the tree.
        icon: Optional icon asset of the item.
        item: The item the node represents.
    """

    kind: Literal["item"] = "item"
    name: str
    path: str
    icon: Optional[str] = None
    item: Item


TreeNode = Annotated[Union[FolderNode, ItemNode], Field(discriminator="kind")]

FolderNode.model_rebuild()


__all__ = ["FolderNode", "ItemNode", "TreeNode"]
