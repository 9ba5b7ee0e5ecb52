"""Preconditions checked before an item is written."""

from __future__ import annotations

import re
from typing import Iterable

from .errors import ItemValidationError
from .models import Item
from .paths import sanitize_file_name

_WHITESPACE = re.compile(r"\s")


def validate_item(item: Item) -> None:
    """Raise if ``item`` cannot be written to the store.

    Args:
        item: Item about to be created or updated.

    Raises:
        ItemValidationError: If the title or folder is blank, the title spans
            several lines, the title or a folder name maps to a hidden path, or a
            tag is blank or contains whitespace.
    """

    problems: list[str] = []
    if not item.title:
        problems.append("Title is required.")
    elif "\n" in item.title:
        problems.append("Title must be a single line.")
    elif sanitize_file_name(item.title).startswith("."):
        problems.append("Title cannot start with '.'; the document would be hidden.")
    if not item.folder:
        problems.append("Folder is required.")
    elif any(segment.startswith(".") for segment in item.folder.split("/")):
        problems.append("Folder names cannot start with '.'; the folder would be hidden.")
    for tag in item.tags:
        if not tag:
            problems.append("Tags cannot be empty.")
        elif _WHITESPACE.search(tag):
            problems.append(
                f"Tag {tag!r} contains whitespace; use hyphens or underscores instead."
            )
    if problems:
        raise ItemValidationError(problems)


def merge_tags(existing: Iterable[str], additions: Iterable[str]) -> list[str]:
    """Append ``additions`` to ``existing`` without duplicating tags.

    Args:
        existing: Tags already attached to an item.
        additions: Quick tags or user-entered tags to append.

    Returns:
        list[str]: Combined tags in first-seen order, with blanks dropped.
    """

    merged = [tag.strip() for tag in [*existing, *additions]]
    return [tag for tag in dict.fromkeys(merged) if tag]


__all__ = ["merge_tags", "validate_item"]
