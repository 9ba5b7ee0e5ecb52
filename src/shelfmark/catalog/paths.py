"""Helpers for ``/``-separated store paths."""

from __future__ import annotations

import re

DOCUMENT_SUFFIX = ".md"
FILENAME_PLACEHOLDER = "-"

_ILLEGAL_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|]')
_REPEATED_SLASHES = re.compile(r"/+")


def normalize_path(value: str) -> str:
    """Return ``value`` with forward slashes, no duplicate or edge separators.

    Args:
        value: Raw path string, possibly using backslashes.

    Returns:
        str: Normalized path; the store root is the empty string.
    """

    normalized = value.replace("\\", "/")
    normalized = _REPEATED_SLASHES.sub("/", normalized)
    return normalized.strip().strip("/")


def parent_path(path: str) -> str:
    """Return the path one level up from ``path`` (empty for top-level entries)."""

    index = path.rfind("/")
    return path[:index] if index != -1 else ""


def folder_name(path: str) -> str:
    """Return the last segment of ``path``."""

    return path.rsplit("/", 1)[-1]


def join_path(folder: str, name: str) -> str:
    return normalize_path(f"{folder}/{name}") if folder else normalize_path(name)


def sanitize_file_name(title: str) -> str:
    """Replace characters that are illegal in file names with a placeholder.

    Args:
        title: Item title used as the file stem.

    Returns:
        str: Sanitized file stem.
    """

    return _ILLEGAL_FILENAME_CHARS.sub(FILENAME_PLACEHOLDER, title).strip()


def item_document_path(folder: str, title: str) -> str:
    """Return the document path for an item with ``title`` stored in ``folder``."""

    return join_path(normalize_path(folder), f"{sanitize_file_name(title)}{DOCUMENT_SUFFIX}")


def ancestor_paths(path: str) -> list[str]:
    """Return every proper ancestor of ``path``, outermost first."""

    segments = path.split("/") if path else []
    return ["/".join(segments[:depth]) for depth in range(1, len(segments))]


__all__ = [
    "DOCUMENT_SUFFIX",
    "FILENAME_PLACEHOLDER",
    "ancestor_paths",
    "folder_name",
    "item_document_path",
    "join_path",
    "normalize_path",
    "parent_path",
    "sanitize_file_name",
]
