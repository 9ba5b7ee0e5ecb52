"""Text normalization utilities for item search."""

from __future__ import annotations

import re

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F]")
_WHITESPACE = re.compile(r"\s+")


def normalize_search_text(text: str) -> str:
    """Return ``text`` folded for case-insensitive substring matching.

    Args:
        text: Query text or a searchable item field.

    Returns:
        str: Text with control characters removed, whitespace collapsed and
        case folded.
    """

    sanitized = _CONTROL_CHARS.sub(" ", text)
    sanitized = _WHITESPACE.sub(" ", sanitized).strip()
    return sanitized.casefold()


__all__ = ["normalize_search_text"]
