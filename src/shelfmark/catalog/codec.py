"""Conversion between items and their on-disk markdown documents.

Each document starts with a header block delimited by ``---`` lines followed by
a human-readable rendering of the item. The header is read with a small
line-oriented parser rather than a general YAML loader because only a narrow
subset is ever written, and documents written by older releases must keep
decoding even when they are not valid YAML.

Header grammar (EBNF)::

    header      = marker , NL , { line , NL } , marker ;
    marker      = "---" ;
    line        = pair | tag-entry | other ;
    pair        = key , ":" , [ value ] ;          (* key begins in column 0 *)
    key         = letter , { letter | digit | "_" | "-" } ;
    tag-block   = "tags" , ":" , [ inline-tags ] , { tag-entry | other } ;
    tag-entry   = { WS } , "-" , [ WS+ , tag ] ;
    inline-tags = "[" , tag , { "," , tag } , "]" | tag , { "," , tag } ;

    (* A tag-block is terminated by the first following pair or by the closing
       marker. tag-entry lines outside a tag-block and "other" lines are
       ignored. *)

Header keys have been renamed across releases; decoding tries the candidates in
``LINK_KEYS``, ``CREATED_KEYS``, ``UPDATED_KEYS`` and ``FOLDER_KEYS`` in order and
never attempts to detect which release wrote a document.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Mapping, Optional, Sequence

from .models import DEFAULT_ITEM_TYPE, Item
from .paths import folder_name, normalize_path, parent_path

LOGGER = logging.getLogger(__name__)

HEADER_MARKER = "---"

LINK_KEYS = ("source", "link")
CREATED_KEYS = ("created", "createdAt")
UPDATED_KEYS = ("lastupdate", "updatedAt")
FOLDER_KEYS = ("collectionPath", "folder")

_HEADER = re.compile(r"\A---[ \t]*\n(?P<header>.*?)\n---[ \t]*(?:\n|\Z)", re.DOTALL)
_PAIR = re.compile(r"^(?P<key>[A-Za-z_][\w-]*)[ \t]*:(?P<value>.*)$")
_TAG_ENTRY = re.compile(r"^\s*-(?:\s+(?P<tag>.*))?$")
_DESCRIPTION_HEADING = "## Description"
_DETAILS_MARKER = "\n---\n## Details"


def encode_item(item: Item) -> str:
    """Render ``item`` as a markdown document with a metadata header.

    Current-generation key names are always written.

    Args:
        item: Item to serialize.

    Returns:
        str: Document text.
    """

    header = [
        HEADER_MARKER,
        f"id: {item.id}",
        f'title: "{item.title}"',
        f"source: {item.link}".rstrip(),
        f"created: {item.created_at.isoformat()}",
        f"lastupdate: {item.updated_at.isoformat()}",
        f"collectionId: {item.collection_id}".rstrip(),
        f'collectionTitle: "{item.collection_title}"',
        f'collectionPath: "{item.folder}"',
    ]
    if item.collection_parent_id:
        header.append(f"collectionParentId: {item.collection_parent_id}")
    if item.banner:
        header.append(f"banner: {item.banner}")
    if item.type:
        header.append(f"type: {item.type}")
    if item.icon:
        header.append(f"icon: {item.icon}")
    header.append("tags:")
    header.extend(f"  - {tag}" for tag in item.tags)
    header.append(HEADER_MARKER)

    body = ["", f"# {item.title}", ""]
    if item.banner:
        body.extend([f"![Banner]({item.banner})", ""])
    body.extend(
        [
            _DESCRIPTION_HEADING,
            item.description,
            "",
            HEADER_MARKER,
            "## Details",
            f"- **Link**: [Source]({item.link})",
            f"- **Type**: {item.type or DEFAULT_ITEM_TYPE}",
            f"- **Collection**: {item.collection_title} ({item.folder})",
            f"- **Tags**: {', '.join(f'#{tag}' for tag in item.tags)}",
            f"- **Created**: {_display_date(item.created_at)}",
            f"- **Updated**: {_display_date(item.updated_at)}",
            "",
        ]
    )
    return "\n".join(header + body)


def decode_item(text: str, source_path: str) -> Optional[Item]:
    """Parse a markdown document back into an item.

    Args:
        text: Document contents.
        source_path: Store path the document was read from.

    Returns:
        Optional[Item]: Decoded item, or ``None`` when the document has no header
        block or lacks an ``id`` or ``title``.
    """

    normalized = text.lstrip("\ufeff").replace("\r\n", "\n")
    match = _HEADER.match(normalized)
    if match is None:
        LOGGER.debug("Skipping %s: no header block.", source_path)
        return None

    fields, tags = parse_header(match.group("header"))
    item_id = fields.get("id")
    title = fields.get("title")
    if not item_id or not title:
        LOGGER.debug("Skipping %s: header lacks id or title.", source_path)
        return None

    folder = _first_present(fields, FOLDER_KEYS)
    folder = normalize_path(folder) if folder else parent_path(normalize_path(source_path))
    description = fields.get("description")
    if description is None:
        description = _body_description(normalized[match.end() :])

    now = datetime.now(timezone.utc)
    return Item(
        id=item_id,
        title=title,
        description=description,
        link=_first_present(fields, LINK_KEYS) or "",
        banner=fields.get("banner") or None,
        type=fields.get("type") or DEFAULT_ITEM_TYPE,
        icon=fields.get("icon") or None,
        tags=tags,
        folder=folder,
        collection_id=fields.get("collectionId", ""),
        collection_title=fields.get("collectionTitle") or folder_name(folder),
        collection_path=fields.get("collectionPath") or folder,
        collection_parent_id=fields.get("collectionParentId") or None,
        created_at=_parse_timestamp(_first_present(fields, CREATED_KEYS), now, source_path),
        updated_at=_parse_timestamp(_first_present(fields, UPDATED_KEYS), now, source_path),
    )


def parse_header(block: str) -> tuple[dict[str, str], list[str]]:
    """Split a header block into scalar fields and the tag list.

    Args:
        block: Header text between the markers, without the markers.

    Returns:
        tuple[dict[str, str], list[str]]: Unquoted scalar values keyed by header
        key, and the trimmed, non-empty tags in document order.
    """

    fields: dict[str, str] = {}
    tags: list[str] = []
    in_tags = False
    for line in block.split("\n"):
        if in_tags:
            entry = _TAG_ENTRY.match(line)
            if entry is not None:
                tags.append(_unquote((entry.group("tag") or "").strip()))
                continue
        pair = _PAIR.match(line)
        if pair is None:
            continue
        key = pair.group("key")
        value = pair.group("value").strip()
        if key == "tags":
            in_tags = True
            tags.extend(_inline_tags(value))
            continue
        in_tags = False
        fields[key] = _unquote(value)
    return fields, [tag for tag in tags if tag]


def _first_present(fields: Mapping[str, str], candidates: Sequence[str]) -> Optional[str]:
    for key in candidates:
        value = fields.get(key)
        if value:
            return value
    return None


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def _inline_tags(value: str) -> list[str]:
    if not value:
        return []
    if value.startswith("[") and value.endswith("]"):
        value = value[1:-1]
    return [_unquote(part.strip()) for part in value.split(",")]


def _body_description(body: str) -> str:
    body = f"\n{body}"
    start = body.find(f"\n{_DESCRIPTION_HEADING}\n")
    if start == -1:
        return ""
    start += len(_DESCRIPTION_HEADING) + 2
    # The details block written by encode_item closes the section; the description
    # itself may contain headings and rules.
    end = body.rfind(_DETAILS_MARKER)
    if end >= start:
        return body[start:end].strip()

    collected: list[str] = []
    for line in body[start:].split("\n"):
        if line.strip() == HEADER_MARKER or line.startswith("## "):
            break
        collected.append(line)
    return "\n".join(collected).strip()


def _parse_timestamp(value: Optional[str], default: datetime, source_path: str) -> datetime:
    if not value:
        return default
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        LOGGER.debug("Unparsable timestamp %r in %s; using current time.", value, source_path)
        return default


def _display_date(value: datetime) -> str:
    return value.strftime("%x")


__all__ = [
    "CREATED_KEYS",
    "FOLDER_KEYS",
    "HEADER_MARKER",
    "LINK_KEYS",
    "UPDATED_KEYS",
    "decode_item",
    "encode_item",
    "parse_header",
]
