"""Metadata codec tests."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from shelfmark.catalog.codec import decode_item, encode_item, parse_header
from shelfmark.catalog.models import Item


def _item(**overrides: object) -> Item:
    """Return a fully populated item for codec tests.

    Args:
        overrides: Field values replacing the defaults.

    Returns:
        Item: Sample item.
    """
    values: dict[str, object] = {
        "id": "item-1700000000000",
        "title": "My Note",
        "description": "A short description.\nSpanning two lines.",
        "link": "https://example.com/articles?id=1",
        "banner": "https://example.com/banner.png",
        "type": "article",
        "icon": "icons/book.svg",
        "tags": ["reading", "python"],
        "folder": "Items/Reading",
        "collection_id": "col-7",
        "collection_title": "Reading",
        "collection_parent_id": "col-1",
        "created_at": datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 3, 2, 18, 5, 12, 345000, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return Item(**values)


def test_encode_then_decode_recovers_item() -> None:
    item = _item()

    decoded = decode_item(encode_item(item), "Elsewhere/My Note.md")

    assert decoded == item


def test_encode_then_decode_with_optional_fields_absent() -> None:
    item = _item(banner=None, icon=None, collection_parent_id=None, tags=[], link="")

    decoded = decode_item(encode_item(item), "Items/Reading/My Note.md")

    assert decoded == item


def test_encode_writes_current_generation_keys() -> None:
    text = encode_item(_item())
    header = text.split("\n---\n", 1)[0]

    assert "source: https://example.com/articles?id=1" in header
    assert "created: 2024-03-01T09:30:00+00:00" in header
    assert "lastupdate: " in header
    assert 'collectionPath: "Items/Reading"' in header
    assert "\nlink:" not in header
    assert "createdAt" not in header
    assert header.endswith("tags:\n  - reading\n  - python")


def test_encode_renders_readable_body() -> None:
    text = encode_item(_item())

    assert "# My Note" in text
    assert "![Banner](https://example.com/banner.png)" in text
    assert "- **Link**: [Source](https://example.com/articles?id=1)" in text
    assert "- **Type**: article" in text
    assert "- **Collection**: Reading (Items/Reading)" in text
    assert "- **Tags**: #reading, #python" in text


def test_legacy_keys_decode_like_current_keys() -> None:
    current = "\n".join(
        [
            "---",
            "id: item-1",
            'title: "Legacy"',
            "source: https://example.com",
            "created: 2023-01-01T00:00:00+00:00",
            "lastupdate: 2023-01-02T00:00:00+00:00",
            "tags:",
            "  - old",
            "---",
        ]
    )
    legacy = "\n".join(
        [
            "---",
            "id: item-1",
            'title: "Legacy"',
            "link: https://example.com",
            "createdAt: 2023-01-01T00:00:00+00:00",
            "updatedAt: 2023-01-02T00:00:00+00:00",
            "tags:",
            "  - old",
            "---",
        ]
    )

    assert decode_item(legacy, "Notes/Legacy.md") == decode_item(current, "Notes/Legacy.md")


def test_current_key_takes_priority_over_legacy_key() -> None:
    text = "---\nid: a\ntitle: T\nlink: https://old.example\nsource: https://new.example\n---\n"

    item = decode_item(text, "T.md")

    assert item is not None
    assert item.link == "https://new.example"


def test_missing_optional_fields_use_defaults() -> None:
    before = datetime.now(timezone.utc)
    item = decode_item("---\nid: item-9\ntitle: Bare\n---\nbody", "Projects/Web/Bare.md")
    after = datetime.now(timezone.utc)

    assert item is not None
    assert item.folder == "Projects/Web"
    assert item.collection_path == "Projects/Web"
    assert item.collection_title == "Web"
    assert item.link == ""
    assert item.type == "link"
    assert item.tags == []
    assert item.banner is None
    assert before <= item.created_at <= after
    assert before <= item.updated_at <= after


def test_unparsable_timestamp_falls_back_to_now() -> None:
    item = decode_item("---\nid: x\ntitle: T\ncreated: yesterday\n---\n", "T.md")

    assert item is not None
    assert item.created_at.tzinfo is not None


@pytest.mark.parametrize(
    "text",
    [
        "# Just a note\n\nNo header here.",
        "---\ntitle: No id\n---\n",
        "---\nid: item-1\n---\n",
        '---\nid: item-1\ntitle: ""\n---\n',
        "",
    ],
)
def test_non_item_documents_decode_to_none(text: str) -> None:
    assert decode_item(text, "Notes/file.md") is None


def test_tag_block_ends_at_next_top_level_key() -> None:
    block = "\n".join(
        [
            "tags:",
            "  - alpha ",
            "  -   ",
            "  - beta",
            "type: article",
            "  - not-a-tag",
        ]
    )

    fields, tags = parse_header(block)

    assert tags == ["alpha", "beta"]
    assert fields["type"] == "article"


def test_tag_block_ends_at_header_end() -> None:
    text = "---\nid: a\ntitle: T\ntags:\n  - one\n  - two\n---\n- three\n"

    item = decode_item(text, "T.md")

    assert item is not None
    assert item.tags == ["one", "two"]


def test_inline_tag_lists_are_accepted() -> None:
    flow = decode_item('---\nid: a\ntitle: T\ntags: [one, "two"]\n---\n', "T.md")
    comma = decode_item("---\nid: a\ntitle: T\ntags: one, two\n---\n", "T.md")

    assert flow is not None and flow.tags == ["one", "two"]
    assert comma is not None and comma.tags == ["one", "two"]


def test_quoted_values_are_unquoted() -> None:
    item = decode_item(
        "---\nid: 'item-2'\ntitle: \"Say \"hi\"\"\ncollectionTitle: \"Quotes\"\n---\n",
        "Q/Say.md",
    )

    assert item is not None
    assert item.id == "item-2"
    assert item.title == 'Say "hi"'
    assert item.collection_title == "Quotes"


def test_crlf_documents_decode() -> None:
    text = encode_item(_item()).replace("\n", "\r\n")

    assert decode_item(text, "Items/Reading/My Note.md") == _item()


def test_header_description_key_wins_over_body() -> None:
    text = "---\nid: a\ntitle: T\ndescription: From header\n---\n## Description\nFrom body\n"

    item = decode_item(text, "T.md")

    assert item is not None
    assert item.description == "From header"


def test_description_with_headings_and_rules_round_trips() -> None:
    item = _item(description="Intro\n\n## Notes\nmore\n---\ntail")

    decoded = decode_item(encode_item(item), "Items/Reading/My Note.md")

    assert decoded is not None
    assert decoded.description == "Intro\n\n## Notes\nmore\n---\ntail"
    assert decoded == item


def test_hand_written_description_stops_at_next_section() -> None:
    text = "---\nid: a\ntitle: T\n---\n## Description\nFirst line\n## Other\nignored\n"

    item = decode_item(text, "T.md")

    assert item is not None
    assert item.description == "First line"
