"""Unit tests for JSON export of collections."""

from __future__ import annotations

import json
import typing as typ

from cms_pages.export import export_collection, serialise_collection
from cms_pages.records import Record

if typ.TYPE_CHECKING:
    from pathlib import Path


def test_export_collection_writes_utf8_json(tmp_path: Path) -> None:
    """Exports keep order and non-ASCII text and create parent folders."""
    records = (
        Record.from_header(
            "2024-07-15-trends.md", {"title": "清邁", "order": 1}, "B"
        ),
        Record.from_header("guide.md", {"title": "Guide"}),
    )
    target = tmp_path / "public" / "articles.json"

    written = export_collection(records, target, include_body=True)

    text = written.read_text(encoding="utf-8")
    assert "清邁" in text, "expected non-ASCII text to be kept readable"
    payload = json.loads(text)
    assert [item["slug"] for item in payload] == ["trends", "guide"]
    assert payload[0]["body"] == "B"


def test_serialise_empty_collection() -> None:
    """An empty collection serialises to an empty JSON array."""
    assert serialise_collection(()) == "[]\n"
