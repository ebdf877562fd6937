"""Tests for JSON/JSONL item ingesters."""

import json
from datetime import datetime, timezone

import pytest

from pkmindex.ingesters import JsonIngester, JsonLinesIngester, get_ingester, register_ingester
from pkmindex import ingesters
from pkmindex.ingesters.records import item_from_dict
from pkmindex.protocols import Ingester

RECORD = {
    "id": "m1",
    "title": "Update",
    "content": "Hello",
    "created_at": "2024-03-01T09:00:00Z",
    "source_type": "gmail",
    "tags": ["source:gmail_work", "inbox"],
    "metadata": {"thread_id": "T1", "from": "alice@x.com"},
    "links": [{"url": "https://meet.test/x", "type": "meeting_url"}],
}


class TestRecords:

    def test_full_record(self):
        item = item_from_dict(RECORD)

        assert item.id == "m1"
        assert item.created_at == datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
        assert item.thread_id == "T1"
        assert item.source_name == "gmail_work"
        assert item.links[0].type == "meeting_url"
        assert item.links[0].title == ""

    def test_minimal_record(self):
        item = item_from_dict({"id": 42, "created_at": "2024-03-01T09:00:00+02:00"})

        assert item.id == "42"
        assert item.title == ""
        assert item.source_name == "unknown"
        assert item.created_at.utcoffset().total_seconds() == 7200

    @pytest.mark.parametrize("record", [
        {"created_at": "2024-03-01T09:00:00Z"},
        {"id": "m1"},
        {"id": "m1", "created_at": "yesterday"},
    ])
    def test_invalid_records(self, record):
        with pytest.raises(ValueError):
            item_from_dict(record)


class TestJsonIngester:

    def test_reads_array(self, tmp_path):
        path = tmp_path / "items.json"
        path.write_text(json.dumps([RECORD, dict(RECORD, id="m2")]))

        ingester = get_ingester(path)
        assert isinstance(ingester, JsonIngester)
        assert [i.id for i in ingester.ingest(path)] == ["m1", "m2"]

    def test_rejects_non_array(self, tmp_path):
        path = tmp_path / "items.json"
        path.write_text(json.dumps(RECORD))

        with pytest.raises(ValueError, match="JSON array"):
            list(JsonIngester().ingest(path))


class TestJsonLinesIngester:

    def test_reads_lines_skipping_blanks(self, tmp_path):
        path = tmp_path / "items.jsonl"
        path.write_text(json.dumps(RECORD) + "\n\n" + json.dumps(dict(RECORD, id="m2")) + "\n")

        ingester = get_ingester(path)
        assert isinstance(ingester, JsonLinesIngester)
        assert [i.id for i in ingester.ingest(path)] == ["m1", "m2"]

    def test_ndjson_suffix(self, tmp_path):
        path = tmp_path / "items.ndjson"
        path.write_text(json.dumps(RECORD) + "\n")
        assert isinstance(get_ingester(path), JsonLinesIngester)


class TestRegistry:

    def test_unsupported_or_missing(self, tmp_path):
        (tmp_path / "notes.txt").write_text("hi")
        assert get_ingester(tmp_path / "notes.txt") is None
        assert get_ingester(tmp_path / "missing.json") is None

    def test_register_ingester(self, tmp_path):
        class TextIngester:
            format_name = "txt"

            def can_handle(self, source):
                return source.suffix == ".txt"

            def ingest(self, source):
                return iter([])

        custom = TextIngester()
        assert isinstance(custom, Ingester)
        register_ingester(custom)
        try:
            assert get_ingester(tmp_path / "notes.txt") is custom
        finally:
            ingesters._INGESTERS.remove(custom)
