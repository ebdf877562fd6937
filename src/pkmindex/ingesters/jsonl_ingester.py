"""Ingester for JSON Lines exports."""

import json
from pathlib import Path
from typing import Iterator

from pkmindex.ingesters.records import item_from_dict
from pkmindex.models import Item


class JsonLinesIngester:
    """Ingester for a .jsonl file, one record per line."""

    format_name = "jsonl"

    def can_handle(self, source: Path) -> bool:
        """Check if this is an existing .jsonl file."""
        return source.suffix.lower() in (".jsonl", ".ndjson") and source.is_file()

    def ingest(self, source: Path) -> Iterator[Item]:
        """Yield items line by line, skipping blank lines."""
        with open(source, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    yield item_from_dict(json.loads(line))
