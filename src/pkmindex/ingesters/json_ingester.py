"""Ingester for JSON array exports."""

import json
from pathlib import Path
from typing import Iterator

from pkmindex.ingesters.records import item_from_dict
from pkmindex.models import Item


class JsonIngester:
    """Ingester for a .json file holding a list of records."""

    format_name = "json"

    def can_handle(self, source: Path) -> bool:
        """Check if this is an existing .json file."""
        return source.suffix.lower() == ".json" and source.is_file()

    def ingest(self, source: Path) -> Iterator[Item]:
        """Yield items from a JSON array.

        Args:
            source: Path to the JSON file

        Yields:
            Item objects in file order
        """
        with open(source, encoding="utf-8") as f:
            records = json.load(f)

        if not isinstance(records, list):
            raise ValueError(f"{source}: expected a JSON array of records")

        for record in records:
            yield item_from_dict(record)
