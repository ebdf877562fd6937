"""Input file handlers (ingesters) for pkmindex."""

from pathlib import Path
from typing import Optional

from pkmindex.ingesters.json_ingester import JsonIngester
from pkmindex.ingesters.jsonl_ingester import JsonLinesIngester
from pkmindex.protocols import Ingester

# Registry of available ingesters
_INGESTERS: list[Ingester] = [
    JsonIngester(),
    JsonLinesIngester(),
]


def get_ingester(source: Path | str) -> Optional[Ingester]:
    """Find an ingester that can handle the given file.

    Args:
        source: Path to the exported items file

    Returns:
        An Ingester instance that can handle the source, or None
    """
    source_path = Path(source)
    for ingester in _INGESTERS:
        if ingester.can_handle(source_path):
            return ingester
    return None


def register_ingester(ingester: Ingester) -> None:
    """Register a custom ingester (for plugins/extensions).

    Args:
        ingester: An object implementing the Ingester protocol
    """
    _INGESTERS.append(ingester)


__all__ = ["get_ingester", "register_ingester", "JsonIngester", "JsonLinesIngester"]
