"""Protocol for item source handlers."""

from pathlib import Path
from typing import Iterator, Protocol, runtime_checkable

from pkmindex.models import Item


@runtime_checkable
class Ingester(Protocol):
    """Protocol for reading already-fetched items from an export file.

    Implementations handle different file formats (JSON array, JSON Lines).
    Uses structural subtyping - no inheritance required.
    """

    @property
    def format_name(self) -> str:
        """Return identifier for this format (e.g., 'json', 'jsonl')."""
        ...

    def can_handle(self, source: Path) -> bool:
        """Check if this ingester can read the given file."""
        ...

    def ingest(self, source: Path) -> Iterator[Item]:
        """Yield items from the file."""
        ...
