"""Data models for pkmindex."""

from pkmindex.models.document import Document, SearchFilters, SearchResult, StoreStats
from pkmindex.models.item import Group, Item, Link

__all__ = [
    "Item",
    "Link",
    "Group",
    "Document",
    "SearchFilters",
    "SearchResult",
    "StoreStats",
]
