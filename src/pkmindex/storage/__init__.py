"""SQLite-backed document and vector storage."""

from pkmindex.storage.store import DimensionMismatchError, VectorStore

__all__ = ["VectorStore", "DimensionMismatchError"]
