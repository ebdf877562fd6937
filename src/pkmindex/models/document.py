"""Persisted documents and search/statistics records."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass
class Document:
    """A searchable document representing one group's synthesized content."""

    thread_id: str
    source_name: str
    title: str
    content: str
    created_at: datetime
    updated_at: datetime
    source_id: str = ""
    source_type: str = ""
    message_count: int = 1
    metadata: dict[str, Any] = field(default_factory=dict)
    id: Optional[int] = None  # Assigned by the store
    indexed_at: Optional[datetime] = None


@dataclass
class SearchFilters:
    """Optional narrowing for search queries."""

    source_type: str = ""
    source_name: str = ""
    min_score: float = 0.0


@dataclass
class SearchResult:
    """A document with its distance from the query."""

    document: Document
    distance: float
    score: float


@dataclass
class StoreStats:
    """Aggregate statistics about the stored corpus."""

    total_documents: int = 0
    total_threads: int = 0
    documents_by_source: dict[str, int] = field(default_factory=dict)
    documents_by_type: dict[str, int] = field(default_factory=dict)
    oldest_document: Optional[datetime] = None
    newest_document: Optional[datetime] = None
    average_message_count: float = 0.0
