"""SQLite-backed document and vector storage."""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional, Sequence, Union

import numpy as np

from pkmindex.models import Document, SearchFilters, SearchResult, StoreStats
from pkmindex.storage.schema import SCHEMA
from pkmindex.utils import parse_rfc3339, to_rfc3339

logger = logging.getLogger(__name__)

Vector = Union[Sequence[float], np.ndarray]

UPSERT_SQL = """
INSERT INTO documents (
    source_id, thread_id, title, content, source_type, source_name,
    message_count, metadata, created_at, updated_at, indexed_at
)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT(thread_id, source_name) DO UPDATE SET
    source_id = excluded.source_id,
    title = excluded.title,
    content = excluded.content,
    source_type = excluded.source_type,
    message_count = excluded.message_count,
    metadata = excluded.metadata,
    created_at = excluded.created_at,
    updated_at = excluded.updated_at,
    indexed_at = excluded.indexed_at
"""

DOCUMENT_COLUMNS = """d.id, d.source_id, d.thread_id, d.title, d.content, d.source_type,
    d.source_name, d.message_count, d.metadata, d.created_at, d.updated_at, d.indexed_at"""


class DimensionMismatchError(ValueError):
    """A vector's length differs from the store's configured dimensionality."""

    def __init__(self, expected: int, actual: int | tuple[int, ...], what: str = "embedding"):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{what} dimensions mismatch: expected {expected}, got {actual}"
        )


class VectorStore:
    """SQLite-backed store for documents and their embeddings.

    Documents are unique per (thread_id, source_name). Vectors live in a
    separate table keyed by document id and are replaced by
    delete-then-insert inside the same transaction as the document row.

    Every operation opens its own connection, so concurrent indexing runs
    never share one. WAL journaling gives concurrent readers and a single
    writer.
    """

    BUSY_TIMEOUT = 30.0  # seconds to wait for the write lock

    def __init__(self, path: Path | str, dimensions: int):
        if dimensions <= 0:
            raise ValueError(f"dimensions must be positive, got {dimensions}")
        self.path = Path(path)
        self.dimensions = dimensions

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database connections."""
        conn = sqlite3.connect(self.path, timeout=self.BUSY_TIMEOUT)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def initialize(self) -> None:
        """Create schema if not exists and pin the store's dimensionality.

        Raises:
            DimensionMismatchError: If the store was created with another
                dimensionality
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.connection() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(SCHEMA)

            row = conn.execute(
                "SELECT value FROM store_metadata WHERE key = 'dimensions'"
            ).fetchone()
            if row is None:
                conn.execute(
                    "INSERT INTO store_metadata (key, value) VALUES ('dimensions', ?)",
                    (str(self.dimensions),),
                )
            elif int(row["value"]) != self.dimensions:
                raise DimensionMismatchError(
                    int(row["value"]), self.dimensions, what="store"
                )

    def set_metadata(self, key: str, value: str) -> None:
        """Store a metadata key-value pair."""
        with self.connection() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO store_metadata (key, value) VALUES (?, ?)",
                (key, value),
            )

    def get_metadata(self, key: str) -> Optional[str]:
        """Retrieve a metadata value by key."""
        with self.connection() as conn:
            row = conn.execute(
                "SELECT value FROM store_metadata WHERE key = ?", (key,)
            ).fetchone()
            return row["value"] if row else None

    def _as_vector(self, values: Vector, what: str) -> np.ndarray:
        vector = np.asarray(values, dtype=np.float32)
        if vector.ndim != 1 or vector.shape[0] != self.dimensions:
            actual = vector.shape[0] if vector.ndim == 1 else vector.shape
            raise DimensionMismatchError(self.dimensions, actual, what=what)
        return vector

    # Write operations

    def upsert_document(self, doc: Document, embedding: Vector) -> int:
        """Insert or replace a document and its embedding.

        On (thread_id, source_name) conflict the row is fully replaced but
        keeps its id. The old vector is deleted and the new one inserted in
        the same transaction.

        Args:
            doc: Document to store (its id field is ignored)
            embedding: Vector of exactly ``dimensions`` floats

        Returns:
            The internal document id

        Raises:
            DimensionMismatchError: Before any write, on a wrong-length vector
        """
        vector = self._as_vector(embedding, "embedding")
        metadata_json = json.dumps(doc.metadata, ensure_ascii=False)
        indexed_at = to_rfc3339(datetime.now(timezone.utc))

        with self.connection() as conn:
            conn.execute(
                UPSERT_SQL,
                (
                    doc.source_id,
                    doc.thread_id,
                    doc.title,
                    doc.content,
                    doc.source_type,
                    doc.source_name,
                    doc.message_count,
                    metadata_json,
                    to_rfc3339(doc.created_at),
                    to_rfc3339(doc.updated_at),
                    indexed_at,
                ),
            )

            # lastrowid is unreliable for the update branch of an upsert
            doc_id = conn.execute(
                "SELECT id FROM documents WHERE thread_id = ? AND source_name = ?",
                (doc.thread_id, doc.source_name),
            ).fetchone()["id"]

            conn.execute("DELETE FROM vectors WHERE document_id = ?", (doc_id,))
            conn.execute(
                "INSERT INTO vectors (document_id, embedding) VALUES (?, ?)",
                (doc_id, vector.tobytes()),
            )

        logger.debug(
            "Upserted document %d (%s/%s)", doc_id, doc.source_name, doc.thread_id
        )
        return doc_id

    # Read operations

    def is_indexed(self, thread_id: str, source_name: str) -> bool:
        """Check whether a thread is already stored for a source."""
        with self.connection() as conn:
            row = conn.execute(
                "SELECT 1 FROM documents WHERE thread_id = ? AND source_name = ? LIMIT 1",
                (thread_id, source_name),
            ).fetchone()
            return row is not None

    def get_indexed_thread_ids(self, source_name: str) -> set[str]:
        """Return every thread id stored for a source."""
        with self.connection() as conn:
            cursor = conn.execute(
                "SELECT thread_id FROM documents WHERE source_name = ?", (source_name,)
            )
            return {row["thread_id"] for row in cursor}

    def get_document(self, thread_id: str, source_name: str) -> Optional[Document]:
        """Fetch a single document by its uniqueness key."""
        with self.connection() as conn:
            row = conn.execute(
                f"SELECT {DOCUMENT_COLUMNS} FROM documents d "
                "WHERE d.thread_id = ? AND d.source_name = ?",
                (thread_id, source_name),
            ).fetchone()
            return self._row_to_document(row) if row else None

    def count(self) -> int:
        """Total number of stored documents."""
        with self.connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM documents").fetchone()[0]

    def search(
        self,
        query_embedding: Vector,
        limit: int = 10,
        filters: Optional[SearchFilters] = None,
    ) -> list[SearchResult]:
        """Find the documents nearest to a query embedding.

        Source filters narrow the candidates in SQL before ranking. Distance
        is Euclidean; score is 1 / (1 + distance). min_score is applied
        after the ``limit`` nearest are selected.

        Returns:
            Results ordered by ascending distance (closest first)
        """
        query = self._as_vector(query_embedding, "query embedding")
        filters = filters or SearchFilters()
        if limit <= 0:
            return []

        sql = (
            f"SELECT {DOCUMENT_COLUMNS}, v.embedding "
            "FROM vectors v JOIN documents d ON v.document_id = d.id"
        )
        clauses = []
        args: list[str] = []
        if filters.source_type:
            clauses.append("d.source_type = ?")
            args.append(filters.source_type)
        if filters.source_name:
            clauses.append("d.source_name = ?")
            args.append(filters.source_name)
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)

        with self.connection() as conn:
            rows = conn.execute(sql, args).fetchall()

        if not rows:
            return []

        matrix = np.vstack(
            [np.frombuffer(row["embedding"], dtype=np.float32) for row in rows]
        )
        distances = np.linalg.norm(matrix - query, axis=1)
        nearest = np.argsort(distances, kind="stable")[:limit]

        results = []
        for idx in nearest:
            distance = float(distances[idx])
            score = 1.0 / (1.0 + distance)
            if filters.min_score > 0 and score < filters.min_score:
                continue
            results.append(
                SearchResult(
                    document=self._row_to_document(rows[idx]),
                    distance=distance,
                    score=score,
                )
            )
        return results

    def stats(self) -> StoreStats:
        """Aggregate statistics about the stored corpus."""
        stats = StoreStats()
        with self.connection() as conn:
            stats.total_documents = conn.execute(
                "SELECT COUNT(*) FROM documents"
            ).fetchone()[0]
            stats.total_threads = conn.execute(
                "SELECT COUNT(DISTINCT thread_id) FROM documents"
            ).fetchone()[0]

            for row in conn.execute(
                "SELECT source_name, COUNT(*) AS n FROM documents GROUP BY source_name"
            ):
                stats.documents_by_source[row["source_name"]] = row["n"]

            for row in conn.execute(
                "SELECT source_type, COUNT(*) AS n FROM documents GROUP BY source_type"
            ):
                stats.documents_by_type[row["source_type"]] = row["n"]

            row = conn.execute(
                "SELECT MIN(created_at) AS oldest, MAX(updated_at) AS newest, "
                "AVG(message_count) AS average FROM documents"
            ).fetchone()
            stats.oldest_document = parse_rfc3339(row["oldest"])
            stats.newest_document = parse_rfc3339(row["newest"])
            stats.average_message_count = float(row["average"] or 0.0)

        return stats

    @staticmethod
    def _row_to_document(row: sqlite3.Row) -> Document:
        return Document(
            id=row["id"],
            source_id=row["source_id"],
            thread_id=row["thread_id"],
            title=row["title"],
            content=row["content"],
            source_type=row["source_type"],
            source_name=row["source_name"],
            message_count=row["message_count"],
            metadata=json.loads(row["metadata"]),
            created_at=parse_rfc3339(row["created_at"]),
            updated_at=parse_rfc3339(row["updated_at"]),
            indexed_at=parse_rfc3339(row["indexed_at"]),
        )
