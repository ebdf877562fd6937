"""Indexing pipeline: group, synthesize, embed and store items per source."""

import logging
import sqlite3
import time
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from pkmindex.builders import get_builder
from pkmindex.config import IndexOptions
from pkmindex.groupers import ThreadGrouper
from pkmindex.models import Document, Group, Item, StoreStats
from pkmindex.protocols import EmbeddingProvider
from pkmindex.storage import VectorStore
from pkmindex.utils import truncate_content

logger = logging.getLogger(__name__)

# Errors from the store that abort one group's upsert but not the run
STORE_ERRORS = (sqlite3.Error, OSError, ValueError, TypeError)


@dataclass
class IndexResult:
    """Outcome counts for one source."""

    source_name: str
    indexed: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def processed(self) -> int:
        return self.indexed + self.skipped + self.failed


class IndexingError(RuntimeError):
    """A failure that prevents indexing a whole source."""

    def __init__(self, source_name: str, message: str):
        self.source_name = source_name
        super().__init__(f"failed to index source {source_name}: {message}")


class IndexingPipeline:
    """Indexes one source's items into a VectorStore.

    Groups are processed sequentially in (start time, thread id) order.
    Already-indexed threads are skipped unless ``reindex`` is set. A failed
    embedding or upsert is logged and the run moves on to the next group.
    """

    PROGRESS_EVERY = 10

    def __init__(
        self,
        store: VectorStore,
        embedder: EmbeddingProvider,
        options: Optional[IndexOptions] = None,
        grouper: Optional[ThreadGrouper] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = store
        self.embedder = embedder
        self.options = options or IndexOptions()
        self.grouper = grouper or ThreadGrouper()
        self._sleep = sleep

    def index(
        self,
        source_name: str,
        items: Iterable[Item],
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> IndexResult:
        """Index a batch of items belonging to one source.

        Args:
            source_name: Source the items came from (e.g. 'gmail_work')
            items: Items to group and index
            should_stop: Checked between groups; returning True ends the run

        Returns:
            IndexResult with indexed/skipped/failed counts

        Raises:
            IndexingError: If the set of already-indexed threads can't be read
        """
        items = list(items)
        groups = self.grouper.ordered(self.grouper.group(items, source_name))
        logger.info(
            "Source %s: grouped %d items into %d threads",
            source_name, len(items), len(groups),
        )

        indexed_threads: set[str] = set()
        if not self.options.reindex:
            try:
                indexed_threads = self.store.get_indexed_thread_ids(source_name)
            except (sqlite3.Error, OSError) as e:
                raise IndexingError(source_name, f"failed to get indexed threads: {e}") from e
            logger.info("Source %s: already indexed: %d threads", source_name, len(indexed_threads))

        result = IndexResult(source_name=source_name)
        embedded_once = False

        for group in groups:
            if should_stop is not None and should_stop():
                logger.info("Source %s: stopped after %d threads", source_name, result.processed)
                break

            if result.processed and result.processed % self.PROGRESS_EVERY == 0:
                logger.info(
                    "Progress: %d indexed, %d skipped, %d failed (current: %s)",
                    result.indexed, result.skipped, result.failed, group.subject,
                )

            if group.thread_id in indexed_threads:
                result.skipped += 1
                continue

            builder = get_builder(group.source_type)
            full_content = builder.build_content(group)
            content = truncate_content(full_content, self.options.max_content_length)
            if len(content) != len(full_content):
                logger.debug(
                    "Truncated thread %s from %d to %d chars",
                    group.thread_id, len(full_content), self.options.max_content_length,
                )

            if embedded_once and self.options.delay > 0:
                self._sleep(self.options.delay)

            try:
                embedding = self.embedder.embed(content)
            except Exception as e:
                logger.warning(
                    "Failed to embed thread %s (%s, %d chars): %s",
                    group.thread_id, group.subject, len(full_content), e,
                )
                result.failed += 1
                continue
            embedded_once = True

            doc = self._build_document(group, content, builder.build_metadata(group))
            try:
                self.store.upsert_document(doc, embedding)
            except STORE_ERRORS as e:
                logger.warning("Failed to index thread %s: %s", group.thread_id, e)
                continue

            result.indexed += 1

        logger.info(
            "Source %s: %d indexed, %d skipped, %d failed",
            source_name, result.indexed, result.skipped, result.failed,
        )
        return result

    @staticmethod
    def _build_document(group: Group, content: str, metadata: dict) -> Document:
        return Document(
            source_id=group.items[0].id if group.items else "",
            thread_id=group.thread_id,
            title=group.subject,
            content=content,
            source_type=group.source_type,
            source_name=group.source_name,
            message_count=group.message_count,
            metadata=metadata,
            created_at=group.start_time,
            updated_at=group.end_time,
        )


def split_by_source(items: Iterable[Optional[Item]]) -> dict[str, list[Item]]:
    """Bucket items by source name (``source:`` tag, else source type)."""
    by_source: dict[str, list[Item]] = defaultdict(list)
    for item in items:
        if item is not None:
            by_source[item.source_name].append(item)
    return dict(by_source)


class VectorSink:
    """Sink that indexes fetched items into a vector store.

    Items are split per source and each source runs through its own
    IndexingPipeline pass.
    """

    name = "vector_db"

    def __init__(
        self,
        store: VectorStore,
        embedder: EmbeddingProvider,
        options: Optional[IndexOptions] = None,
    ):
        self.store = store
        self.embedder = embedder
        self.pipeline = IndexingPipeline(store, embedder, options)

    def write(
        self,
        items: Iterable[Optional[Item]],
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> list[IndexResult]:
        """Index items, one pipeline pass per source name (sorted).

        Raises:
            IndexingError: On the first source-level failure
        """
        by_source = split_by_source(items)
        results = []
        for source_name in sorted(by_source):
            results.append(self.pipeline.index(source_name, by_source[source_name], should_stop))

        logger.info(
            "Vector indexing complete: %d indexed, %d skipped, %d failed",
            sum(r.indexed for r in results),
            sum(r.skipped for r in results),
            sum(r.failed for r in results),
        )
        return results

    def stats(self) -> StoreStats:
        return self.store.stats()

    def close(self) -> None:
        self.embedder.close()
