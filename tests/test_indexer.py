"""Tests for the indexing pipeline and vector sink."""

import logging
from datetime import timedelta

import pytest

from pkmindex.config import IndexOptions
from pkmindex.indexer import IndexingError, IndexingPipeline, VectorSink, split_by_source
from pkmindex.storage import VectorStore
from pkmindex.utils.text import TRUNCATION_MARKER

from conftest import T0, FakeEmbedder


def thread(make_item, thread_id, count=2, start=T0, **kwargs):
    """Items forming one email thread, one hour apart."""
    return [
        make_item(
            f"{thread_id}-m{i}",
            title="Update" if i == 0 else "Re: Update",
            content=f"message {i} of {thread_id}",
            created_at=start + timedelta(hours=i),
            thread_id=thread_id,
            sender="alice@x.com",
            **kwargs,
        )
        for i in range(count)
    ]


class TestIndexingPipeline:

    def test_indexes_each_thread_once(self, store, embedder, make_item):
        items = thread(make_item, "T1") + thread(make_item, "T2", start=T0 + timedelta(days=1))
        pipeline = IndexingPipeline(store, embedder)

        result = pipeline.index("gmail_work", items)

        assert (result.indexed, result.skipped, result.failed) == (2, 0, 0)
        assert store.count() == 2
        assert store.get_indexed_thread_ids("gmail_work") == {"T1", "T2"}

    def test_second_run_skips_indexed_threads(self, store, embedder, make_item):
        items = thread(make_item, "T1") + thread(make_item, "T2", start=T0 + timedelta(days=1))
        pipeline = IndexingPipeline(store, embedder)
        pipeline.index("gmail_work", items)
        calls_after_first = len(embedder.calls)

        result = pipeline.index("gmail_work", items)

        assert (result.indexed, result.skipped, result.failed) == (0, 2, 0)
        assert len(embedder.calls) == calls_after_first
        assert store.count() == 2

    def test_reindex_replaces_in_place(self, store, embedder, make_item):
        items = thread(make_item, "T1")
        IndexingPipeline(store, embedder).index("gmail_work", items)
        first_id = store.get_document("T1", "gmail_work").id

        result = IndexingPipeline(store, embedder, IndexOptions(reindex=True)).index(
            "gmail_work", items
        )

        assert (result.indexed, result.skipped) == (1, 0)
        assert store.count() == 1
        assert store.get_document("T1", "gmail_work").id == first_id

    def test_same_thread_in_two_sources(self, store, embedder, make_item):
        pipeline = IndexingPipeline(store, embedder)
        pipeline.index("work", thread(make_item, "T1"))
        result = pipeline.index("personal", thread(make_item, "T1"))

        assert result.indexed == 1
        assert store.count() == 2

    def test_document_fields(self, store, embedder, make_item):
        items = thread(make_item, "T1", count=3)
        IndexingPipeline(store, embedder).index("gmail_work", items)

        doc = store.get_document("T1", "gmail_work")
        assert doc.title == "Update"
        assert doc.source_id == "T1-m0"
        assert doc.source_type == "gmail"
        assert doc.message_count == 3
        assert doc.created_at == T0
        assert doc.updated_at == T0 + timedelta(hours=2)
        assert doc.content.startswith("Thread: Update\n\n")
        assert doc.metadata["message_ids"] == ["T1-m0", "T1-m1", "T1-m2"]

    def test_truncation(self, store, embedder, make_item):
        items = [make_item("m1", content="x" * 500, thread_id="T1")]
        options = IndexOptions(max_content_length=50)

        IndexingPipeline(store, embedder, options).index("gmail_work", items)

        sent = embedder.calls[0]
        assert sent.endswith(TRUNCATION_MARKER)
        assert len(sent) == 50 + len(TRUNCATION_MARKER)
        assert store.get_document("T1", "gmail_work").content == sent

    def test_embed_failure_counted_and_run_continues(self, store, make_item, caplog):
        embedder = FakeEmbedder(fail_on=("of BAD",))
        items = thread(make_item, "BAD") + thread(make_item, "OK", start=T0 + timedelta(days=1))

        with caplog.at_level(logging.WARNING, logger="pkmindex.indexer"):
            result = IndexingPipeline(store, embedder).index("gmail_work", items)

        assert (result.indexed, result.skipped, result.failed) == (1, 0, 1)
        assert store.get_indexed_thread_ids("gmail_work") == {"OK"}
        assert "Failed to embed thread BAD" in caplog.text

    def test_failed_thread_retried_on_next_run(self, store, make_item):
        items = thread(make_item, "T1")
        IndexingPipeline(store, FakeEmbedder(fail_on=("message",))).index("s", items)

        result = IndexingPipeline(store, FakeEmbedder()).index("s", items)

        assert result.indexed == 1

    def test_store_failure_not_counted(self, store, make_item, caplog):
        # 4-dimensional vectors against an 8-dimensional store
        embedder = FakeEmbedder(dimension=4)

        with caplog.at_level(logging.WARNING, logger="pkmindex.indexer"):
            result = IndexingPipeline(store, embedder).index("s", thread(make_item, "T1"))

        assert (result.indexed, result.skipped, result.failed) == (0, 0, 0)
        assert store.count() == 0
        assert "Failed to index thread T1" in caplog.text

    def test_delay_between_embeddings(self, store, embedder, make_item):
        sleeps = []
        items = [
            make_item(f"m{i}", created_at=T0 + timedelta(minutes=i)) for i in range(3)
        ]
        pipeline = IndexingPipeline(
            store, embedder, IndexOptions(delay=0.25), sleep=sleeps.append
        )

        pipeline.index("s", items)

        assert sleeps == [0.25, 0.25]

    def test_no_delay_when_everything_skipped(self, store, embedder, make_item):
        sleeps = []
        items = [make_item("m1"), make_item("m2", created_at=T0 + timedelta(minutes=1))]
        IndexingPipeline(store, embedder).index("s", items)

        IndexingPipeline(
            store, embedder, IndexOptions(delay=1.0), sleep=sleeps.append
        ).index("s", items)

        assert sleeps == []

    def test_groups_embedded_in_time_order(self, store, embedder, make_item):
        items = [
            make_item("late", content="late", created_at=T0 + timedelta(days=2)),
            make_item("b", content="b-same", created_at=T0),
            make_item("a", content="a-same", created_at=T0),
        ]

        IndexingPipeline(store, embedder).index("s", items)

        order = [next(w for w in ("a-same", "b-same", "late") if w in c) for c in embedder.calls]
        assert order == ["a-same", "b-same", "late"]

    def test_should_stop(self, store, embedder, make_item):
        items = [make_item(f"m{i}", created_at=T0 + timedelta(minutes=i)) for i in range(5)]
        checks = []

        def should_stop():
            checks.append(1)
            return len(checks) > 2

        result = IndexingPipeline(store, embedder).index("s", items, should_stop=should_stop)

        assert result.indexed == 2
        assert store.count() == 2

    def test_unreadable_store_raises(self, tmp_path, embedder, make_item):
        store = VectorStore(tmp_path / "never_initialized.db", dimensions=8)

        with pytest.raises(IndexingError) as exc:
            IndexingPipeline(store, embedder).index("gmail_work", [make_item("m1")])

        assert exc.value.source_name == "gmail_work"
        assert "failed to index source gmail_work" in str(exc.value)

    def test_empty_input(self, store, embedder):
        result = IndexingPipeline(store, embedder).index("s", [])
        assert result.processed == 0
        assert embedder.calls == []


class TestVectorSink:

    def test_split_by_source(self, make_item):
        items = [
            make_item("a", source_name="work"),
            None,
            make_item("b", source_name="home"),
            make_item("c", source_type="google_drive"),
            make_item("d", source_name="work"),
        ]
        by_source = split_by_source(items)

        assert {k: [i.id for i in v] for k, v in by_source.items()} == {
            "work": ["a", "d"],
            "home": ["b"],
            "google_drive": ["c"],
        }

    def test_write_runs_each_source(self, store, embedder, make_item):
        items = [
            make_item("w1", thread_id="T1", source_name="work"),
            make_item("h1", thread_id="T1", source_name="home"),
            make_item("h2", thread_id="T2", source_name="home",
                      created_at=T0 + timedelta(hours=1)),
        ]
        sink = VectorSink(store, embedder)

        results = sink.write(items)

        assert [(r.source_name, r.indexed) for r in results] == [("home", 2), ("work", 1)]
        stats = sink.stats()
        assert stats.total_documents == 3
        assert stats.documents_by_source == {"home": 2, "work": 1}

    def test_close_closes_embedder(self, store, embedder):
        VectorSink(store, embedder).close()
        assert embedder.closed
