"""
Shared pytest fixtures for pkmindex tests.

Provides a deterministic fake embedder so no model is ever loaded.
"""

import hashlib
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
import pytest

from pkmindex.models import Item
from pkmindex.storage import VectorStore

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


class FakeEmbedder:
    """
    Deterministic embedding provider for testing.

    Vectors are derived from a hash of the text. Texts containing any of
    the ``fail_on`` markers raise instead.
    """

    model_name = "fake-model"

    def __init__(self, dimension: int = 8, fail_on: tuple[str, ...] = ()):
        self.dimension = dimension
        self.fail_on = fail_on
        self.calls: list[str] = []
        self.closed = False

    def embed(self, text: str) -> np.ndarray:
        self.calls.append(text)
        for marker in self.fail_on:
            if marker in text:
                raise RuntimeError("embedding service unavailable")
        digest = hashlib.sha256(text.encode()).digest()
        return np.array(
            [digest[i % len(digest)] / 255.0 for i in range(self.dimension)],
            dtype=np.float32,
        )

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def embedder() -> FakeEmbedder:
    """Fresh 8-dimensional fake embedder."""
    return FakeEmbedder()


@pytest.fixture
def store(tmp_path: Path) -> VectorStore:
    """Initialized 8-dimensional store in a temp directory."""
    s = VectorStore(tmp_path / "vectors.db", dimensions=8)
    s.initialize()
    return s


@pytest.fixture
def store3(tmp_path: Path) -> VectorStore:
    """Initialized 3-dimensional store."""
    s = VectorStore(tmp_path / "vectors3.db", dimensions=3)
    s.initialize()
    return s


@pytest.fixture
def make_item():
    """Factory for Items with sensible email defaults."""

    def _make(
        id: str,
        title: str = "Subject",
        content: str = "Body",
        created_at: datetime = T0,
        thread_id: str | None = None,
        source_type: str = "gmail",
        source_name: str | None = None,
        sender: str | None = None,
        to: str | None = None,
        cc: str | None = None,
        bcc: str | None = None,
        **extra,
    ) -> Item:
        metadata = dict(extra)
        if thread_id is not None:
            metadata["thread_id"] = thread_id
        for key, value in (("from", sender), ("to", to), ("cc", cc), ("bcc", bcc)):
            if value is not None:
                metadata[key] = value
        tags = [f"source:{source_name}"] if source_name else []
        return Item(
            id=id,
            title=title,
            content=content,
            created_at=created_at,
            source_type=source_type,
            tags=tags,
            metadata=metadata,
        )

    return _make
