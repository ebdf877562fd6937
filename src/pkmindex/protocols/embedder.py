"""Protocol for embedding model providers."""

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Protocol for embedding model providers.

    Allows swapping between local models (sentence-transformers),
    HTTP services (Ollama), or deterministic fakes in tests.
    """

    @property
    def dimension(self) -> int:
        """Return the embedding dimension."""
        ...

    @property
    def model_name(self) -> str:
        """Return identifier for the model used."""
        ...

    def embed(self, text: str) -> np.ndarray:
        """Generate the embedding for a single text.

        Returns: numpy array of shape (embedding_dim,)
        """
        ...

    def close(self) -> None:
        """Release any resources held by the provider."""
        ...
