"""Local embedding provider backed by sentence-transformers."""

import logging

import numpy as np
from sentence_transformers import SentenceTransformer

from pkmindex.embedders.errors import EmbeddingError

logger = logging.getLogger(__name__)


class SentenceTransformerEmbedder:
    """Runs a sentence-transformers model in-process.

    The model is loaded on the first embed, so commands that never embed
    (stats, a fully skipped index run) don't pay for loading torch weights.
    Vectors are L2-normalized, which makes Euclidean ranking in the store
    agree with cosine similarity.
    """

    DEFAULT_MODEL = "all-MiniLM-L6-v2"

    def __init__(self, model_name: str | None = None, dimensions: int | None = None):
        """
        Args:
            model_name: Hugging Face model id; defaults to all-MiniLM-L6-v2
            dimensions: Expected vector length. When set, a model producing
                another length is rejected on load.
        """
        self._model_name = model_name or self.DEFAULT_MODEL
        self._expected_dimensions = dimensions
        self._model: SentenceTransformer | None = None

    def _load(self) -> SentenceTransformer:
        if self._model is None:
            logger.info("Loading embedding model %s", self._model_name)
            model = SentenceTransformer(self._model_name)
            actual = model.get_sentence_embedding_dimension()
            if self._expected_dimensions and actual != self._expected_dimensions:
                raise EmbeddingError(
                    f"model {self._model_name} produces {actual}-dimensional vectors, "
                    f"configured dimensions is {self._expected_dimensions}"
                )
            self._model = model
        return self._model

    @property
    def dimension(self) -> int:
        if self._expected_dimensions:
            return self._expected_dimensions
        return self._load().get_sentence_embedding_dimension()

    @property
    def model_name(self) -> str:
        return self._model_name

    def embed(self, text: str) -> np.ndarray:
        """Embed one document or query; returns shape (dimension,) float32."""
        vector = self._load().encode(
            text,
            convert_to_numpy=True,
            normalize_embeddings=True,
            show_progress_bar=False,
        )
        return np.asarray(vector, dtype=np.float32)

    def close(self) -> None:
        self._model = None
