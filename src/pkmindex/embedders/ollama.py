"""Ollama HTTP embedding provider."""

import logging
import time

import numpy as np
import requests

from pkmindex.embedders.errors import EmbeddingError

logger = logging.getLogger(__name__)


class OllamaEmbedder:
    """Embedding provider backed by a local Ollama server (/api/embed).

    Transient failures (connection errors, HTTP 5xx, empty embeddings) are
    retried with exponential backoff; anything else fails immediately.
    """

    DEFAULT_URL = "http://localhost:11434"
    MAX_ATTEMPTS = 3
    BASE_DELAY = 0.5  # seconds, doubled per retry
    TIMEOUT = 120

    def __init__(self, model: str, dimensions: int, base_url: str | None = None):
        self._model_name = model
        self._dimensions = dimensions
        self.base_url = (base_url or self.DEFAULT_URL).rstrip("/")
        self._session = requests.Session()

    @property
    def dimension(self) -> int:
        return self._dimensions

    @property
    def model_name(self) -> str:
        return self._model_name

    def embed(self, text: str) -> np.ndarray:
        """Embed one text, retrying transient failures.

        Raises:
            EmbeddingError: When the server keeps failing or answers badly
        """
        last_error: EmbeddingError | None = None

        for attempt in range(self.MAX_ATTEMPTS):
            if attempt > 0:
                delay = self.BASE_DELAY * (2 ** (attempt - 1))
                logger.debug("Retrying Ollama embed in %.1fs (%s)", delay, last_error)
                time.sleep(delay)

            try:
                return self._embed_once(text)
            except EmbeddingError as e:
                if not e.retriable:
                    raise
                last_error = e

        raise EmbeddingError(
            f"failed after {self.MAX_ATTEMPTS} attempts: {last_error}"
        ) from last_error

    def _embed_once(self, text: str) -> np.ndarray:
        try:
            resp = self._session.post(
                f"{self.base_url}/api/embed",
                json={"model": self._model_name, "input": text},
                timeout=self.TIMEOUT,
            )
        except requests.RequestException as e:
            raise EmbeddingError(f"cannot reach Ollama at {self.base_url}: {e}", retriable=True) from e

        if resp.status_code != 200:
            raise EmbeddingError(
                f"Ollama API error (status {resp.status_code}): {resp.text}",
                retriable=resp.status_code >= 500,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise EmbeddingError(f"failed to decode Ollama response: {e}") from e

        # Newer servers return "embeddings" (a batch), older ones "embedding"
        embeddings = data.get("embeddings") or []
        if embeddings and embeddings[0]:
            values = embeddings[0]
        elif data.get("embedding"):
            values = data["embedding"]
        else:
            raise EmbeddingError("empty embedding returned from Ollama", retriable=True)

        return np.asarray(values, dtype=np.float32)

    def close(self) -> None:
        self._session.close()
