"""OpenAI-compatible HTTP embedding provider."""

import logging

import numpy as np
import requests

from pkmindex.embedders.errors import EmbeddingError

logger = logging.getLogger(__name__)


class OpenAIEmbedder:
    """Embedding provider for the OpenAI /v1/embeddings API.

    Also works against any server exposing the same endpoint. The requested
    ``dimensions`` is sent along so models that support shortening return
    vectors matching the store.
    """

    DEFAULT_URL = "https://api.openai.com"
    TIMEOUT = 120

    def __init__(self, model: str, dimensions: int, api_key: str, base_url: str | None = None):
        self._model_name = model
        self._dimensions = dimensions
        self.base_url = (base_url or self.DEFAULT_URL).rstrip("/")
        self._session = requests.Session()
        self._session.headers["Authorization"] = f"Bearer {api_key}"

    @property
    def dimension(self) -> int:
        return self._dimensions

    @property
    def model_name(self) -> str:
        return self._model_name

    def embed(self, text: str) -> np.ndarray:
        """Embed one text.

        Raises:
            EmbeddingError: On transport errors, non-200 answers or an empty result
        """
        try:
            resp = self._session.post(
                f"{self.base_url}/v1/embeddings",
                json={
                    "model": self._model_name,
                    "input": [text],
                    "dimensions": self._dimensions,
                },
                timeout=self.TIMEOUT,
            )
        except requests.RequestException as e:
            raise EmbeddingError(f"cannot reach {self.base_url}: {e}", retriable=True) from e

        if resp.status_code != 200:
            raise EmbeddingError(
                f"OpenAI API error (status {resp.status_code}): {resp.text}",
                retriable=resp.status_code >= 500,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise EmbeddingError(f"failed to decode OpenAI response: {e}") from e

        entries = sorted(data.get("data") or [], key=lambda d: d.get("index", 0))
        if not entries or not entries[0].get("embedding"):
            raise EmbeddingError("empty embeddings returned from OpenAI")

        logger.debug("Embedded %d chars with %s", len(text), self._model_name)
        return np.asarray(entries[0]["embedding"], dtype=np.float32)

    def close(self) -> None:
        self._session.close()
