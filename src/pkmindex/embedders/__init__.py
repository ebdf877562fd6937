"""Embedding providers for vector generation."""

from typing import TYPE_CHECKING

from pkmindex.embedders.errors import EmbeddingError
from pkmindex.embedders.ollama import OllamaEmbedder
from pkmindex.embedders.openai import OpenAIEmbedder

if TYPE_CHECKING:
    from pkmindex.config import EmbeddingsConfig
    from pkmindex.protocols import EmbeddingProvider


def create_embedder(config: "EmbeddingsConfig") -> "EmbeddingProvider":
    """Build the embedding provider named in the configuration.

    sentence-transformers is imported lazily so the HTTP providers never
    load torch.

    Raises:
        ValueError: On an unknown provider or a missing OpenAI API key
    """
    if config.provider == "ollama":
        return OllamaEmbedder(config.model, config.dimensions, base_url=config.api_url or None)

    if config.provider == "openai":
        if not config.api_key:
            raise ValueError("api_key (or OPENAI_API_KEY) is required for the openai provider")
        return OpenAIEmbedder(
            config.model, config.dimensions, config.api_key, base_url=config.api_url or None
        )

    if config.provider == "sentence-transformers":
        from pkmindex.embedders.sentence_transformer import SentenceTransformerEmbedder

        return SentenceTransformerEmbedder(config.model or None, config.dimensions)

    raise ValueError(f"Unsupported embedding provider: {config.provider}")


__all__ = ["create_embedder", "EmbeddingError", "OllamaEmbedder", "OpenAIEmbedder"]
