"""Protocol definitions for extensible components."""

from pkmindex.protocols.builder import ContentBuilder
from pkmindex.protocols.embedder import EmbeddingProvider
from pkmindex.protocols.ingester import Ingester

__all__ = ["ContentBuilder", "EmbeddingProvider", "Ingester"]
