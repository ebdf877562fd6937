"""FastMCP server exposing semantic search over a vector store."""

from mcp.server.fastmcp import FastMCP

from pkmindex.formatting import format_stats
from pkmindex.models import SearchFilters, SearchResult
from pkmindex.protocols import EmbeddingProvider
from pkmindex.storage import VectorStore

SNIPPET_LENGTH = 200


def format_results(query: str, results: list[SearchResult]) -> str:
    """Render search results as a ranked text list."""
    if not results:
        return f"No results found for: {query}"

    lines = []
    for i, r in enumerate(results, 1):
        doc = r.document
        text = doc.content[:SNIPPET_LENGTH].replace("\n", " ")
        if len(doc.content) > SNIPPET_LENGTH:
            text += "..."

        lines.append(f"{i}. [{r.score:.3f}] {doc.title} ({doc.source_name}, {doc.message_count} msg)")
        lines.append(f"   {text}")
        lines.append("")

    return "\n".join(lines)


def create_mcp_server(store: VectorStore, embedder: EmbeddingProvider) -> FastMCP:
    """Create an MCP server for a vector store.

    Args:
        store: Initialized store to search
        embedder: Provider matching the store's dimensionality

    Returns:
        Configured FastMCP server instance
    """
    mcp = FastMCP(
        name="pkmindex",
    )

    @mcp.tool()
    def search(
        query: str,
        limit: int = 10,
        source_type: str = "",
        source_name: str = "",
        min_score: float = 0.0,
    ) -> str:
        """Semantic search across indexed email threads, events and documents.

        Args:
            query: Natural language description of what you're looking for
            limit: Maximum number of results to return (default: 10)
            source_type: Only return this source type (e.g., "gmail")
            source_name: Only return this source (e.g., "gmail_work")
            min_score: Drop results scoring below this (0.0-1.0)

        Returns:
            Ranked list of matching documents with similarity scores
        """
        query_embedding = embedder.embed(query)
        filters = SearchFilters(
            source_type=source_type, source_name=source_name, min_score=min_score
        )
        return format_results(query, store.search(query_embedding, limit=limit, filters=filters))

    @mcp.tool()
    def stats() -> str:
        """Summarize what is indexed: counts per source and type, date range."""
        return format_stats(store.stats())

    return mcp
