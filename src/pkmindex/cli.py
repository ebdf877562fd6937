"""CLI entry point for pkmindex."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from pkmindex.config import Config, IndexOptions, load_config
from pkmindex.embedders import create_embedder
from pkmindex.formatting import format_stats
from pkmindex.indexer import IndexingError, VectorSink
from pkmindex.ingesters import get_ingester
from pkmindex.models import Item, SearchFilters, SearchResult
from pkmindex.storage import DimensionMismatchError, VectorStore
from pkmindex.utils import to_rfc3339

logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)
logger = logging.getLogger(__name__)

# Header lines skipped when picking a preview line
PREVIEW_SKIP_PREFIXES = ("---", "Thread:", "From:", "To:", "Cc:", "Bcc:")


def open_store(config: Config) -> VectorStore:
    """Open (and create if needed) the configured vector store."""
    store = VectorStore(config.db_path, config.embeddings.dimensions)
    try:
        store.initialize()
    except DimensionMismatchError as e:
        logger.error(f"Cannot open {config.db_path}: {e}")
        sys.exit(1)
    return store


def index(
    config: Config,
    source: str,
    options: IndexOptions,
    source_name: Optional[str] = None,
) -> None:
    """Index an exported items file into the vector store.

    Args:
        config: Loaded configuration
        source: Path to a .json or .jsonl items file
        options: Reindex/delay/truncation options for this run
        source_name: Override the source name of every item
    """
    source_path = Path(source)
    ingester = get_ingester(source_path)
    if ingester is None:
        logger.error(f"Cannot read: {source}")
        logger.error("Supported inputs: .json, .jsonl files")
        sys.exit(1)

    items = list(ingester.ingest(source_path))
    if source_name:
        items = [_with_source(item, source_name) for item in items]

    logger.info(f"Loaded {len(items)} items from {source}")

    store = open_store(config)
    embedder = create_embedder(config.embeddings)
    store.set_metadata("embedding_model", embedder.model_name)

    sink = VectorSink(store, embedder, options)
    try:
        results = sink.write(items)
    except IndexingError as e:
        logger.error(str(e))
        sys.exit(1)
    finally:
        sink.close()

    for result in results:
        print(
            f"{result.source_name}: {result.indexed} indexed, "
            f"{result.skipped} skipped, {result.failed} failed"
        )


def _with_source(item: Item, source_name: str) -> Item:
    tags = [t for t in item.tags if not t.startswith("source:")]
    tags.insert(0, f"source:{source_name}")
    return Item(
        id=item.id,
        title=item.title,
        content=item.content,
        created_at=item.created_at,
        source_type=item.source_type,
        tags=tags,
        metadata=item.metadata,
        links=item.links,
    )


def search(
    config: Config,
    query: str,
    limit: int = 10,
    filters: Optional[SearchFilters] = None,
    output_format: str = "text",
) -> None:
    """Run a semantic search and print the results.

    Args:
        config: Loaded configuration
        query: Free-text query
        limit: Maximum number of results
        filters: Optional source and score filters
        output_format: "text" or "json"
    """
    store = open_store(config)
    embedder = create_embedder(config.embeddings)
    try:
        query_embedding = embedder.embed(query)
    finally:
        embedder.close()

    results = store.search(query_embedding, limit=limit, filters=filters)

    if output_format == "json":
        print(json.dumps(results_to_json(query, results), indent=2, ensure_ascii=False))
    else:
        print(format_text(query, results))


def results_to_json(query: str, results: list[SearchResult]) -> dict:
    """Build the JSON output document for search results."""
    return {
        "query": query,
        "total_results": len(results),
        "results": [
            {
                "score": r.score,
                "thread_id": r.document.thread_id,
                "title": r.document.title,
                "content": r.document.content,
                "source_type": r.document.source_type,
                "source_name": r.document.source_name,
                "message_count": r.document.message_count,
                "created_at": to_rfc3339(r.document.created_at),
                "updated_at": to_rfc3339(r.document.updated_at),
                "metadata": r.document.metadata,
            }
            for r in results
        ],
    }


def format_text(query: str, results: list[SearchResult]) -> str:
    """Human-readable search results."""
    if not results:
        return f'No results found for "{query}"'

    lines = [f'Found {len(results)} thread(s) for "{query}":', ""]
    for i, r in enumerate(results, 1):
        doc = r.document
        plural = "" if doc.message_count == 1 else "s"
        lines.append(f"{i}. [{r.score:.2f}] {doc.title} ({doc.message_count} message{plural})")
        lines.append(
            f"   Source: {doc.source_name} | "
            f"{doc.created_at:%Y-%m-%d} - {doc.updated_at:%Y-%m-%d}"
        )

        participants = [p for p in doc.metadata.get("participants", []) if isinstance(p, str)]
        if participants:
            lines.append(f"   Participants: {', '.join(participants[:3])}")

        preview = _preview(doc.content)
        if preview:
            lines.append(f"   Preview: {preview}")
        lines.append("")

    return "\n".join(lines)


def _preview(content: str, width: int = 100) -> str:
    for line in content.split("\n"):
        line = line.strip()
        if line and not line.startswith(PREVIEW_SKIP_PREFIXES):
            return line[:width] + "..." if len(line) > width else line
    return ""


def stats(config: Config) -> None:
    """Show statistics about the vector store.

    Args:
        config: Loaded configuration
    """
    store = open_store(config)
    model = store.get_metadata("embedding_model")

    print(f"Vector store: {config.db_path}")
    print(f"  Dimensions: {store.dimensions}")
    if model:
        print(f"  Embedding model: {model}")
    print()
    print(format_stats(store.stats()))


def serve(config: Config, transport: str = "stdio") -> None:
    """Start MCP server for the vector store.

    Args:
        config: Loaded configuration
        transport: Transport protocol (stdio or sse)
    """
    if not config.db_path.exists():
        logger.error(f"Vector store not found: {config.db_path}")
        sys.exit(1)

    # Import here to avoid loading MCP unless needed
    from pkmindex.server import create_mcp_server

    from typing import cast, Literal

    store = open_store(config)
    embedder = create_embedder(config.embeddings)

    logger.info(f"Serving {config.db_path} via {transport}")
    mcp = create_mcp_server(store, embedder)
    mcp.run(transport=cast(Literal["stdio", "sse", "streamable-http"], transport))


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="pkmindex",
        description="pkmindex - semantic search over personal records",
    )
    parser.add_argument("--config", help="Path to config.toml")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # index command
    index_parser = subparsers.add_parser(
        "index",
        help="Index an exported items file into the vector store",
    )
    index_parser.add_argument("source", help="Input .json or .jsonl file")
    index_parser.add_argument(
        "--source-name", help="Source name for every item (default: from tags)"
    )
    index_parser.add_argument(
        "--reindex", action="store_true", help="Re-embed threads that are already indexed"
    )
    index_parser.add_argument(
        "--delay", type=float, help="Seconds to wait between embedding calls"
    )
    index_parser.add_argument(
        "--max-content-length",
        type=int,
        help="Truncate content to this many characters (0 = no limit)",
    )

    # search command
    search_parser = subparsers.add_parser(
        "search",
        help="Semantic search over indexed documents",
    )
    search_parser.add_argument("query", help="Search query")
    search_parser.add_argument(
        "--limit", type=int, default=10, help="Maximum number of results (default: 10)"
    )
    search_parser.add_argument("--source-type", default="", help="Filter by source type")
    search_parser.add_argument("--source-name", default="", help="Filter by source name")
    search_parser.add_argument(
        "--min-score", type=float, default=0.0, help="Minimum similarity score (0.0-1.0)"
    )
    search_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    # stats command
    subparsers.add_parser(
        "stats",
        help="Show vector store statistics",
    )

    # serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Start MCP server for the vector store",
    )
    serve_parser.add_argument(
        "--transport",
        choices=["stdio", "sse"],
        default="stdio",
        help="Transport protocol (default: stdio)",
    )

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        config = load_config(Path(args.config) if args.config else None)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    if args.command == "index":
        defaults = config.indexing
        options = IndexOptions(
            reindex=args.reindex or defaults.reindex,
            delay=args.delay if args.delay is not None else defaults.delay,
            max_content_length=(
                args.max_content_length
                if args.max_content_length is not None
                else defaults.max_content_length
            ),
        )
        index(config, args.source, options, source_name=args.source_name)
    elif args.command == "search":
        filters = SearchFilters(
            source_type=args.source_type,
            source_name=args.source_name,
            min_score=args.min_score,
        )
        search(config, args.query, args.limit, filters, args.format)
    elif args.command == "stats":
        stats(config)
    elif args.command == "serve":
        serve(config, args.transport)


if __name__ == "__main__":
    main()
