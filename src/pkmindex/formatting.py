"""Plain-text rendering shared by the CLI and the MCP server."""

from pkmindex.models import StoreStats


def format_stats(stats: StoreStats) -> str:
    """Render store statistics as text."""
    lines = [
        f"Documents: {stats.total_documents}",
        f"Threads: {stats.total_threads}",
        f"Average messages per document: {stats.average_message_count:.1f}",
    ]
    if stats.oldest_document and stats.newest_document:
        lines.append(
            f"Date range: {stats.oldest_document:%Y-%m-%d} - {stats.newest_document:%Y-%m-%d}"
        )
    for name, count in sorted(stats.documents_by_source.items()):
        lines.append(f"  source {name}: {count}")
    for name, count in sorted(stats.documents_by_type.items()):
        lines.append(f"  type {name}: {count}")
    return "\n".join(lines)
