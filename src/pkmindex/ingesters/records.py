"""Conversion of exported JSON records into Items."""

from datetime import datetime
from typing import Any

from pkmindex.models import Item, Link


def item_from_dict(data: dict[str, Any]) -> Item:
    """Build an Item from one exported record.

    Required keys: id, created_at (ISO 8601). Everything else is optional.

    Raises:
        ValueError: If a required key is missing or the timestamp is invalid
    """
    if not data.get("id"):
        raise ValueError("record is missing 'id'")
    if not data.get("created_at"):
        raise ValueError(f"record {data['id']} is missing 'created_at'")

    created = data["created_at"]
    if created.endswith("Z"):
        created = created[:-1] + "+00:00"

    return Item(
        id=str(data["id"]),
        title=data.get("title", ""),
        content=data.get("content", ""),
        created_at=datetime.fromisoformat(created),
        source_type=data.get("source_type", ""),
        tags=list(data.get("tags", [])),
        metadata=dict(data.get("metadata", {})),
        links=[
            Link(url=link["url"], title=link.get("title", ""), type=link.get("type", ""))
            for link in data.get("links", [])
        ],
    )
