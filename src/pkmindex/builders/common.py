"""Helpers shared by the content builders."""

from datetime import datetime
from typing import Any

from pkmindex.models import Group
from pkmindex.utils import to_rfc3339


def date_range(group: Group) -> dict[str, str]:
    """Start/end of the group as RFC 3339 strings."""
    return {
        "start": to_rfc3339(group.start_time) if group.start_time else "",
        "end": to_rfc3339(group.end_time) if group.end_time else "",
    }


def json_safe(value: Any) -> Any:
    """Convert a metadata value into something json.dumps accepts."""
    if isinstance(value, datetime):
        return to_rfc3339(value)
    if isinstance(value, dict):
        return {str(k): json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [json_safe(v) for v in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def format_when(value: Any) -> str:
    """Short human-readable timestamp for content headers."""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    return str(value)
