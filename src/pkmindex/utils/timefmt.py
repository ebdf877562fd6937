"""RFC 3339 timestamp helpers for storage round-tripping."""

from datetime import datetime, timezone
from typing import Optional


def ensure_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime. Naive values are assumed to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_rfc3339(value: datetime) -> str:
    """Format as RFC 3339 in UTC, second precision (e.g. 2024-01-02T09:00:00Z)."""
    return ensure_utc(value).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_rfc3339(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored timestamp. Returns None for empty values."""
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(value))
