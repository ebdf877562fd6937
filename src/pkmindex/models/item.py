"""Input records and the transient groups built from them."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pkmindex.utils.timefmt import ensure_utc

# Metadata fields that carry participant addresses
PARTICIPANT_FIELDS = ("from", "to", "cc", "bcc")

SOURCE_TAG_PREFIX = "source:"


@dataclass(frozen=True)
class Link:
    """A link attached to an item (meeting URL, attachment, etc.)."""

    url: str
    title: str = ""
    type: str = ""


@dataclass(frozen=True)
class Item:
    """A single record fetched from an external source."""

    id: str
    title: str
    content: str
    created_at: datetime
    source_type: str = ""
    tags: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    links: list[Link] = field(default_factory=list)

    @property
    def thread_id(self) -> str:
        """Explicit thread linkage, or empty string."""
        value = self.metadata.get("thread_id")
        return value if isinstance(value, str) else ""

    @property
    def source_name(self) -> str:
        """Source name from the first ``source:`` tag, else the source type."""
        for tag in self.tags:
            if tag.startswith(SOURCE_TAG_PREFIX):
                return tag[len(SOURCE_TAG_PREFIX):]
        return self.source_type or "unknown"

    def participants(self) -> list[str]:
        """Non-empty address fields in from/to/cc/bcc order."""
        found = []
        for name in PARTICIPANT_FIELDS:
            value = self.metadata.get(name)
            if isinstance(value, str) and value:
                found.append(value)
        return found


@dataclass
class Group:
    """Items aggregated under one logical document (thread, event, file)."""

    thread_id: str
    source_name: str
    subject: str = ""
    source_type: str = "unknown"
    items: list[Item] = field(default_factory=list)
    participants: list[str] = field(default_factory=list)
    start_time: datetime | None = None
    end_time: datetime | None = None

    @property
    def message_count(self) -> int:
        return len(self.items)

    def add(self, item: Item) -> None:
        """Add a member, widening the time bounds and participant set."""
        self.items.append(item)

        created = ensure_utc(item.created_at)
        if self.start_time is None or created < self.start_time:
            self.start_time = created
        if self.end_time is None or created > self.end_time:
            self.end_time = created

        for address in item.participants():
            if address not in self.participants:
                self.participants.append(address)
