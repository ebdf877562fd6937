"""Thread-based grouping strategy."""

from typing import Iterable, Optional

from pkmindex.builders import get_builder
from pkmindex.models import Group, Item
from pkmindex.utils import ensure_utc


class ThreadGrouper:
    """Default grouping: explicit thread_id, else one group per item.

    Items sharing a key accumulate into one Group. Members are sorted by
    creation time before the group is handed out, so the result does not
    depend on the order of the input batch.
    """

    def group(self, items: Iterable[Optional[Item]], source_name: str) -> dict[str, Group]:
        """Partition items into groups keyed by thread id.

        Args:
            items: Items to group (None entries are ignored)
            source_name: Source that owns every resulting group

        Returns:
            Mapping of thread id to Group with members in chronological order
        """
        groups: dict[str, Group] = {}

        for item in items:
            if item is None:
                continue

            key = item.thread_id or item.id
            group = groups.get(key)
            if group is None:
                group = groups[key] = Group(thread_id=key, source_name=source_name)
            group.add(item)

        for group in groups.values():
            group.items.sort(key=lambda i: (ensure_utc(i.created_at), i.id))

            first = group.items[0]
            group.source_type = first.source_type or "unknown"
            group.subject = get_builder(group.source_type).clean_title(first.title)

        return groups

    @staticmethod
    def ordered(groups: dict[str, Group]) -> list[Group]:
        """Return groups sorted by (start time, thread id)."""
        return sorted(groups.values(), key=lambda g: (g.start_time, g.thread_id))
