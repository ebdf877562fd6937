"""Fallback content builder for unrecognized source types."""

from typing import Any

from pkmindex.builders.common import date_range, json_safe
from pkmindex.models import Group
from pkmindex.utils import clean_subject


class GenericBuilder:
    """Pass-through builder: subject header plus each non-empty body."""

    source_type = "unknown"

    def clean_title(self, title: str) -> str:
        return clean_subject(title)

    def build_content(self, group: Group) -> str:
        if not group.items:
            return ""

        parts = [f"Item: {group.subject}\n\n"]
        for item in group.items:
            body = (item.content or "").strip()
            if body:
                parts.append(body)
                parts.append("\n\n")
        return "".join(parts)

    def build_metadata(self, group: Group) -> dict[str, Any]:
        result: dict[str, Any] = {"date_range": date_range(group)}
        if group.items:
            for key, value in group.items[0].metadata.items():
                result[key] = json_safe(value)
        return result
