"""Content builder for Drive documents."""

from typing import Any

from pkmindex.builders.common import date_range, json_safe
from pkmindex.models import Group


def _owners(value: Any) -> list[str]:
    """A single owner string or a list of them."""
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, (list, tuple)):
        return [str(o) for o in value if o]
    return []


class DriveBuilder:
    """Builds a document header (type, owners, link) followed by the body."""

    source_type = "google_drive"

    def clean_title(self, title: str) -> str:
        return title.strip()

    def build_content(self, group: Group) -> str:
        if not group.items:
            return ""

        item = group.items[0]
        metadata = item.metadata
        lines = [f"Document: {group.subject}", ""]

        if metadata.get("mime_type"):
            lines.append(f"Type: {metadata['mime_type']}")
        owners = _owners(metadata.get("owners"))
        if owners:
            lines.append(f"Owners: {', '.join(owners)}")
        if metadata.get("web_view_link"):
            lines.append(f"Link: {metadata['web_view_link']}")

        text = "\n".join(lines) + "\n"
        body = (item.content or "").strip()
        if body:
            text += f"\n{body}\n"
        return text

    def build_metadata(self, group: Group) -> dict[str, Any]:
        result: dict[str, Any] = {"date_range": date_range(group)}
        if not group.items:
            return result

        metadata = group.items[0].metadata
        for key in ("mime_type", "web_view_link", "owners"):
            if key in metadata:
                result[key] = json_safe(metadata[key])
        return result
