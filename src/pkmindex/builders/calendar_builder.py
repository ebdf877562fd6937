"""Content builder for calendar events."""

from typing import Any

from pkmindex.builders.common import date_range, format_when, json_safe
from pkmindex.models import Group


def _attendee_name(attendee: Any) -> str:
    if isinstance(attendee, dict):
        return attendee.get("display_name") or attendee.get("name") or attendee.get("email", "")
    return str(attendee)


class CalendarBuilder:
    """Builds an event summary from the first item of the group."""

    source_type = "google_calendar"

    def clean_title(self, title: str) -> str:
        return title.strip()

    def _attendees(self, metadata: dict[str, Any]) -> list[str]:
        attendees = metadata.get("attendees") or []
        return [name for name in (_attendee_name(a) for a in attendees) if name]

    def build_content(self, group: Group) -> str:
        if not group.items:
            return ""

        item = group.items[0]
        metadata = item.metadata
        lines = [f"Event: {group.subject}", ""]

        if metadata.get("start_time"):
            lines.append(f"Start: {format_when(metadata['start_time'])}")
        if metadata.get("end_time"):
            lines.append(f"End: {format_when(metadata['end_time'])}")
        if metadata.get("location"):
            lines.append(f"Location: {metadata['location']}")

        attendees = self._attendees(metadata)
        if attendees:
            lines.append(f"Attendees: {', '.join(attendees)}")

        for link in item.links:
            if link.type == "meeting_url":
                lines.append(f"Meeting URL: {link.url}")
                break

        text = "\n".join(lines) + "\n"
        description = (item.content or "").strip()
        if description:
            text += f"\n{description}\n"
        return text

    def build_metadata(self, group: Group) -> dict[str, Any]:
        result: dict[str, Any] = {"date_range": date_range(group)}
        if not group.items:
            return result

        metadata = group.items[0].metadata
        for key in ("start_time", "end_time"):
            if key in metadata:
                result[key] = json_safe(metadata[key])
        if metadata.get("location"):
            result["location"] = metadata["location"]

        attendees = self._attendees(metadata)
        if attendees:
            result["attendees"] = attendees
        return result
