"""Content builder for email threads."""

from typing import Any

from pkmindex.builders.common import date_range, format_when
from pkmindex.models import Group
from pkmindex.models.item import PARTICIPANT_FIELDS
from pkmindex.utils import clean_subject, prepare_email_body, to_rfc3339

HEADER_LABELS = {"from": "From", "to": "To", "cc": "Cc", "bcc": "Bcc"}


class EmailBuilder:
    """Builds one text block per message, oldest first.

    Each block carries a compact From/To/Cc/Bcc header and the message
    body with HTML converted and quoted replies removed.
    """

    source_type = "gmail"

    def clean_title(self, title: str) -> str:
        return clean_subject(title)

    def build_content(self, group: Group) -> str:
        parts = [f"Thread: {group.subject}\n\n"]

        for i, item in enumerate(group.items, 1):
            parts.append(f"--- Message {i} ({format_when(item.created_at)}) ---\n")

            for name in PARTICIPANT_FIELDS:
                value = item.metadata.get(name)
                if isinstance(value, str) and value:
                    parts.append(f"{HEADER_LABELS[name]}: {value}\n")

            parts.append("\n")
            body = prepare_email_body(item.content or "")
            parts.append(body if body else "(no content)")
            parts.append("\n\n")

        return "".join(parts)

    def build_metadata(self, group: Group) -> dict[str, Any]:
        messages = []
        for item in group.items:
            record: dict[str, Any] = {
                "date": to_rfc3339(item.created_at),
                "subject": item.title,
            }
            for name in PARTICIPANT_FIELDS:
                value = item.metadata.get(name)
                if isinstance(value, str):
                    record[name] = value
            messages.append(record)

        return {
            "participants": list(group.participants),
            "message_ids": [item.id for item in group.items],
            "message_count": group.message_count,
            "date_range": date_range(group),
            "messages": messages,
        }
