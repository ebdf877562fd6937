"""Utility functions for pkmindex."""

from pkmindex.utils.text import (
    TRUNCATION_MARKER,
    clean_subject,
    prepare_email_body,
    truncate_content,
)
from pkmindex.utils.timefmt import ensure_utc, parse_rfc3339, to_rfc3339

__all__ = [
    "TRUNCATION_MARKER",
    "clean_subject",
    "prepare_email_body",
    "truncate_content",
    "ensure_utc",
    "parse_rfc3339",
    "to_rfc3339",
]
