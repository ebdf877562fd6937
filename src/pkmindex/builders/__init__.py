"""Source-type-specific content builders."""

from pkmindex.builders.calendar_builder import CalendarBuilder
from pkmindex.builders.drive_builder import DriveBuilder
from pkmindex.builders.email_builder import EmailBuilder
from pkmindex.builders.generic_builder import GenericBuilder
from pkmindex.protocols import ContentBuilder

# Registry of builders keyed by source type
_BUILDERS: dict[str, ContentBuilder] = {
    "gmail": EmailBuilder(),
    "google_calendar": CalendarBuilder(),
    "google_drive": DriveBuilder(),
}

_DEFAULT = GenericBuilder()


def get_builder(source_type: str) -> ContentBuilder:
    """Find the builder for a source type, falling back to the generic one.

    Args:
        source_type: Source type of the group (e.g., 'gmail')

    Returns:
        A ContentBuilder instance; never None
    """
    return _BUILDERS.get(source_type, _DEFAULT)


def register_builder(source_type: str, builder: ContentBuilder) -> None:
    """Register a custom builder (for plugins/extensions).

    Args:
        source_type: Source type the builder handles
        builder: An object implementing the ContentBuilder protocol
    """
    _BUILDERS[source_type] = builder


__all__ = [
    "get_builder",
    "register_builder",
    "EmailBuilder",
    "CalendarBuilder",
    "DriveBuilder",
    "GenericBuilder",
]
