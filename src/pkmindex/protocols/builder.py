"""Protocol for source-type-specific content builders."""

from typing import Any, Protocol, runtime_checkable

from pkmindex.models import Group


@runtime_checkable
class ContentBuilder(Protocol):
    """Protocol for turning a group into embeddable text and metadata.

    One implementation per source type (email, calendar, drive). Uses
    structural subtyping - no inheritance required.
    """

    @property
    def source_type(self) -> str:
        """Return the source type this builder reports (e.g., 'gmail')."""
        ...

    def clean_title(self, title: str) -> str:
        """Normalize a raw item title into a group subject."""
        ...

    def build_content(self, group: Group) -> str:
        """Build the canonical text that gets embedded and stored."""
        ...

    def build_metadata(self, group: Group) -> dict[str, Any]:
        """Build the JSON-serializable metadata stored with the document."""
        ...
