"""Protocol definitions for content conversion."""

from typing import Protocol


class MarkdownConverter(Protocol):
    """
    Protocol for converting an HTML fragment to Markdown.

    Implementations must be deterministic for a fixed configuration and
    raise ConversionError when the fragment cannot be converted.
    """

    def convert(self, html: str) -> str:
        """
        Convert HTML to Markdown.

        Args:
            html: HTML fragment

        Returns:
            Markdown string
        """
        ...
