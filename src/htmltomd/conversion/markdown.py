"""HTML to Markdown conversion."""

from __future__ import annotations

import logging
import re

import html2text

from ..errors import ConversionError

logger = logging.getLogger(__name__)


class HtmlToMarkdown:
    """
    Converts an HTML fragment to Markdown.

    Uses html2text with inline links and no line wrapping. No base URL is
    set, so relative links come out exactly as written in the page and are
    resolved afterwards by the link rewriter.

    Example:
        converter = HtmlToMarkdown()
        markdown = converter.convert("<h1>Title</h1><p>Body</p>")
    """

    def __init__(
        self,
        body_width: int = 0,
        ignore_images: bool = False,
        ignore_tables: bool = False,
        unicode_snob: bool = True,
        mark_code: bool = False,
    ):
        """
        Initialize the Markdown converter.

        Args:
            body_width: Max line width (0 = no wrapping)
            ignore_images: Skip image conversion
            ignore_tables: Render tables as plain text
            unicode_snob: Use Unicode chars instead of ASCII approximations
            mark_code: Wrap pre blocks in [code] markers instead of indenting
        """
        self.body_width = body_width
        self.ignore_images = ignore_images
        self.ignore_tables = ignore_tables
        self.unicode_snob = unicode_snob
        self.mark_code = mark_code

    def _make_converter(self) -> html2text.HTML2Text:
        # HTML2Text keeps parser state, so every conversion gets its own
        converter = html2text.HTML2Text(baseurl="", bodywidth=self.body_width)

        # Links stay inline and unwrapped so they fit on one line
        converter.inline_links = True
        converter.wrap_links = False
        converter.protect_links = False
        converter.skip_internal_links = False

        converter.ignore_images = self.ignore_images
        converter.ignore_tables = self.ignore_tables
        converter.unicode_snob = self.unicode_snob
        converter.mark_code = self.mark_code
        converter.default_image_alt = ""
        converter.single_line_break = False
        return converter

    def _clean_output(self, markdown: str) -> str:
        """Clean up the converted Markdown."""
        markdown = re.sub(r"\n{3,}", "\n\n", markdown)
        markdown = "\n".join(line.rstrip() for line in markdown.split("\n"))
        return markdown.strip() + "\n"

    def convert(self, html: str) -> str:
        """
        Convert HTML to Markdown.

        Args:
            html: HTML fragment

        Returns:
            Markdown string ending in a single newline

        Raises:
            ConversionError: If html2text fails on the input
        """
        try:
            markdown = self._make_converter().handle(html)
        except Exception as e:
            logger.error(f"Failed to convert HTML to Markdown: {e}")
            raise ConversionError(f"Failed to convert to Markdown: {e}") from e

        return self._clean_output(markdown)
