"""Content conversion for htmltomd (selection, Markdown, link rewriting)."""

from .links import LinkRewriter, resolve_url, rewrite_links
from .markdown import HtmlToMarkdown
from .protocols import MarkdownConverter
from .selection import Selection, apply_filters, parse_document, select

__all__ = [
    # Protocols
    "MarkdownConverter",
    # Selection
    "Selection",
    "apply_filters",
    "parse_document",
    "select",
    # Markdown
    "HtmlToMarkdown",
    # Links
    "LinkRewriter",
    "resolve_url",
    "rewrite_links",
]
