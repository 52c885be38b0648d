"""Relative link resolution for rendered Markdown."""

from __future__ import annotations

import logging
import re
from typing import Union
from urllib.parse import SplitResult, quote, urljoin, urlsplit

logger = logging.getLogger(__name__)

RELATIVE_PREFIXES = ("../", "./")

# A percent sign not followed by two hex digits is not a valid escape
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")

# ](./path) or ](../path) up to the closing parenthesis; html2text writes
# parentheses inside a target as \( and \)
_RELATIVE_LINK = re.compile(r"\]\((\.\.?/(?:\\.|[^)\\])*)\)")
_MD_ESCAPE = re.compile(r"\\(.)")

# Reserved characters and existing escapes stay as they are
_URL_SAFE = ":/?#[]@!$&'()*+,;=%~"


def resolve_url(base: Union[SplitResult, str], reference: str) -> str:
    """
    Resolve a link reference against the page URL (RFC 3986).

    The result is percent-encoded. A reference that cannot be parsed as a URL
    is returned unchanged.

    Examples:
        >>> resolve_url("https://ex.com/a/b.html", "../c.html")
        'https://ex.com/c.html'
        >>> resolve_url("https://ex.com/a/b.html", "./c.html")
        'https://ex.com/a/c.html'
    """
    if _CONTROL_CHARS.search(reference) or _BAD_ESCAPE.search(reference):
        return reference
    try:
        urlsplit(reference)
    except ValueError:
        return reference

    base_url = base.geturl() if isinstance(base, SplitResult) else base
    return quote(urljoin(base_url, reference), safe=_URL_SAFE)


class LinkRewriter:
    """
    Rewrites relative Markdown link targets to absolute URLs, line by line.

    By default only the first link on a line is considered, and only when its
    target starts with ``./`` or ``../``. With ``rewrite_all=True`` every such
    target on the line is rewritten. Links broken across lines are never
    touched. The number and order of lines is always preserved.

    Example:
        rewriter = LinkRewriter()
        rewriter.rewrite("[x](../x.html)", "https://ex.com/a/b.html")
        # '[x](https://ex.com/x.html)'
    """

    def __init__(self, rewrite_all: bool = False) -> None:
        self.rewrite_all = rewrite_all

    def _rewrite_first(self, line: str, base: SplitResult) -> str:
        start = line.index("](") + 2
        end = line.find(")", start)
        if end == -1:
            return line

        link = line[start:end]
        if not link.startswith(RELATIVE_PREFIXES):
            return line

        return line.replace(link, resolve_url(base, link), 1)

    def _rewrite_every(self, line: str, base: SplitResult) -> str:
        def replace(match: re.Match[str]) -> str:
            target = _MD_ESCAPE.sub(r"\1", match.group(1))
            resolved = resolve_url(base, target).replace("(", r"\(").replace(")", r"\)")
            return f"]({resolved})"

        return _RELATIVE_LINK.sub(replace, line)

    def rewrite_line(self, line: str, base: SplitResult) -> str:
        """Rewrite one line; lines without a relative link come back as-is."""
        if "](" not in line or "./" not in line:
            return line
        if self.rewrite_all:
            return self._rewrite_every(line, base)
        return self._rewrite_first(line, base)

    def rewrite(self, markdown: str, base_url: str) -> str:
        """
        Rewrite relative links in a Markdown document.

        Args:
            markdown: Rendered Markdown
            base_url: URL of the page the Markdown came from

        Returns:
            Markdown with relative link targets made absolute
        """
        try:
            base = urlsplit(base_url)
        except ValueError as e:
            logger.warning(f"Cannot parse base URL {base_url!r}, leaving links as-is: {e}")
            return markdown

        lines = markdown.split("\n")
        return "\n".join(self.rewrite_line(line, base) for line in lines)


def rewrite_links(markdown: str, base_url: str) -> str:
    """Rewrite the first relative link on each line against base_url."""
    return LinkRewriter().rewrite(markdown, base_url)
