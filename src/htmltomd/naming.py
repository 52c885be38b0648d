"""Output filename derivation for converted pages."""

import posixpath
import re
from urllib.parse import urlsplit

from .errors import InvalidURLError

# Characters that are not safe in filenames on common filesystems
_UNSAFE_CHARS = re.compile(r"[?#:]")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def derive_filename(url: str) -> str:
    """
    Map a source URL to a filesystem-safe Markdown filename.

    The host and the path (with ``/`` replaced by ``_``) are concatenated, the
    extension of the last path segment is dropped and ``.md`` is appended.
    A root path maps to ``index.md``.

    Examples:
        >>> derive_filename("https://ex.com/a/b?x=1")
        'ex.com_a_b.md'
        >>> derive_filename("https://ex.com/docs/page.html")
        'ex.com_docs_page.md'
        >>> derive_filename("https://ex.com/")
        'index.md'

    Args:
        url: Source URL

    Returns:
        Non-empty filename without ``?``, ``#`` or ``:``

    Raises:
        InvalidURLError: If the URL cannot be parsed
    """
    if _CONTROL_CHARS.search(url):
        raise InvalidURLError("URL contains control characters", url=url)

    try:
        parsed = urlsplit(url)
        # Port is validated lazily by urllib
        parsed.port
    except ValueError as e:
        raise InvalidURLError(f"Invalid URL: {e}", url=url) from e

    path = parsed.path
    if not path.strip("/"):
        stem = "index"
    else:
        root, _ext = posixpath.splitext(path)
        # Host and port only; user:password@ never reaches the filename
        host = parsed.netloc.rpartition("@")[2]
        stem = host + root.replace("/", "_")

    return _UNSAFE_CHARS.sub("_", stem + ".md")
