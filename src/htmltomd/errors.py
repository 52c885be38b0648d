"""Exception hierarchy for the conversion pipeline.

Every stage of a conversion raises a subclass of ``HtmlToMdError``. The HTTP
layer maps ``http_status`` straight onto the response status.
"""

from __future__ import annotations


class HtmlToMdError(Exception):
    """Base class for all conversion failures."""

    http_status = 500

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.url = url


class FetchError(HtmlToMdError):
    """The source URL could not be fetched (network, timeout, size limit)."""


class ParseError(HtmlToMdError):
    """The fetched HTML could not be parsed into a document."""


class FilterError(HtmlToMdError):
    """Reserved for filter failures. Filtering has no failure path today."""


class ConversionError(HtmlToMdError):
    """The filtered HTML could not be converted to Markdown."""


class InvalidURLError(HtmlToMdError):
    """The request URL is malformed or rejected by the URL policy."""

    http_status = 400
