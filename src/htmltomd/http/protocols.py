"""Response type and client interface used by the fetch step."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class HttpResponse:
    """
    A fetched page, status and all.

    Attributes:
        status_code: Status of the final response
        content: Body bytes, at most the configured size limit
        content_type: Raw Content-Type header ("" if absent)
        headers: Response headers
        url: URL the body came from, after redirects
    """

    status_code: int
    content: bytes
    content_type: str
    headers: dict[str, str]
    url: str

    @property
    def charset(self) -> str | None:
        """Charset declared in the Content-Type header, if any."""
        for part in self.content_type.split(";")[1:]:
            part = part.strip()
            if part.lower().startswith("charset="):
                return part.split("=", 1)[1].strip().strip("\"'") or None
        return None


class HttpClient(Protocol):
    """
    Anything that can GET a page.

    Lets the pipeline run against a mock in tests and against
    AsyncHttpClient in the server.
    """

    async def get(
        self,
        url: str,
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """
        Perform an HTTP GET request.

        Args:
            url: The URL to fetch
            timeout: Total request timeout in seconds
            headers: Optional additional headers

        Returns:
            HttpResponse with status, content, and headers

        Raises:
            FetchError on transport failures, timeouts and oversize bodies
        """
        ...
