"""FetchStep - HTTP fetching pipeline step."""

import logging
from typing import Optional

from ...http.protocols import HttpClient
from ...models.events import ConversionEvent, EventType
from ..base import EventEmitter, PageContext

logger = logging.getLogger(__name__)


class FetchStep:
    """
    Pipeline step that fetches the page.

    Populates:
        ctx.html: Raw response body as bytes
        ctx.encoding: Charset from the Content-Type header
        ctx.status_code: HTTP status code

    The body of a non-2xx response is kept and converted. Transport
    failures propagate as FetchError.

    Example:
        async with AsyncHttpClient() as client:
            ctx = await FetchStep(client, timeout=10).execute(ctx)
    """

    name = "fetch"

    def __init__(self, http_client: HttpClient, timeout: Optional[float] = None) -> None:
        """
        Initialize the fetch step.

        Args:
            http_client: HTTP client implementing HttpClient protocol
            timeout: Total fetch timeout (client default if None)
        """
        self._client = http_client
        self._timeout = timeout

    async def execute(
        self,
        ctx: PageContext,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        response = await self._client.get(ctx.url, timeout=self._timeout)

        ctx.html = response.content
        ctx.encoding = response.charset
        ctx.status_code = response.status_code
        ctx.stats["bytes_downloaded"] = len(response.content)

        logger.debug(f"Fetched {ctx.url}: HTTP {response.status_code}, {len(response.content)} bytes")

        if emit:
            emit(
                ConversionEvent(
                    type=EventType.FETCH_COMPLETED,
                    url=ctx.url,
                    step=self.name,
                    count=len(response.content),
                    message=f"Fetched {len(response.content)} bytes (HTTP {response.status_code})",
                )
            )

        return ctx
