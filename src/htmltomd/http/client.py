"""Async HTTP client with a bounded timeout and body size."""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType

import aiohttp

from .. import __version__
from ..errors import FetchError
from .protocols import HttpResponse

logger = logging.getLogger(__name__)


class AsyncHttpClient:
    """
    Async HTTP client for fetching source pages.

    Each request is a single attempt: no retries and no rate limiting. Every
    request is bounded by a total timeout and a maximum body size so that a
    slow or huge origin cannot tie up the server.

    Example:
        async with AsyncHttpClient(default_timeout=10) as client:
            response = await client.get("https://example.com")
            print(response.status_code, len(response.content))
    """

    CHUNK_SIZE = 8192

    def __init__(
        self,
        max_content_size: int = 10 * 1024 * 1024,
        user_agent: str | None = None,
        proxy: str | None = None,
        default_timeout: float = 30.0,
    ) -> None:
        """
        Initialize the HTTP client.

        Args:
            max_content_size: Maximum response size in bytes
            user_agent: Custom User-Agent string
            proxy: Proxy URL (http://)
            default_timeout: Default total request timeout in seconds
        """
        self._max_content_size = max_content_size
        self._proxy = proxy
        self._default_timeout = default_timeout

        if user_agent is None:
            user_agent = f"Mozilla/5.0 (compatible; htmltomd/{__version__})"
        self._user_agent = user_agent

        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> AsyncHttpClient:
        """Enter async context and create session."""
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context and close session."""
        await self.close()

    async def start(self) -> None:
        """Create the underlying session (idempotent)."""
        if self._session is None:
            connector = aiohttp.TCPConnector(limit=100, limit_per_host=10)
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers={"User-Agent": self._user_agent},
            )

    async def close(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    async def get(
        self,
        url: str,
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """
        Perform a single HTTP GET request.

        Non-2xx responses are returned like any other; only transport level
        problems raise.

        Args:
            url: The URL to fetch
            timeout: Total request timeout in seconds (uses default if None)
            headers: Optional additional headers

        Returns:
            HttpResponse with status, content, and headers

        Raises:
            FetchError: On network errors, timeouts or content size exceeded
        """
        if self._session is None:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")

        timeout_val = timeout or self._default_timeout

        try:
            async with self._session.get(
                url,
                timeout=aiohttp.ClientTimeout(total=timeout_val),
                headers=headers,
                proxy=self._proxy,
                allow_redirects=True,
            ) as response:
                content_length = response.headers.get("Content-Length")
                if content_length and content_length.isdigit() and int(content_length) > self._max_content_size:
                    raise FetchError(f"Content too large: {content_length} bytes", url=url)

                content = bytearray()
                async for chunk in response.content.iter_chunked(self.CHUNK_SIZE):
                    content.extend(chunk)
                    if len(content) > self._max_content_size:
                        raise FetchError(
                            f"Content size limit exceeded: >{self._max_content_size} bytes",
                            url=url,
                        )

                if response.status >= 400:
                    logger.warning(f"Got HTTP {response.status} for {url}, converting the body anyway")

                return HttpResponse(
                    status_code=response.status,
                    content=bytes(content),
                    content_type=response.headers.get("Content-Type", ""),
                    headers=dict(response.headers),
                    url=str(response.url),
                )

        except asyncio.TimeoutError as e:
            logger.error(f"Timed out fetching {url} after {timeout_val}s")
            raise FetchError(f"Timed out after {timeout_val}s", url=url) from e
        except aiohttp.ClientError as e:
            logger.error(f"HTTP fetch error for {url}: {e}")
            raise FetchError(f"Failed to fetch URL: {e}", url=url) from e
