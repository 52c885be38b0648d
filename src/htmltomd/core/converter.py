"""Converter: the primary API for turning a page into Markdown."""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Union

from ..conversion.links import LinkRewriter
from ..conversion.markdown import HtmlToMarkdown
from ..http.client import AsyncHttpClient
from ..http.protocols import HttpClient
from ..models.config import ServerConfig
from ..models.conversion import ConversionRequest, ConversionResponse
from ..pipeline.base import ConversionPipeline, ConversionStep, EventEmitter, PageContext
from ..pipeline.steps import (
    ConvertStep,
    FetchStep,
    NameStep,
    ParseStep,
    RewriteLinksStep,
    SelectStep,
    ValidateStep,
)
from ..security.url_validator import UrlValidator

logger = logging.getLogger(__name__)


class Converter:
    """
    Fetches a page and converts the selected, filtered region to Markdown.

    Every call to ``convert`` runs its own pipeline with its own parsed
    document; the only thing shared between calls is the HTTP connection
    pool. A failing stage raises and nothing is returned.

    Example:
        async with Converter(ServerConfig()) as converter:
            response = await converter.convert(
                ConversionRequest(
                    url="https://docs.example.com/guide.html",
                    selector=".content",
                    filters=[".sidebar", ".footer"],
                )
            )
        print(response.filename)
    """

    def __init__(
        self,
        config: ServerConfig | None = None,
        http_client: HttpClient | None = None,
    ) -> None:
        """
        Initialize the Converter.

        Args:
            config: Server configuration (defaults if None)
            http_client: Client to fetch pages with. If None, an
                AsyncHttpClient is created and owned by this converter.
        """
        self.config = config or ServerConfig()
        self._owns_client = http_client is None
        self._http_client: HttpClient | None = http_client

        security = self.config.security
        self._url_validator = UrlValidator(
            allowed_schemes=security.allowed_schemes,
            allowed_domains=security.allowed_domains,
            block_private_ips=security.block_private_ips,
        )
        self._markdown = HtmlToMarkdown(
            ignore_images=self.config.conversion.ignore_images,
            ignore_tables=self.config.conversion.ignore_tables,
        )
        self._rewriter = LinkRewriter(rewrite_all=self.config.conversion.rewrite_all_links)

    async def __aenter__(self) -> Converter:
        """Enter async context and open the HTTP client if we own it."""
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def start(self) -> None:
        if self._http_client is None:
            fetch = self.config.fetch
            client = AsyncHttpClient(
                max_content_size=fetch.max_content_size,
                user_agent=fetch.user_agent,
                proxy=fetch.proxy,
                default_timeout=fetch.timeout,
            )
            await client.start()
            self._http_client = client

    async def close(self) -> None:
        if self._owns_client and isinstance(self._http_client, AsyncHttpClient):
            await self._http_client.close()
            self._http_client = None

    def _conversion_steps(self) -> list[ConversionStep]:
        return [
            ParseStep(),
            SelectStep(),
            ConvertStep(self._markdown),
            RewriteLinksStep(self._rewriter),
        ]

    def build_pipeline(self) -> ConversionPipeline:
        """Full pipeline: validate, name, fetch, then the conversion steps."""
        if self._http_client is None:
            raise RuntimeError("Converter not started. Use 'async with' context manager.")

        steps: list[ConversionStep] = [
            ValidateStep(self._url_validator),
            NameStep(),
            FetchStep(self._http_client, timeout=self.config.fetch.timeout),
        ]
        steps.extend(self._conversion_steps())
        return ConversionPipeline(steps=steps)

    async def convert(
        self,
        request: ConversionRequest,
        emit: EventEmitter | None = None,
    ) -> ConversionResponse:
        """
        Fetch and convert a page.

        Args:
            request: What to fetch, select and filter
            emit: Optional callback for pipeline events

        Returns:
            ConversionResponse with filename and Markdown content

        Raises:
            InvalidURLError: URL is malformed or not allowed
            FetchError: The page could not be fetched
            ParseError: The page could not be parsed
            ConversionError: The Markdown conversion failed
        """
        ctx = await self.build_pipeline().execute(PageContext(request=request), emit)
        return self._response(ctx)

    async def convert_html(
        self,
        request: ConversionRequest,
        html: Union[bytes, str],
        emit: EventEmitter | None = None,
    ) -> ConversionResponse:
        """
        Convert HTML that was obtained elsewhere, as if fetched from request.url.

        No network access and no URL policy check; request.url is only used
        for the filename and for resolving relative links.
        """
        pipeline = ConversionPipeline(steps=[NameStep(), *self._conversion_steps()])
        ctx = await pipeline.execute(PageContext(request=request, html=html), emit)
        return self._response(ctx)

    @staticmethod
    def _response(ctx: PageContext) -> ConversionResponse:
        assert ctx.filename is not None and ctx.markdown is not None
        logger.info(f"Converted {ctx.url} -> {ctx.filename} ({len(ctx.markdown)} chars)")
        return ConversionResponse(filename=ctx.filename, content=ctx.markdown)


def convert_blocking(
    url: str,
    selector: str = "",
    filters: list[str] | None = None,
    config: ServerConfig | None = None,
) -> ConversionResponse:
    """
    Blocking conversion of a single URL.

    Convenience wrapper for sync code. Do not call from within a running
    event loop; use ``async with Converter()`` there instead.

    Example:
        response = convert_blocking("https://example.com/docs", selector="main")
        print(response.content)
    """
    request = ConversionRequest(url=url, selector=selector, filters=filters or [])

    async def _run() -> ConversionResponse:
        async with Converter(config) as converter:
            return await converter.convert(request)

    return asyncio.run(_run())
