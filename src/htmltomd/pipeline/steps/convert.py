"""ConvertStep and RewriteLinksStep - produce the final Markdown."""

import asyncio
import logging
from typing import Optional

from ...conversion.links import LinkRewriter
from ...conversion.protocols import MarkdownConverter
from ...errors import ConversionError
from ...models.events import ConversionEvent, EventType
from ..base import EventEmitter, PageContext

logger = logging.getLogger(__name__)


class ConvertStep:
    """
    Pipeline step that converts ctx.fragment to Markdown.

    Example:
        step = ConvertStep(HtmlToMarkdown())
        ctx = await step.execute(ctx)
        # ctx.markdown now contains the converted content
    """

    name = "convert"

    def __init__(self, converter: MarkdownConverter) -> None:
        self._converter = converter

    async def execute(
        self,
        ctx: PageContext,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        if ctx.fragment is None:
            raise ConversionError("No HTML fragment to convert", url=ctx.url)

        ctx.markdown = await asyncio.to_thread(self._converter.convert, ctx.fragment)

        logger.debug(f"Converted {ctx.url} to {len(ctx.markdown)} bytes of Markdown")
        if emit:
            emit(
                ConversionEvent(
                    type=EventType.CONVERTED,
                    url=ctx.url,
                    step=self.name,
                    count=len(ctx.markdown),
                    message=f"Converted to {len(ctx.markdown)} bytes of Markdown",
                )
            )
        return ctx


class RewriteLinksStep:
    """Pipeline step that makes relative links in ctx.markdown absolute."""

    name = "rewrite_links"

    def __init__(self, rewriter: Optional[LinkRewriter] = None) -> None:
        self._rewriter = rewriter or LinkRewriter()

    async def execute(
        self,
        ctx: PageContext,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        if ctx.markdown is None:
            raise ConversionError("No Markdown to rewrite", url=ctx.url)

        ctx.markdown = self._rewriter.rewrite(ctx.markdown, ctx.url)

        if emit:
            emit(ConversionEvent(type=EventType.LINKS_REWRITTEN, url=ctx.url, step=self.name))
        return ctx
