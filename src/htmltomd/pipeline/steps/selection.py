"""ParseStep and SelectStep - build the HTML fragment to convert."""

import asyncio
import logging
from typing import Optional

from ...conversion.selection import apply_filters, parse_document, select
from ...errors import ParseError
from ...models.events import ConversionEvent, EventType
from ..base import EventEmitter, PageContext

logger = logging.getLogger(__name__)


class ParseStep:
    """Pipeline step that parses ctx.html into ctx.document."""

    name = "parse"

    async def execute(
        self,
        ctx: PageContext,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        if ctx.html is None:
            raise ParseError("No HTML content to parse", url=ctx.url)

        # Parsing a large page is CPU bound, keep it off the event loop
        ctx.document = await asyncio.to_thread(parse_document, ctx.html, ctx.encoding)
        return ctx


class SelectStep:
    """
    Pipeline step that selects the requested region and applies the filters.

    Populates:
        ctx.selection: The filtered selection
        ctx.fragment: HTML handed to the Markdown converter

    All filters have been applied by the time ctx.fragment is produced.
    """

    name = "select"

    async def execute(
        self,
        ctx: PageContext,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        if ctx.document is None:
            raise ParseError("Document was not parsed", url=ctx.url)

        request = ctx.request
        selection = select(ctx.document, request.selector)

        initial_length = len(selection.html())
        logger.info(f"Initial HTML length: {initial_length}")

        if emit:
            emit(
                ConversionEvent(
                    type=EventType.SELECTED,
                    url=ctx.url,
                    step=self.name,
                    count=len(selection),
                    message=f"Selected {len(selection)} elements",
                )
            )

        apply_filters(selection, request.filters)
        ctx.fragment = selection.html()
        ctx.selection = selection

        removed = sum(count for _, count in selection.removed)
        ctx.stats["elements_selected"] = len(selection)
        ctx.stats["elements_removed"] = removed
        logger.info(f"Filtered HTML length: {len(ctx.fragment)}")

        if emit and request.filters:
            emit(
                ConversionEvent(
                    type=EventType.FILTERED,
                    url=ctx.url,
                    step=self.name,
                    count=removed,
                    message=f"Filters removed {removed} elements",
                )
            )

        return ctx
