"""Base classes for the conversion pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Optional, Protocol, Union, runtime_checkable

from ..models.conversion import ConversionRequest
from ..models.events import ConversionEvent, EventType

if TYPE_CHECKING:
    from bs4 import BeautifulSoup

    from ..conversion.selection import Selection

logger = logging.getLogger(__name__)

# Type alias for event emitter function
EventEmitter = Callable[[ConversionEvent], None]


@dataclass
class PageContext:
    """
    State for converting one page, filled in as it moves through the steps.

    A context and everything hanging off it (notably the parsed document)
    belongs to a single pipeline run and is never shared.

    Attributes:
        request: The conversion request
        filename: Output filename derived from the URL
        html: Raw page content (bytes as fetched, or str when supplied)
        encoding: Charset declared by the server
        status_code: HTTP status of the fetch
        document: Parsed document
        selection: Selected and filtered region of the document
        fragment: Serialized HTML of the selection
        markdown: Converted (and later link-rewritten) Markdown
    """

    request: ConversionRequest
    filename: Optional[str] = None

    html: Optional[Union[bytes, str]] = None
    encoding: Optional[str] = None
    status_code: Optional[int] = None

    document: Optional[BeautifulSoup] = None
    selection: Optional[Selection] = None
    fragment: Optional[str] = None
    markdown: Optional[str] = None

    stats: dict[str, int] = field(default_factory=dict)

    @property
    def url(self) -> str:
        return self.request.url


@runtime_checkable
class ConversionStep(Protocol):
    """
    Protocol for pipeline steps.

    Each step receives a PageContext, processes it, and returns the
    (possibly modified) context. A step that cannot do its job raises one of
    the HtmlToMdError subclasses; there is no skipping and no partial result.

    Example implementation:
        class UppercaseStep:
            name = "uppercase"

            async def execute(self, ctx, emit=None):
                ctx.markdown = ctx.markdown.upper()
                return ctx
    """

    name: str

    async def execute(
        self,
        ctx: PageContext,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        """
        Execute this pipeline step.

        Args:
            ctx: The page context with accumulated state
            emit: Optional callback to emit events

        Returns:
            The (possibly modified) page context
        """
        ...


@dataclass
class ConversionPipeline:
    """
    Runs one page through an ordered list of steps.

    Steps run strictly in sequence. The first exception aborts the run: a
    FAILED event is emitted and the exception propagates unchanged.

    Example:
        pipeline = ConversionPipeline(steps=[
            ValidateStep(validator),
            NameStep(),
            FetchStep(http_client),
            ParseStep(),
            SelectStep(),
            ConvertStep(HtmlToMarkdown()),
            RewriteLinksStep(LinkRewriter()),
        ])

        ctx = await pipeline.execute(PageContext(request=request))
        print(ctx.filename, ctx.markdown)
    """

    steps: list[ConversionStep]

    async def execute(
        self,
        ctx: PageContext,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        """
        Execute the pipeline for a page.

        Args:
            ctx: Initial context (at least the request)
            emit: Optional callback for emitting events

        Returns:
            PageContext with final state

        Raises:
            HtmlToMdError: From whichever step failed
        """
        if emit:
            emit(ConversionEvent(type=EventType.STARTED, url=ctx.url, message=f"Converting {ctx.url}"))

        for step in self.steps:
            try:
                ctx = await step.execute(ctx, emit)
            except Exception as e:
                logger.debug(f"Step {step.name} failed for {ctx.url}: {e}")
                if emit:
                    emit(ConversionEvent(type=EventType.FAILED, url=ctx.url, step=step.name, error=str(e)))
                raise

        if emit:
            emit(ConversionEvent(type=EventType.COMPLETED, url=ctx.url, message=f"Wrote {ctx.filename}"))

        return ctx

    def add_step(self, step: ConversionStep) -> ConversionPipeline:
        """
        Add a step to the pipeline (fluent API).

        Args:
            step: The step to add

        Returns:
            Self for chaining
        """
        self.steps.append(step)
        return self
