"""
htmltomd - Convert a region of a web page to Markdown over HTTP.

Usage:
    from htmltomd import Converter, ConversionRequest

    async with Converter() as converter:
        response = await converter.convert(
            ConversionRequest(url="https://example.com/post.html", selector=".content")
        )
        print(response.filename, response.content)
"""

__version__ = "1.0.0"

from .conversion import LinkRewriter, resolve_url, rewrite_links
from .core.converter import Converter, convert_blocking
from .errors import (
    ConversionError,
    FetchError,
    FilterError,
    HtmlToMdError,
    InvalidURLError,
    ParseError,
)
from .models import (
    ConversionConfig,
    ConversionEvent,
    ConversionRequest,
    ConversionResponse,
    EventType,
    FetchConfig,
    SecurityConfig,
    ServerConfig,
)
from .naming import derive_filename

__all__ = [
    "__version__",
    # Core
    "Converter",
    "convert_blocking",
    "derive_filename",
    "resolve_url",
    "rewrite_links",
    "LinkRewriter",
    # Models
    "ConversionRequest",
    "ConversionResponse",
    "ConversionEvent",
    "EventType",
    # Config
    "ServerConfig",
    "FetchConfig",
    "SecurityConfig",
    "ConversionConfig",
    # Errors
    "HtmlToMdError",
    "FetchError",
    "ParseError",
    "FilterError",
    "ConversionError",
    "InvalidURLError",
]
