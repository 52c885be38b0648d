"""Configuration, request and event models."""

from .config import ByteSize, ConversionConfig, FetchConfig, SecurityConfig, ServerConfig
from .conversion import ConversionRequest, ConversionResponse
from .events import ConversionEvent, EventType

__all__ = [
    # Config
    "ByteSize",
    "ConversionConfig",
    "FetchConfig",
    "SecurityConfig",
    "ServerConfig",
    # Conversion
    "ConversionRequest",
    "ConversionResponse",
    # Events
    "ConversionEvent",
    "EventType",
]
