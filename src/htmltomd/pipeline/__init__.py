"""Pipeline architecture for conversions."""

from .base import ConversionPipeline, ConversionStep, EventEmitter, PageContext

__all__ = ["ConversionPipeline", "ConversionStep", "EventEmitter", "PageContext"]
