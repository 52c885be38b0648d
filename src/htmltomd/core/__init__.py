"""Conversion orchestration."""

from .converter import Converter, convert_blocking

__all__ = ["Converter", "convert_blocking"]
