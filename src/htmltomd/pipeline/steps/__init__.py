"""Pipeline steps for a conversion."""

from .convert import ConvertStep, RewriteLinksStep
from .fetch import FetchStep
from .selection import ParseStep, SelectStep
from .validate import NameStep, ValidateStep

__all__ = [
    "ConvertStep",
    "FetchStep",
    "NameStep",
    "ParseStep",
    "RewriteLinksStep",
    "SelectStep",
    "ValidateStep",
]
