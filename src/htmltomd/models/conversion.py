"""Request and response models for a single conversion."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, field_validator


class ConversionRequest(BaseModel):
    """
    One page to convert.

    Attributes:
        url: Absolute URL of the page to fetch
        selector: CSS selector of the region to keep (empty = whole document)
        filters: CSS selectors removed from the region, applied in order
    """

    url: str = Field(..., description="Absolute URL of the page to convert")
    selector: str = Field("", description="CSS selector of the region to convert")
    filters: tuple[str, ...] = Field((), description="CSS selectors removed before conversion")

    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator("url")
    @classmethod
    def _check_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("URL is required")
        try:
            parsed = urlsplit(v)
        except ValueError as e:
            raise ValueError(f"Invalid URL: {e}") from e
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("URL must be absolute (scheme and host required)")
        return v

    @field_validator("selector", mode="before")
    @classmethod
    def _none_selector(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("selector")
    @classmethod
    def _strip_selector(cls, v: str) -> str:
        return v.strip()

    @field_validator("filters", mode="before")
    @classmethod
    def _normalize_filters(cls, v: Any) -> Any:
        if v is None:
            return ()
        if isinstance(v, str):
            v = [v]
        if isinstance(v, (list, tuple)):
            # Blank entries are dropped, anything else is left for validation
            return tuple(f.strip() if isinstance(f, str) else f for f in v if not isinstance(f, str) or f.strip())
        return v


class ConversionResponse(BaseModel):
    """Result of a conversion: target filename and Markdown body."""

    filename: str
    content: str

    model_config = {"frozen": True}
