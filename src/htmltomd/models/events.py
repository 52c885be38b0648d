"""Event types emitted while a conversion runs."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class EventType(str, Enum):
    """Stages reported by the conversion pipeline."""

    STARTED = "started"
    FETCH_COMPLETED = "fetch_completed"
    SELECTED = "selected"
    FILTERED = "filtered"
    CONVERTED = "converted"
    LINKS_REWRITTEN = "links_rewritten"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ConversionEvent:
    """
    Event emitted during a conversion.

    Example:
        def on_event(event: ConversionEvent) -> None:
            if event.type == EventType.FAILED:
                print(f"{event.step}: {event.error}")
    """

    type: EventType
    url: str
    step: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None
    count: Optional[int] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        parts = [f"[{self.type.value}]"]
        if self.step:
            parts.append(f"{self.step}:")
        parts.append(self.message or self.error or self.url)
        return " ".join(parts)
