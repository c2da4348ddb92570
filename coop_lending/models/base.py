"""Base models shared across domains."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class ChangeEvent:
    """Notification that a storage key was written by another source."""

    key: str
    value: str | None  # None when the key was removed
    source: str | None  # writer identity, None for unknown writers
    event_time: datetime
