"""Domain event emitted by the realtime notifier."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

EVENT_KIND_REPORT = "report"
EVENT_KIND_LOCATION = "location"
EVENT_KIND_SAFETY = "safety"
EVENT_KIND_SYSTEM = "system"
EVENT_KIND_ENGAGEMENT = "engagement"

EVENT_KINDS = (
    EVENT_KIND_REPORT,
    EVENT_KIND_LOCATION,
    EVENT_KIND_SAFETY,
    EVENT_KIND_SYSTEM,
    EVENT_KIND_ENGAGEMENT,
)


@dataclass
class RealtimeEvent:
    """Push-style notification delivered while the app is running."""

    id: str
    type: str
    title: str
    message: str
    timestamp: datetime
    read: bool
    priority: str
    action_url: str | None = None
    icon: str | None = None
    sound: bool | None = None
    vibration: bool | None = None
    persistent: bool | None = None
    distance_meters: float | None = None


__all__ = [
    "EVENT_KIND_REPORT",
    "EVENT_KIND_LOCATION",
    "EVENT_KIND_SAFETY",
    "EVENT_KIND_SYSTEM",
    "EVENT_KIND_ENGAGEMENT",
    "EVENT_KINDS",
    "RealtimeEvent",
]
