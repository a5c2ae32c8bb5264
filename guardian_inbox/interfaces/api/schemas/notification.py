"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

NotificationPriority = Literal["low", "medium", "high", "critical"]
RealtimeEventKind = Literal["report", "location", "safety", "system", "engagement"]


class NotificationRead(BaseModel):
    """Representation of an inbox item delivered to the client."""

    id: str
    type: str
    title: str
    message: str
    formatted_message: str
    timestamp: datetime
    read: bool
    priority: str
    data: dict[str, Any] | None = None
    time_ago: str
    short_time_ago: str
    is_new: bool
    risk_level: int
    risk_label: str | None = None
    risk_color: str | None = None
    risk_gradient: str | None = None
    risk_stars: list[str] | None = None
    priority_color: str
    priority_icon: str
    icon: str
    color: str
    type_label: str
    status_text: str
    distance_text: str = ""


class NotificationPageRead(BaseModel):
    """A filtered, paginated view of the inbox."""

    items: list[NotificationRead]
    total: int
    page: int
    per_page: int
    has_more: bool
    unread_count: int


class NotificationGroupRead(BaseModel):
    label: str
    notifications: list[NotificationRead]


class NotificationSummaryRead(BaseModel):
    """Counters used by badge surfaces."""

    total: int
    unread: int
    read: int
    new: int


class RefreshRequest(BaseModel):
    """Optional device position used to compute distances to reports."""

    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)


class RefreshRead(BaseModel):
    skipped: bool
    total: int
    unread_count: int


class MarkAllReadRead(BaseModel):
    updated: int


class RealtimeEventCreate(BaseModel):
    """Push-style notification forwarded by the realtime notifier."""

    id: str = Field(..., min_length=1)
    type: RealtimeEventKind
    title: str
    message: str
    timestamp: datetime
    read: bool = False
    priority: NotificationPriority = "medium"
    action_url: str | None = None
    icon: str | None = None
    sound: bool | None = None
    vibration: bool | None = None
    persistent: bool | None = None
    distance_meters: float | None = Field(default=None, ge=0)


class IngestRead(BaseModel):
    accepted: bool
    notification: NotificationRead | None = None


class NavigationRead(BaseModel):
    """Map destination opened when a notification is tapped."""

    lat: float
    lng: float
    address: str | None
    report_type: str | None
    risk_level: int
    timestamp: datetime


__all__ = [
    "NotificationPriority",
    "RealtimeEventKind",
    "NotificationRead",
    "NotificationPageRead",
    "NotificationGroupRead",
    "NotificationSummaryRead",
    "RefreshRequest",
    "RefreshRead",
    "MarkAllReadRead",
    "RealtimeEventCreate",
    "IngestRead",
    "NavigationRead",
]
