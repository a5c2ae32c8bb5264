"""Realtime notification helpers for the infrastructure layer."""

from .events import (
    NOTIFICATIONS_UPDATED_EVENT,
    STORAGE_EVENT,
    InboxEvent,
    InboxListener,
    NotificationEventBus,
)
from .manager import NotificationConnectionManager
from .realtime import RealtimeInboxForwarder
from .serialization import (
    NotificationDecodeError,
    deserialize_notification,
    dumps_notifications,
    loads_notifications,
    serialize_data,
    serialize_notification,
)

__all__ = [
    "NOTIFICATIONS_UPDATED_EVENT",
    "STORAGE_EVENT",
    "InboxEvent",
    "InboxListener",
    "NotificationEventBus",
    "NotificationConnectionManager",
    "RealtimeInboxForwarder",
    "NotificationDecodeError",
    "deserialize_notification",
    "dumps_notifications",
    "loads_notifications",
    "serialize_data",
    "serialize_notification",
]
