"""Aggregate application use cases."""

from .notifications import InboxRegistry, NotificationInbox

__all__ = [
    "InboxRegistry",
    "NotificationInbox",
]
