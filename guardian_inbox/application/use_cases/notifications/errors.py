"""Errors raised by inbox use cases."""

from __future__ import annotations


class NotificationNotFoundError(ValueError):
    """Raised when an operation targets an item missing from the inbox."""

    def __init__(self, notification_id: str) -> None:
        super().__init__(f"Notification {notification_id} not found")
        self.notification_id = notification_id


class ConfirmationRequiredError(ValueError):
    """Raised when a destructive operation is attempted without confirmation."""


__all__ = ["NotificationNotFoundError", "ConfirmationRequiredError"]
