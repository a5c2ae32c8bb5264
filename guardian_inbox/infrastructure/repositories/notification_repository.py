"""Persistence helpers for a user's notification inbox."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Callable

from sqlalchemy.orm import Session

from guardian_inbox.domain.entities import NotificationItem
from guardian_inbox.infrastructure.notifications.serialization import (
    dumps_notifications,
    loads_notifications,
)

from .storage_entry_repository import StorageEntryRepository


class NotificationRepository:
    """Store the inbox as one serialized blob plus the last-checked instant."""

    def __init__(
        self,
        session: Session,
        *,
        notifications_key: str,
        last_check_key: str,
    ) -> None:
        self.session = session
        self._entries = StorageEntryRepository(session)
        self._notifications_key = notifications_key
        self._last_check_key = last_check_key

    def load_items(self, owner_id: str) -> list[NotificationItem]:
        """Return the stored items; raises ``ValueError`` on undecodable data."""

        stored = self._entries.get(owner_id, self._notifications_key)
        if not stored:
            return []
        return loads_notifications(stored)

    def save_items(self, owner_id: str, items: Sequence[NotificationItem]) -> str:
        """Rewrite the full collection and return the serialized value."""

        serialized = dumps_notifications(items)
        self._entries.put(owner_id, self._notifications_key, serialized)
        return serialized

    def get_last_check(self, owner_id: str) -> str | None:
        return self._entries.get(owner_id, self._last_check_key)

    def set_last_check(self, owner_id: str, value: datetime) -> None:
        self._entries.put(owner_id, self._last_check_key, value.isoformat())

    def clear(self, owner_id: str) -> None:
        """Remove the stored items and the last-checked instant together."""

        self._entries.delete_many(owner_id, (self._notifications_key, self._last_check_key))


class DatabaseNotificationStore:
    """Inbox store for one user that opens a short-lived session per call."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        owner_id: str,
        *,
        notifications_key: str,
        last_check_key: str,
    ) -> None:
        self._session_factory = session_factory
        self.owner_id = owner_id
        self.notifications_key = notifications_key
        self._last_check_key = last_check_key

    def _repository(self, session: Session) -> NotificationRepository:
        return NotificationRepository(
            session,
            notifications_key=self.notifications_key,
            last_check_key=self._last_check_key,
        )

    def load_items(self) -> list[NotificationItem]:
        with self._session_factory() as session:
            return self._repository(session).load_items(self.owner_id)

    def save_items(self, items: Sequence[NotificationItem]) -> str:
        with self._session_factory() as session:
            return self._repository(session).save_items(self.owner_id, items)

    def clear(self) -> None:
        """Remove both the stored items and the last-checked instant."""

        with self._session_factory() as session:
            self._repository(session).clear(self.owner_id)

    def get_last_check(self) -> str | None:
        with self._session_factory() as session:
            return self._repository(session).get_last_check(self.owner_id)

    def set_last_check(self, value: datetime) -> None:
        with self._session_factory() as session:
            self._repository(session).set_last_check(self.owner_id, value)


__all__ = ["NotificationRepository", "DatabaseNotificationStore"]
