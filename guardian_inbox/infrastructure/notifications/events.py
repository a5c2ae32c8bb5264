"""In-process observer used to announce inbox changes to other surfaces."""

from __future__ import annotations

import copy
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)

NOTIFICATIONS_UPDATED_EVENT = "notificationsUpdated"
STORAGE_EVENT = "storage"


@dataclass(frozen=True)
class InboxEvent:
    """Change signal emitted after an inbox is written."""

    owner_id: str
    name: str
    detail: dict[str, Any] = field(default_factory=dict)


InboxListener = Callable[[InboxEvent], None]


class NotificationEventBus:
    """Fan out :class:`InboxEvent` instances to registered listeners."""

    def __init__(self) -> None:
        self._listeners: list[InboxListener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: InboxListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""

        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: InboxEvent) -> None:
        """Deliver ``event`` to every listener; a failing listener does not stop the rest."""

        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(InboxEvent(event.owner_id, event.name, copy.deepcopy(event.detail)))
            except Exception:
                logger.exception("Inbox listener %r failed handling %s", listener, event.name)


__all__ = [
    "NOTIFICATIONS_UPDATED_EVENT",
    "STORAGE_EVENT",
    "InboxEvent",
    "InboxListener",
    "NotificationEventBus",
]
