"""Bridge inbox change signals to the user's websocket connections."""

from __future__ import annotations

import asyncio
from typing import Any, Callable

from anyio import from_thread

from .events import InboxEvent, NotificationEventBus
from .manager import NotificationConnectionManager


class RealtimeInboxForwarder:
    """Forward :class:`InboxEvent` signals to connected websocket clients."""

    def __init__(self, manager: NotificationConnectionManager) -> None:
        self._manager = manager
        self._unsubscribe: Callable[[], None] | None = None

    def attach(self, bus: NotificationEventBus) -> None:
        """Start listening to ``bus``."""

        self.detach()
        self._unsubscribe = bus.subscribe(self.dispatch)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def dispatch(self, event: InboxEvent) -> None:
        """Schedule ``event`` for every socket opened by its owner."""

        if not self._manager.has_connections(event.owner_id):
            return

        message = {"type": event.name, "data": event.detail}
        self._schedule_send(event.owner_id, message)

    def _schedule_send(self, user_id: str, message: dict[str, Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Called from a worker thread; block until the loop has sent the message.
            from_thread.run(self._manager.send_to_user, user_id, message)
        else:
            loop.create_task(self._manager.send_to_user(user_id, message))


__all__ = ["RealtimeInboxForwarder"]
