"""Track the websocket connections opened by each inbox owner."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, DefaultDict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class NotificationConnectionManager:
    """Hold the open inbox sockets of every user and prune the ones that fail."""

    def __init__(self) -> None:
        self._connections: DefaultDict[str, Set[WebSocket]] = defaultdict(set)

    async def connect(self, owner_id: str, websocket: WebSocket) -> None:
        """Accept ``websocket`` and register it under ``owner_id``."""

        await websocket.accept()
        self._connections[owner_id].add(websocket)
        logger.debug("Inbox socket opened for %s (%d open)", owner_id, self.connection_count(owner_id))

    def disconnect(self, owner_id: str, websocket: WebSocket) -> None:
        connections = self._connections.get(owner_id)
        if connections is None:
            return
        connections.discard(websocket)
        if not connections:
            self._connections.pop(owner_id, None)

    def has_connections(self, owner_id: str) -> bool:
        return bool(self._connections.get(owner_id))

    def connection_count(self, owner_id: str) -> int:
        return len(self._connections.get(owner_id, ()))

    async def send_to_user(self, owner_id: str, message: dict[str, Any]) -> int:
        """Send ``message`` to every socket of ``owner_id``; return how many received it.

        A socket whose send fails is dropped so later signals skip it.
        """

        delivered = 0
        for connection in list(self._connections.get(owner_id, ())):
            try:
                await connection.send_json(message)
            except Exception:
                logger.warning(
                    "Dropping inbox socket for %s after failed %s send",
                    owner_id,
                    message.get("type"),
                    exc_info=True,
                )
                self.disconnect(owner_id, connection)
            else:
                delivered += 1
        return delivered


__all__ = ["NotificationConnectionManager"]
