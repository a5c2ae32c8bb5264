"""Keep one :class:`NotificationInbox` per authenticated user."""

from __future__ import annotations

import threading
from datetime import timedelta
from typing import Callable

from guardian_inbox.infrastructure.notifications import NotificationEventBus

from .inbox import DEFAULT_LAST_CHECK, NotificationInbox, NotificationStore, ReportSource


class InboxRegistry:
    """Lazily build and cache the inbox belonging to each user id."""

    def __init__(
        self,
        *,
        store_factory: Callable[[str], NotificationStore],
        report_source: ReportSource,
        event_bus: NotificationEventBus,
        default_last_check: str = DEFAULT_LAST_CHECK,
        new_badge_window: timedelta = timedelta(minutes=5),
    ) -> None:
        self._store_factory = store_factory
        self._report_source = report_source
        self.event_bus = event_bus
        self._default_last_check = default_last_check
        self._new_badge_window = new_badge_window
        self._inboxes: dict[str, NotificationInbox] = {}
        self._lock = threading.Lock()

    def get(self, owner_id: str) -> NotificationInbox:
        with self._lock:
            inbox = self._inboxes.get(owner_id)
            if inbox is None:
                inbox = NotificationInbox(
                    owner_id,
                    store=self._store_factory(owner_id),
                    report_source=self._report_source,
                    event_bus=self.event_bus,
                    default_last_check=self._default_last_check,
                    new_badge_window=self._new_badge_window,
                )
                self._inboxes[owner_id] = inbox
            return inbox


__all__ = ["InboxRegistry"]
