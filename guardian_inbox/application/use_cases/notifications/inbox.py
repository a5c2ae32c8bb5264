"""Reconciliation engine owning one user's notification inbox.

The inbox mirrors "validated report" events as notification items, merges them
with items pushed by the realtime notifier and persists the whole collection
after every mutation. Each write is announced on the event bus so badge
counters and other surfaces can refresh without being owned by the inbox.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Protocol

from guardian_inbox.domain.entities import (
    EVENT_KIND_ENGAGEMENT,
    EVENT_KIND_LOCATION,
    EVENT_KIND_REPORT,
    EVENT_KIND_SAFETY,
    EVENT_KIND_SYSTEM,
    NOTIFICATION_TYPE_NEW_ZONE,
    NOTIFICATION_TYPE_REPORT_VALIDATED,
    NOTIFICATION_TYPE_ZONE_ALERT,
    AlertNotificationData,
    GeoPoint,
    NavigationTarget,
    NotificationItem,
    RealtimeEvent,
    ReportNotificationData,
    User,
    ValidatedReport,
    priority_for_risk_level,
)
from guardian_inbox.infrastructure.notifications import (
    NOTIFICATIONS_UPDATED_EVENT,
    STORAGE_EVENT,
    InboxEvent,
    NotificationEventBus,
)
from guardian_inbox.utils import ensure_app_timezone, now_in_app_timezone, parse_iso_datetime

from .errors import ConfirmationRequiredError, NotificationNotFoundError
from .filtering import NotificationFilterCriteria, filter_notifications, sort_by_recent
from .formatting import detailed_time, haversine_distance, is_new

logger = logging.getLogger(__name__)

DEFAULT_LAST_CHECK = "2020-01-01T00:00:00+00:00"
TITLE_OWN_REPORT = "Your Report Validated"
TITLE_NEW_ZONE = "New Zone Alert"

_IGNORED_EVENT_KINDS = frozenset({EVENT_KIND_SYSTEM, EVENT_KIND_ENGAGEMENT})
_EVENT_KIND_TO_TYPE = {
    EVENT_KIND_REPORT: NOTIFICATION_TYPE_REPORT_VALIDATED,
    EVENT_KIND_LOCATION: NOTIFICATION_TYPE_NEW_ZONE,
    EVENT_KIND_SAFETY: NOTIFICATION_TYPE_ZONE_ALERT,
}


class NotificationStore(Protocol):
    """Storage holding one user's serialized inbox."""

    notifications_key: str

    def load_items(self) -> list[NotificationItem]: ...

    def save_items(self, items: Sequence[NotificationItem]) -> str: ...

    def clear(self) -> None: ...

    def get_last_check(self) -> str | None: ...

    def set_last_check(self, value: datetime) -> None: ...


class ReportSource(Protocol):
    """Authoritative list of reviewed incident reports."""

    def get_validated_reports(self) -> Sequence[ValidatedReport]: ...


def build_report_notification(
    report: ValidatedReport,
    current_user: User,
    *,
    last_check: datetime,
    now: datetime | None = None,
    user_location: GeoPoint | None = None,
) -> NotificationItem:
    """Derive the inbox item announcing a validated ``report``."""

    validated_at = ensure_app_timezone(report.validated_at)
    if validated_at is None:
        raise ValueError(f"Report {report.id} has no validation time")

    risk_level = report.admin_level()
    is_user_report = report.user_id == current_user.id
    seen = validated_at <= last_check

    distance = None
    if user_location is not None and report.location is not None:
        distance = haversine_distance(
            user_location.lat, user_location.lng, report.location.lat, report.location.lng
        )

    return NotificationItem(
        id=f"validated_{report.id}",
        type=NOTIFICATION_TYPE_REPORT_VALIDATED if is_user_report else NOTIFICATION_TYPE_NEW_ZONE,
        title=TITLE_OWN_REPORT if is_user_report else TITLE_NEW_ZONE,
        message=report.type,
        timestamp=validated_at,
        read=seen,
        priority=priority_for_risk_level(risk_level),
        data=ReportNotificationData(
            report_id=report.id,
            report_type=report.type,
            risk_level=risk_level,
            admin_level=risk_level,
            location=report.location,
            location_address=report.display_address(),
            validated_time=detailed_time(validated_at, now),
            seen_by_user=seen,
            is_user_report=is_user_report,
            validated_at=validated_at,
            user_id=report.user_id,
            distance_meters=distance,
        ),
    )


def remove_notifications_for_deleted_reports(
    items: Iterable[NotificationItem], reports: Iterable[ValidatedReport]
) -> list[NotificationItem]:
    """Drop report-derived items whose report is no longer published."""

    live_ids = {report.id for report in reports}
    return [item for item in items if not item.report_id or item.report_id in live_ids]


def notification_from_event(event: RealtimeEvent) -> NotificationItem | None:
    """Convert a realtime event into an inbox item, or ``None`` for ignored kinds."""

    if event.type in _IGNORED_EVENT_KINDS:
        return None
    notification_type = _EVENT_KIND_TO_TYPE.get(event.type)
    if notification_type is None:
        return None
    return NotificationItem(
        id=event.id,
        type=notification_type,
        title=event.title,
        message=event.message,
        timestamp=ensure_app_timezone(event.timestamp),
        read=event.read,
        priority=event.priority,
        data=AlertNotificationData(
            action_url=event.action_url,
            icon=event.icon,
            sound=event.sound,
            vibration=event.vibration,
            persistent=event.persistent,
            distance_meters=event.distance_meters,
        ),
    )


@dataclass(frozen=True)
class _ChangeSignal:
    """Counters and stored value captured while the inbox lock is held."""

    count: int
    unread_count: int
    serialized: str | None


class NotificationInbox:
    """Own, reconcile and query the notification collection of one user.

    Mutations are serialized behind a single re-entrant lock. The report fetch
    and the change signals published on the event bus both happen outside
    that lock, so listeners may call back into the inbox from any thread.
    Overlapping :meth:`refresh` calls are ignored rather than queued; callers
    can check :attr:`is_reconciling` beforehand.
    """

    def __init__(
        self,
        owner_id: str,
        *,
        store: NotificationStore,
        report_source: ReportSource,
        event_bus: NotificationEventBus,
        clock: Callable[[], datetime] = now_in_app_timezone,
        default_last_check: str = DEFAULT_LAST_CHECK,
        new_badge_window: timedelta = timedelta(minutes=5),
    ) -> None:
        self.owner_id = owner_id
        self._store = store
        self._report_source = report_source
        self._event_bus = event_bus
        self._clock = clock
        self._default_last_check = parse_iso_datetime(default_last_check)
        self._new_badge_window = new_badge_window
        self._items: list[NotificationItem] | None = None
        self._lock = threading.RLock()
        self._flag_lock = threading.Lock()
        self._reconciling = False

    @property
    def is_reconciling(self) -> bool:
        with self._flag_lock:
            return self._reconciling

    @property
    def items(self) -> list[NotificationItem]:
        """Return a shallow copy of the in-memory collection, loading it on first use."""

        with self._lock:
            return list(self._ensure_loaded())

    def load(self) -> list[NotificationItem]:
        """Read the persisted collection, newest first. Decode errors yield ``[]``."""

        try:
            items = self._store.load_items()
        except ValueError:
            logger.exception("Stored notifications for %s could not be decoded", self.owner_id)
            return []
        return sort_by_recent(items)

    def reconcile(
        self,
        current_user: User,
        existing_items: Sequence[NotificationItem],
        *,
        user_location: GeoPoint | None = None,
    ) -> list[NotificationItem]:
        """Merge ``existing_items`` with the validated reports currently published.

        Items whose report vanished are removed and every published report
        replaces the local item sharing its ``reportId``, so local read flags
        on report items do not survive. The result is not sorted.
        """

        reports = self._fetch_validated_reports()
        if reports is None:
            return list(existing_items)
        return self._merge(current_user, existing_items, reports, user_location=user_location)

    def refresh(
        self, current_user: User, *, user_location: GeoPoint | None = None
    ) -> list[NotificationItem] | None:
        """Reconcile the held collection, persist it and return it newest first.

        Returns ``None`` without fetching when another refresh is in flight.
        """

        with self._flag_lock:
            if self._reconciling:
                logger.debug("Refresh for %s ignored; reconciliation in flight", self.owner_id)
                return None
            self._reconciling = True
        try:
            reports = self._fetch_validated_reports()
            with self._lock:
                existing = self._ensure_loaded()
                if reports is None:
                    merged = list(existing)
                else:
                    merged = self._merge(
                        current_user, existing, reports, user_location=user_location
                    )
                self._items = sort_by_recent(merged)
                signal = self._persist()
                result = list(self._items)
            self._announce(signal)
            return result
        finally:
            with self._flag_lock:
                self._reconciling = False

    def ingest(self, event: RealtimeEvent) -> NotificationItem | None:
        """Prepend the item built from ``event`` unless ignored or already present."""

        notification = notification_from_event(event)
        if notification is None:
            logger.debug("Ignoring realtime event %s of kind %s", event.id, event.type)
            return None
        with self._lock:
            items = self._ensure_loaded()
            if any(item.id == notification.id for item in items):
                return None
            items.insert(0, notification)
            signal = self._persist()
        self._announce(signal)
        return notification

    def query(
        self, criteria: NotificationFilterCriteria | None = None
    ) -> list[NotificationItem]:
        return filter_notifications(self.items, criteria)

    def get(self, notification_id: str) -> NotificationItem:
        with self._lock:
            return self._find(notification_id)

    def mark_read(self, notification_id: str) -> NotificationItem:
        with self._lock:
            item = self._find(notification_id)
            item.mark_seen()
            signal = self._persist()
        self._announce(signal)
        return item

    def mark_all_read(self) -> int:
        """Mark every item read and seen; return how many items changed."""

        with self._lock:
            changed = sum(1 for item in self._ensure_loaded() if item.mark_seen())
            signal = self._persist() if changed else None
        if signal is not None:
            self._announce(signal)
        return changed

    def open_inbox(self) -> int:
        """Record an inbox visit: everything becomes seen and the check time moves."""

        changed = self.mark_all_read()
        self.touch_last_check_time()
        return changed

    def delete(self, notification_id: str, *, confirmed: bool) -> NotificationItem:
        if not confirmed:
            raise ConfirmationRequiredError("Deleting a notification must be confirmed")
        with self._lock:
            item = self._find(notification_id)
            self._items = [entry for entry in self._ensure_loaded() if entry.id != item.id]
            signal = self._persist()
        self._announce(signal)
        return item

    def clear_all(self, *, confirmed: bool) -> None:
        """Drop every item and forget the last-checked instant."""

        if not confirmed:
            raise ConfirmationRequiredError("Clearing all notifications must be confirmed")
        with self._lock:
            self._store.clear()
            self._items = []
            signal = self._signal(None)
        self._announce(signal)
        logger.info("Cleared inbox for %s", self.owner_id)

    def last_check_time(self) -> datetime:
        stored = self._store.get_last_check()
        if stored:
            try:
                parsed = parse_iso_datetime(stored)
            except ValueError:
                logger.warning("Ignoring malformed last check time %r for %s", stored, self.owner_id)
            else:
                if parsed is not None:
                    return parsed
        return self._default_last_check

    def touch_last_check_time(self) -> datetime:
        now = self._clock()
        self._store.set_last_check(now)
        return now

    def unread_count(self) -> int:
        return sum(1 for item in self.items if not item.read)

    def read_count(self) -> int:
        return sum(1 for item in self.items if item.read)

    def new_count(self) -> int:
        now = self._clock()
        return sum(
            1 for item in self.items if is_new(item, now=now, window=self._new_badge_window)
        )

    def navigation_payload(self, notification_id: str) -> NavigationTarget | None:
        """Return the map destination for a location-bearing item."""

        item = self.get(notification_id)
        data = item.data
        if not isinstance(data, ReportNotificationData) or data.location is None:
            return None
        return NavigationTarget(
            lat=data.location.lat,
            lng=data.location.lng,
            address=data.location_address,
            report_type=data.report_type,
            risk_level=item.risk_level(),
            timestamp=item.timestamp,
        )

    def _fetch_validated_reports(self) -> list[ValidatedReport] | None:
        """Return the published reports deduplicated by id, or ``None`` on failure."""

        try:
            reports = list(self._report_source.get_validated_reports())
        except Exception:
            logger.exception(
                "Fetching validated reports for %s failed; keeping existing items", self.owner_id
            )
            return None

        unique: dict[str, ValidatedReport] = {}
        for report in reports:
            if report.is_validated():
                unique[report.id] = report
        return list(unique.values())

    def _merge(
        self,
        current_user: User,
        existing_items: Sequence[NotificationItem],
        reports: Sequence[ValidatedReport],
        *,
        user_location: GeoPoint | None,
    ) -> list[NotificationItem]:
        last_check = self.last_check_time()
        now = self._clock()
        survivors = remove_notifications_for_deleted_reports(existing_items, reports)
        fresh: list[NotificationItem] = []
        for report in reports:
            survivors = [item for item in survivors if item.report_id != report.id]
            fresh.append(
                build_report_notification(
                    report,
                    current_user,
                    last_check=last_check,
                    now=now,
                    user_location=user_location,
                )
            )

        logger.info(
            "Reconciled inbox for %s: %d kept, %d from validated reports",
            self.owner_id,
            len(survivors),
            len(fresh),
        )
        return survivors + fresh

    def _ensure_loaded(self) -> list[NotificationItem]:
        if self._items is None:
            self._items = self.load()
        return self._items

    def _find(self, notification_id: str) -> NotificationItem:
        for item in self._ensure_loaded():
            if item.id == notification_id:
                return item
        raise NotificationNotFoundError(notification_id)

    def _persist(self) -> _ChangeSignal:
        serialized = self._store.save_items(self._ensure_loaded())
        return self._signal(serialized)

    def _signal(self, serialized: str | None) -> _ChangeSignal:
        items = self._items or []
        return _ChangeSignal(
            count=len(items),
            unread_count=sum(1 for item in items if not item.read),
            serialized=serialized,
        )

    def _announce(self, signal: _ChangeSignal) -> None:
        self._event_bus.publish(
            InboxEvent(
                owner_id=self.owner_id,
                name=NOTIFICATIONS_UPDATED_EVENT,
                detail={"count": signal.count, "unreadCount": signal.unread_count},
            )
        )
        self._event_bus.publish(
            InboxEvent(
                owner_id=self.owner_id,
                name=STORAGE_EVENT,
                detail={"key": self._store.notifications_key, "newValue": signal.serialized},
            )
        )


__all__ = [
    "DEFAULT_LAST_CHECK",
    "NotificationStore",
    "ReportSource",
    "NotificationInbox",
    "build_report_notification",
    "remove_notifications_for_deleted_reports",
    "notification_from_event",
]
