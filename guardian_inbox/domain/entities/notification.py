"""Domain entities describing items shown in the notification inbox."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Union

NOTIFICATION_TYPE_REPORT_VALIDATED = "report_validated"
NOTIFICATION_TYPE_NEW_ZONE = "new_zone"
NOTIFICATION_TYPE_ZONE_ALERT = "zone_alert"
NOTIFICATION_TYPE_SYSTEM = "system"

NOTIFICATION_TYPES = (
    NOTIFICATION_TYPE_REPORT_VALIDATED,
    NOTIFICATION_TYPE_NEW_ZONE,
    NOTIFICATION_TYPE_ZONE_ALERT,
    NOTIFICATION_TYPE_SYSTEM,
)

PRIORITY_LOW = "low"
PRIORITY_MEDIUM = "medium"
PRIORITY_HIGH = "high"
PRIORITY_CRITICAL = "critical"

PRIORITY_RANK: dict[str, int] = {
    PRIORITY_CRITICAL: 4,
    PRIORITY_HIGH: 3,
    PRIORITY_MEDIUM: 2,
    PRIORITY_LOW: 1,
}

DATA_KIND_REPORT = "report"
DATA_KIND_ALERT = "alert"


def priority_for_risk_level(risk_level: int) -> str:
    """Return the notification priority assigned to a report ``risk_level``."""

    if risk_level >= 4:
        return PRIORITY_CRITICAL
    if risk_level == 3:
        return PRIORITY_HIGH
    return PRIORITY_MEDIUM


@dataclass
class GeoPoint:
    """Coordinates of a report plus the addresses resolved for them."""

    lat: float
    lng: float
    full_address: str | None = None
    simplified_address: str | None = None


@dataclass
class ReportNotificationData:
    """Payload attached to notifications derived from validated reports."""

    report_id: str
    report_type: str
    risk_level: int | None = None
    admin_level: int | None = None
    location: GeoPoint | None = None
    location_address: str | None = None
    validated_time: str | None = None
    seen_by_user: bool = False
    is_user_report: bool = False
    validated_at: datetime | None = None
    user_id: str | None = None
    distance_meters: float | None = None
    kind: str = field(default=DATA_KIND_REPORT, init=False)


@dataclass
class AlertNotificationData:
    """Payload attached to notifications pushed by the realtime notifier."""

    action_url: str | None = None
    icon: str | None = None
    sound: bool | None = None
    vibration: bool | None = None
    persistent: bool | None = None
    distance_meters: float | None = None
    seen_by_user: bool = False
    kind: str = field(default=DATA_KIND_ALERT, init=False)


NotificationData = Union[ReportNotificationData, AlertNotificationData]


@dataclass
class NotificationItem:
    """Single entry of a user's notification inbox."""

    id: str
    type: str
    title: str
    message: str
    timestamp: datetime
    read: bool
    priority: str
    data: NotificationData | None = None

    @property
    def report_id(self) -> str | None:
        if isinstance(self.data, ReportNotificationData):
            return self.data.report_id
        return None

    @property
    def seen_by_user(self) -> bool:
        return bool(self.data and self.data.seen_by_user)

    @property
    def location_address(self) -> str | None:
        if isinstance(self.data, ReportNotificationData):
            return self.data.location_address
        return None

    @property
    def report_type(self) -> str | None:
        if isinstance(self.data, ReportNotificationData):
            return self.data.report_type
        return None

    @property
    def distance_meters(self) -> float | None:
        return self.data.distance_meters if self.data else None

    def risk_level(self) -> int:
        """Return the highest known risk level for the item, ``0`` when unknown."""

        if not isinstance(self.data, ReportNotificationData):
            return 0
        return max(self.data.admin_level or 0, self.data.risk_level or 0, 0)

    def mark_seen(self) -> bool:
        """Flag the item as read and seen. Return ``True`` when anything changed."""

        if self.read and self.seen_by_user:
            return False
        self.read = True
        if self.data is None:
            self.data = AlertNotificationData()
        self.data.seen_by_user = True
        return True


@dataclass(frozen=True)
class NavigationTarget:
    """Map destination opened when a location-bearing notification is tapped."""

    lat: float
    lng: float
    address: str | None
    report_type: str | None
    risk_level: int
    timestamp: datetime


__all__ = [
    "NOTIFICATION_TYPE_REPORT_VALIDATED",
    "NOTIFICATION_TYPE_NEW_ZONE",
    "NOTIFICATION_TYPE_ZONE_ALERT",
    "NOTIFICATION_TYPE_SYSTEM",
    "NOTIFICATION_TYPES",
    "PRIORITY_LOW",
    "PRIORITY_MEDIUM",
    "PRIORITY_HIGH",
    "PRIORITY_CRITICAL",
    "PRIORITY_RANK",
    "DATA_KIND_REPORT",
    "DATA_KIND_ALERT",
    "priority_for_risk_level",
    "GeoPoint",
    "ReportNotificationData",
    "AlertNotificationData",
    "NotificationData",
    "NotificationItem",
    "NavigationTarget",
]
