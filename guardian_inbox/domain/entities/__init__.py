"""Domain entities exposed by the application."""

from .notification import (
    DATA_KIND_ALERT,
    DATA_KIND_REPORT,
    NOTIFICATION_TYPE_NEW_ZONE,
    NOTIFICATION_TYPE_REPORT_VALIDATED,
    NOTIFICATION_TYPE_SYSTEM,
    NOTIFICATION_TYPE_ZONE_ALERT,
    NOTIFICATION_TYPES,
    PRIORITY_CRITICAL,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    PRIORITY_RANK,
    AlertNotificationData,
    GeoPoint,
    NavigationTarget,
    NotificationData,
    NotificationItem,
    ReportNotificationData,
    priority_for_risk_level,
)
from .realtime_event import (
    EVENT_KIND_ENGAGEMENT,
    EVENT_KIND_LOCATION,
    EVENT_KIND_REPORT,
    EVENT_KIND_SAFETY,
    EVENT_KIND_SYSTEM,
    EVENT_KINDS,
    RealtimeEvent,
)
from .report import (
    REPORT_STATUS_PENDING,
    REPORT_STATUS_REJECTED,
    REPORT_STATUS_VALIDATED,
    ValidatedReport,
)
from .user import User

__all__ = [
    "DATA_KIND_ALERT",
    "DATA_KIND_REPORT",
    "NOTIFICATION_TYPE_NEW_ZONE",
    "NOTIFICATION_TYPE_REPORT_VALIDATED",
    "NOTIFICATION_TYPE_SYSTEM",
    "NOTIFICATION_TYPE_ZONE_ALERT",
    "NOTIFICATION_TYPES",
    "PRIORITY_CRITICAL",
    "PRIORITY_HIGH",
    "PRIORITY_LOW",
    "PRIORITY_MEDIUM",
    "PRIORITY_RANK",
    "AlertNotificationData",
    "GeoPoint",
    "NavigationTarget",
    "NotificationData",
    "NotificationItem",
    "ReportNotificationData",
    "priority_for_risk_level",
    "EVENT_KIND_ENGAGEMENT",
    "EVENT_KIND_LOCATION",
    "EVENT_KIND_REPORT",
    "EVENT_KIND_SAFETY",
    "EVENT_KIND_SYSTEM",
    "EVENT_KINDS",
    "RealtimeEvent",
    "REPORT_STATUS_PENDING",
    "REPORT_STATUS_REJECTED",
    "REPORT_STATUS_VALIDATED",
    "ValidatedReport",
    "User",
]
