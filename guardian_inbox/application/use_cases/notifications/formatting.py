"""Presentation helpers shared by the inbox views.

Every function here is pure: the current time is passed in (``now``) or read
once from :func:`now_in_app_timezone`, and nothing touches storage.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from guardian_inbox.domain.entities import (
    NOTIFICATION_TYPE_NEW_ZONE,
    NOTIFICATION_TYPE_REPORT_VALIDATED,
    NOTIFICATION_TYPE_SYSTEM,
    NOTIFICATION_TYPE_ZONE_ALERT,
    NotificationItem,
)
from guardian_inbox.utils import ensure_app_timezone, now_in_app_timezone

EARTH_RADIUS_METERS = 6371e3

_RISK_LABELS = {1: "Low", 2: "Moderate", 3: "High", 4: "Critical", 5: "Extreme"}
_RISK_COLORS = {
    1: "#28a745",
    2: "#ffc107",
    3: "#fd7e14",
    4: "#dc3545",
    5: "#8B0000",
}
_RISK_GRADIENTS = {
    1: "linear-gradient(90deg, #22c55e, #16a34a)",
    2: "linear-gradient(90deg, #eab308, #ca8a04)",
    3: "linear-gradient(90deg, #f97316, #ea580c)",
    4: "linear-gradient(90deg, #ef4444, #dc2626)",
    5: "linear-gradient(90deg, #991b1b, #7f1d1d)",
}
_UNKNOWN_RISK_COLOR = "#6c757d"
_UNKNOWN_RISK_GRADIENT = "linear-gradient(90deg, #6b7280, #4b5563)"

_PRIORITY_COLORS = {
    "critical": "danger",
    "high": "warning",
    "medium": "primary",
    "low": "medium",
}
_PRIORITY_ICONS = {
    "critical": "alert-circle",
    "high": "warning",
    "medium": "information-circle",
    "low": "checkmark-circle",
}

_TYPE_ICONS = {
    NOTIFICATION_TYPE_REPORT_VALIDATED: "checkmark-circle",
    NOTIFICATION_TYPE_NEW_ZONE: "warning",
    NOTIFICATION_TYPE_ZONE_ALERT: "alert-circle",
    NOTIFICATION_TYPE_SYSTEM: "information-circle",
}
_TYPE_COLORS = {
    NOTIFICATION_TYPE_REPORT_VALIDATED: "success",
    NOTIFICATION_TYPE_NEW_ZONE: "warning",
    NOTIFICATION_TYPE_ZONE_ALERT: "danger",
    NOTIFICATION_TYPE_SYSTEM: "primary",
}
_TYPE_LABELS = {
    NOTIFICATION_TYPE_REPORT_VALIDATED: "Your Report Validated",
    NOTIFICATION_TYPE_NEW_ZONE: "New Zone Alert",
    NOTIFICATION_TYPE_ZONE_ALERT: "Zone Alert",
    NOTIFICATION_TYPE_SYSTEM: "System Notification",
}
_STATUS_TEXT = {
    NOTIFICATION_TYPE_REPORT_VALIDATED: "Validated",
    NOTIFICATION_TYPE_NEW_ZONE: "New Zone",
    NOTIFICATION_TYPE_ZONE_ALERT: "Zone Alert",
    NOTIFICATION_TYPE_SYSTEM: "System",
}

_INCIDENT_NAMES = re.compile(r"\b(crime-theft|vandalism|assault|theft|verbal threats|lost item)\b")
_DISTANCE = re.compile(r"(\d+\.?\d*)\s*(km|m)\s+(away)")
_RELATIVE_TIME = re.compile(
    r"\b(just now|minutes? ago|hours? ago|days? ago|weeks? ago|months? ago)\b"
)
_TITLED_INCIDENTS = re.compile(
    r"\b(Crime-Theft|Vandalism|Assault|Theft|Verbal Threats|Lost Item)\b"
)

_ONE_DAY = timedelta(days=1)


@dataclass
class NotificationGroup:
    """Items bucketed under a relative-age heading."""

    label: str
    notifications: list[NotificationItem]


def _elapsed(timestamp: datetime, now: datetime | None) -> tuple[int, int, int]:
    current = now or now_in_app_timezone()
    diff_ms = (ensure_app_timezone(current) - ensure_app_timezone(timestamp)) / timedelta(
        milliseconds=1
    )
    minutes = math.floor(diff_ms / 60_000)
    hours = math.floor(diff_ms / 3_600_000)
    days = math.floor(diff_ms / 86_400_000)
    return minutes, hours, days


def _short_date(timestamp: datetime) -> str:
    local = ensure_app_timezone(timestamp)
    return f"{local.month}/{local.day}/{local.year}"


def _clock_date(timestamp: datetime) -> str:
    local = ensure_app_timezone(timestamp)
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return f"{local:%b} {local.day}, {hour}:{local:%M} {meridiem}"


def time_ago(timestamp: datetime, now: datetime | None = None) -> str:
    """Return the relative age label used on inbox cards."""

    minutes, hours, days = _elapsed(timestamp, now)
    weeks = days // 7
    months = days // 30

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if hours < 24:
        return f"{hours}h ago"
    if days == 1:
        return "1 day ago"
    if days < 7:
        return f"{days}d ago"
    if weeks == 1:
        return "1 week ago"
    if weeks < 4:
        return f"{weeks}w ago"
    if months == 1:
        return "1 month ago"
    if months < 12:
        return f"{months}mo ago"
    return _short_date(timestamp)


def short_time_ago(timestamp: datetime, now: datetime | None = None) -> str:
    """Compact variant used in list rows; switches to a date after a week."""

    minutes, hours, days = _elapsed(timestamp, now)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if hours < 24:
        return f"{hours}h ago"
    if days < 7:
        return f"{days}d ago"
    return _short_date(timestamp)


def detailed_time(timestamp: datetime, now: datetime | None = None) -> str:
    """Return a spelled-out relative age such as ``3 hours ago``."""

    minutes, hours, days = _elapsed(timestamp, now)
    weeks = days // 7
    months = days // 30

    if minutes < 60:
        if minutes < 1:
            return "just now"
        return f"{minutes} minute{'' if minutes == 1 else 's'} ago"
    if hours < 24:
        return f"{hours} hour{'' if hours == 1 else 's'} ago"
    if days == 1:
        return "1 day ago"
    if days < 7:
        return f"{days} days ago"
    if weeks == 1:
        return "1 week ago"
    if weeks < 4:
        return f"{weeks} weeks ago"
    if months == 1:
        return "1 month ago"
    if months < 12:
        return f"{months} months ago"
    return _clock_date(timestamp)


def _normalize_level(level: object) -> int | None:
    if level is None:
        return 1
    if isinstance(level, bool):
        return None
    try:
        number = float(level)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not number.is_integer():
        return None
    return int(number)


def risk_label(level: object) -> str:
    """Return the human label for a 1-5 risk level."""

    return _RISK_LABELS.get(_normalize_level(level), "Unknown")


def risk_color(level: object) -> str:
    """Return the hex color associated with a 1-5 risk level."""

    return _RISK_COLORS.get(_normalize_level(level), _UNKNOWN_RISK_COLOR)


def risk_gradient(level: object) -> str:
    return _RISK_GRADIENTS.get(_normalize_level(level), _UNKNOWN_RISK_GRADIENT)


def risk_stars(level: int) -> list[str]:
    """Return five star icon names, filled up to ``level``."""

    return ["star" if index <= level else "star-outline" for index in range(1, 6)]


def priority_color(priority: str) -> str:
    return _PRIORITY_COLORS.get(priority, "medium")


def priority_icon(priority: str) -> str:
    return _PRIORITY_ICONS.get(priority, "information-circle")


def notification_icon(notification_type: str) -> str:
    return _TYPE_ICONS.get(notification_type, "notifications")


def notification_color(notification_type: str) -> str:
    return _TYPE_COLORS.get(notification_type, "medium")


def notification_type_label(notification_type: str) -> str:
    return _TYPE_LABELS.get(notification_type, "Notification")


def status_text(notification_type: str) -> str:
    return _STATUS_TEXT.get(notification_type, "Notification")


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in meters between two coordinates."""

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lng2 - lng1)

    a = (
        math.sin(delta_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance_text(meters: float | None) -> str:
    """Return ``"850 m away"`` / ``"1.2 km away"`` or an empty string."""

    if meters is None:
        return ""
    if meters < 1000:
        return f"{math.floor(meters + 0.5)} m away"
    return f"{meters / 1000:.1f} km away"


def _title_words(text: str, separator: str) -> str:
    return separator.join(word[:1].upper() + word[1:] for word in text.split(separator))


def emphasize_message(message: str) -> str:
    """Wrap distances, relative times and incident names in ``<strong>`` tags."""

    formatted = _INCIDENT_NAMES.sub(lambda match: _title_words(match.group(0), "-"), message)
    formatted = _DISTANCE.sub(r"<strong>\1 \2 \3</strong>", formatted)
    formatted = _RELATIVE_TIME.sub(
        lambda match: f"<strong>{_title_words(match.group(0), ' ')}</strong>", formatted
    )
    return _TITLED_INCIDENTS.sub(r"<strong>\1</strong>", formatted)


def is_new(
    notification: NotificationItem,
    *,
    now: datetime | None = None,
    window: timedelta = timedelta(minutes=5),
) -> bool:
    """Return whether ``notification`` is recent enough to carry a NEW badge."""

    current = ensure_app_timezone(now or now_in_app_timezone())
    return current - ensure_app_timezone(notification.timestamp) <= window


def group_by_age(
    notifications: Iterable[NotificationItem], now: datetime | None = None
) -> Sequence[NotificationGroup]:
    """Bucket items into Recent (48h), This Week, This Month and Old."""

    current = ensure_app_timezone(now or now_in_app_timezone())
    groups: dict[str, list[NotificationItem]] = {
        "Recent": [],
        "This Week": [],
        "This Month": [],
        "Old": [],
    }
    for notification in notifications:
        age = current - ensure_app_timezone(notification.timestamp)
        if age < _ONE_DAY * 2:
            groups["Recent"].append(notification)
        elif age < _ONE_DAY * 7:
            groups["This Week"].append(notification)
        elif age < _ONE_DAY * 30:
            groups["This Month"].append(notification)
        else:
            groups["Old"].append(notification)

    return [
        NotificationGroup(label=label, notifications=items)
        for label, items in groups.items()
        if items
    ]


__all__ = [
    "NotificationGroup",
    "time_ago",
    "short_time_ago",
    "detailed_time",
    "risk_label",
    "risk_color",
    "risk_gradient",
    "risk_stars",
    "priority_color",
    "priority_icon",
    "notification_icon",
    "notification_color",
    "notification_type_label",
    "status_text",
    "haversine_distance",
    "distance_text",
    "emphasize_message",
    "is_new",
    "group_by_age",
]
