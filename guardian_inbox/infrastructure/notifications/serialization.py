"""Conversion between inbox items and their stored JSON representation.

The stored blob keeps the camelCase keys written by the mobile client
(``reportId``, ``seenByUser``...) so existing data keeps loading.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from guardian_inbox.domain.entities import (
    DATA_KIND_ALERT,
    DATA_KIND_REPORT,
    AlertNotificationData,
    GeoPoint,
    NotificationData,
    NotificationItem,
    ReportNotificationData,
)
from guardian_inbox.utils import parse_iso_datetime

_REPORT_MARKERS = ("reportId", "adminLevel", "riskLevel")


class NotificationDecodeError(ValueError):
    """Raised when stored notification data cannot be decoded."""


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _serialize_location(location: GeoPoint | None) -> dict[str, Any] | None:
    if location is None:
        return None
    return {
        "lat": location.lat,
        "lng": location.lng,
        "fullAddress": location.full_address,
        "simplifiedAddress": location.simplified_address,
    }


def serialize_data(data: NotificationData | None) -> dict[str, Any] | None:
    if data is None:
        return None
    if isinstance(data, ReportNotificationData):
        return {
            "kind": DATA_KIND_REPORT,
            "reportId": data.report_id,
            "reportType": data.report_type,
            "riskLevel": data.risk_level,
            "adminLevel": data.admin_level,
            "location": _serialize_location(data.location),
            "locationAddress": data.location_address,
            "validatedTime": data.validated_time,
            "seenByUser": data.seen_by_user,
            "isUserReport": data.is_user_report,
            "validatedAt": _isoformat(data.validated_at),
            "userId": data.user_id,
            "distanceMeters": data.distance_meters,
        }
    return {
        "kind": DATA_KIND_ALERT,
        "actionUrl": data.action_url,
        "icon": data.icon,
        "sound": data.sound,
        "vibration": data.vibration,
        "persistent": data.persistent,
        "distanceMeters": data.distance_meters,
        "seenByUser": data.seen_by_user,
    }


def serialize_notification(item: NotificationItem) -> dict[str, Any]:
    """Return the JSON-serializable representation of ``item``."""

    payload: dict[str, Any] = {
        "id": item.id,
        "type": item.type,
        "title": item.title,
        "message": item.message,
        "timestamp": item.timestamp.isoformat(),
        "read": item.read,
        "priority": item.priority,
    }
    data = serialize_data(item.data)
    if data is not None:
        payload["data"] = data
    return payload


def dumps_notifications(items: Iterable[NotificationItem]) -> str:
    """Serialize ``items`` into the flat JSON array kept in storage."""

    return json.dumps([serialize_notification(item) for item in items])


def _coerce_level(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return int(number)


def _coerce_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


def _optional_bool(value: Any) -> bool | None:
    return None if value is None else bool(value)


def _deserialize_location(raw: Any) -> GeoPoint | None:
    if not isinstance(raw, Mapping):
        return None
    lat = _coerce_float(raw.get("lat"))
    lng = _coerce_float(raw.get("lng"))
    if lat is None or lng is None:
        return None
    return GeoPoint(
        lat=lat,
        lng=lng,
        full_address=_optional_str(raw.get("fullAddress")),
        simplified_address=_optional_str(raw.get("simplifiedAddress")),
    )


def deserialize_data(raw: Any) -> NotificationData | None:
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise NotificationDecodeError("Notification data must be an object")

    kind = raw.get("kind")
    if kind is None:
        kind = (
            DATA_KIND_REPORT
            if any(raw.get(marker) is not None for marker in _REPORT_MARKERS)
            else DATA_KIND_ALERT
        )

    seen = bool(raw.get("seenByUser", False))
    distance = _coerce_float(raw.get("distanceMeters"))
    if kind == DATA_KIND_REPORT:
        return ReportNotificationData(
            report_id=str(raw.get("reportId") or ""),
            report_type=str(raw.get("reportType") or ""),
            risk_level=_coerce_level(raw.get("riskLevel")),
            admin_level=_coerce_level(raw.get("adminLevel")),
            location=_deserialize_location(raw.get("location")),
            location_address=_optional_str(raw.get("locationAddress")),
            validated_time=_optional_str(raw.get("validatedTime")),
            seen_by_user=seen,
            is_user_report=bool(raw.get("isUserReport", False)),
            validated_at=parse_iso_datetime(raw.get("validatedAt")),
            user_id=_optional_str(raw.get("userId")),
            distance_meters=distance,
        )
    if kind == DATA_KIND_ALERT:
        return AlertNotificationData(
            action_url=_optional_str(raw.get("actionUrl")),
            icon=_optional_str(raw.get("icon")),
            sound=_optional_bool(raw.get("sound")),
            vibration=_optional_bool(raw.get("vibration")),
            persistent=_optional_bool(raw.get("persistent")),
            distance_meters=distance,
            seen_by_user=seen,
        )
    raise NotificationDecodeError(f"Unknown notification data kind '{kind}'")


def deserialize_notification(raw: Any) -> NotificationItem:
    """Build a :class:`NotificationItem` from its stored representation."""

    if not isinstance(raw, Mapping):
        raise NotificationDecodeError("Stored notification must be an object")
    try:
        timestamp = parse_iso_datetime(raw["timestamp"])
        if timestamp is None:
            raise NotificationDecodeError("Notification timestamp is empty")
        return NotificationItem(
            id=str(raw["id"]),
            type=str(raw["type"]),
            title=str(raw.get("title") or ""),
            message=str(raw.get("message") or ""),
            timestamp=timestamp,
            read=bool(raw.get("read", False)),
            priority=str(raw.get("priority") or "medium"),
            data=deserialize_data(raw.get("data")),
        )
    except KeyError as exc:
        raise NotificationDecodeError(f"Stored notification is missing {exc}") from exc
    except (TypeError, AttributeError) as exc:
        raise NotificationDecodeError(str(exc)) from exc


def loads_notifications(text: str) -> list[NotificationItem]:
    """Parse the stored JSON array back into inbox items."""

    raw = json.loads(text)
    if not isinstance(raw, list):
        raise NotificationDecodeError("Stored notifications must be a JSON array")
    return [deserialize_notification(entry) for entry in raw]


__all__ = [
    "NotificationDecodeError",
    "serialize_data",
    "serialize_notification",
    "dumps_notifications",
    "deserialize_data",
    "deserialize_notification",
    "loads_notifications",
]
