"""Filtering, searching and sorting of inbox items."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Callable

from guardian_inbox.domain.entities import (
    NOTIFICATION_TYPE_NEW_ZONE,
    NOTIFICATION_TYPE_REPORT_VALIDATED,
    PRIORITY_RANK,
    NotificationItem,
)

FILTER_TYPES = ("all", "unread", "report", "zone")
STATUS_FILTERS = ("all", "unread", "read", "validated", "zone")
RISK_FILTERS = ("all", "low", "moderate", "high", "critical")
SORT_OPTIONS = ("recent", "priority", "type")

_Predicate = Callable[[NotificationItem], bool]

_LEGACY_TYPE_PREDICATES: dict[str, _Predicate] = {
    "unread": lambda item: not item.read,
    "report": lambda item: item.type == NOTIFICATION_TYPE_REPORT_VALIDATED,
    "zone": lambda item: item.type == NOTIFICATION_TYPE_NEW_ZONE,
}

_STATUS_PREDICATES: dict[str, _Predicate] = {
    "unread": lambda item: not item.read,
    "read": lambda item: item.read,
    "validated": lambda item: item.type == NOTIFICATION_TYPE_REPORT_VALIDATED,
    "zone": lambda item: item.type == NOTIFICATION_TYPE_NEW_ZONE,
}

_RISK_BUCKETS: dict[str, Callable[[int], bool]] = {
    "low": lambda level: level == 1,
    "moderate": lambda level: level == 2,
    "high": lambda level: level == 3,
    "critical": lambda level: level >= 4,
}


@dataclass(frozen=True)
class NotificationFilterCriteria:
    """Options selected in the inbox filter panel."""

    filter_type: str = "all"
    status_filter: str = "all"
    risk_filter: str = "all"
    search_query: str = ""
    sort_by: str = "recent"

    def __post_init__(self) -> None:
        _ensure_choice("filter_type", self.filter_type, FILTER_TYPES)
        _ensure_choice("status_filter", self.status_filter, STATUS_FILTERS)
        _ensure_choice("risk_filter", self.risk_filter, RISK_FILTERS)
        _ensure_choice("sort_by", self.sort_by, SORT_OPTIONS)


def _ensure_choice(name: str, value: str, choices: Sequence[str]) -> None:
    if value not in choices:
        allowed = ", ".join(choices)
        raise ValueError(f"Invalid {name} '{value}'. Expected one of: {allowed}")


def sort_by_recent(items: Sequence[NotificationItem]) -> list[NotificationItem]:
    """Return ``items`` ordered newest first."""

    return sorted(items, key=lambda item: item.timestamp, reverse=True)


def sort_notifications(
    items: Sequence[NotificationItem], sort_by: str = "recent"
) -> list[NotificationItem]:
    """Return a sorted copy of ``items`` following the ``sort_by`` option."""

    if sort_by == "priority":
        # sorted() is stable, so items sharing a priority keep their order.
        return sorted(
            items, key=lambda item: PRIORITY_RANK.get(item.priority, 0), reverse=True
        )
    if sort_by == "type":
        return sorted(items, key=lambda item: item.type or "")
    return sort_by_recent(items)


def _matches_query(item: NotificationItem, query: str) -> bool:
    fields = (item.title, item.message, item.location_address, item.report_type)
    return any(value and query in value.lower() for value in fields)


def filter_notifications(
    items: Sequence[NotificationItem],
    criteria: NotificationFilterCriteria | None = None,
) -> list[NotificationItem]:
    """Apply the legacy type filter, status, risk, search and sort in that order.

    The input sequence and its items are never mutated.
    """

    criteria = criteria or NotificationFilterCriteria()
    filtered = list(items)

    legacy = _LEGACY_TYPE_PREDICATES.get(criteria.filter_type)
    if legacy is not None:
        filtered = [item for item in filtered if legacy(item)]

    status = _STATUS_PREDICATES.get(criteria.status_filter)
    if status is not None:
        filtered = [item for item in filtered if status(item)]

    in_bucket = _RISK_BUCKETS.get(criteria.risk_filter)
    if in_bucket is not None:
        filtered = [item for item in filtered if in_bucket(item.risk_level())]

    if criteria.search_query.strip():
        query = criteria.search_query.lower()
        filtered = [item for item in filtered if _matches_query(item, query)]

    return sort_notifications(filtered, criteria.sort_by)


def paginate(
    items: Sequence[NotificationItem], page: int, per_page: int = 20
) -> list[NotificationItem]:
    """Return every item up to the end of ``page`` (zero based)."""

    return list(items[: (page + 1) * per_page])


def has_more(items: Sequence[NotificationItem], page: int, per_page: int = 20) -> bool:
    return len(items) > (page + 1) * per_page


__all__ = [
    "FILTER_TYPES",
    "STATUS_FILTERS",
    "RISK_FILTERS",
    "SORT_OPTIONS",
    "NotificationFilterCriteria",
    "filter_notifications",
    "sort_notifications",
    "sort_by_recent",
    "paginate",
    "has_more",
]
