"""Tests for inbox filtering, searching, sorting and paging."""

from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[4]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite:///./guardian-test.db")
os.environ.setdefault("SECRET_KEY", "test-secret")

from guardian_inbox.application.use_cases.notifications import (
    NotificationFilterCriteria,
    filter_notifications,
    has_more,
    paginate,
    sort_notifications,
)
from guardian_inbox.domain.entities import (
    AlertNotificationData,
    NotificationItem,
    ReportNotificationData,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _report_item(
    identifier: str,
    *,
    minutes_ago: int = 0,
    read: bool = False,
    type_: str = "new_zone",
    priority: str = "medium",
    admin_level: int | None = 1,
    risk_level: int | None = None,
    report_type: str = "vandalism",
    address: str | None = "Main St",
) -> NotificationItem:
    return NotificationItem(
        id=identifier,
        type=type_,
        title="New Zone Alert",
        message=report_type,
        timestamp=NOW - timedelta(minutes=minutes_ago),
        read=read,
        priority=priority,
        data=ReportNotificationData(
            report_id=identifier,
            report_type=report_type,
            risk_level=risk_level,
            admin_level=admin_level,
            location_address=address,
        ),
    )


def _alert_item(identifier: str, *, minutes_ago: int = 0, priority: str = "medium") -> NotificationItem:
    return NotificationItem(
        id=identifier,
        type="zone_alert",
        title="Heads up",
        message="Stay alert",
        timestamp=NOW - timedelta(minutes=minutes_ago),
        read=False,
        priority=priority,
        data=AlertNotificationData(),
    )


def test_unread_and_critical_filters_compose():
    items = [
        _report_item("a", read=False, type_="new_zone", admin_level=1),
        _report_item("b", read=True, type_="report_validated", admin_level=4),
    ]

    assert filter_notifications(items, NotificationFilterCriteria(status_filter="unread")) == [items[0]]
    assert filter_notifications(items, NotificationFilterCriteria(risk_filter="critical")) == [items[1]]
    assert (
        filter_notifications(
            items, NotificationFilterCriteria(status_filter="unread", risk_filter="critical")
        )
        == []
    )


def test_search_matches_report_type_case_insensitively():
    items = [
        _report_item("theft", report_type="crime-theft"),
        _report_item("other", report_type="vandalism"),
    ]

    result = filter_notifications(items, NotificationFilterCriteria(search_query="THEFT"))

    assert [item.id for item in result] == ["theft"]


def test_search_matches_location_address():
    items = [
        _report_item("a", address="Avenida Central"),
        _report_item("b", address="Main St"),
    ]

    result = filter_notifications(items, NotificationFilterCriteria(search_query="central"))

    assert [item.id for item in result] == ["a"]


def test_blank_search_is_ignored():
    items = [_report_item("a"), _alert_item("b")]

    result = filter_notifications(items, NotificationFilterCriteria(search_query="   "))

    assert len(result) == 2


def test_priority_sort_orders_critical_first():
    items = [
        _alert_item("low", priority="low"),
        _alert_item("critical", priority="critical"),
        _alert_item("medium", priority="medium"),
    ]

    result = sort_notifications(items, "priority")

    assert [item.id for item in result] == ["critical", "medium", "low"]


def test_priority_sort_is_stable_for_ties():
    items = [
        _alert_item("first", priority="high"),
        _alert_item("second", priority="high"),
        _alert_item("third", priority="high"),
    ]

    assert [item.id for item in sort_notifications(items, "priority")] == [
        "first",
        "second",
        "third",
    ]


def test_type_sort_is_alphabetical():
    items = [
        _alert_item("zone"),
        _report_item("validated", type_="report_validated"),
        _report_item("new", type_="new_zone"),
    ]

    assert [item.type for item in sort_notifications(items, "type")] == [
        "new_zone",
        "report_validated",
        "zone_alert",
    ]


def test_recent_sort_is_default():
    items = [
        _alert_item("older", minutes_ago=30),
        _alert_item("newest", minutes_ago=1),
        _alert_item("oldest", minutes_ago=90),
    ]

    assert [item.id for item in filter_notifications(items)] == ["newest", "older", "oldest"]


@pytest.mark.parametrize(
    ("risk_filter", "expected"),
    [
        ("low", ["one"]),
        ("moderate", ["two"]),
        ("high", ["three"]),
        ("critical", ["four", "five"]),
    ],
)
def test_risk_buckets_use_highest_known_level(risk_filter, expected):
    items = [
        _report_item("one", minutes_ago=1, admin_level=1),
        _report_item("two", minutes_ago=2, admin_level=1, risk_level=2),
        _report_item("three", minutes_ago=3, admin_level=3),
        _report_item("four", minutes_ago=4, admin_level=4),
        _report_item("five", minutes_ago=5, admin_level=None, risk_level=5),
    ]

    result = filter_notifications(items, NotificationFilterCriteria(risk_filter=risk_filter))

    assert [item.id for item in result] == expected


def test_items_without_risk_data_only_match_all():
    items = [_alert_item("alert")]

    assert filter_notifications(items, NotificationFilterCriteria(risk_filter="low")) == []
    assert filter_notifications(items, NotificationFilterCriteria(risk_filter="all")) == items


def test_legacy_filter_type_applies_before_status():
    items = [
        _report_item("own", type_="report_validated", read=True, minutes_ago=1),
        _report_item("zone", type_="new_zone", read=True, minutes_ago=2),
        _report_item("zone-unread", type_="new_zone", read=False, minutes_ago=3),
    ]

    result = filter_notifications(
        items, NotificationFilterCriteria(filter_type="zone", status_filter="read")
    )

    assert [item.id for item in result] == ["zone"]


def test_filtering_does_not_mutate_input():
    items = [_alert_item("b", minutes_ago=5), _alert_item("a", minutes_ago=1)]
    snapshot = list(items)

    filter_notifications(items, NotificationFilterCriteria(sort_by="recent"))

    assert items == snapshot


def test_invalid_criteria_are_rejected():
    with pytest.raises(ValueError):
        NotificationFilterCriteria(status_filter="archived")
    with pytest.raises(ValueError):
        NotificationFilterCriteria(sort_by="alphabetical")


def test_paginate_returns_everything_up_to_the_page():
    items = [_alert_item(str(index), minutes_ago=index) for index in range(45)]

    assert len(paginate(items, 0)) == 20
    assert len(paginate(items, 1)) == 40
    assert len(paginate(items, 2)) == 45
    assert has_more(items, 1) is True
    assert has_more(items, 2) is False
