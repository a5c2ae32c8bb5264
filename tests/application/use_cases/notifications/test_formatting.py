"""Tests for the inbox presentation helpers."""

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

from guardian_inbox.application.use_cases.notifications.formatting import (
    detailed_time,
    distance_text,
    emphasize_message,
    group_by_age,
    haversine_distance,
    is_new,
    notification_icon,
    notification_type_label,
    priority_color,
    priority_icon,
    risk_color,
    risk_gradient,
    risk_label,
    risk_stars,
    short_time_ago,
    time_ago,
)
from guardian_inbox.domain.entities import NotificationItem

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _item(identifier: str, age: timedelta) -> NotificationItem:
    return NotificationItem(
        id=identifier,
        type="new_zone",
        title="New Zone Alert",
        message="vandalism",
        timestamp=NOW - age,
        read=False,
        priority="medium",
    )


@pytest.mark.parametrize(
    ("age", "expected"),
    [
        (timedelta(seconds=30), "Just now"),
        (timedelta(minutes=1, seconds=30), "1m ago"),
        (timedelta(minutes=5), "5m ago"),
        (timedelta(hours=3), "3h ago"),
        (timedelta(hours=25), "1 day ago"),
        (timedelta(days=3), "3d ago"),
        (timedelta(days=8), "1 week ago"),
        (timedelta(days=15), "2w ago"),
        (timedelta(days=30), "1 month ago"),
        (timedelta(days=65), "2mo ago"),
        (timedelta(days=400), "4/28/2023"),
    ],
)
def test_time_ago_buckets(age, expected):
    assert time_ago(NOW - age, NOW) == expected


def test_time_ago_treats_future_timestamps_as_just_now():
    assert time_ago(NOW + timedelta(minutes=10), NOW) == "Just now"


@pytest.mark.parametrize(
    ("age", "expected"),
    [
        (timedelta(seconds=10), "Just now"),
        (timedelta(minutes=45), "45m ago"),
        (timedelta(hours=5), "5h ago"),
        (timedelta(days=6), "6d ago"),
        (timedelta(days=8), "5/24/2024"),
    ],
)
def test_short_time_ago(age, expected):
    assert short_time_ago(NOW - age, NOW) == expected


@pytest.mark.parametrize(
    ("age", "expected"),
    [
        (timedelta(seconds=5), "just now"),
        (timedelta(minutes=1), "1 minute ago"),
        (timedelta(minutes=12), "12 minutes ago"),
        (timedelta(hours=1), "1 hour ago"),
        (timedelta(hours=2), "2 hours ago"),
        (timedelta(days=1), "1 day ago"),
        (timedelta(days=4), "4 days ago"),
        (timedelta(days=14), "2 weeks ago"),
        (timedelta(days=95), "3 months ago"),
        (timedelta(days=400), "Apr 28, 12:00 PM"),
    ],
)
def test_detailed_time(age, expected):
    assert detailed_time(NOW - age, NOW) == expected


@pytest.mark.parametrize(
    ("level", "label", "color"),
    [
        (1, "Low", "#28a745"),
        (2, "Moderate", "#ffc107"),
        (3, "High", "#fd7e14"),
        (4, "Critical", "#dc3545"),
        (5, "Extreme", "#8B0000"),
        (7, "Unknown", "#6c757d"),
        ("abc", "Unknown", "#6c757d"),
        ("4", "Critical", "#dc3545"),
        (None, "Low", "#28a745"),
    ],
)
def test_risk_label_and_color(level, label, color):
    assert risk_label(level) == label
    assert risk_color(level) == color


def test_risk_stars_fill_up_to_level():
    assert risk_stars(3) == ["star", "star", "star", "star-outline", "star-outline"]


def test_type_and_priority_lookups_fall_back():
    assert notification_icon("report_validated") == "checkmark-circle"
    assert notification_icon("unknown") == "notifications"
    assert notification_type_label("new_zone") == "New Zone Alert"
    assert notification_type_label("other") == "Notification"
    assert priority_color("critical") == "danger"
    assert priority_color("bogus") == "medium"
    assert priority_icon("high") == "warning"
    assert priority_icon("bogus") == "information-circle"
    assert risk_gradient(5) == "linear-gradient(90deg, #991b1b, #7f1d1d)"
    assert risk_gradient("n/a") == "linear-gradient(90deg, #6b7280, #4b5563)"


@pytest.mark.parametrize(
    ("meters", "expected"),
    [
        (None, ""),
        (850.4, "850 m away"),
        (999.5, "1000 m away"),
        (1234, "1.2 km away"),
    ],
)
def test_distance_text(meters, expected):
    assert distance_text(meters) == expected


def test_haversine_distance_for_one_degree_of_latitude():
    assert haversine_distance(0, 0, 1, 0) == pytest.approx(111_195, rel=1e-3)


def test_emphasize_message_marks_distance_time_and_incident():
    message = "crime-theft • 1.2 km away • 5 minutes ago"

    assert emphasize_message(message) == (
        "<strong>Crime-Theft</strong> • <strong>1.2 km away</strong> • "
        "5 <strong>Minutes Ago</strong>"
    )


def test_is_new_uses_five_minute_window():
    assert is_new(_item("fresh", timedelta(minutes=4)), now=NOW) is True
    assert is_new(_item("old", timedelta(minutes=6)), now=NOW) is False


def test_group_by_age_omits_empty_groups():
    items = [
        _item("a", timedelta(hours=1)),
        _item("b", timedelta(days=3)),
        _item("c", timedelta(days=90)),
    ]

    groups = group_by_age(items, NOW)

    assert [group.label for group in groups] == ["Recent", "This Week", "Old"]
    assert [item.id for item in groups[0].notifications] == ["a"]
    assert [item.id for item in groups[2].notifications] == ["c"]
