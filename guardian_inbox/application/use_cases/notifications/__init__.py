"""Use cases backing the notification inbox."""

from .errors import ConfirmationRequiredError, NotificationNotFoundError
from .filtering import (
    FILTER_TYPES,
    RISK_FILTERS,
    SORT_OPTIONS,
    STATUS_FILTERS,
    NotificationFilterCriteria,
    filter_notifications,
    has_more,
    paginate,
    sort_by_recent,
    sort_notifications,
)
from .inbox import (
    DEFAULT_LAST_CHECK,
    NotificationInbox,
    NotificationStore,
    ReportSource,
    build_report_notification,
    notification_from_event,
    remove_notifications_for_deleted_reports,
)
from .registry import InboxRegistry

__all__ = [
    "ConfirmationRequiredError",
    "NotificationNotFoundError",
    "FILTER_TYPES",
    "RISK_FILTERS",
    "SORT_OPTIONS",
    "STATUS_FILTERS",
    "NotificationFilterCriteria",
    "filter_notifications",
    "has_more",
    "paginate",
    "sort_by_recent",
    "sort_notifications",
    "DEFAULT_LAST_CHECK",
    "NotificationInbox",
    "NotificationStore",
    "ReportSource",
    "build_report_notification",
    "notification_from_event",
    "remove_notifications_for_deleted_reports",
    "InboxRegistry",
]
