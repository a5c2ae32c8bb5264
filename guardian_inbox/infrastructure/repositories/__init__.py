"""Repository implementations for infrastructure layer."""

from .notification_repository import DatabaseNotificationStore, NotificationRepository
from .report_repository import DatabaseReportSource, ReportRepository
from .storage_entry_repository import StorageEntryRepository

__all__ = [
    "DatabaseNotificationStore",
    "NotificationRepository",
    "DatabaseReportSource",
    "ReportRepository",
    "StorageEntryRepository",
]
