"""ORM models used by the application infrastructure."""

from .report import ReportModel
from .storage_entry import StorageEntryModel

__all__ = [
    "ReportModel",
    "StorageEntryModel",
]
