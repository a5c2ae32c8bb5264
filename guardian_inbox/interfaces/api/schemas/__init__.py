from .notification import (
    IngestRead,
    MarkAllReadRead,
    NavigationRead,
    NotificationGroupRead,
    NotificationPageRead,
    NotificationRead,
    NotificationSummaryRead,
    RealtimeEventCreate,
    RefreshRead,
    RefreshRequest,
)

__all__ = [
    "IngestRead",
    "MarkAllReadRead",
    "NavigationRead",
    "NotificationGroupRead",
    "NotificationPageRead",
    "NotificationRead",
    "NotificationSummaryRead",
    "RealtimeEventCreate",
    "RefreshRead",
    "RefreshRequest",
]
