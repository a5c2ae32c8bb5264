"""Endpoints and websocket handler for the notification inbox."""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime, timedelta
from typing import Literal

from anyio import to_thread
from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    Request,
    Response,
    WebSocket,
    WebSocketDisconnect,
    status,
)

from guardian_inbox.application.use_cases.notifications import (
    ConfirmationRequiredError,
    InboxRegistry,
    NotificationFilterCriteria,
    NotificationInbox,
    NotificationNotFoundError,
    has_more,
    paginate,
)
from guardian_inbox.application.use_cases.notifications import formatting
from guardian_inbox.domain.entities import (
    GeoPoint,
    NotificationItem,
    RealtimeEvent,
    ReportNotificationData,
    User,
)
from guardian_inbox.interfaces.api.dependencies import (
    get_current_user,
    get_inbox,
    get_inbox_registry,
    resolve_current_user,
)
from guardian_inbox.interfaces.api.schemas import (
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
from guardian_inbox.utils import now_in_app_timezone

router = APIRouter(prefix="/notifications", tags=["notifications"])

logger = logging.getLogger(__name__)


def _new_badge_window(request: Request) -> timedelta:
    return timedelta(minutes=request.app.state.settings.new_badge_minutes)


def _notification_to_schema(
    notification: NotificationItem, *, now: datetime, new_window: timedelta
) -> NotificationRead:
    risk_level = notification.risk_level()
    is_report = isinstance(notification.data, ReportNotificationData)
    return NotificationRead(
        id=notification.id,
        type=notification.type,
        title=notification.title,
        message=notification.message,
        formatted_message=formatting.emphasize_message(notification.message),
        timestamp=notification.timestamp,
        read=notification.read,
        priority=notification.priority,
        data=asdict(notification.data) if notification.data is not None else None,
        time_ago=formatting.time_ago(notification.timestamp, now),
        short_time_ago=formatting.short_time_ago(notification.timestamp, now),
        is_new=formatting.is_new(notification, now=now, window=new_window),
        risk_level=risk_level,
        risk_label=formatting.risk_label(risk_level) if is_report else None,
        risk_color=formatting.risk_color(risk_level) if is_report else None,
        risk_gradient=formatting.risk_gradient(risk_level) if is_report else None,
        risk_stars=formatting.risk_stars(risk_level) if is_report else None,
        priority_color=formatting.priority_color(notification.priority),
        priority_icon=formatting.priority_icon(notification.priority),
        icon=formatting.notification_icon(notification.type),
        color=formatting.notification_color(notification.type),
        type_label=formatting.notification_type_label(notification.type),
        status_text=formatting.status_text(notification.type),
        distance_text=formatting.distance_text(notification.distance_meters),
    )


def _not_found(exc: NotificationNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


def _acknowledge(inbox: NotificationInbox, notification_ids: list[str]) -> None:
    for notification_id in notification_ids:
        try:
            inbox.mark_read(notification_id)
        except NotificationNotFoundError:
            logger.debug("Ack for unknown notification %s", notification_id)


@router.get("/", response_model=NotificationPageRead)
def list_notifications(
    request: Request,
    filter_type: Literal["all", "unread", "report", "zone"] = Query("all"),
    status_filter: Literal["all", "unread", "read", "validated", "zone"] = Query("all"),
    risk_filter: Literal["all", "low", "moderate", "high", "critical"] = Query("all"),
    search: str = Query("", max_length=200, description="Case-insensitive text search"),
    sort_by: Literal["recent", "priority", "type"] = Query("recent"),
    page: int = Query(0, ge=0, description="Zero based page index"),
    per_page: int | None = Query(None, ge=1, le=100),
    inbox: NotificationInbox = Depends(get_inbox),
) -> NotificationPageRead:
    """Return the filtered inbox of the authenticated user."""

    criteria = NotificationFilterCriteria(
        filter_type=filter_type,
        status_filter=status_filter,
        risk_filter=risk_filter,
        search_query=search,
        sort_by=sort_by,
    )
    size = per_page or request.app.state.settings.page_size
    filtered = inbox.query(criteria)
    now = now_in_app_timezone()
    window = _new_badge_window(request)
    return NotificationPageRead(
        items=[
            _notification_to_schema(item, now=now, new_window=window)
            for item in paginate(filtered, page, size)
        ],
        total=len(filtered),
        page=page,
        per_page=size,
        has_more=has_more(filtered, page, size),
        unread_count=inbox.unread_count(),
    )


@router.get("/grouped", response_model=list[NotificationGroupRead])
def list_grouped_notifications(
    request: Request,
    inbox: NotificationInbox = Depends(get_inbox),
) -> list[NotificationGroupRead]:
    """Return the inbox bucketed into Recent, This Week, This Month and Old."""

    now = now_in_app_timezone()
    window = _new_badge_window(request)
    return [
        NotificationGroupRead(
            label=group.label,
            notifications=[
                _notification_to_schema(item, now=now, new_window=window)
                for item in group.notifications
            ],
        )
        for group in formatting.group_by_age(inbox.query(), now)
    ]


@router.get("/summary", response_model=NotificationSummaryRead)
def read_summary(inbox: NotificationInbox = Depends(get_inbox)) -> NotificationSummaryRead:
    """Return counters consumed by badge surfaces."""

    return NotificationSummaryRead(
        total=len(inbox.items),
        unread=inbox.unread_count(),
        read=inbox.read_count(),
        new=inbox.new_count(),
    )


@router.post("/refresh", response_model=RefreshRead)
def refresh_notifications(
    payload: RefreshRequest | None = None,
    current_user: User = Depends(get_current_user),
    registry: InboxRegistry = Depends(get_inbox_registry),
) -> RefreshRead:
    """Merge the inbox with the validated reports currently published."""

    inbox = registry.get(current_user.id)
    location = None
    if payload is not None and payload.lat is not None and payload.lng is not None:
        location = GeoPoint(lat=payload.lat, lng=payload.lng)

    items = inbox.refresh(current_user, user_location=location)
    if items is None:
        current = inbox.items
        return RefreshRead(
            skipped=True,
            total=len(current),
            unread_count=sum(1 for item in current if not item.read),
        )
    return RefreshRead(
        skipped=False,
        total=len(items),
        unread_count=sum(1 for item in items if not item.read),
    )


@router.post("/open", response_model=MarkAllReadRead)
def open_inbox(inbox: NotificationInbox = Depends(get_inbox)) -> MarkAllReadRead:
    """Record an inbox visit: every item becomes seen and the check time moves."""

    return MarkAllReadRead(updated=inbox.open_inbox())


@router.post("/events", response_model=IngestRead, status_code=status.HTTP_201_CREATED)
def ingest_event(
    request: Request,
    response: Response,
    payload: RealtimeEventCreate,
    inbox: NotificationInbox = Depends(get_inbox),
) -> IngestRead:
    """Store a push notification forwarded by the realtime notifier."""

    event = RealtimeEvent(**payload.model_dump())
    notification = inbox.ingest(event)
    if notification is None:
        response.status_code = status.HTTP_200_OK
        return IngestRead(accepted=False)
    return IngestRead(
        accepted=True,
        notification=_notification_to_schema(
            notification, now=now_in_app_timezone(), new_window=_new_badge_window(request)
        ),
    )


@router.post("/read-all", response_model=MarkAllReadRead)
def mark_all_read(inbox: NotificationInbox = Depends(get_inbox)) -> MarkAllReadRead:
    return MarkAllReadRead(updated=inbox.mark_all_read())


@router.delete("/", status_code=status.HTTP_204_NO_CONTENT)
def clear_notifications(
    confirm: bool = Query(False, description="Must be true; clearing cannot be undone"),
    inbox: NotificationInbox = Depends(get_inbox),
) -> Response:
    """Remove every notification and reset the last-checked time."""

    try:
        inbox.clear_all(confirmed=confirm)
    except ConfirmationRequiredError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{notification_id}/read", response_model=NotificationRead)
def mark_notification_read(
    request: Request,
    notification_id: str,
    inbox: NotificationInbox = Depends(get_inbox),
) -> NotificationRead:
    try:
        notification = inbox.mark_read(notification_id)
    except NotificationNotFoundError as exc:
        raise _not_found(exc) from exc
    return _notification_to_schema(
        notification, now=now_in_app_timezone(), new_window=_new_badge_window(request)
    )


@router.get("/{notification_id}/navigation", response_model=NavigationRead)
def read_navigation_target(
    notification_id: str,
    inbox: NotificationInbox = Depends(get_inbox),
) -> NavigationRead:
    """Return the map destination for a location-bearing notification."""

    try:
        target = inbox.navigation_payload(notification_id)
    except NotificationNotFoundError as exc:
        raise _not_found(exc) from exc
    if target is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification has no location",
        )
    return NavigationRead(**asdict(target))


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: str,
    confirm: bool = Query(False, description="Must be true; deletion cannot be undone"),
    inbox: NotificationInbox = Depends(get_inbox),
) -> Response:
    try:
        inbox.delete(notification_id, confirmed=confirm)
    except ConfirmationRequiredError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except NotificationNotFoundError as exc:
        raise _not_found(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams inbox change signals to the user."""

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=1008)
        return

    try:
        user = resolve_current_user(token)
    except HTTPException:
        await websocket.close(code=1008)
        return

    registry: InboxRegistry = websocket.app.state.inbox_registry
    manager = websocket.app.state.connection_manager
    inbox = registry.get(user.id)

    await manager.connect(user.id, websocket)
    try:
        # The inbox lock is taken on worker threads, never on the event loop.
        items = await to_thread.run_sync(lambda: inbox.items)
        await websocket.send_json(
            {
                "type": "init",
                "data": {
                    "count": len(items),
                    "unreadCount": sum(1 for item in items if not item.read),
                },
            }
        )
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except ValueError:
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type == "ack":
                ids = message.get("ids", [])
                if isinstance(ids, list):
                    await to_thread.run_sync(_acknowledge, inbox, [str(value) for value in ids])
                continue
    except WebSocketDisconnect:
        manager.disconnect(user.id, websocket)
    except Exception:
        manager.disconnect(user.id, websocket)
        raise


__all__ = ["router"]
