from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from guardian_inbox.application.use_cases.notifications import InboxRegistry
from guardian_inbox.config import Settings, get_settings
from guardian_inbox.infrastructure.database import (
    create_database_engine,
    create_session_factory,
    initialize_database,
)
from guardian_inbox.infrastructure.notifications import (
    NotificationConnectionManager,
    NotificationEventBus,
    RealtimeInboxForwarder,
)
from guardian_inbox.infrastructure.repositories import (
    DatabaseNotificationStore,
    DatabaseReportSource,
)
from guardian_inbox.interfaces.api.routes import register_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the schema on startup, wire websocket forwarding and release resources on shutdown."""

    initialize_database(app.state.engine)
    app.state.forwarder.attach(app.state.event_bus)
    yield
    app.state.forwarder.detach()
    app.state.engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or get_settings()
    app = FastAPI(title="Guardian Inbox", lifespan=lifespan)

    engine = create_database_engine(settings.database_url)
    session_factory = create_session_factory(engine)
    event_bus = NotificationEventBus()
    connection_manager = NotificationConnectionManager()

    def store_factory(owner_id: str) -> DatabaseNotificationStore:
        return DatabaseNotificationStore(
            session_factory,
            owner_id,
            notifications_key=settings.notifications_storage_key,
            last_check_key=settings.last_check_storage_key,
        )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.event_bus = event_bus
    app.state.connection_manager = connection_manager
    app.state.forwarder = RealtimeInboxForwarder(connection_manager)
    app.state.inbox_registry = InboxRegistry(
        store_factory=store_factory,
        report_source=DatabaseReportSource(session_factory),
        event_bus=event_bus,
        default_last_check=settings.default_last_check,
        new_badge_window=timedelta(minutes=settings.new_badge_minutes),
    )

    # The mobile web client is served from a different origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
