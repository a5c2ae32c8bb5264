"""Tests for the inbox event bus, realtime forwarding and token helpers."""

from __future__ import annotations

import asyncio
import os
import sys
from datetime import timedelta
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite:///./guardian-test.db")
os.environ.setdefault("SECRET_KEY", "test-secret")

from guardian_inbox.infrastructure.notifications import (
    NOTIFICATIONS_UPDATED_EVENT,
    InboxEvent,
    NotificationConnectionManager,
    NotificationEventBus,
    RealtimeInboxForwarder,
)
from guardian_inbox.infrastructure.security import create_access_token, decode_access_token


class RecordingSocket:
    def __init__(self):
        self.accepted = False
        self.sent = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, message):
        self.sent.append(message)


class ClosedSocket(RecordingSocket):
    async def send_json(self, message):
        raise RuntimeError("socket closed")


def test_failing_listener_does_not_block_others():
    bus = NotificationEventBus()
    received = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe(broken)
    bus.subscribe(received.append)

    bus.publish(InboxEvent("user-1", NOTIFICATIONS_UPDATED_EVENT, {"count": 1}))

    assert [event.detail for event in received] == [{"count": 1}]


def test_unsubscribe_stops_delivery():
    bus = NotificationEventBus()
    received = []
    unsubscribe = bus.subscribe(received.append)

    unsubscribe()
    bus.publish(InboxEvent("user-1", NOTIFICATIONS_UPDATED_EVENT, {}))

    assert received == []


def test_listeners_receive_independent_copies():
    bus = NotificationEventBus()
    received = []

    def mutating(event):
        event.detail["count"] = 99

    bus.subscribe(mutating)
    bus.subscribe(received.append)
    detail = {"count": 1}

    bus.publish(InboxEvent("user-1", NOTIFICATIONS_UPDATED_EVENT, detail))

    assert received[0].detail == {"count": 1}
    assert detail == {"count": 1}


def test_forwarder_sends_events_to_connected_owner():
    manager = NotificationConnectionManager()
    bus = NotificationEventBus()
    forwarder = RealtimeInboxForwarder(manager)
    forwarder.attach(bus)
    socket = RecordingSocket()

    async def scenario():
        await manager.connect("user-1", socket)
        bus.publish(InboxEvent("user-1", NOTIFICATIONS_UPDATED_EVENT, {"count": 2}))
        bus.publish(InboxEvent("user-2", NOTIFICATIONS_UPDATED_EVENT, {"count": 5}))
        await asyncio.sleep(0)

    asyncio.run(scenario())

    assert socket.accepted is True
    assert socket.sent == [{"type": NOTIFICATIONS_UPDATED_EVENT, "data": {"count": 2}}]

    forwarder.detach()
    bus.publish(InboxEvent("user-1", NOTIFICATIONS_UPDATED_EVENT, {"count": 3}))
    assert len(socket.sent) == 1


def test_failed_sends_drop_the_stale_socket():
    manager = NotificationConnectionManager()
    healthy = RecordingSocket()
    stale = ClosedSocket()

    async def scenario():
        await manager.connect("user-1", healthy)
        await manager.connect("user-1", stale)
        return await manager.send_to_user("user-1", {"type": "pong"})

    delivered = asyncio.run(scenario())

    assert delivered == 1
    assert healthy.sent == [{"type": "pong"}]
    assert manager.connection_count("user-1") == 1


def test_manager_forgets_users_without_sockets():
    manager = NotificationConnectionManager()
    socket = RecordingSocket()

    asyncio.run(manager.connect("user-1", socket))
    manager.disconnect("user-1", socket)

    assert manager.has_connections("user-1") is False
    assert manager.connection_count("user-1") == 0


def test_access_tokens_round_trip():
    token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(minutes=5))

    assert decode_access_token(token)["sub"] == "user-1"


@pytest.mark.parametrize("token", ["garbage", ""])
def test_invalid_tokens_raise_value_error(token):
    with pytest.raises(ValueError):
        decode_access_token(token)


def test_expired_tokens_are_rejected():
    token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(minutes=-1))

    with pytest.raises(ValueError):
        decode_access_token(token)
