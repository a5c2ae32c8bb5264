"""Integration tests for the notification inbox API."""

from __future__ import annotations

import os
import sys
import threading
import time
from datetime import timedelta
from pathlib import Path

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[4]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite:///./guardian-test.db")
os.environ.setdefault("SECRET_KEY", "test-secret")

from guardian_inbox.config import Settings, reset_settings_cache
from guardian_inbox.domain.entities import GeoPoint, ValidatedReport
from guardian_inbox.infrastructure.repositories import DatabaseReportSource, ReportRepository
from guardian_inbox.infrastructure.security import create_access_token
from guardian_inbox.utils import now_in_app_timezone

USER_ID = "user-1"


@pytest.fixture()
def app(tmp_path):
    """Return an application bound to a fresh SQLite database."""

    reset_settings_cache()
    from main import create_app

    settings = Settings(
        database_url=f"sqlite:///{tmp_path / 'api.db'}",
        secret_key=os.environ["SECRET_KEY"],
    )
    return create_app(settings)


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def _auth_headers(user_id: str = USER_ID) -> dict[str, str]:
    token = create_access_token({"sub": user_id, "email": f"{user_id}@example.com"})
    return {"Authorization": f"Bearer {token}"}


def _seed_reports(app) -> None:
    now = now_in_app_timezone()
    with app.state.session_factory() as session:
        repository = ReportRepository(session)
        repository.save(
            ValidatedReport(
                id="r1",
                status="Validated",
                type="crime-theft",
                user_id=USER_ID,
                validated_at=now - timedelta(hours=2),
                level=5,
                location=GeoPoint(lat=9.93, lng=-84.08, full_address="Avenida Central"),
            )
        )
        repository.save(
            ValidatedReport(
                id="r2",
                status="Validated",
                type="vandalism",
                user_id="user-2",
                validated_at=now - timedelta(minutes=1),
                level=2,
            )
        )
        repository.save(
            ValidatedReport(id="r3", status="Pending", type="assault", user_id="user-2")
        )


def _event_payload(identifier: str, kind: str = "location") -> dict:
    return {
        "id": identifier,
        "type": kind,
        "title": "Nearby incident",
        "message": "vandalism • 500 m away",
        "timestamp": now_in_app_timezone().isoformat(),
        "read": False,
        "priority": "high",
    }


def test_requests_without_token_are_rejected(client: TestClient) -> None:
    response = client.get("/notifications/")
    assert response.status_code == 401

    response = client.get("/notifications/", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401


def test_refresh_list_and_filter_flow(app, client: TestClient) -> None:
    _seed_reports(app)
    headers = _auth_headers()

    response = client.post("/notifications/refresh", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"skipped": False, "total": 2, "unread_count": 2}

    response = client.get("/notifications/", headers=headers)
    assert response.status_code == 200
    page = response.json()
    assert page["total"] == 2
    assert page["has_more"] is False
    assert [item["id"] for item in page["items"]] == ["validated_r2", "validated_r1"]

    newest, own = page["items"]
    assert newest["type"] == "new_zone"
    assert newest["is_new"] is True
    assert own["type"] == "report_validated"
    assert own["title"] == "Your Report Validated"
    assert own["priority"] == "critical"
    assert own["risk_label"] == "Extreme"
    assert own["time_ago"] == "2h ago"
    assert own["short_time_ago"] == "2h ago"
    assert own["type_label"] == "Your Report Validated"
    assert own["priority_color"] == "danger"
    assert own["priority_icon"] == "alert-circle"
    assert own["risk_stars"] == ["star"] * 5
    assert own["risk_gradient"]
    assert own["formatted_message"] == "<strong>Crime-Theft</strong>"
    assert own["data"]["report_id"] == "r1"

    response = client.get(
        "/notifications/",
        params={"risk_filter": "critical", "search": "THEFT"},
        headers=headers,
    )
    assert [item["id"] for item in response.json()["items"]] == ["validated_r1"]

    response = client.get("/notifications/", params={"sort_by": "priority"}, headers=headers)
    assert [item["priority"] for item in response.json()["items"]] == ["critical", "medium"]

    response = client.get("/notifications/", params={"status_filter": "archived"}, headers=headers)
    assert response.status_code == 422


def test_refresh_with_location_reports_distance(app, client: TestClient) -> None:
    _seed_reports(app)
    headers = _auth_headers()

    response = client.post(
        "/notifications/refresh", json={"lat": 9.93, "lng": -84.07}, headers=headers
    )
    assert response.status_code == 200

    items = client.get("/notifications/", headers=headers).json()["items"]
    located = next(item for item in items if item["id"] == "validated_r1")
    assert located["distance_text"].endswith("m away")


def test_inboxes_are_isolated_per_user(app, client: TestClient) -> None:
    client.post("/notifications/events", json=_event_payload("evt-1"), headers=_auth_headers())

    response = client.get("/notifications/", headers=_auth_headers("user-2"))

    assert response.json()["total"] == 0


def test_ingest_events(client: TestClient) -> None:
    headers = _auth_headers()

    response = client.post("/notifications/events", json=_event_payload("evt-1"), headers=headers)
    assert response.status_code == 201
    body = response.json()
    assert body["accepted"] is True
    assert body["notification"]["type"] == "new_zone"

    response = client.post("/notifications/events", json=_event_payload("evt-1"), headers=headers)
    assert response.status_code == 200
    assert response.json()["accepted"] is False

    response = client.post(
        "/notifications/events", json=_event_payload("evt-2", "system"), headers=headers
    )
    assert response.status_code == 200
    assert response.json() == {"accepted": False, "notification": None}

    summary = client.get("/notifications/summary", headers=headers).json()
    assert summary == {"total": 1, "unread": 1, "read": 0, "new": 1}


def test_mark_read_open_and_grouping(app, client: TestClient) -> None:
    _seed_reports(app)
    headers = _auth_headers()
    client.post("/notifications/refresh", headers=headers)

    response = client.post("/notifications/validated_r2/read", headers=headers)
    assert response.status_code == 200
    assert response.json()["read"] is True
    assert response.json()["data"]["seen_by_user"] is True

    response = client.post("/notifications/missing/read", headers=headers)
    assert response.status_code == 404

    response = client.post("/notifications/open", headers=headers)
    assert response.json() == {"updated": 1}
    response = client.post("/notifications/read-all", headers=headers)
    assert response.json() == {"updated": 0}

    groups = client.get("/notifications/grouped", headers=headers).json()
    assert [group["label"] for group in groups] == ["Recent"]
    assert len(groups[0]["notifications"]) == 2


def test_navigation_payload(app, client: TestClient) -> None:
    _seed_reports(app)
    headers = _auth_headers()
    client.post("/notifications/refresh", headers=headers)

    response = client.get("/notifications/validated_r1/navigation", headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert (body["lat"], body["lng"]) == (9.93, -84.08)
    assert body["address"] == "Avenida Central"
    assert body["risk_level"] == 5

    response = client.get("/notifications/validated_r2/navigation", headers=headers)
    assert response.status_code == 404

    response = client.get("/notifications/missing/navigation", headers=headers)
    assert response.status_code == 404


def test_delete_and_clear_require_confirmation(client: TestClient) -> None:
    headers = _auth_headers()
    client.post("/notifications/events", json=_event_payload("evt-1"), headers=headers)
    client.post("/notifications/events", json=_event_payload("evt-2"), headers=headers)

    response = client.delete("/notifications/evt-1", headers=headers)
    assert response.status_code == 409

    response = client.delete("/notifications/evt-1", params={"confirm": "true"}, headers=headers)
    assert response.status_code == 204

    response = client.delete("/notifications/evt-1", params={"confirm": "true"}, headers=headers)
    assert response.status_code == 404

    response = client.delete("/notifications/", headers=headers)
    assert response.status_code == 409

    response = client.delete("/notifications/", params={"confirm": "true"}, headers=headers)
    assert response.status_code == 204
    assert client.get("/notifications/summary", headers=headers).json()["total"] == 0


def test_websocket_init_ping_and_ack(client: TestClient) -> None:
    headers = _auth_headers()
    client.post("/notifications/events", json=_event_payload("evt-1"), headers=headers)
    token = headers["Authorization"].split(" ", 1)[1]

    with client.websocket_connect(f"/notifications/ws?token={token}") as websocket:
        assert websocket.receive_json() == {
            "type": "init",
            "data": {"count": 1, "unreadCount": 1},
        }

        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}

        websocket.send_json({"type": "ack", "ids": ["evt-1"]})
        assert websocket.receive_json() == {
            "type": "notificationsUpdated",
            "data": {"count": 1, "unreadCount": 0},
        }
        storage = websocket.receive_json()
        assert storage["type"] == "storage"
        assert storage["data"]["key"] == "guardian_care_notifications"

    summary = client.get("/notifications/summary", headers=headers).json()
    assert summary["unread"] == 0


def test_websocket_ack_during_slow_refresh(client: TestClient, monkeypatch) -> None:
    headers = _auth_headers()
    client.post("/notifications/events", json=_event_payload("evt-1"), headers=headers)
    token = headers["Authorization"].split(" ", 1)[1]
    fetching = threading.Event()
    original = DatabaseReportSource.get_validated_reports

    def slow_reports(self):
        fetching.set()
        time.sleep(0.5)
        return original(self)

    monkeypatch.setattr(DatabaseReportSource, "get_validated_reports", slow_reports)
    responses = []

    with client.websocket_connect(f"/notifications/ws?token={token}") as websocket:
        assert websocket.receive_json()["type"] == "init"

        worker = threading.Thread(
            target=lambda: responses.append(
                client.post("/notifications/refresh", headers=headers)
            ),
            daemon=True,
        )
        worker.start()
        assert fetching.wait(timeout=5)
        websocket.send_json({"type": "ack", "ids": ["evt-1"]})

        worker.join(timeout=10)
        assert not worker.is_alive()

        websocket.send_json({"type": "ping"})
        messages = []
        while True:
            message = websocket.receive_json()
            if message["type"] == "pong":
                break
            messages.append(message)

    assert responses[0].status_code == 200
    assert responses[0].json()["skipped"] is False
    assert {"type": "notificationsUpdated", "data": {"count": 1, "unreadCount": 0}} in messages
    summary = client.get("/notifications/summary", headers=headers).json()
    assert summary["unread"] == 0
