from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import RecordingStore, gitlab_headers
from tests.fixtures import gitlab_events


def test_merge_request_hook_is_processed(client: TestClient, store: RecordingStore) -> None:
    r = client.post(
        "/api/v1/webhooks/gitlab",
        headers=gitlab_headers("Merge Request Hook"),
        json=gitlab_events.merge_request_hook(),
    )

    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "success"
    assert data["message"] == "Merge request event processed"
    assert data["event"]["mr_id"] == 42
    assert len(store.saved) == 1
    assert store.saved[0].collection == "gitlab_merge_requests"


def test_event_data_is_raw_body(client: TestClient, store: RecordingStore) -> None:
    body = b'{"object_kind": "push", "project_id": 15,  "commits": []}'
    r = client.post(
        "/api/v1/webhooks/gitlab", headers=gitlab_headers("Push Hook"), content=body
    )

    assert r.status_code == 200
    assert store.saved[0].event_data == body.decode()


def test_system_hook_legacy_event(client: TestClient, store: RecordingStore) -> None:
    r = client.post(
        "/api/v1/webhooks/gitlab",
        headers=gitlab_headers("System Hook"),
        json=gitlab_events.project_create(),
    )

    assert r.status_code == 200
    assert r.json()["message"] == "Project system event processed"
    assert store.saved[0].collection == "gitlab_project_system_events"


def test_unsupported_hook_is_acknowledged(client: TestClient, store: RecordingStore) -> None:
    r = client.post(
        "/api/v1/webhooks/gitlab",
        headers=gitlab_headers("Pipeline Hook"),
        json={"object_kind": "pipeline"},
    )

    assert r.status_code == 200
    assert r.json() == {
        "status": "success",
        "message": "Event received but not processed",
        "event": {"event": "Pipeline Hook"},
    }
    assert store.saved == []


def test_unsupported_system_hook_kind(client: TestClient) -> None:
    r = client.post(
        "/api/v1/webhooks/gitlab",
        headers=gitlab_headers("System Hook"),
        json={"object_kind": "build", "action": "create"},
    )

    assert r.status_code == 200
    assert r.json() == {
        "status": "success",
        "message": "New format system event received but not processed",
        "event": {"object_kind": "build", "action": "create"},
    }


def test_unsupported_legacy_event_name(client: TestClient) -> None:
    r = client.post(
        "/api/v1/webhooks/gitlab",
        headers=gitlab_headers("System Hook"),
        json={"event_name": "team_create"},
    )

    assert r.status_code == 200
    assert r.json()["message"] == "System hook event received but not processed"
    assert r.json()["event"] == {"event_name": "team_create"}


def test_store_unavailable_still_succeeds(client: TestClient, store: RecordingStore) -> None:
    store.available = False
    r = client.post(
        "/api/v1/webhooks/gitlab",
        headers=gitlab_headers("System Hook"),
        json=gitlab_events.repository_update(),
    )

    assert r.status_code == 200
    assert r.json()["status"] == "success"
    assert r.json()["message"] == "Repository update event processed"
