from fastapi.testclient import TestClient

from tests.conftest import RecordingStore


def test_healthz(client: TestClient) -> None:
    r = client.get("/api/v1/healthz")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_health_reports_pipeline(client: TestClient) -> None:
    r = client.get("/api/v1/health")
    assert r.status_code == 200
    data = r.json()
    assert data["ok"] is True
    assert data["service"] == "hookledger"
    assert data["persistence"] == "available"
    assert data["token_check"] is True


def test_health_reports_store_outage(client: TestClient, store: RecordingStore) -> None:
    store.available = False
    r = client.get("/api/v1/health")
    assert r.status_code == 200
    assert r.json()["persistence"] == "unavailable"
