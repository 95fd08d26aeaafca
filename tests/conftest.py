from __future__ import annotations

from typing import Iterator, List

import pytest
from fastapi.testclient import TestClient

from hookledger.services.event_store import get_event_store
from hookledger.types import CollaboratorUnavailable, NormalizedRecord
from main import app
from server.config import Settings, get_settings

WEBHOOK_SECRET = "inbound-secret"


class RecordingStore:
    """In-memory stand-in for the Supabase event store."""

    def __init__(self, available: bool = True, missing_table: bool = False) -> None:
        self.available = available
        self.missing_table = missing_table
        self.save_calls = 0
        self.saved: List[NormalizedRecord] = []

    def is_available(self) -> bool:
        return self.available

    def save(self, record: NormalizedRecord) -> None:
        self.save_calls += 1
        if not self.available or self.missing_table:
            raise CollaboratorUnavailable(f"{record.collection} collection not found")
        self.saved.append(record)


@pytest.fixture(autouse=True)
def test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENV", "test")
    monkeypatch.delenv("SUPABASE_URL", raising=False)


@pytest.fixture()
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture()
def settings() -> Settings:
    return Settings(gitlab_webhook_secret=WEBHOOK_SECRET, supabase_url=None)


@pytest.fixture()
def client(store: RecordingStore, settings: Settings) -> Iterator[TestClient]:
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_event_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def gitlab_headers(event: str | None, token: str | None = WEBHOOK_SECRET) -> dict[str, str]:
    headers = {"Content-Type": "application/json", "User-Agent": "GitLab/16.11.0"}
    if event is not None:
        headers["X-Gitlab-Event"] = event
    if token is not None:
        headers["X-Gitlab-Token"] = token
    return headers
