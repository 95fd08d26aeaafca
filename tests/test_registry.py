from __future__ import annotations

from datetime import datetime

import pytest
from pydantic import BaseModel

from hookledger.adapters.registry import ParserRegistry
from hookledger.types import (
    Dialect,
    EventCategory,
    EventClassification,
    MergeRequestEvent,
    PayloadFormatError,
)
from tests.fixtures import gitlab_events


class DummyEvent(BaseModel):
    id: int


def test_registry_get_and_register() -> None:
    assert ParserRegistry.get(EventCategory.MERGE_REQUEST, Dialect.HOOK) is MergeRequestEvent

    ParserRegistry.register(EventCategory.UNSUPPORTED, Dialect.HOOK, DummyEvent)
    try:
        assert ParserRegistry.get(EventCategory.UNSUPPORTED, Dialect.HOOK) is DummyEvent
    finally:
        ParserRegistry._registry.pop((EventCategory.UNSUPPORTED, Dialect.HOOK))


def test_registry_unknown() -> None:
    with pytest.raises(KeyError):
        ParserRegistry.get(EventCategory.PROJECT, Dialect.HOOK)


def test_merge_request_timestamps_follow_dialect() -> None:
    payload = gitlab_events.system_hook_merge_request()

    hook = ParserRegistry.parse(
        EventClassification(EventCategory.MERGE_REQUEST, Dialect.HOOK), payload
    )
    system = ParserRegistry.parse(
        EventClassification(EventCategory.MERGE_REQUEST, Dialect.SYSTEM_HOOK), payload
    )

    assert isinstance(hook.object_attributes.created_at, datetime)
    assert system.object_attributes.created_at == "2024-05-01 10:00:00 UTC"
    assert system.object_attributes.updated_at == "2024-05-01 10:05:00 UTC"


def test_merge_request_missing_iid() -> None:
    payload = gitlab_events.merge_request_hook()
    del payload["object_attributes"]["iid"]

    with pytest.raises(PayloadFormatError) as excinfo:
        ParserRegistry.parse(
            EventClassification(EventCategory.MERGE_REQUEST, Dialect.HOOK), payload
        )
    assert excinfo.value.message == "Invalid merge request event format"
    assert excinfo.value.summary["errors"][0]["loc"] == "object_attributes.iid"


def test_system_hook_merge_request_error_message() -> None:
    payload = {"object_kind": "merge_request", "object_attributes": {"iid": "forty-two"}}

    with pytest.raises(PayloadFormatError) as excinfo:
        ParserRegistry.parse(
            EventClassification(EventCategory.MERGE_REQUEST, Dialect.SYSTEM_HOOK), payload
        )
    assert excinfo.value.message == "Invalid system hook merge request event format"


def test_unknown_timestamp_layout_is_format_error() -> None:
    payload = gitlab_events.merge_request_hook(created_at="yesterday")

    with pytest.raises(PayloadFormatError) as excinfo:
        ParserRegistry.parse(
            EventClassification(EventCategory.MERGE_REQUEST, Dialect.HOOK), payload
        )
    assert excinfo.value.summary["errors"][0]["loc"] == "object_attributes.created_at"


def test_user_event_legacy_aliases() -> None:
    event = ParserRegistry.parse(
        EventClassification(EventCategory.USER, Dialect.LEGACY_FLAT),
        {
            "event_name": "user_create",
            "email": "ada@example.com",
            "name": "Ada Lovelace",
            "username": "ada",
            "user_id": 41,
        },
    )
    assert event.user_email == "ada@example.com"
    assert event.user_name == "Ada Lovelace"
    assert event.user_username == "ada"


def test_group_event_full_path_alias() -> None:
    event = ParserRegistry.parse(
        EventClassification(EventCategory.GROUP, Dialect.LEGACY_FLAT),
        {
            "event_name": "group_rename",
            "name": "Platform",
            "path": "platform",
            "full_path": "org/platform",
            "old_path": "infra",
            "old_full_path": "org/infra",
            "group_id": 78,
        },
    )
    assert event.path_with_namespace == "org/platform"
    assert event.old_path_with_namespace == "org/infra"


def test_key_event_id_alias() -> None:
    event = ParserRegistry.parse(
        EventClassification(EventCategory.KEY, Dialect.LEGACY_FLAT),
        {"event_name": "key_create", "username": "ada", "id": 4, "key": "ssh-rsa AAA"},
    )
    assert event.key_id == 4
    assert event.user_name == "ada"


def test_legacy_event_requires_identifier() -> None:
    with pytest.raises(PayloadFormatError) as excinfo:
        ParserRegistry.parse(
            EventClassification(EventCategory.PROJECT, Dialect.LEGACY_FLAT),
            {"event_name": "project_create"},
        )
    assert excinfo.value.message == "Invalid project system event format"
