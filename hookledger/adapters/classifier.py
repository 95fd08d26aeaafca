"""Dialect detection for GitLab deliveries.

Header-named hooks are looked up directly. ``System Hook`` deliveries carry
their kind in the body: newer payloads name it in ``object_kind``, older flat
ones in ``event_name``. All lookup tables are read-only and built at import.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Tuple

from pydantic import ValidationError

from hookledger.types import (
    Delivery,
    Dialect,
    EventCategory,
    EventClassification,
    InputError,
    PayloadFormatError,
    SystemHookEnvelope,
)

logger = logging.getLogger(__name__)

SYSTEM_HOOK_EVENT = "System Hook"

HOOK_EVENT_CATEGORIES: Mapping[str, EventCategory] = MappingProxyType(
    {
        "Merge Request Hook": EventCategory.MERGE_REQUEST,
        "Note Hook": EventCategory.NOTE,
        "Push Hook": EventCategory.PUSH,
        "Tag Push Hook": EventCategory.TAG_PUSH,
        "Issues Hook": EventCategory.ISSUES,
    }
)

ENVELOPE_KIND_CATEGORIES: Mapping[str, EventCategory] = MappingProxyType(
    {
        "gitlab_subscription_member_approval": EventCategory.MEMBER_APPROVAL,
        "gitlab_subscription_member_approvals": EventCategory.MEMBER_APPROVAL,
        "merge_request": EventCategory.MERGE_REQUEST,
    }
)

_LEGACY_EVENT_GROUPS: Tuple[Tuple[EventCategory, Tuple[str, ...]], ...] = (
    (
        EventCategory.PROJECT,
        (
            "project_create",
            "project_destroy",
            "project_rename",
            "project_transfer",
            "project_update",
        ),
    ),
    (
        EventCategory.USER,
        ("user_create", "user_destroy", "user_rename", "user_failed_login"),
    ),
    (EventCategory.GROUP, ("group_create", "group_destroy", "group_rename")),
    (
        EventCategory.ACCESS_REQUEST,
        (
            "user_access_request_revoked_for_group",
            "user_access_request_revoked_for_project",
            "user_access_request_to_group",
            "user_access_request_to_project",
            "user_add_to_group",
            "user_add_to_team",
            "user_remove_from_group",
            "user_remove_from_team",
            "user_update_for_group",
            "user_update_for_team",
        ),
    ),
    (EventCategory.KEY, ("key_create", "key_destroy")),
    (EventCategory.REPOSITORY_UPDATE, ("repository_update",)),
)


def _flatten(groups: Iterable[Tuple[EventCategory, Tuple[str, ...]]]) -> Dict[str, EventCategory]:
    table: Dict[str, EventCategory] = {}
    for category, names in groups:
        for name in names:
            table[name] = category
    return table


LEGACY_EVENT_CATEGORIES: Mapping[str, EventCategory] = MappingProxyType(
    _flatten(_LEGACY_EVENT_GROUPS)
)


def classify(delivery: Delivery) -> EventClassification:
    """Decide category and dialect for a delivery.

    Raises:
        InputError: the ``X-Gitlab-Event`` header is missing, or a system hook
            body is not JSON.
        PayloadFormatError: a system hook body is JSON but its discriminator
            fields cannot be read.
    """
    event_type = delivery.event_type
    if not event_type:
        raise InputError("Missing X-Gitlab-Event header")

    if event_type == SYSTEM_HOOK_EVENT:
        return classify_system_hook(delivery.document)

    category = HOOK_EVENT_CATEGORIES.get(event_type, EventCategory.UNSUPPORTED)
    return EventClassification(category=category, dialect=Dialect.HOOK, name=event_type)


def classify_system_hook(document: Any) -> EventClassification:
    """Classify a decoded system hook body by its envelope fields."""
    try:
        envelope = SystemHookEnvelope.model_validate(document)
    except ValidationError as exc:
        raise PayloadFormatError(EventCategory.UNSUPPORTED, exc) from exc

    logger.debug(
        "system hook envelope",
        extra={
            "event_name": envelope.event_name,
            "object_kind": envelope.object_kind,
            "action": envelope.action,
        },
    )

    if envelope.object_kind:
        category = ENVELOPE_KIND_CATEGORIES.get(
            envelope.object_kind, EventCategory.UNSUPPORTED
        )
        return EventClassification(
            category=category,
            dialect=Dialect.SYSTEM_HOOK,
            name=envelope.object_kind,
            action=envelope.action,
        )

    category = LEGACY_EVENT_CATEGORIES.get(
        envelope.event_name or "", EventCategory.UNSUPPORTED
    )
    return EventClassification(
        category=category,
        dialect=Dialect.LEGACY_FLAT,
        name=envelope.event_name,
    )
