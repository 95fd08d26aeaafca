"""Error taxonomy for webhook processing.

Every ``WebhookError`` is terminal for the delivery that raised it and is
rendered to the caller as an error acknowledgement with ``status_code``.
Unsupported event kinds are not errors and never raise.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from hookledger.utils.timeparse import TimeFormatError

from .enums import EventCategory

_CATEGORY_LABELS: Dict[EventCategory, str] = {
    EventCategory.MERGE_REQUEST: "merge request",
    EventCategory.NOTE: "note",
    EventCategory.PROJECT: "project system",
    EventCategory.USER: "user system",
    EventCategory.GROUP: "group system",
    EventCategory.ACCESS_REQUEST: "access request",
    EventCategory.KEY: "key",
    EventCategory.REPOSITORY_UPDATE: "repository update",
    EventCategory.MEMBER_APPROVAL: "member approval",
    EventCategory.PUSH: "push",
    EventCategory.TAG_PUSH: "tag push",
    EventCategory.ISSUES: "issues",
    EventCategory.UNSUPPORTED: "system hook",
}


def category_label(category: EventCategory) -> str:
    return _CATEGORY_LABELS[category]


class WebhookError(Exception):
    """Base class for deliveries rejected by the pipeline."""

    status_code: int = 400

    def __init__(self, message: str, *, summary: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.summary: Dict[str, Any] = summary or {}


class InputError(WebhookError):
    """The delivery's shape cannot be determined (missing header, non-JSON body)."""


class UnauthorizedDelivery(WebhookError):
    """The shared-secret token did not match the configured secret."""

    status_code = 401


class PayloadFormatError(WebhookError):
    """Valid JSON that does not fit the category's expected structure."""

    def __init__(
        self, category: EventCategory, error: Exception, *, label: Optional[str] = None
    ) -> None:
        self.category = category
        self.error = error
        super().__init__(
            f"Invalid {label or category_label(category)} event format",
            summary={"category": category.value, "errors": _describe(error)},
        )


class CollaboratorUnavailable(RuntimeError):
    """An external collaborator (the event store) cannot take the record."""


def _describe(error: Exception) -> List[Dict[str, Any]]:
    if isinstance(error, ValidationError):
        return [
            {"loc": ".".join(str(part) for part in item["loc"]), "msg": item["msg"]}
            for item in error.errors(include_url=False)
        ]
    return [{"loc": "", "msg": str(error)}]


__all__ = [
    "CollaboratorUnavailable",
    "InputError",
    "PayloadFormatError",
    "TimeFormatError",
    "UnauthorizedDelivery",
    "WebhookError",
    "category_label",
]
