from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, Field

from .enums import AckStatus


class Acknowledgement(BaseModel):
    """Response body returned to the webhook sender.

    Attributes:
        status: ``success`` for every accepted delivery, including ones whose
            category is not processed; ``error`` only for rejected input.
        message: Human readable outcome, e.g. "Merge request event processed".
        event: Echoed summary of the event (identifiers, titles, names).

    Examples:
        Processed:
            {
              "status": "success",
              "message": "Merge request event processed",
              "event": {"action": "open", "mr_id": 42, "title": "Fix",
                        "state": "opened", "project": "api"}
            }

        Rejected:
            {
              "status": "error",
              "message": "Missing X-Gitlab-Event header",
              "event": {}
            }
    """

    status: AckStatus
    message: str
    event: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def success(cls, message: str, event: Dict[str, Any]) -> "Acknowledgement":
        return cls(status=AckStatus.SUCCESS, message=message, event=event)

    @classmethod
    def error(cls, message: str, event: Dict[str, Any]) -> "Acknowledgement":
        return cls(status=AckStatus.ERROR, message=message, event=event)
