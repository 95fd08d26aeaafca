from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel

from .enums import Dialect, EventCategory
from .errors import InputError

EVENT_HEADER = "x-gitlab-event"
TOKEN_HEADER = "x-gitlab-token"
INSTANCE_HEADER = "x-gitlab-instance"
USER_AGENT_HEADER = "user-agent"


@dataclass(frozen=True)
class Delivery:
    """One inbound webhook call: its headers and the untouched body bytes.

    Header names are stored lower-cased. The body is decoded at most once,
    on first access to ``document``.

    Example:
        >>> d = Delivery.from_headers({"X-Gitlab-Event": "Push Hook"}, b"{}")
        >>> d.event_type
        'Push Hook'
    """

    headers: Mapping[str, str]
    body: bytes = field(repr=False)

    @classmethod
    def from_headers(cls, headers: Mapping[str, str], body: bytes) -> "Delivery":
        return cls(headers={k.lower(): v for k, v in headers.items()}, body=bytes(body))

    def header(self, name: str) -> Optional[str]:
        value = self.headers.get(name.lower())
        return value if value else None

    @property
    def event_type(self) -> Optional[str]:
        return self.header(EVENT_HEADER)

    @property
    def token(self) -> Optional[str]:
        return self.header(TOKEN_HEADER)

    @property
    def instance(self) -> Optional[str]:
        return self.header(INSTANCE_HEADER)

    @property
    def user_agent(self) -> Optional[str]:
        return self.header(USER_AGENT_HEADER)

    @cached_property
    def document(self) -> Any:
        """The JSON-decoded body. Raises ``InputError`` when it is not JSON."""
        try:
            return json.loads(self.body)
        except ValueError as exc:
            raise InputError("Invalid JSON body", summary={"error": str(exc)}) from exc

    @property
    def raw_text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class EventClassification:
    """Result of inspecting a delivery: which family and which payload shape.

    ``name`` is the string the decision was made on (the header value, the
    envelope's ``object_kind`` or the legacy ``event_name``) and is echoed
    back when the category is unsupported.
    """

    category: EventCategory
    dialect: Dialect
    name: Optional[str] = None
    action: Optional[str] = None

    @property
    def supported(self) -> bool:
        return self.category is not EventCategory.UNSUPPORTED


class NormalizedRecord(BaseModel):
    """Flat, persistence-ready row for one parsed event.

    Attributes:
        collection: Destination table, e.g. ``gitlab_merge_requests``.
        category: Event family the row came from.
        fields: Column values. Always contains ``event_data``, the verbatim
            request body, even when structured fields are missing.
    """

    collection: str
    category: EventCategory
    fields: Dict[str, Any]

    @property
    def event_data(self) -> str:
        return self.fields["event_data"]
