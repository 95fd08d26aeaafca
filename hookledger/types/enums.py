from __future__ import annotations

from enum import Enum


class EventCategory(str, Enum):
    """Logical GitLab event family, independent of the payload dialect.

    ``UNSUPPORTED`` is a regular outcome of classification rather than an
    error: GitLab keeps adding event kinds and a well-formed delivery we do
    not understand is still acknowledged.
    """

    MERGE_REQUEST = "merge_request"
    NOTE = "note"
    PROJECT = "project"
    USER = "user"
    GROUP = "group"
    ACCESS_REQUEST = "access_request"
    KEY = "key"
    REPOSITORY_UPDATE = "repository_update"
    MEMBER_APPROVAL = "member_approval"
    PUSH = "push"
    TAG_PUSH = "tag_push"
    ISSUES = "issues"
    UNSUPPORTED = "unsupported"


class Dialect(str, Enum):
    """Payload shape a delivery arrived in.

    - HOOK: per-project webhooks named by the ``X-Gitlab-Event`` header
    - SYSTEM_HOOK: system hooks carrying an ``object_kind`` envelope
    - LEGACY_FLAT: older flat system hooks identified by ``event_name``
    """

    HOOK = "hook"
    SYSTEM_HOOK = "system_hook"
    LEGACY_FLAT = "legacy_flat"


class NoteableType(str, Enum):
    """Object a note (comment) is attached to."""

    MERGE_REQUEST = "MergeRequest"
    ISSUE = "Issue"
    COMMIT = "Commit"
    SNIPPET = "Snippet"


class AckStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class DispatchState(str, Enum):
    """Stages a delivery moves through inside the dispatcher."""

    RECEIVED = "received"
    CLASSIFIED = "classified"
    PARSED = "parsed"
    PROJECTED = "projected"
    ACKNOWLEDGED = "acknowledged"
    REJECTED = "rejected"
