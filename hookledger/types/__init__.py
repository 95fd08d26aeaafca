"""Core types for hookledger's GitLab webhook pipeline.

This package centralizes the enums, delivery and record models, GitLab payload
models, error taxonomy and the event store protocol in one place. Most modules
should import types from here rather than directly from submodules.

Usage:
    from hookledger.types import Delivery, EventCategory, MergeRequestEvent
"""

from .enums import AckStatus, Dialect, DispatchState, EventCategory, NoteableType
from .errors import (
    CollaboratorUnavailable,
    InputError,
    PayloadFormatError,
    TimeFormatError,
    UnauthorizedDelivery,
    WebhookError,
)
from .events import Delivery, EventClassification, NormalizedRecord
from .gitlab import (
    AccessRequestEvent,
    GitLabUser,
    GroupSystemEvent,
    IssueEvent,
    KeyEvent,
    MemberApprovalEvent,
    MergeRequestEvent,
    NoteEvent,
    NotedCommit,
    NotedIssue,
    NotedMergeRequest,
    NotedSnippet,
    ProjectSystemEvent,
    PushEvent,
    RepositoryUpdateEvent,
    SystemHookEnvelope,
    TagPushEvent,
    TypedEvent,
    UserSystemEvent,
)
from .api import Acknowledgement
from .protocols import EventStore
from .results import DispatchOutcome

__all__ = [
    "AckStatus",
    "Dialect",
    "DispatchState",
    "EventCategory",
    "NoteableType",
    "CollaboratorUnavailable",
    "InputError",
    "PayloadFormatError",
    "TimeFormatError",
    "UnauthorizedDelivery",
    "WebhookError",
    "Delivery",
    "EventClassification",
    "NormalizedRecord",
    "AccessRequestEvent",
    "GitLabUser",
    "GroupSystemEvent",
    "IssueEvent",
    "KeyEvent",
    "MemberApprovalEvent",
    "MergeRequestEvent",
    "NoteEvent",
    "NotedCommit",
    "NotedIssue",
    "NotedMergeRequest",
    "NotedSnippet",
    "ProjectSystemEvent",
    "PushEvent",
    "RepositoryUpdateEvent",
    "SystemHookEnvelope",
    "TagPushEvent",
    "TypedEvent",
    "UserSystemEvent",
    "Acknowledgement",
    "EventStore",
    "DispatchOutcome",
]
