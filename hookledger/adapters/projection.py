"""Projection of typed GitLab events onto flat, persistence-ready rows.

Every projector returns the row plus the acknowledgement message and the
summary echoed back to the sender. Rows skip optional values the payload did
not carry; ``event_data`` (the verbatim body) is always present.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

from hookledger.adapters.authors import resolve_author
from hookledger.types import (
    AccessRequestEvent,
    Dialect,
    EventCategory,
    EventClassification,
    GroupSystemEvent,
    IssueEvent,
    KeyEvent,
    MemberApprovalEvent,
    MergeRequestEvent,
    NormalizedRecord,
    NotedCommit,
    NotedIssue,
    NotedMergeRequest,
    NotedSnippet,
    NoteEvent,
    ProjectSystemEvent,
    PushEvent,
    RepositoryUpdateEvent,
    TypedEvent,
    UserSystemEvent,
)

SYSTEM_HOOK_SOURCE = "system_hook"


@dataclass(frozen=True)
class ProjectedEvent:
    record: NormalizedRecord
    message: str
    summary: Dict[str, Any]


class _Row:
    """Ordered column builder that drops absent values."""

    def __init__(self) -> None:
        self.fields: Dict[str, Any] = {}

    def put(self, key: str, value: Any) -> "_Row":
        if value is None:
            return self
        if isinstance(value, datetime):
            value = value.isoformat()
        self.fields[key] = value
        return self

    def put_json(self, key: str, value: Any) -> "_Row":
        self.fields[key] = json.dumps(value)
        return self


def _positive(value: Optional[int]) -> Optional[int]:
    return value if value is not None and value > 0 else None


def _merge_request(
    event: MergeRequestEvent, classification: EventClassification
) -> ProjectedEvent:
    attrs = event.object_attributes
    author = resolve_author(attrs.author, event.user)
    project = event.project
    system_hook = classification.dialect is Dialect.SYSTEM_HOOK

    row = (
        _Row()
        .put("mr_id", attrs.id)
        .put("mr_iid", attrs.iid)
        .put("title", attrs.title)
        .put("description", attrs.description)
        .put("state", attrs.state)
        .put("action", attrs.action)
        .put("author_name", author.name)
        .put("author_username", author.username)
        .put("project_id", project.id if project else None)
        .put("project_name", project.name if project else None)
        .put("source_branch", attrs.source_branch)
        .put("target_branch", attrs.target_branch)
        .put("url", attrs.url)
    )
    if system_hook:
        row.put("created_at", attrs.created_at)
        row.put("updated_at", attrs.updated_at)
        row.put("event_source", SYSTEM_HOOK_SOURCE)

    summary: Dict[str, Any] = {
        "action": attrs.action,
        "mr_id": attrs.iid,
        "title": attrs.title,
        "state": attrs.state,
        "project": project.name if project else None,
    }
    if system_hook:
        summary["source"] = SYSTEM_HOOK_SOURCE
        message = "System hook merge request event processed"
    else:
        message = "Merge request event processed"
    return ProjectedEvent(
        record=_record("gitlab_merge_requests", EventCategory.MERGE_REQUEST, row),
        message=message,
        summary=summary,
    )


def _note(event: NoteEvent, classification: EventClassification) -> ProjectedEvent:
    attrs = event.object_attributes
    project = event.project
    project_id = project.id if project and project.id is not None else event.project_id

    row = (
        _Row()
        .put("note_id", attrs.id)
        .put("note_content", attrs.note)
        .put("noteable_type", attrs.noteable_type)
        .put("author_id", attrs.author_id)
        .put("project_id", project_id)
        .put("project_name", project.name if project else None)
        .put("action", attrs.action)
        .put("system", attrs.system)
        .put("created_at", attrs.created_at)
        .put("updated_at", attrs.updated_at)
        .put("url", attrs.url)
    )

    noteable = event.noteable
    if isinstance(noteable, (NotedMergeRequest, NotedIssue)):
        row.put("noteable_id", noteable.iid)
        row.put("noteable_title", noteable.title)
        row.put("noteable_state", noteable.state)
    elif isinstance(noteable, NotedCommit):
        row.put("noteable_id", noteable.id)
        row.put("noteable_title", noteable.message)
        row.put("commit_id", noteable.id)
    elif isinstance(noteable, NotedSnippet):
        row.put("noteable_id", noteable.id)
        row.put("noteable_title", noteable.title)

    row.put("line_code", attrs.line_code or None)
    row.put("commit_id", attrs.commit_id or None)

    return ProjectedEvent(
        record=_record("gitlab_note_events", EventCategory.NOTE, row),
        message="Note event processed",
        summary={
            "action": attrs.action,
            "note_id": attrs.id,
            "noteable_type": attrs.noteable_type,
            "project": project.name if project else None,
            "author_id": attrs.author_id,
        },
    )


def _push(event: PushEvent, classification: EventClassification) -> ProjectedEvent:
    category = classification.category
    project = event.project
    row = (
        _Row()
        .put("object_kind", event.object_kind or category.value)
        .put("ref", event.ref)
        .put("before", event.before)
        .put("after", event.after)
        .put("checkout_sha", event.checkout_sha)
        .put("user_id", event.user_id)
        .put("user_name", event.user_name)
        .put("user_username", event.user_username)
        .put("project_id", event.project_id)
        .put("project_name", project.name if project else None)
        .put("project_path", project.path_with_namespace if project else None)
        .put("total_commits_count", event.total_commits_count)
        .put_json("commits", [c.model_dump(mode="json") for c in event.commits])
    )
    tag = category is EventCategory.TAG_PUSH
    return ProjectedEvent(
        record=_record("gitlab_push_events", category, row),
        message="Tag push event processed" if tag else "Push event processed",
        summary={
            "ref": event.ref,
            "project_id": event.project_id,
            "project_name": project.name if project else None,
            "user_name": event.user_name,
            "commits_count": event.total_commits_count
            if event.total_commits_count is not None
            else len(event.commits),
        },
    )


def _issue(event: IssueEvent, classification: EventClassification) -> ProjectedEvent:
    attrs = event.object_attributes
    project = event.project
    labels: List[Optional[str]] = [label.title for label in event.labels]
    row = (
        _Row()
        .put("issue_id", attrs.id)
        .put("issue_iid", attrs.iid)
        .put("title", attrs.title)
        .put("description", attrs.description)
        .put("state", attrs.state)
        .put("action", attrs.action)
        .put("author_id", attrs.author_id)
        .put("project_id", project.id if project and project.id is not None else attrs.project_id)
        .put("project_name", project.name if project else None)
        .put("url", attrs.url)
        .put("created_at", attrs.created_at)
        .put("updated_at", attrs.updated_at)
        .put("closed_at", attrs.closed_at)
        .put_json("labels", labels)
    )
    return ProjectedEvent(
        record=_record("gitlab_issue_events", EventCategory.ISSUES, row),
        message="Issues event processed",
        summary={
            "action": attrs.action,
            "issue_id": attrs.iid,
            "title": attrs.title,
            "state": attrs.state,
            "project": project.name if project else None,
        },
    )


def _project(
    event: ProjectSystemEvent, classification: EventClassification
) -> ProjectedEvent:
    row = (
        _Row()
        .put("event_name", event.event_name)
        .put("project_id", event.project_id)
        .put("project_name", event.name)
        .put("path", event.path)
        .put("path_with_namespace", event.path_with_namespace)
        .put("project_visibility", event.project_visibility)
        .put("owner_name", event.owner_name)
        .put("owner_email", event.owner_email)
        .put("old_path_with_namespace", event.old_path_with_namespace or None)
    )
    return ProjectedEvent(
        record=_record("gitlab_project_system_events", EventCategory.PROJECT, row),
        message="Project system event processed",
        summary={
            "event_name": event.event_name,
            "project_id": event.project_id,
            "project_name": event.name,
            "path": event.path_with_namespace,
        },
    )


def _user(event: UserSystemEvent, classification: EventClassification) -> ProjectedEvent:
    row = (
        _Row()
        .put("event_name", event.event_name)
        .put("user_id", event.user_id)
        .put("user_name", event.user_name)
        .put("user_email", event.user_email)
        .put("user_username", event.user_username)
        .put("old_username", event.old_username or None)
    )
    return ProjectedEvent(
        record=_record("gitlab_user_system_events", EventCategory.USER, row),
        message="User system event processed",
        summary={
            "event_name": event.event_name,
            "user_id": event.user_id,
            "user_name": event.user_name,
            "username": event.user_username,
        },
    )


def _group(event: GroupSystemEvent, classification: EventClassification) -> ProjectedEvent:
    row = (
        _Row()
        .put("event_name", event.event_name)
        .put("group_id", event.group_id)
        .put("group_name", event.name)
        .put("path", event.path)
        .put("path_with_namespace", event.path_with_namespace)
        .put("old_path", event.old_path or None)
        .put("old_path_with_namespace", event.old_path_with_namespace or None)
    )
    return ProjectedEvent(
        record=_record("gitlab_group_system_events", EventCategory.GROUP, row),
        message="Group system event processed",
        summary={
            "event_name": event.event_name,
            "group_id": event.group_id,
            "group_name": event.name,
            "path": event.path_with_namespace,
        },
    )


def _access_request(
    event: AccessRequestEvent, classification: EventClassification
) -> ProjectedEvent:
    row = (
        _Row()
        .put("event_name", event.event_name)
        .put("user_id", event.user_id)
        .put("user_name", event.user_name)
        .put("user_email", event.user_email)
        .put("user_username", event.user_username)
    )
    # group and project columns only travel together with their id
    if _positive(event.group_id):
        row.put("group_id", event.group_id)
        row.put("group_name", event.group_name)
        row.put("group_path", event.group_path)
        row.put("group_access", event.group_access)
    if _positive(event.project_id):
        row.put("project_id", event.project_id)
        row.put("project_name", event.project_name)
        row.put("project_path", event.project_path)
        row.put("project_access", event.project_access)
    return ProjectedEvent(
        record=_record("gitlab_access_request_events", EventCategory.ACCESS_REQUEST, row),
        message="Access request event processed",
        summary={
            "event_name": event.event_name,
            "user_id": event.user_id,
            "user_name": event.user_name,
        },
    )


def _key(event: KeyEvent, classification: EventClassification) -> ProjectedEvent:
    row = (
        _Row()
        .put("event_name", event.event_name)
        .put("user_id", event.user_id)
        .put("user_name", event.user_name)
        .put("user_email", event.user_email)
        .put("key_id", event.key_id)
    )
    return ProjectedEvent(
        record=_record("gitlab_key_events", EventCategory.KEY, row),
        message="Key event processed",
        summary={
            "event_name": event.event_name,
            "user_id": event.user_id,
            "key_id": event.key_id,
        },
    )


def _repository_update(
    event: RepositoryUpdateEvent, classification: EventClassification
) -> ProjectedEvent:
    project = event.project
    row = (
        _Row()
        .put("event_name", event.event_name)
        .put("user_id", event.user_id)
        .put("user_name", event.user_name)
        .put("user_email", event.user_email)
        .put("project_id", event.project_id)
        .put("project_name", project.name if project else None)
        .put("project_path", project.path_with_namespace if project else None)
        .put_json("refs", event.refs)
        .put_json("changes", [change.model_dump() for change in event.changes])
    )
    return ProjectedEvent(
        record=_record(
            "gitlab_repository_update_events", EventCategory.REPOSITORY_UPDATE, row
        ),
        message="Repository update event processed",
        summary={
            "event_name": event.event_name,
            "user_id": event.user_id,
            "project_id": event.project_id,
            "project_name": project.name if project else None,
            "refs_count": len(event.refs),
        },
    )


def _member_approval(
    event: MemberApprovalEvent, classification: EventClassification
) -> ProjectedEvent:
    attrs = event.object_attributes
    status = attrs.status if attrs else None
    row = (
        _Row()
        .put("object_kind", event.object_kind)
        .put("action", event.action)
        .put("user_id", event.user_id)
        .put("requested_by_user_id", _positive(event.requested_by_user_id))
        .put("reviewed_by_user_id", _positive(event.reviewed_by_user_id))
        .put("promotion_namespace_id", _positive(event.promotion_namespace_id))
        .put("status", status or None)
    )
    if attrs is not None:
        row.put("new_access_level", _positive(attrs.new_access_level))
        row.put("old_access_level", _positive(attrs.old_access_level))
    return ProjectedEvent(
        record=_record(
            "gitlab_member_approval_events", EventCategory.MEMBER_APPROVAL, row
        ),
        message="Member approval event processed",
        summary={
            "object_kind": event.object_kind,
            "action": event.action,
            "user_id": event.user_id,
            "status": status,
        },
    )


_PROJECTORS: Mapping[EventCategory, Callable[[Any, EventClassification], ProjectedEvent]] = {
    EventCategory.MERGE_REQUEST: _merge_request,
    EventCategory.NOTE: _note,
    EventCategory.PUSH: _push,
    EventCategory.TAG_PUSH: _push,
    EventCategory.ISSUES: _issue,
    EventCategory.PROJECT: _project,
    EventCategory.USER: _user,
    EventCategory.GROUP: _group,
    EventCategory.ACCESS_REQUEST: _access_request,
    EventCategory.KEY: _key,
    EventCategory.REPOSITORY_UPDATE: _repository_update,
    EventCategory.MEMBER_APPROVAL: _member_approval,
}

EVENT_DATA_FIELD = "event_data"


def _record(collection: str, category: EventCategory, row: _Row) -> NormalizedRecord:
    return NormalizedRecord(collection=collection, category=category, fields=row.fields)


def project(
    event: TypedEvent, classification: EventClassification, raw_body: str
) -> ProjectedEvent:
    """Map a typed event onto its ``NormalizedRecord`` and acknowledgement data.

    Args:
        event: Output of ``ParserRegistry.parse``.
        classification: The classification the event was parsed under.
        raw_body: The delivery body as text, stored verbatim as ``event_data``.

    Raises:
        KeyError: no projector exists for the category (unsupported events
            never reach projection).
    """
    projector = _PROJECTORS[classification.category]
    projected = projector(event, classification)
    record = projected.record
    return ProjectedEvent(
        record=NormalizedRecord(
            collection=record.collection,
            category=record.category,
            fields={**record.fields, EVENT_DATA_FIELD: raw_body},
        ),
        message=projected.message,
        summary=projected.summary,
    )
