"""Typed GitLab webhook payloads.

One model per event category. Both merge request dialects share
``MergeRequestEvent``; the only difference between them is how
``object_attributes.created_at``/``updated_at`` come out of validation:

- ``hook`` dialect: parsed into an aware ``datetime`` via ``parse_time``
- ``system_hook`` dialect: kept as the original string

The dialect is passed in the validation context::

    MergeRequestEvent.model_validate(doc, context={"dialect": "system_hook"})

Unknown keys are ignored everywhere. Fields default to ``None`` unless an
identifier is needed to make sense of the event.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    Field,
    ValidationInfo,
    model_validator,
)

from hookledger.utils.timeparse import parse_time

from .enums import Dialect, NoteableType


def _to_instant(value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return parse_time(value)
    return value


def _to_dialect_timestamp(value: Any, info: ValidationInfo) -> Any:
    context = info.context or {}
    if context.get("dialect") == Dialect.SYSTEM_HOOK.value:
        return value or None
    return _to_instant(value)


def _none_as_empty(value: Any) -> Any:
    return [] if value is None else value


# GitLab sends null for empty collections
_EMPTY_IF_NULL = BeforeValidator(_none_as_empty)

Instant = Annotated[Optional[datetime], BeforeValidator(_to_instant)]
DialectTimestamp = Annotated[
    Optional[Union[datetime, str]], BeforeValidator(_to_dialect_timestamp)
]


class GitLabUser(BaseModel):
    id: Optional[int] = None
    name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None


class GitLabProject(BaseModel):
    id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    web_url: Optional[str] = None
    avatar_url: Optional[str] = None
    git_ssh_url: Optional[str] = None
    git_http_url: Optional[str] = None
    namespace: Optional[str] = None
    visibility_level: Optional[int] = None
    path_with_namespace: Optional[str] = None
    default_branch: Optional[str] = None
    homepage: Optional[str] = None
    url: Optional[str] = None
    ssh_url: Optional[str] = None
    http_url: Optional[str] = None


class GitLabRepository(BaseModel):
    name: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None
    homepage: Optional[str] = None


class CommitAuthor(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None


class GitLabCommit(BaseModel):
    id: Optional[str] = None
    message: Optional[str] = None
    title: Optional[str] = None
    timestamp: Instant = None
    url: Optional[str] = None
    author: Optional[CommitAuthor] = None


class PushCommit(GitLabCommit):
    added: Annotated[List[str], _EMPTY_IF_NULL] = Field(default_factory=list)
    modified: Annotated[List[str], _EMPTY_IF_NULL] = Field(default_factory=list)
    removed: Annotated[List[str], _EMPTY_IF_NULL] = Field(default_factory=list)


class GitLabLabel(BaseModel):
    id: Optional[int] = None
    title: Optional[str] = None
    color: Optional[str] = None
    project_id: Optional[int] = None
    created_at: Instant = None
    updated_at: Instant = None
    template: Optional[bool] = None
    description: Optional[str] = None
    type: Optional[str] = None
    group_id: Optional[int] = None


class Change(BaseModel):
    previous: Optional[str] = None
    current: Optional[str] = None


class LabelChange(BaseModel):
    previous: Annotated[List[GitLabLabel], _EMPTY_IF_NULL] = Field(default_factory=list)
    current: Annotated[List[GitLabLabel], _EMPTY_IF_NULL] = Field(default_factory=list)


class MergeRequestChanges(BaseModel):
    title: Optional[Change] = None
    description: Optional[Change] = None
    labels: Optional[LabelChange] = None
    state: Optional[Change] = None
    updated_at: Optional[Change] = None


# Merge requests


class MergeRequestAttributes(BaseModel):
    id: Optional[int] = None
    iid: int
    title: Optional[str] = None
    description: Optional[str] = None
    state: Optional[str] = None
    created_at: DialectTimestamp = None
    updated_at: DialectTimestamp = None
    merge_status: Optional[str] = None
    target_branch: Optional[str] = None
    source_branch: Optional[str] = None
    source_project_id: Optional[int] = None
    target_project_id: Optional[int] = None
    url: Optional[str] = None
    source: Optional[GitLabProject] = None
    target: Optional[GitLabProject] = None
    last_commit: Optional[GitLabCommit] = None
    work_in_progress: Optional[bool] = None
    assignee: Optional[GitLabUser] = None
    author: Optional[GitLabUser] = None
    merge_commit_sha: Optional[str] = None
    blocking_discussions_resolved: Optional[bool] = None
    action: Optional[str] = None


class MergeRequestEvent(BaseModel):
    """Merge request event in either the ``hook`` or ``system_hook`` dialect."""

    object_kind: Optional[str] = None
    event_type: Optional[str] = None
    user: Optional[GitLabUser] = None
    project: Optional[GitLabProject] = None
    object_attributes: MergeRequestAttributes
    labels: Annotated[List[GitLabLabel], _EMPTY_IF_NULL] = Field(default_factory=list)
    changes: Optional[MergeRequestChanges] = None
    repository: Optional[GitLabRepository] = None


# Notes


class NoteDiff(BaseModel):
    diff: Optional[str] = None
    new_path: Optional[str] = None
    old_path: Optional[str] = None
    a_mode: Optional[str] = None
    b_mode: Optional[str] = None
    new_file: Optional[bool] = None
    renamed_file: Optional[bool] = None
    deleted_file: Optional[bool] = None


class NoteAttributes(BaseModel):
    """Note attributes. Timestamps stay textual, as GitLab sent them."""

    id: int
    note: Optional[str] = None
    noteable_type: Optional[str] = None
    author_id: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    project_id: Optional[int] = None
    attachment: Any = None
    line_code: Optional[str] = None
    commit_id: Optional[str] = None
    noteable_id: Any = None
    system: Optional[bool] = None
    st_diff: Optional[NoteDiff] = None
    action: Optional[str] = None
    url: Optional[str] = None


class NotedMergeRequest(BaseModel):
    noteable_type: Literal["MergeRequest"]
    id: Optional[int] = None
    iid: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    state: Optional[str] = None
    target_branch: Optional[str] = None
    source_branch: Optional[str] = None
    source_project_id: Optional[int] = None
    target_project_id: Optional[int] = None
    author_id: Optional[int] = None
    assignee_id: Optional[int] = None
    milestone_id: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    merge_status: Optional[str] = None
    detailed_merge_status: Optional[str] = None
    position: Optional[int] = None
    labels: Annotated[List[GitLabLabel], _EMPTY_IF_NULL] = Field(default_factory=list)
    source: Optional[GitLabProject] = None
    target: Optional[GitLabProject] = None
    last_commit: Optional[GitLabCommit] = None
    work_in_progress: Optional[bool] = None
    draft: Optional[bool] = None
    assignee: Optional[GitLabUser] = None


class NotedIssue(BaseModel):
    noteable_type: Literal["Issue"]
    id: Optional[int] = None
    iid: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    state: Optional[str] = None
    assignee_ids: Annotated[List[int], _EMPTY_IF_NULL] = Field(default_factory=list)
    assignee_id: Optional[int] = None
    author_id: Optional[int] = None
    project_id: Optional[int] = None
    milestone_id: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    position: Optional[int] = None
    branch_name: Optional[str] = None
    labels: Annotated[List[GitLabLabel], _EMPTY_IF_NULL] = Field(default_factory=list)


class NotedCommit(GitLabCommit):
    noteable_type: Literal["Commit"]


class NotedSnippet(BaseModel):
    noteable_type: Literal["Snippet"]
    id: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    author_id: Optional[int] = None
    project_id: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    file_name: Optional[str] = None
    type: Optional[str] = None
    visibility_level: Optional[int] = None
    url: Optional[str] = None


Noteable = Annotated[
    Union[NotedMergeRequest, NotedIssue, NotedCommit, NotedSnippet],
    Field(discriminator="noteable_type"),
]

# payload key holding the noted object, per noteable_type
NOTEABLE_KEYS: Dict[str, str] = {
    NoteableType.MERGE_REQUEST.value: "merge_request",
    NoteableType.ISSUE.value: "issue",
    NoteableType.COMMIT.value: "commit",
    NoteableType.SNIPPET.value: "snippet",
}


class NoteEvent(BaseModel):
    """Comment on a merge request, issue, commit or snippet.

    GitLab ships the noted object under one of four keys. Validation folds
    whichever one matches ``object_attributes.noteable_type`` into the single
    ``noteable`` field, so at most one of them is ever carried. A missing
    sub-object simply leaves ``noteable`` empty.
    """

    object_kind: Optional[str] = None
    event_type: Optional[str] = None
    user: Optional[GitLabUser] = None
    project_id: Optional[int] = None
    project: Optional[GitLabProject] = None
    repository: Optional[GitLabRepository] = None
    object_attributes: NoteAttributes
    noteable: Optional[Noteable] = None

    @model_validator(mode="before")
    @classmethod
    def _select_noteable(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        noted = {key: data.pop(key, None) for key in NOTEABLE_KEYS.values()}
        attributes = data.get("object_attributes")
        if not isinstance(attributes, dict):
            return data
        noteable_type = attributes.get("noteable_type")
        key = NOTEABLE_KEYS.get(noteable_type) if isinstance(noteable_type, str) else None
        if key is None or noted[key] is None:
            return data
        if isinstance(noted[key], dict):
            data["noteable"] = {**noted[key], "noteable_type": noteable_type}
        else:
            data["noteable"] = noted[key]
        return data


# Push and tag push


class PushEvent(BaseModel):
    object_kind: Optional[str] = None
    event_name: Optional[str] = None
    before: Optional[str] = None
    after: Optional[str] = None
    ref: Optional[str] = None
    checkout_sha: Optional[str] = None
    message: Optional[str] = None
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    user_username: Optional[str] = None
    user_email: Optional[str] = None
    user_avatar: Optional[str] = None
    project_id: int
    project: Optional[GitLabProject] = None
    commits: Annotated[List[PushCommit], _EMPTY_IF_NULL] = Field(default_factory=list)
    total_commits_count: Optional[int] = None
    repository: Optional[GitLabRepository] = None


class TagPushEvent(PushEvent):
    pass


# Issues


class IssueAttributes(BaseModel):
    id: Optional[int] = None
    iid: int
    title: Optional[str] = None
    description: Optional[str] = None
    state: Optional[str] = None
    action: Optional[str] = None
    author_id: Optional[int] = None
    project_id: Optional[int] = None
    created_at: Instant = None
    updated_at: Instant = None
    closed_at: Instant = None
    due_date: Optional[str] = None
    confidential: Optional[bool] = None
    url: Optional[str] = None


class IssueEvent(BaseModel):
    object_kind: Optional[str] = None
    event_type: Optional[str] = None
    user: Optional[GitLabUser] = None
    project: Optional[GitLabProject] = None
    object_attributes: IssueAttributes
    labels: Annotated[List[GitLabLabel], _EMPTY_IF_NULL] = Field(default_factory=list)
    assignees: Annotated[List[GitLabUser], _EMPTY_IF_NULL] = Field(default_factory=list)
    repository: Optional[GitLabRepository] = None


# System hooks


class SystemHookEnvelope(BaseModel):
    """Discriminator fields shared by every system hook body."""

    event_name: Optional[str] = None
    object_kind: Optional[str] = None
    action: Optional[str] = None


class ProjectOwner(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None


class ProjectSystemEvent(BaseModel):
    event_name: Optional[str] = None
    created_at: Instant = None
    updated_at: Instant = None
    name: Optional[str] = None
    owner_email: Optional[str] = None
    owner_name: Optional[str] = None
    owners: Annotated[List[ProjectOwner], _EMPTY_IF_NULL] = Field(default_factory=list)
    path: Optional[str] = None
    path_with_namespace: Optional[str] = None
    project_id: int
    project_namespace_id: Optional[int] = None
    project_visibility: Optional[str] = None
    old_path_with_namespace: Optional[str] = None


class UserSystemEvent(BaseModel):
    event_name: Optional[str] = None
    created_at: Instant = None
    updated_at: Instant = None
    user_email: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("user_email", "email")
    )
    user_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("user_name", "name")
    )
    user_username: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("user_username", "username")
    )
    user_id: int
    old_username: Optional[str] = None


class GroupSystemEvent(BaseModel):
    event_name: Optional[str] = None
    created_at: Instant = None
    updated_at: Instant = None
    name: Optional[str] = None
    path: Optional[str] = None
    path_with_namespace: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("path_with_namespace", "full_path")
    )
    group_id: int
    owner_email: Optional[str] = None
    owner_name: Optional[str] = None
    old_path: Optional[str] = None
    old_path_with_namespace: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("old_path_with_namespace", "old_full_path"),
    )


class AccessRequestEvent(BaseModel):
    """Membership and access request changes for a group or a project."""

    event_name: Optional[str] = None
    created_at: Instant = None
    updated_at: Instant = None
    group_access: Optional[str] = None
    project_access: Optional[str] = None
    group_id: Optional[int] = None
    project_id: Optional[int] = None
    group_name: Optional[str] = None
    project_name: Optional[str] = None
    group_path: Optional[str] = None
    project_path: Optional[str] = None
    user_email: Optional[str] = None
    user_name: Optional[str] = None
    user_username: Optional[str] = None
    user_id: int


class KeyEvent(BaseModel):
    event_name: Optional[str] = None
    created_at: Instant = None
    updated_at: Instant = None
    user_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("user_name", "username")
    )
    user_email: Optional[str] = None
    user_id: Optional[int] = None
    key_id: int = Field(validation_alias=AliasChoices("key_id", "id"))


class RefChange(BaseModel):
    before: Optional[str] = None
    after: Optional[str] = None
    ref: Optional[str] = None


class RepositoryUpdateEvent(BaseModel):
    event_name: Optional[str] = None
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    user_avatar: Optional[str] = None
    project_id: int
    project: Optional[GitLabProject] = None
    changes: Annotated[List[RefChange], _EMPTY_IF_NULL] = Field(default_factory=list)
    refs: Annotated[List[str], _EMPTY_IF_NULL] = Field(default_factory=list)


class MemberApprovalAttributes(BaseModel):
    new_access_level: Optional[int] = None
    old_access_level: Optional[int] = None
    existing_member_id: Optional[int] = None
    promotion_request_ids_that_failed_to_apply: Annotated[List[int], _EMPTY_IF_NULL] = Field(
        default_factory=list
    )
    status: Optional[str] = None


class MemberApprovalEvent(BaseModel):
    object_kind: Optional[str] = None
    action: Optional[str] = None
    object_attributes: Optional[MemberApprovalAttributes] = None
    user_id: int
    requested_by_user_id: Optional[int] = None
    reviewed_by_user_id: Optional[int] = None
    promotion_namespace_id: Optional[int] = None
    created_at: Instant = None
    updated_at: Instant = None


TypedEvent = Union[
    MergeRequestEvent,
    NoteEvent,
    PushEvent,
    IssueEvent,
    ProjectSystemEvent,
    UserSystemEvent,
    GroupSystemEvent,
    AccessRequestEvent,
    KeyEvent,
    RepositoryUpdateEvent,
    MemberApprovalEvent,
]
