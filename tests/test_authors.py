from __future__ import annotations

from typing import Optional

import pytest

from hookledger.adapters.authors import (
    DEFAULT_AUTHOR_NAME,
    DEFAULT_AUTHOR_USERNAME,
    resolve_author,
)
from hookledger.types import GitLabUser

AUTHOR = GitLabUser(id=7, name="Ada Lovelace", username="ada")
EVENT_USER = GitLabUser(id=9, name="Grace Hopper", username="grace")


@pytest.mark.parametrize(
    "primary, secondary, name, username",
    [
        (AUTHOR, EVENT_USER, "Ada Lovelace", "ada"),
        (AUTHOR, None, "Ada Lovelace", "ada"),
        (None, EVENT_USER, "Grace Hopper", "grace"),
        (None, None, DEFAULT_AUTHOR_NAME, DEFAULT_AUTHOR_USERNAME),
        (GitLabUser(id=0, name="Ghost", username="ghost"), EVENT_USER, "Grace Hopper", "grace"),
        (GitLabUser(id=-1, name="Ghost", username="ghost"), None, DEFAULT_AUTHOR_NAME, DEFAULT_AUTHOR_USERNAME),
        (GitLabUser(id=7, name="", username="ada"), EVENT_USER, "Grace Hopper", "ada"),
        (GitLabUser(id=7, name="Ada Lovelace", username=""), GitLabUser(id=0, name="x", username="y"), "Ada Lovelace", DEFAULT_AUTHOR_USERNAME),
    ],
)
def test_resolve_author(
    primary: Optional[GitLabUser],
    secondary: Optional[GitLabUser],
    name: str,
    username: str,
) -> None:
    resolved = resolve_author(primary, secondary)
    assert resolved.name == name
    assert resolved.username == username


def test_resolve_author_ignores_missing_id() -> None:
    resolved = resolve_author(GitLabUser(name="No Id", username="noid"), EVENT_USER)
    assert resolved.name == "Grace Hopper"
    assert resolved.username == "grace"
