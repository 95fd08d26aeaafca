from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from hookledger.types import GitLabUser

logger = logging.getLogger(__name__)

DEFAULT_AUTHOR_NAME = "Unknown Author"
DEFAULT_AUTHOR_USERNAME = "unknown"


@dataclass(frozen=True)
class ResolvedAuthor:
    name: str
    username: str


def _usable(user: Optional[GitLabUser], attribute: str) -> Optional[str]:
    if user is None:
        return None
    user_id = user.id
    if not isinstance(user_id, int) or isinstance(user_id, bool) or user_id <= 0:
        return None
    value = getattr(user, attribute)
    return value or None


def _pick(
    primary: Optional[GitLabUser],
    secondary: Optional[GitLabUser],
    attribute: str,
    default: str,
) -> str:
    value = _usable(primary, attribute)
    if value is not None:
        return value
    value = _usable(secondary, attribute)
    if value is not None:
        logger.info(
            "Using event user as author fallback",
            extra={"attribute": attribute, "event_user_id": secondary.id},
        )
        return value
    logger.warning(
        "Both author and event user are invalid, using default",
        extra={
            "attribute": attribute,
            "author_id": primary.id if primary else None,
            "event_user_id": secondary.id if secondary else None,
        },
    )
    return default


def resolve_author(
    primary: Optional[GitLabUser], secondary: Optional[GitLabUser]
) -> ResolvedAuthor:
    """Pick the display name and username for a merge request.

    Each attribute is resolved on its own: the recorded author's value wins
    when the author has a positive id and the value is non-empty, then the
    user who triggered the delivery under the same rule, then a fixed default.
    The two attributes may therefore come from different users.
    """
    return ResolvedAuthor(
        name=_pick(primary, secondary, "name", DEFAULT_AUTHOR_NAME),
        username=_pick(primary, secondary, "username", DEFAULT_AUTHOR_USERNAME),
    )
