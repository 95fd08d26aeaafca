from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request

from hookledger.adapters.gitlab import GitLabAdapter
from hookledger.services.event_store import get_event_store
from hookledger.types import Delivery, EventStore, InputError, UnauthorizedDelivery
from server.config import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["webhooks"])


def get_gitlab_adapter(
    settings: Settings = Depends(get_settings),
    store: EventStore = Depends(get_event_store),
) -> GitLabAdapter:
    return GitLabAdapter(webhook_secret=settings.gitlab_webhook_secret, store=store)


def _media_type(content_type: Optional[str]) -> Optional[str]:
    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip().lower()


@router.post("/webhooks/gitlab")
async def gitlab_webhook(
    request: Request,
    adapter: GitLabAdapter = Depends(get_gitlab_adapter),
) -> dict[str, Any]:
    """GitLab webhook and system hook receiver.

    - Reads the raw body once and wraps it with the headers in a `Delivery`
    - Verifies `X-Gitlab-Token` against the configured secret, if any
    - Classifies, parses, projects and stores the event via the adapter
    - Returns `{status, message, event}`; rejections are rendered by the
      application's `WebhookError` handler
    """
    delivery = Delivery.from_headers(request.headers, await request.body())

    logger.info(
        "GitLab webhook received",
        extra={
            "event": delivery.event_type,
            "source": delivery.instance,
            "user_agent": delivery.user_agent,
        },
    )

    try:
        adapter.verify_request(delivery.token)
    except PermissionError as e:
        logger.warning("GitLab webhook token verification failed")
        raise UnauthorizedDelivery(str(e)) from e

    media_type = _media_type(delivery.header("content-type"))
    if media_type is not None and media_type != "application/json":
        raise InputError(
            "Invalid Content-Type, expected application/json",
            summary={"content_type": media_type},
        )

    outcome = adapter.handle(delivery)
    return outcome.acknowledgement.model_dump(mode="json")
