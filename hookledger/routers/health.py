from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from hookledger.services.event_store import get_event_store
from hookledger.types import EventStore
from server.config import Settings, get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(
    settings: Settings = Depends(get_settings),
    store: EventStore = Depends(get_event_store),
) -> Dict[str, Any]:
    """Report service health and the state of the webhook pipeline.

    Deliveries are acknowledged even when the event store is down, so
    ``persistence`` is the only place an outage shows up.
    """
    return {
        "ok": True,
        "service": "hookledger",
        "version": settings.app_version,
        "persistence": "available" if store.is_available() else "unavailable",
        "token_check": bool(settings.gitlab_webhook_secret),
    }


@router.get("/healthz")
async def healthz() -> Dict[str, str]:
    """Liveness check for load balancers; touches no collaborators."""
    return {"status": "ok"}
