"""Router aggregation for hookledger."""

from __future__ import annotations

from fastapi import APIRouter

from hookledger.routers import health as health_router_module
from hookledger.routers import webhooks as webhooks_router_module

# Create aggregated router
api_router = APIRouter(prefix="/api/v1")

# Include routers
api_router.include_router(health_router_module.router)
api_router.include_router(webhooks_router_module.router)

__all__ = ["api_router"]
