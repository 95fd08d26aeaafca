"""Main FastAPI application for hookledger."""

from __future__ import annotations

import json

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hookledger.types import Acknowledgement, WebhookError

from .config import get_settings
from .logging_config import configure_logging, logger
from .routes import api_router


# Register global exception handlers for consistent error responses across the API
def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers for webhook rejections, 422, HTTP, and 500 errors."""

    @app.exception_handler(WebhookError)
    async def _webhook_exception_handler(request: Request, exc: WebhookError):
        logger.debug(
            "webhook rejected",
            extra={"reason": exc.message, "status": exc.status_code, "path": str(request.url)},
        )
        ack = Acknowledgement.error(exc.message, exc.summary)
        return JSONResponse(ack.model_dump(mode="json"), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.debug("validation error", extra={"errors": exc.errors(), "path": str(request.url)})
        return JSONResponse(
            {"ok": False, "error": "Invalid request", "detail": exc.errors()},
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    @app.exception_handler(HTTPException)
    async def _http_exception_handler(request: Request, exc: HTTPException):
        logger.debug(
            "http error",
            extra={"detail": exc.detail, "status": exc.status_code, "path": str(request.url)},
        )
        detail = exc.detail
        if not isinstance(detail, str):
            detail = json.dumps(detail)
        return JSONResponse({"ok": False, "error": detail}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error", extra={"path": str(request.url)})
        return JSONResponse(
            {"ok": False, "error": "Internal server error"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


# Configure logging early
_settings = get_settings()
configure_logging(_settings.log_level)

# Create FastAPI app
app = FastAPI(
    title=_settings.app_name,
    version=_settings.app_version,
    docs_url=_settings.resolved_docs_url,
    redoc_url=None,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_allow_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
register_exception_handlers(app)

# Include aggregated router
app.include_router(api_router)


@app.on_event("startup")
async def _startup() -> None:
    logger.info(
        "Starting hookledger server",
        extra={"version": _settings.app_version, "gitlab_url": _settings.gitlab_base_url},
    )
    if not _settings.gitlab_webhook_secret:
        logger.warning("GITLAB_WEBHOOK_SECRET is not set; webhook tokens are not checked")
    logger.info("hookledger server started successfully")


@app.on_event("shutdown")
async def _shutdown() -> None:
    logger.info("hookledger server shutdown complete")


__all__ = ["app"]
