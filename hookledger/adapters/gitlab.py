from __future__ import annotations

import hmac
import logging
from typing import Any, Dict, Optional

from hookledger.adapters.classifier import classify
from hookledger.adapters.projection import project
from hookledger.adapters.registry import ParserRegistry
from hookledger.types import (
    Acknowledgement,
    CollaboratorUnavailable,
    Delivery,
    Dialect,
    DispatchOutcome,
    DispatchState,
    EventClassification,
    EventStore,
    NormalizedRecord,
    WebhookError,
)

logger = logging.getLogger(__name__)


class GitLabAdapter:
    """GitLab webhook adapter: verification, dispatch and persistence.

    ``handle`` walks a delivery through classification, parsing and
    projection, hands the resulting record to the event store and builds the
    acknowledgement. Rejections surface as ``WebhookError``; everything else,
    including unsupported event kinds and store outages, is acknowledged as
    success.
    """

    def __init__(
        self,
        webhook_secret: Optional[str] = None,
        store: Optional[EventStore] = None,
    ) -> None:
        self.webhook_secret = webhook_secret or None
        self.store = store

    # Webhook helpers
    def verify_request(self, token: Optional[str]) -> None:
        """Compare the ``X-Gitlab-Token`` header with the configured secret."""
        if not self.webhook_secret:
            return
        provided = token or ""
        if not hmac.compare_digest(provided.encode(), self.webhook_secret.encode()):
            raise PermissionError("Invalid GitLab webhook token")

    def handle(self, delivery: Delivery) -> DispatchOutcome:
        """Process one delivery end to end.

        Raises:
            InputError: missing ``X-Gitlab-Event`` header or non-JSON body.
            PayloadFormatError: the body does not fit the event's structure.
        """
        state = DispatchState.RECEIVED
        try:
            classification = classify(delivery)
            state = DispatchState.CLASSIFIED
            logger.info(
                "Processing GitLab webhook",
                extra={
                    "event_type": delivery.event_type,
                    "category": classification.category.value,
                    "dialect": classification.dialect.value,
                },
            )

            if not classification.supported:
                return self._unsupported(classification)

            event = ParserRegistry.parse(classification, delivery.document)
            state = DispatchState.PARSED
            projected = project(event, classification, delivery.raw_text)
            state = DispatchState.PROJECTED
        except WebhookError as exc:
            logger.warning(
                "Rejected GitLab webhook",
                extra={
                    "state": DispatchState.REJECTED.value,
                    "failed_after": state.value,
                    "reason": exc.message,
                },
            )
            raise

        persisted = self._persist(projected.record)
        return DispatchOutcome(
            classification=classification,
            acknowledgement=Acknowledgement.success(projected.message, projected.summary),
            record=projected.record,
            persisted=persisted,
        )

    def _unsupported(self, classification: EventClassification) -> DispatchOutcome:
        summary: Dict[str, Any]
        if classification.dialect is Dialect.HOOK:
            message = "Event received but not processed"
            summary = {"event": classification.name}
        elif classification.dialect is Dialect.SYSTEM_HOOK:
            message = "New format system event received but not processed"
            summary = {
                "object_kind": classification.name,
                "action": classification.action,
            }
        else:
            message = "System hook event received but not processed"
            summary = {"event_name": classification.name}

        logger.info(
            "Unsupported GitLab event",
            extra={"dialect": classification.dialect.value, "event": classification.name},
        )
        return DispatchOutcome(
            classification=classification,
            acknowledgement=Acknowledgement.success(message, summary),
        )

    def _persist(self, record: NormalizedRecord) -> bool:
        if self.store is None:
            logger.warning(
                "No event store configured", extra={"collection": record.collection}
            )
            return False
        if not self.store.is_available():
            logger.warning(
                "Event store unavailable, record not persisted",
                extra={"collection": record.collection},
            )
            return False
        try:
            self.store.save(record)
        except CollaboratorUnavailable as e:
            logger.warning(
                "Record not persisted",
                extra={"collection": record.collection, "error": str(e)},
            )
            return False
        except Exception:
            logger.exception(
                "Failed to save GitLab event record",
                extra={"collection": record.collection},
            )
            return False
        logger.info("GitLab event record saved", extra={"collection": record.collection})
        return True
