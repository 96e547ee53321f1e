from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request

from campustune_api.api.schemas import WebhookAckResponse
from campustune_api.db.session import DbSessionDep
from campustune_api.domain.errors import AppError
from campustune_api.domain.payment_events import (
    CHECKOUT_SESSION_COMPLETED,
    IgnoredEvent,
    classify_event,
    verify_webhook_event,
)
from campustune_api.domain.settlement import settle_tip
from campustune_api.observability import metrics
from campustune_api.observability.context import bind_payment_event
from campustune_api.observability.ops import observe_operation
from campustune_api.settings import Settings, get_settings
from campustune_api.time import UtcNow, get_utcnow

router = APIRouter(prefix="/v1", tags=["webhooks"])

logger = logging.getLogger(__name__)


def _metric_event_type(event_type: str) -> str:
    return event_type if event_type == CHECKOUT_SESSION_COMPLETED else "other"


@router.post("/webhooks/stripe", response_model=WebhookAckResponse)
async def receive_stripe_webhook(
    request: Request,
    db: DbSessionDep,
    settings: Annotated[Settings, Depends(get_settings)],
    now: Annotated[UtcNow, Depends(get_utcnow)],
    stripe_signature: Annotated[str | None, Header(alias="stripe-signature")] = None,
) -> WebhookAckResponse:
    """Settle Stripe tip payments.

    The body is read as raw bytes and never declared as a JSON model: the
    signature covers the exact bytes Stripe sent. A 2xx tells Stripe to stop
    retrying, so only authentication failures and ledger failures return errors.
    """
    if not settings.stripe_webhook_secret:
        raise AppError(
            code="webhook_not_configured",
            message="Webhook signing secret is not configured",
            status_code=503,
        )

    payload = await request.body()
    async with observe_operation("stripe_webhook") as span:
        try:
            event = verify_webhook_event(
                payload,
                stripe_signature,
                secret=settings.stripe_webhook_secret,
                tolerance_seconds=settings.stripe_webhook_tolerance_seconds,
            )
        except AppError as exc:
            metrics.webhook_event_total.labels(event_type="unverified", outcome=exc.code).inc()
            logger.warning("stripe_webhook_rejected", extra={"code": exc.code})
            raise

        if isinstance(event, IgnoredEvent):
            metrics.webhook_event_total.labels(event_type="unparsed", outcome="ignored").inc()
            logger.warning(
                "stripe_webhook_ignored",
                extra={"reason": event.reason.value, "details": event.details or None},
            )
            return WebhookAckResponse(outcome="ignored", reason=event.reason.value)

        span.set_attribute("stripe.event_type", event.type)
        metric_type = _metric_event_type(event.type)
        with bind_payment_event(event.id):
            classified = classify_event(
                event, message_max_length=settings.tip_message_max_length
            )
            if isinstance(classified, IgnoredEvent):
                metrics.webhook_event_total.labels(
                    event_type=metric_type, outcome="ignored"
                ).inc()
                logger.info(
                    "stripe_webhook_ignored",
                    extra={
                        "event_type": event.type,
                        "reason": classified.reason.value,
                        "details": classified.details or None,
                    },
                )
                return WebhookAckResponse(outcome="ignored", reason=classified.reason.value)

            try:
                result = await settle_tip(db, classified, now=now())
            except AppError:
                metrics.webhook_event_total.labels(event_type=metric_type, outcome="failed").inc()
                raise

            metrics.webhook_event_total.labels(
                event_type=metric_type, outcome=result.outcome.value
            ).inc()
            return WebhookAckResponse(outcome=result.outcome.value)
