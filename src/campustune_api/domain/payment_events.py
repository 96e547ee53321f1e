"""Authenticate inbound Stripe webhook deliveries and decide which ones settle a tip."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

import stripe
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from campustune_api.domain.errors import AppError
from campustune_api.domain.ledger_types import SUPPORT_MESSAGE_MAX_LENGTH, TipPayment

CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"
ARTIST_TIP_METADATA_TYPE = "artist_tip"

# Metadata keys the checkout flow attaches; anything outside this list is never read.
REQUIRED_TIP_METADATA = ("artistId", "supporterId")

_MAX_PARTY_ID_LENGTH = 64
_MAX_TRANSACTION_ID_LENGTH = 255
DEFAULT_MESSAGE_MAX_LENGTH = SUPPORT_MESSAGE_MAX_LENGTH


class WebhookEventData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    payload: dict[str, Any] = Field(alias="object")


class WebhookEvent(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    type: str
    livemode: bool = False
    data: WebhookEventData


class IgnoreReason(StrEnum):
    UNHANDLED_EVENT_TYPE = "unhandled_event_type"
    NOT_ARTIST_TIP = "not_artist_tip"
    MISSING_METADATA = "missing_metadata"
    INVALID_METADATA = "invalid_metadata"
    INVALID_AMOUNT = "invalid_amount"
    INVALID_PAYLOAD = "invalid_payload"


@dataclass(frozen=True)
class IgnoredEvent:
    reason: IgnoreReason
    details: dict[str, Any] = field(default_factory=dict)


def verify_webhook_event(
    payload: bytes,
    signature: str | None,
    *,
    secret: str,
    tolerance_seconds: int,
) -> WebhookEvent | IgnoredEvent:
    """Check the Stripe-Signature header against the exact bytes received.

    Raises AppError(invalid_signature) when the delivery is not authentic. An
    authentic body that is not an event envelope can never be settled, so it
    comes back as IgnoredEvent(invalid_payload) rather than an error.
    """
    if not signature:
        raise AppError(
            code="invalid_signature",
            message="Missing webhook signature",
            status_code=400,
        )
    try:
        body = payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise AppError(
            code="invalid_signature",
            message="Webhook body is not valid UTF-8",
            status_code=400,
        ) from exc

    try:
        stripe.WebhookSignature.verify_header(body, signature, secret, tolerance_seconds)
    except stripe.SignatureVerificationError as exc:
        raise AppError(
            code="invalid_signature",
            message="Webhook signature verification failed",
            status_code=400,
        ) from exc

    try:
        return WebhookEvent.model_validate_json(payload)
    except ValidationError as exc:
        return IgnoredEvent(
            reason=IgnoreReason.INVALID_PAYLOAD,
            details={"error_count": exc.error_count()},
        )


def _present(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def classify_event(
    event: WebhookEvent,
    *,
    message_max_length: int = DEFAULT_MESSAGE_MAX_LENGTH,
) -> TipPayment | IgnoredEvent:
    if event.type != CHECKOUT_SESSION_COMPLETED:
        return IgnoredEvent(
            reason=IgnoreReason.UNHANDLED_EVENT_TYPE,
            details={"event_type": event.type},
        )
    return classify_checkout_session(event.data.payload, message_max_length=message_max_length)


def classify_checkout_session(
    session: dict[str, Any],
    *,
    message_max_length: int = DEFAULT_MESSAGE_MAX_LENGTH,
) -> TipPayment | IgnoredEvent:
    metadata = session.get("metadata")
    if not isinstance(metadata, dict):
        metadata = {}

    if metadata.get("type") != ARTIST_TIP_METADATA_TYPE:
        return IgnoredEvent(reason=IgnoreReason.NOT_ARTIST_TIP)

    missing = [name for name in REQUIRED_TIP_METADATA if not _present(metadata.get(name))]
    if not _present(session.get("id")):
        missing.append("id")
    amount = session.get("amount_total")
    if amount is None:
        missing.append("amount_total")
    if missing:
        return IgnoredEvent(reason=IgnoreReason.MISSING_METADATA, details={"missing": missing})

    # Stored ids are the stripped values, so " A" and "A" credit the same wallet.
    artist_id: str = metadata["artistId"].strip()
    supporter_id: str = metadata["supporterId"].strip()
    transaction_id: str = session["id"].strip()
    oversized = [
        name
        for name, value, limit in (
            ("artistId", artist_id, _MAX_PARTY_ID_LENGTH),
            ("supporterId", supporter_id, _MAX_PARTY_ID_LENGTH),
            ("id", transaction_id, _MAX_TRANSACTION_ID_LENGTH),
        )
        if len(value) > limit
    ]
    if oversized:
        return IgnoredEvent(reason=IgnoreReason.INVALID_METADATA, details={"oversized": oversized})

    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        return IgnoredEvent(reason=IgnoreReason.INVALID_AMOUNT, details={"amount_total": amount})

    message = metadata.get("message")
    if not _present(message):
        message = None
    else:
        message = message[: min(message_max_length, SUPPORT_MESSAGE_MAX_LENGTH)]

    return TipPayment(
        transaction_id=transaction_id,
        artist_id=artist_id,
        supporter_id=supporter_id,
        amount=amount,
        message=message,
    )
