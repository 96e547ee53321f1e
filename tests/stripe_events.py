from __future__ import annotations

import hashlib
import hmac
import json
import time
import uuid
from typing import Any

WEBHOOK_SECRET = "whsec_test_campustune"


def checkout_completed_event(
    *,
    session_id: str = "cs_test_123",
    artist_id: str | None = "artist-a",
    supporter_id: str | None = "supporter-1",
    amount_total: Any = 500,
    message: str | None = "",
    tip_type: str | None = "artist_tip",
    event_type: str = "checkout.session.completed",
    event_id: str | None = None,
) -> dict[str, Any]:
    metadata: dict[str, Any] = {}
    for key, value in (
        ("type", tip_type),
        ("artistId", artist_id),
        ("supporterId", supporter_id),
        ("message", message),
    ):
        if value is not None:
            metadata[key] = value
    return {
        "id": event_id or f"evt_{uuid.uuid4().hex}",
        "object": "event",
        "type": event_type,
        "livemode": False,
        "data": {
            "object": {
                "id": session_id,
                "object": "checkout.session",
                "amount_total": amount_total,
                "currency": "usd",
                "payment_status": "paid",
                "metadata": metadata,
            }
        },
    }


def encode_event(event: dict[str, Any]) -> bytes:
    return json.dumps(event, separators=(",", ":")).encode("utf-8")


def sign_payload(
    payload: bytes, *, secret: str = WEBHOOK_SECRET, timestamp: int | None = None
) -> str:
    ts = int(time.time()) if timestamp is None else timestamp
    signed = f"{ts}.".encode("utf-8") + payload
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"
