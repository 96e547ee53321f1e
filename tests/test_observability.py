from __future__ import annotations

import json
import logging

import pytest
from httpx import AsyncClient

from campustune_api.observability.context import bind_payment_event, get_payment_event_id
from campustune_api.observability.logging import JsonFormatter, RequestContextFilter


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient) -> None:
    response = await client.get("/health", headers={"x-request-id": "req-abc.123"})

    assert response.status_code == 200
    assert response.headers["x-request-id"] == "req-abc.123"


@pytest.mark.asyncio
async def test_invalid_request_id_is_replaced(client: AsyncClient) -> None:
    response = await client.get("/health", headers={"x-request-id": "not valid!"})

    assert response.headers["x-request-id"] != "not valid!"
    assert len(response.headers["x-request-id"]) == 36


@pytest.mark.asyncio
async def test_readiness_checks_database(client: AsyncClient) -> None:
    response = await client.get("/health/ready")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_metrics_endpoint_exposes_payment_counters(client: AsyncClient) -> None:
    response = await client.get("/metrics")

    assert response.status_code == 200
    for name in (
        "ct_operation_total",
        "ct_webhook_event_total",
        "ct_tip_settlement_total",
        "ct_tip_settled_amount_cents_total",
    ):
        assert name in response.text


def test_json_formatter_redacts_signatures() -> None:
    record = logging.makeLogRecord(
        {
            "name": "campustune_api.webhooks",
            "levelname": "WARNING",
            "msg": "webhook_rejected",
            "stripe_signature": "t=1700000000,v1=abcdef",
            "artist_id": "A",
        }
    )
    with bind_payment_event("evt_123"):
        RequestContextFilter().filter(record)
    payload = json.loads(JsonFormatter().format(record))

    assert payload["msg"] == "webhook_rejected"
    assert payload["stripe_signature"] == "[redacted]"
    assert payload["artist_id"] == "A"
    assert payload["payment_event_id"] == "evt_123"


def test_payment_event_binding_is_scoped() -> None:
    with bind_payment_event("evt_scope"):
        assert get_payment_event_id() == "evt_scope"
    assert get_payment_event_id() is None
