from __future__ import annotations

import datetime as dt
import uuid
from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "ok"


WebhookOutcome = Literal["settled", "duplicate", "ignored"]


class WebhookAckResponse(BaseModel):
    received: bool = True
    outcome: WebhookOutcome
    reason: str | None = None


class SupportPublic(BaseModel):
    id: uuid.UUID
    supporter_id: str
    artist_id: str
    amount: int
    amount_display: str
    payment_method: str
    message: str | None = None
    status: str
    transaction_id: str
    created_at: dt.datetime


class SupportHistoryResponse(BaseModel):
    artist_id: str
    supports: list[SupportPublic]


class WalletPublic(BaseModel):
    artist_id: str
    total_received: int
    balance: int
    total_received_display: str
    balance_display: str
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None


class SupporterCountResponse(BaseModel):
    artist_id: str
    count: int


class CreateTipCheckoutRequest(BaseModel):
    supporter_id: str = Field(min_length=1, max_length=64)
    amount_cents: int
    message: str | None = None


class TipCheckoutResponse(BaseModel):
    url: str
    session_id: str


class PaymentsConfigResponse(BaseModel):
    publishable_key: str
