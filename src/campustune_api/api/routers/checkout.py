from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from campustune_api.api.schemas import (
    CreateTipCheckoutRequest,
    PaymentsConfigResponse,
    TipCheckoutResponse,
)
from campustune_api.domain.checkout import CheckoutProviderDep
from campustune_api.domain.errors import AppError
from campustune_api.observability.ops import observe_operation
from campustune_api.settings import Settings, get_settings

router = APIRouter(prefix="/v1", tags=["checkout"])


@router.get("/payments/config", response_model=PaymentsConfigResponse)
async def get_payments_config(
    settings: Annotated[Settings, Depends(get_settings)],
) -> PaymentsConfigResponse:
    if not settings.checkout_configured:
        raise AppError(
            code="payments_not_configured",
            message="Payment system is not configured",
            status_code=503,
        )
    return PaymentsConfigResponse(publishable_key=settings.stripe_publishable_key)


@router.post("/artists/{artist_id}/tips/checkout", response_model=TipCheckoutResponse)
async def create_tip_checkout(
    artist_id: str,
    payload: CreateTipCheckoutRequest,
    provider: CheckoutProviderDep,
    settings: Annotated[Settings, Depends(get_settings)],
) -> TipCheckoutResponse:
    if not (settings.tip_min_amount_cents <= payload.amount_cents <= settings.tip_max_amount_cents):
        raise AppError(
            code="invalid_tip_amount",
            message="Tip amount is outside the allowed range",
            status_code=400,
            details={
                "amount_cents": payload.amount_cents,
                "min_amount_cents": settings.tip_min_amount_cents,
                "max_amount_cents": settings.tip_max_amount_cents,
            },
        )
    if payload.message is not None and len(payload.message) > settings.tip_message_max_length:
        raise AppError(
            code="message_too_long",
            message="Support message is too long",
            status_code=400,
            details={"max_length": settings.tip_message_max_length},
        )
    if not artist_id.strip() or len(artist_id) > 64:
        raise AppError(code="invalid_artist_id", message="Invalid artist id", status_code=400)

    base_url = settings.app_base_url.rstrip("/")
    async with observe_operation("tip_checkout_create", attributes={"tip.artist_id": artist_id}):
        session = await provider.create_tip_checkout_session(
            artist_id=artist_id,
            supporter_id=payload.supporter_id,
            amount=payload.amount_cents,
            currency=settings.tip_currency,
            message=payload.message or None,
            success_url=f"{base_url}/artist/{artist_id}?tip=success",
            cancel_url=f"{base_url}/artist/{artist_id}?tip=cancelled",
        )
    return TipCheckoutResponse(url=session.url, session_id=session.session_id)
