from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Annotated, Protocol

import httpx
from fastapi import Depends, Request

from campustune_api.domain.errors import AppError
from campustune_api.domain.payment_events import ARTIST_TIP_METADATA_TYPE
from campustune_api.settings import Settings

logger = logging.getLogger(__name__)

_DESCRIPTION_PREVIEW_LENGTH = 100


@dataclass(frozen=True)
class CheckoutSession:
    session_id: str
    url: str


class TipCheckoutProvider(Protocol):
    async def create_tip_checkout_session(
        self,
        *,
        artist_id: str,
        supporter_id: str,
        amount: int,
        currency: str,
        message: str | None,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        ...


def build_tip_checkout_form(
    *,
    artist_id: str,
    supporter_id: str,
    amount: int,
    currency: str,
    message: str | None,
    success_url: str,
    cancel_url: str,
) -> dict[str, str]:
    """Form fields for POST /v1/checkout/sessions.

    The metadata block is what the webhook classifier later trusts, so its keys
    must match REQUIRED_TIP_METADATA.
    """
    if message:
        description = f'Message: "{message[:_DESCRIPTION_PREVIEW_LENGTH]}"'
    else:
        description = "Support this artist"
    return {
        "mode": "payment",
        "payment_method_types[0]": "card",
        "line_items[0][quantity]": "1",
        "line_items[0][price_data][currency]": currency,
        "line_items[0][price_data][unit_amount]": str(amount),
        "line_items[0][price_data][product_data][name]": "Artist tip",
        "line_items[0][price_data][product_data][description]": description,
        "success_url": success_url,
        "cancel_url": cancel_url,
        "metadata[type]": ARTIST_TIP_METADATA_TYPE,
        "metadata[artistId]": artist_id,
        "metadata[supporterId]": supporter_id,
        "metadata[message]": message or "",
    }


class StripeCheckoutClient:
    """Owns one pooled HTTP client for the Stripe REST API; close it on shutdown."""

    def __init__(
        self,
        secret_key: str,
        *,
        base_url: str = "https://api.stripe.com",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            auth=(secret_key, ""),
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> StripeCheckoutClient | None:
        if not settings.checkout_configured:
            return None
        return cls(
            settings.stripe_secret_key,
            base_url=str(settings.stripe_api_base_url).rstrip("/"),
            timeout=settings.stripe_timeout_seconds,
        )

    async def create_tip_checkout_session(
        self,
        *,
        artist_id: str,
        supporter_id: str,
        amount: int,
        currency: str,
        message: str | None,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        form = build_tip_checkout_form(
            artist_id=artist_id,
            supporter_id=supporter_id,
            amount=amount,
            currency=currency,
            message=message,
            success_url=success_url,
            cancel_url=cancel_url,
        )
        try:
            response = await self._client.post("/v1/checkout/sessions", data=form)
            response.raise_for_status()
            body = response.json()
            return CheckoutSession(session_id=body["id"], url=body["url"])
        except (httpx.HTTPError, ValueError, KeyError) as exc:
            logger.warning(
                "checkout_session_create_failed",
                exc_info=exc,
                extra={"artist_id": artist_id, "amount": amount},
            )
            raise AppError(
                code="payment_provider_error",
                message="Failed to create payment session",
                status_code=502,
            ) from exc

    async def aclose(self) -> None:
        await self._client.aclose()


def get_checkout_provider(request: Request) -> TipCheckoutProvider:
    provider = getattr(request.app.state, "checkout_provider", None)
    if provider is None:
        raise AppError(
            code="payments_not_configured",
            message="Payment system is not configured",
            status_code=503,
        )
    return provider


CheckoutProviderDep = Annotated[TipCheckoutProvider, Depends(get_checkout_provider)]
