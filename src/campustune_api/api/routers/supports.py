from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from campustune_api.api.schemas import (
    SupportHistoryResponse,
    SupportPublic,
    SupporterCountResponse,
    WalletPublic,
)
from campustune_api.db.models import Support
from campustune_api.db.session import DbSessionDep
from campustune_api.domain import ledger
from campustune_api.domain.ledger_types import format_minor_units
from campustune_api.settings import Settings, get_settings

router = APIRouter(prefix="/v1", tags=["supports"])


def _support_public(support: Support) -> SupportPublic:
    return SupportPublic(
        id=support.id,
        supporter_id=support.supporter_id,
        artist_id=support.artist_id,
        amount=support.amount,
        amount_display=format_minor_units(support.amount),
        payment_method=support.payment_method,
        message=support.message,
        status=support.status,
        transaction_id=support.transaction_id,
        created_at=support.created_at,
    )


@router.get("/artists/{artist_id}/supports", response_model=SupportHistoryResponse)
async def get_artist_supports(
    artist_id: str,
    db: DbSessionDep,
    settings: Annotated[Settings, Depends(get_settings)],
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> SupportHistoryResponse:
    """Support history for an artist, newest first."""
    capped = min(limit or settings.support_history_limit, settings.support_history_limit)
    supports = await ledger.list_artist_supports(db, artist_id, limit=capped)
    return SupportHistoryResponse(
        artist_id=artist_id,
        supports=[_support_public(support) for support in supports],
    )


@router.get("/artists/{artist_id}/wallet", response_model=WalletPublic)
async def get_artist_wallet(artist_id: str, db: DbSessionDep) -> WalletPublic:
    # Reads never create wallet rows; settlement is the only writer.
    wallet = await ledger.get_artist_wallet(db, artist_id)
    if wallet is None:
        return WalletPublic(
            artist_id=artist_id,
            total_received=0,
            balance=0,
            total_received_display=format_minor_units(0),
            balance_display=format_minor_units(0),
        )
    return WalletPublic(
        artist_id=wallet.artist_id,
        total_received=wallet.total_received,
        balance=wallet.balance,
        total_received_display=format_minor_units(wallet.total_received),
        balance_display=format_minor_units(wallet.balance),
        created_at=wallet.created_at,
        updated_at=wallet.updated_at,
    )


@router.get("/artists/{artist_id}/supporter-count", response_model=SupporterCountResponse)
async def get_supporter_count(artist_id: str, db: DbSessionDep) -> SupporterCountResponse:
    count = await ledger.count_artist_supporters(db, artist_id)
    return SupporterCountResponse(artist_id=artist_id, count=count)
