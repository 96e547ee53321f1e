from __future__ import annotations

import datetime as dt

import pytest
from sqlalchemy import update

from campustune_api.db.models import ArtistWallet
from campustune_api.domain import ledger
from campustune_api.domain.ledger_types import TipPayment
from campustune_api.domain.settlement import settle_tip
from campustune_api.domain.wallet_audit import WalletDiscrepancy, find_wallet_discrepancies

NOW = dt.datetime(2026, 10, 19, 8, 30, tzinfo=dt.UTC)


async def _settle(db_sessionmaker, transaction_id: str, artist_id: str, amount: int) -> None:
    async with db_sessionmaker() as db:
        await settle_tip(
            db,
            TipPayment(
                transaction_id=transaction_id,
                artist_id=artist_id,
                supporter_id="S1",
                amount=amount,
            ),
            now=NOW,
        )


@pytest.mark.asyncio
async def test_settled_ledger_has_no_discrepancies(db_sessionmaker) -> None:
    await _settle(db_sessionmaker, "tx_1", "A", 500)
    await _settle(db_sessionmaker, "tx_2", "B", 200)

    async with db_sessionmaker() as db:
        assert await find_wallet_discrepancies(db) == []


@pytest.mark.asyncio
async def test_audit_reports_drifted_wallet(db_sessionmaker) -> None:
    await _settle(db_sessionmaker, "tx_1", "A", 500)
    await _settle(db_sessionmaker, "tx_2", "B", 200)
    async with db_sessionmaker() as db:
        await db.execute(
            update(ArtistWallet)
            .where(ArtistWallet.artist_id == "B")
            .values(total_received=1200, balance=1200)
        )
        await db.commit()

    async with db_sessionmaker() as db:
        discrepancies = await find_wallet_discrepancies(db)

    assert discrepancies == [
        WalletDiscrepancy(artist_id="B", wallet_total_received=1200, supports_total=200)
    ]
    assert discrepancies[0].delta == 1000


@pytest.mark.asyncio
async def test_audit_reports_supports_without_wallet(db_sessionmaker) -> None:
    async with db_sessionmaker() as db:
        await ledger.insert_support(
            db,
            tip=TipPayment(transaction_id="tx_orphan", artist_id="C", supporter_id="S9", amount=300),
            now=NOW,
        )
        await db.commit()

    async with db_sessionmaker() as db:
        discrepancies = await find_wallet_discrepancies(db)

    assert discrepancies == [
        WalletDiscrepancy(artist_id="C", wallet_total_received=None, supports_total=300)
    ]
    assert discrepancies[0].delta == -300
