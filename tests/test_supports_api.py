from __future__ import annotations

import datetime as dt

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from campustune_api.db.models import ArtistWallet
from campustune_api.domain.ledger_types import TipPayment, format_minor_units
from campustune_api.domain.settlement import settle_tip

START = dt.datetime(2026, 10, 1, 9, 0, tzinfo=dt.UTC)


async def seed_tips(db_sessionmaker, tips: list[TipPayment]) -> None:
    for index, tip in enumerate(tips):
        async with db_sessionmaker() as session:
            await settle_tip(session, tip, now=START + dt.timedelta(minutes=index))


@pytest.mark.asyncio
async def test_support_history_is_newest_first(client: AsyncClient, db_sessionmaker) -> None:
    await seed_tips(
        db_sessionmaker,
        [
            TipPayment(transaction_id="tx_1", artist_id="A", supporter_id="S1", amount=500),
            TipPayment(
                transaction_id="tx_2",
                artist_id="A",
                supporter_id="S2",
                amount=1250,
                message="see you at the show",
            ),
            TipPayment(transaction_id="tx_3", artist_id="B", supporter_id="S1", amount=100),
        ],
    )

    response = await client.get("/v1/artists/A/supports")

    assert response.status_code == 200
    payload = response.json()
    assert payload["artist_id"] == "A"
    assert [item["transaction_id"] for item in payload["supports"]] == ["tx_2", "tx_1"]
    newest = payload["supports"][0]
    assert newest["amount"] == 1250
    assert newest["amount_display"] == "$12.50"
    assert newest["message"] == "see you at the show"
    assert newest["status"] == "completed"
    assert newest["payment_method"] == "stripe"


@pytest.mark.asyncio
async def test_support_history_respects_limit(client: AsyncClient, db_sessionmaker) -> None:
    await seed_tips(
        db_sessionmaker,
        [
            TipPayment(transaction_id=f"tx_{i}", artist_id="A", supporter_id="S1", amount=100)
            for i in range(4)
        ],
    )

    response = await client.get("/v1/artists/A/supports", params={"limit": 2})

    assert response.status_code == 200
    assert [item["transaction_id"] for item in response.json()["supports"]] == ["tx_3", "tx_2"]


@pytest.mark.asyncio
async def test_wallet_read_for_new_artist_does_not_create_row(
    client: AsyncClient, db_sessionmaker
) -> None:
    response = await client.get("/v1/artists/newcomer/wallet")

    assert response.status_code == 200
    assert response.json() == {
        "artist_id": "newcomer",
        "total_received": 0,
        "balance": 0,
        "total_received_display": "$0.00",
        "balance_display": "$0.00",
        "created_at": None,
        "updated_at": None,
    }
    async with db_sessionmaker() as session:
        assert await session.scalar(select(func.count()).select_from(ArtistWallet)) == 0


@pytest.mark.asyncio
async def test_wallet_read_shows_display_amounts(client: AsyncClient, db_sessionmaker) -> None:
    await seed_tips(
        db_sessionmaker,
        [TipPayment(transaction_id="tx_1", artist_id="A", supporter_id="S1", amount=2005)],
    )

    payload = (await client.get("/v1/artists/A/wallet")).json()

    assert payload["total_received"] == 2005
    assert payload["total_received_display"] == "$20.05"
    assert payload["balance_display"] == "$20.05"


@pytest.mark.asyncio
async def test_supporter_count_counts_distinct_supporters(
    client: AsyncClient, db_sessionmaker
) -> None:
    await seed_tips(
        db_sessionmaker,
        [
            TipPayment(transaction_id="tx_1", artist_id="A", supporter_id="S1", amount=100),
            TipPayment(transaction_id="tx_2", artist_id="A", supporter_id="S1", amount=100),
            TipPayment(transaction_id="tx_3", artist_id="A", supporter_id="S2", amount=100),
            TipPayment(transaction_id="tx_4", artist_id="B", supporter_id="S3", amount=100),
        ],
    )

    response = await client.get("/v1/artists/A/supporter-count")

    assert response.status_code == 200
    assert response.json() == {"artist_id": "A", "count": 2}


@pytest.mark.parametrize(
    ("amount", "expected"),
    [(0, "$0.00"), (5, "$0.05"), (500, "$5.00"), (123456, "$1234.56")],
)
def test_format_minor_units(amount: int, expected: str) -> None:
    assert format_minor_units(amount) == expected
