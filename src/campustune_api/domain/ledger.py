from __future__ import annotations

import datetime as dt
import uuid
from collections.abc import Sequence

from sqlalchemy import desc, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from campustune_api.db.models import ArtistWallet, Support
from campustune_api.domain.ledger_types import PAYMENT_METHOD_STRIPE, SupportStatus, TipPayment

TRANSACTION_ID_CONSTRAINT = "uq_supports_transaction_id"
# SQLite reports the column rather than the constraint name.
_TRANSACTION_ID_CONFLICT_MARKERS = (TRANSACTION_ID_CONSTRAINT, "supports.transaction_id")


def _dialect_insert(db: AsyncSession):
    if db.get_bind().dialect.name == "sqlite":
        return sqlite.insert
    return postgresql.insert


async def find_support_by_transaction_id(
    db: AsyncSession, transaction_id: str
) -> uuid.UUID | None:
    return await db.scalar(
        select(Support.id).where(Support.transaction_id == transaction_id).limit(1)
    )


async def insert_support(db: AsyncSession, *, tip: TipPayment, now: dt.datetime) -> Support:
    support = Support(
        supporter_id=tip.supporter_id,
        artist_id=tip.artist_id,
        amount=tip.amount,
        payment_method=PAYMENT_METHOD_STRIPE,
        message=tip.message,
        status=SupportStatus.COMPLETED.value,
        transaction_id=tip.transaction_id,
        created_at=now,
    )
    db.add(support)
    # Flush so a duplicate transaction id fails here, before the wallet is touched.
    await db.flush()
    return support


async def credit_wallet(
    db: AsyncSession, *, artist_id: str, amount: int, now: dt.datetime
) -> None:
    insert = _dialect_insert(db)
    stmt = (
        insert(ArtistWallet)
        .values(
            id=uuid.uuid4(),
            artist_id=artist_id,
            total_received=amount,
            balance=amount,
            created_at=now,
            updated_at=now,
        )
        .on_conflict_do_update(
            index_elements=[ArtistWallet.artist_id],
            set_={
                "total_received": ArtistWallet.total_received + amount,
                "balance": ArtistWallet.balance + amount,
                "updated_at": now,
            },
        )
    )
    await db.execute(stmt)


def is_transaction_id_conflict(exc: IntegrityError) -> bool:
    text = str(exc.orig)
    return any(marker in text for marker in _TRANSACTION_ID_CONFLICT_MARKERS)


async def list_artist_supports(
    db: AsyncSession, artist_id: str, *, limit: int
) -> Sequence[Support]:
    query = (
        select(Support)
        .where(Support.artist_id == artist_id)
        .order_by(desc(Support.created_at), desc(Support.id))
        .limit(limit)
    )
    return (await db.scalars(query)).all()


async def get_artist_wallet(db: AsyncSession, artist_id: str) -> ArtistWallet | None:
    return await db.scalar(select(ArtistWallet).where(ArtistWallet.artist_id == artist_id))


async def count_artist_supporters(db: AsyncSession, artist_id: str) -> int:
    count = await db.scalar(
        select(func.count(func.distinct(Support.supporter_id))).where(
            Support.artist_id == artist_id,
            Support.status == SupportStatus.COMPLETED.value,
        )
    )
    return int(count or 0)
