from __future__ import annotations

import datetime as dt
import uuid

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Index,
    BigInteger,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from campustune_api.domain.ledger_types import (
    PAYMENT_METHOD_STRIPE,
    SUPPORT_MESSAGE_MAX_LENGTH,
    SupportStatus,
)


class Base(DeclarativeBase):
    pass


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


class Support(Base):
    """One completed tip from a supporter to an artist."""

    __tablename__ = "supports"
    __table_args__ = (
        UniqueConstraint("transaction_id", name="uq_supports_transaction_id"),
        CheckConstraint("amount > 0", name="ck_supports_amount_positive"),
        CheckConstraint(
            "status in ('pending', 'completed', 'failed')",
            name="ck_supports_status",
        ),
        Index("ix_supports_artist_id_created_at", "artist_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    supporter_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    artist_id: Mapped[str] = mapped_column(String(64), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_method: Mapped[str] = mapped_column(
        String(32), nullable=False, default=PAYMENT_METHOD_STRIPE
    )
    message: Mapped[str | None] = mapped_column(
        String(SUPPORT_MESSAGE_MAX_LENGTH), nullable=True
    )
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=SupportStatus.COMPLETED.value
    )
    transaction_id: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )


class ArtistWallet(Base):
    """Running tip totals for one artist, maintained alongside each support insert."""

    __tablename__ = "artist_wallets"
    __table_args__ = (
        UniqueConstraint("artist_id", name="uq_artist_wallets_artist_id"),
        CheckConstraint("balance >= 0", name="ck_artist_wallets_balance_non_negative"),
        CheckConstraint(
            "total_received >= balance",
            name="ck_artist_wallets_total_covers_balance",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    artist_id: Mapped[str] = mapped_column(String(64), nullable=False)
    total_received: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
