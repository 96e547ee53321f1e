from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from campustune_api.db.models import ArtistWallet, Support
from campustune_api.domain.ledger_types import SupportStatus


@dataclass(frozen=True)
class WalletDiscrepancy:
    artist_id: str
    wallet_total_received: int | None
    supports_total: int

    @property
    def delta(self) -> int:
        return (self.wallet_total_received or 0) - self.supports_total


async def find_wallet_discrepancies(db: AsyncSession) -> list[WalletDiscrepancy]:
    """Compare each wallet's total_received against the completed supports behind it."""
    support_totals = (
        select(
            Support.artist_id.label("artist_id"),
            func.sum(Support.amount).label("supports_total"),
        )
        .where(Support.status == SupportStatus.COMPLETED.value)
        .group_by(Support.artist_id)
    )
    totals = {row.artist_id: int(row.supports_total) for row in await db.execute(support_totals)}
    wallets = {
        row.artist_id: int(row.total_received)
        for row in await db.execute(select(ArtistWallet.artist_id, ArtistWallet.total_received))
    }

    discrepancies: list[WalletDiscrepancy] = []
    for artist_id in sorted(totals.keys() | wallets.keys()):
        wallet_total = wallets.get(artist_id)
        supports_total = totals.get(artist_id, 0)
        if wallet_total != supports_total:
            discrepancies.append(
                WalletDiscrepancy(
                    artist_id=artist_id,
                    wallet_total_received=wallet_total,
                    supports_total=supports_total,
                )
            )
    return discrepancies
