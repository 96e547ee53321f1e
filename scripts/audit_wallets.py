from __future__ import annotations

import asyncio
import sys

from campustune_api.db.session import create_sessionmaker
from campustune_api.domain.wallet_audit import find_wallet_discrepancies
from campustune_api.settings import get_settings


async def _run() -> int:
    settings = get_settings()
    sessionmaker = create_sessionmaker(settings.database_url)
    async with sessionmaker() as db:
        discrepancies = await find_wallet_discrepancies(db)

    for item in discrepancies:
        print(
            f"artist={item.artist_id} wallet_total={item.wallet_total_received} "
            f"supports_total={item.supports_total} delta={item.delta}"
        )
    print(f"audit_wallets: discrepancies={len(discrepancies)}")
    return 1 if discrepancies else 0


def main() -> None:
    sys.exit(asyncio.run(_run()))


if __name__ == "__main__":
    main()
