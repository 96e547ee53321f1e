from __future__ import annotations

import argparse
import asyncio

import asyncpg
from sqlalchemy.engine import make_url

from campustune_api.settings import get_settings


def _quote_identifier(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def _build_admin_url(database_url: str) -> tuple[str, str]:
    url = make_url(database_url)
    if not url.drivername.startswith("postgresql"):
        raise ValueError(f"Only PostgreSQL databases can be created, got {url.drivername!r}")
    admin_url = url.set(database="postgres", drivername="postgresql").render_as_string(
        hide_password=False
    )
    return admin_url, url.database or "campustune"


async def ensure_database(database_url: str) -> bool:
    """Create the ledger database if missing. Returns True when it was created."""
    admin_url, target_database = _build_admin_url(database_url)
    if target_database == "postgres":
        return False

    conn = await asyncpg.connect(admin_url)
    try:
        exists = await conn.fetchval(
            "SELECT 1 FROM pg_database WHERE datname = $1",
            target_database,
        )
        if exists:
            return False
        await conn.execute(f"CREATE DATABASE {_quote_identifier(target_database)}")
        return True
    finally:
        await conn.close()


async def main() -> None:
    parser = argparse.ArgumentParser(description="Create the ledger database if it is missing.")
    parser.add_argument("--database-url", help="Defaults to DATABASE_URL from settings.")
    args = parser.parse_args()

    created = await ensure_database(args.database_url or get_settings().database_url)
    print(f"ensure_database: created={created}")


if __name__ == "__main__":
    asyncio.run(main())
