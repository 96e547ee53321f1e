from __future__ import annotations

import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from campustune_api.db.models import Base
from campustune_api.db.session import create_sessionmaker
from campustune_api.main import create_app
from campustune_api.settings import get_settings

from stripe_events import WEBHOOK_SECRET


def _get_test_database_url(tmp_path) -> str:
    explicit = os.environ.get("DATABASE_URL_TEST") or os.environ.get("TEST_DATABASE_URL")
    if explicit:
        return explicit
    return f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}"


@pytest.fixture(autouse=True)
def test_settings(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", _get_test_database_url(tmp_path))
    monkeypatch.setenv("STRIPE_WEBHOOK_SECRET", WEBHOOK_SECRET)
    monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)
    monkeypatch.delenv("STRIPE_PUBLISHABLE_KEY", raising=False)
    get_settings.cache_clear()
    create_sessionmaker.cache_clear()
    yield get_settings()
    get_settings.cache_clear()
    create_sessionmaker.cache_clear()


@pytest_asyncio.fixture
async def db_sessionmaker(test_settings):
    sessionmaker = create_sessionmaker(test_settings.database_url)
    engine = sessionmaker.kw["bind"]
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield sessionmaker
    await engine.dispose()


@pytest.fixture
def app(db_sessionmaker):
    return create_app()


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
