"""
Database module: pool settings per environment and the request session.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core import database
from app.core.config import settings


def test_production_pool_uses_configured_limits():
    options = database.pool_options("production")

    assert options["pool_size"] == settings.DB_POOL_SIZE
    assert options["max_overflow"] == settings.DB_MAX_OVERFLOW
    assert options["pool_recycle"] == settings.DB_POOL_RECYCLE
    assert options["pool_pre_ping"] is True


def test_development_pool_is_small():
    options = database.pool_options("development")

    assert options["pool_size"] == database.DEV_POOL_SIZE
    assert "pool_recycle" not in options


@pytest.mark.asyncio
async def test_get_db_never_commits(monkeypatch):
    session = AsyncMock()
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=session)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    monkeypatch.setattr(database, "AsyncSessionLocal", factory)

    sessions = database.get_db()
    assert await sessions.__anext__() is session
    with pytest.raises(StopAsyncIteration):
        await sessions.__anext__()

    session.commit.assert_not_awaited()
    factory.return_value.__aexit__.assert_awaited_once()
