"""Fixtures against real services; each skips when its URL is not exported."""

import asyncio
import os
import time

import psycopg
import pytest
import pytest_asyncio
from redis.asyncio import Redis

from verified_auth.infrastructure.db import migrate
from verified_auth.infrastructure.db.pool import close_pool, open_pool

REDIS_URL = os.environ.get("REDIS_URL")
DATABASE_URL = os.environ.get("DATABASE_URL")

TABLES = "outbox, provider_identity, auth_identity"


@pytest_asyncio.fixture
async def redis_client():
    if not REDIS_URL:
        pytest.skip("REDIS_URL not set")
    r = Redis.from_url(REDIS_URL, encoding="utf-8", decode_responses=True)
    try:
        yield r
    finally:
        await r.aclose()


async def flush_prefix(redis: Redis, prefix: str) -> None:
    keys = await redis.keys(f"{prefix}*")
    if keys:
        await redis.delete(*keys)


async def _wait_for_postgres(dsn: str, timeout: float = 30.0) -> None:
    deadline = time.monotonic() + timeout
    while True:
        try:
            conn = await psycopg.AsyncConnection.connect(dsn, connect_timeout=2)
        except psycopg.OperationalError:
            if time.monotonic() > deadline:
                raise
            await asyncio.sleep(0.5)
        else:
            await conn.close()
            return


@pytest_asyncio.fixture
async def pool():
    """Migrated database, emptied before each test, behind the app's own pool."""
    if not DATABASE_URL:
        pytest.skip("DATABASE_URL not set")
    await _wait_for_postgres(DATABASE_URL)
    assert await asyncio.to_thread(migrate.cmd_up, DATABASE_URL) == 0

    p = await open_pool()
    async with p.connection() as conn:
        await conn.execute(f"TRUNCATE {TABLES} RESTART IDENTITY")
    try:
        yield p
    finally:
        await close_pool()
