from __future__ import annotations

import logging
from typing import Optional

from psycopg_pool import AsyncConnectionPool

from verified_auth.settings import Settings, get_settings

logger = logging.getLogger(__name__)

_pool: Optional[AsyncConnectionPool] = None


def with_connect_timeout(dsn: str, seconds: int) -> str:
    """Append connect_timeout to a URL-style DSN unless it already has one."""
    if "connect_timeout=" in dsn:
        return dsn
    sep = "&" if "?" in dsn else "?"
    return f"{dsn}{sep}connect_timeout={seconds}"


def get_pool(settings: Settings | None = None) -> AsyncConnectionPool:
    """
    Shared identity/outbox pool, created lazily and left closed.
    Whoever owns the process (API lifespan, outbox worker) opens it.
    """
    global _pool
    if _pool is None:
        settings = settings or get_settings()
        _pool = AsyncConnectionPool(
            with_connect_timeout(
                settings.database_url, settings.db_connect_timeout_seconds
            ),
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            timeout=5,
            open=False,
        )
    return _pool


async def open_pool(settings: Settings | None = None) -> AsyncConnectionPool:
    pool = get_pool(settings)
    if pool.closed:
        await pool.open()
        logger.info("postgres pool opened", extra={"max_size": pool.max_size})
    return pool


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return
    await _pool.close()
    _pool = None
    logger.info("postgres pool closed")


async def ping_pool() -> bool:
    if _pool is None or _pool.closed:
        return False
    async with _pool.connection() as conn:
        await conn.execute("SELECT 1")
    return True
