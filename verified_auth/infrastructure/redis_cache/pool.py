from __future__ import annotations

import logging
from typing import Optional

from redis.asyncio import Redis

from verified_auth.settings import Settings, get_settings

logger = logging.getLogger(__name__)

_client: Optional[Redis] = None


def get_redis(settings: Settings | None = None) -> Redis:
    """
    Shared client for the pending-verification state and sessions.
    decode_responses=True so JSON state and session hashes come back as str.
    """
    global _client
    if _client is None:
        url = (settings or get_settings()).redis_url
        _client = Redis.from_url(
            url, encoding="utf-8", decode_responses=True, health_check_interval=30
        )
    return _client


async def close_redis() -> None:
    global _client
    if _client is None:
        return
    await _client.aclose()
    _client = None
    logger.info("redis client closed")


async def ping_redis() -> bool:
    if _client is None:
        return False
    return bool(await _client.ping())
