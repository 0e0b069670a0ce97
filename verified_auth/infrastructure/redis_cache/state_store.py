from __future__ import annotations

import json
from typing import Any

from redis.asyncio import Redis

from verified_auth.domain.ports.state_store import StateStorePort


class RedisStateStore(StateStorePort):
    """
    Short-lived JSON values keyed by caller-chosen strings.

    Every write gets a TTL; entries are never deleted explicitly.
    """

    def __init__(
        self, redis: Redis, *, key_prefix: str = "auth:state:", ttl_seconds: int = 900
    ) -> None:
        self._redis = redis
        self._prefix = key_prefix
        self._ttl = ttl_seconds

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def set(self, key: str, value: dict[str, Any]) -> None:
        await self._redis.set(self._key(key), json.dumps(value), ex=self._ttl)

    async def get(self, key: str) -> dict[str, Any] | None:
        raw = await self._redis.get(self._key(key))
        if raw is None:
            return None
        try:
            value = json.loads(raw)
        except ValueError:
            return None
        return value if isinstance(value, dict) else None
