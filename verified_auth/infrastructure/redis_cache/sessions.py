from __future__ import annotations

import json
import secrets
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone

from redis.asyncio import Redis


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@dataclass(frozen=True)
class Session:
    identity_id: str
    entity_id: str
    provider: str
    issued_at: str = field(default_factory=_now, compare=False)


class RedisSessions:
    """
    Opaque bearer tokens handed out after a successful authentication.
    Only the token's key lives in Redis; it expires after ttl_seconds.
    """

    def __init__(
        self, redis: Redis, *, key_prefix: str = "auth:sess:", ttl_seconds: int = 86400
    ) -> None:
        self._redis = redis
        self._prefix = key_prefix
        self._ttl = ttl_seconds

    def _key(self, token: str) -> str:
        return self._prefix + token

    async def create(self, session: Session) -> str:
        token = secrets.token_urlsafe(32)
        await self._redis.set(self._key(token), json.dumps(asdict(session)), ex=self._ttl)
        return token

    async def get(self, token: str) -> Session | None:
        raw = await self._redis.get(self._key(token))
        if raw is None:
            return None
        try:
            return Session(**json.loads(raw))
        except (ValueError, TypeError):
            return None

    async def revoke(self, token: str) -> None:
        await self._redis.delete(self._key(token))
