from __future__ import annotations

import logging
from typing import Any

from psycopg.types.json import Json
from psycopg_pool import AsyncConnectionPool

from verified_auth.domain.ports.event_publisher import EventPublisherPort

logger = logging.getLogger(__name__)

_ENQUEUE_SQL = """
INSERT INTO outbox (topic, payload)
VALUES (%s, %s)
RETURNING id
"""


class OutboxEventPublisher(EventPublisherPort):
    """
    Writes events to the outbox table; the outbox worker delivers them.
    emit() returns once the row is committed, not when the email is sent.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool

    async def emit(self, name: str, payload: dict[str, Any]) -> None:
        async with self._pool.connection() as conn:
            async with conn.transaction():
                cur = await conn.execute(_ENQUEUE_SQL, (name, Json(payload)))
                (msg_id,) = await cur.fetchone()
        logger.info("event enqueued", extra={"topic": name, "id": msg_id})
