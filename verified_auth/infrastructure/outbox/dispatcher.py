"""
Outbox delivery loop.

Rows move pending -> processing (claimed with SKIP LOCKED, so several workers
can share the table) -> dispatched. A failing handler puts the row back to
pending with a backoff delay, or parks it as failed once the retry budget is
spent. Rows left in processing by a crashed worker are released after
processing_timeout seconds.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Sequence

from psycopg_pool import AsyncConnectionPool

logger = logging.getLogger(__name__)

# dropped from the row once it will not be delivered again
SCRUBBED_PAYLOAD_KEYS = ("code",)

_CLAIM_SQL = """
UPDATE outbox
SET status = 'processing', updated_at = now()
WHERE id IN (
    SELECT id FROM outbox
    WHERE status = 'pending' AND next_attempt_at <= now()
    ORDER BY next_attempt_at, id
    LIMIT %s
    FOR UPDATE SKIP LOCKED
)
RETURNING id, topic, payload, attempts
"""

_COMPLETE_SQL = """
UPDATE outbox
SET status = 'dispatched', payload = payload - %s::text[], last_error = NULL,
    updated_at = now()
WHERE id = %s
"""

_RESCHEDULE_SQL = """
UPDATE outbox
SET status = 'pending', attempts = %s, last_error = %s,
    next_attempt_at = now() + make_interval(secs => %s), updated_at = now()
WHERE id = %s
"""

_PARK_SQL = """
UPDATE outbox
SET status = 'failed', payload = payload - %s::text[], attempts = %s, last_error = %s,
    updated_at = now()
WHERE id = %s
"""

_RELEASE_STALE_SQL = """
UPDATE outbox
SET status = 'pending', updated_at = now()
WHERE status = 'processing' AND updated_at < now() - make_interval(secs => %s)
"""


class UnroutableMessage(RuntimeError):
    """No handler is registered for the message topic."""


@dataclass(frozen=True)
class OutboxMessage:
    id: int
    topic: str
    payload: dict[str, Any]
    attempts: int = 0


Handler = Callable[[OutboxMessage], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    base: int = 2
    max_delay: int = 60
    max_attempts: int = 10

    def compute_delay(self, attempts: int) -> int:
        """Seconds to wait after `attempts` previous tries."""
        return min(self.base * 2**attempts, self.max_delay)

    def exhausted(self, attempts: int) -> bool:
        return attempts >= self.max_attempts


class OutboxDispatcher:
    def __init__(
        self,
        *,
        pool: AsyncConnectionPool | None,
        handlers: Mapping[str, Handler],
        batch_size: int = 10,
        poll_interval: float = 1.0,
        retry_policy: RetryPolicy | None = None,
        processing_timeout: int = 300,
        scrub_keys: Sequence[str] = SCRUBBED_PAYLOAD_KEYS,
    ) -> None:
        self.pool = pool
        self.handlers = dict(handlers)
        self.batch_size = batch_size
        self.poll_interval = poll_interval
        self.retry_policy = retry_policy or RetryPolicy()
        self.processing_timeout = processing_timeout
        self.scrub_keys = list(scrub_keys)

    async def run_forever(self) -> None:
        released = await self.release_stale()
        logger.info(
            "outbox dispatcher running",
            extra={"topics": sorted(self.handlers), "released": released},
        )
        while True:
            if await self.process_once() == 0:
                await asyncio.sleep(self.poll_interval)

    async def process_once(self) -> int:
        """Handle one claimed batch. Returns how many rows were claimed."""
        batch = await self._claim(self.batch_size)
        for msg in batch:
            try:
                await self._route(msg)
            except UnroutableMessage as e:
                logger.error("outbox message parked", extra={"id": msg.id, "topic": msg.topic})
                await self._park(msg.id, msg.attempts + 1, str(e))
            except Exception as e:  # noqa: BLE001
                await self._retry_later(msg, e)
            else:
                await self._complete(msg.id)
        return len(batch)

    async def _route(self, msg: OutboxMessage) -> None:
        handler = self.handlers.get(msg.topic)
        if handler is None:
            raise UnroutableMessage(f"no handler for topic: {msg.topic}")
        await handler(msg)

    async def _retry_later(self, msg: OutboxMessage, error: Exception) -> None:
        attempts = msg.attempts + 1
        if self.retry_policy.exhausted(attempts):
            logger.error(
                "outbox delivery gave up",
                extra={"id": msg.id, "topic": msg.topic, "attempts": attempts},
            )
            await self._park(msg.id, attempts, str(error))
            return
        delay = self.retry_policy.compute_delay(msg.attempts)
        logger.warning(
            "outbox delivery failed",
            extra={"id": msg.id, "topic": msg.topic, "attempts": attempts, "retry_in_s": delay},
        )
        await self._reschedule(msg.id, attempts, str(error), delay)

    async def release_stale(self) -> int:
        async with self.pool.connection() as conn:
            cur = await conn.execute(_RELEASE_STALE_SQL, (self.processing_timeout,))
            return cur.rowcount

    async def _claim(self, limit: int) -> list[OutboxMessage]:
        async with self.pool.connection() as conn:
            async with conn.transaction():
                cur = await conn.execute(_CLAIM_SQL, (limit,))
                rows = await cur.fetchall()
        msgs = [OutboxMessage(id=r[0], topic=r[1], payload=r[2] or {}, attempts=r[3]) for r in rows]
        return sorted(msgs, key=lambda m: m.id)

    async def _write(self, sql: str, params: tuple) -> None:
        async with self.pool.connection() as conn:
            async with conn.transaction():
                await conn.execute(sql, params)

    async def _complete(self, msg_id: int) -> None:
        await self._write(_COMPLETE_SQL, (self.scrub_keys, msg_id))

    async def _reschedule(self, msg_id: int, attempts: int, error: str, delay: int) -> None:
        await self._write(_RESCHEDULE_SQL, (attempts, error[:1000], delay, msg_id))

    async def _park(self, msg_id: int, attempts: int, error: str) -> None:
        await self._write(_PARK_SQL, (self.scrub_keys, attempts, error[:1000], msg_id))
