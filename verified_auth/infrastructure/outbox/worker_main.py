"""Entry point for the process that turns outbox rows into verification emails."""

from __future__ import annotations

import asyncio
import logging
import signal
from contextlib import suppress

from verified_auth.infrastructure.db.pool import close_pool, open_pool
from verified_auth.infrastructure.email.http_smtp_adapter import HttpSmtpEmailAdapter
from verified_auth.infrastructure.http.client import close_http_client, open_http_client
from verified_auth.infrastructure.outbox.dispatcher import OutboxDispatcher, RetryPolicy
from verified_auth.infrastructure.outbox.handlers import VerificationMailer
from verified_auth.logging import setup_logging
from verified_auth.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def build_dispatcher(pool, email: HttpSmtpEmailAdapter, settings: Settings) -> OutboxDispatcher:
    mailer = VerificationMailer(email, subject=settings.verification_email_subject)
    return OutboxDispatcher(
        pool=pool,
        handlers={mailer.topic: mailer},
        batch_size=settings.outbox_batch_size,
        poll_interval=settings.outbox_poll_interval_ms / 1000,
        retry_policy=RetryPolicy(base=2, max_delay=300),
    )


def _install_stop_handlers(stop: asyncio.Event) -> None:
    def _on_signal() -> None:
        logger.info("outbox worker stopping")
        stop.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # not available on every platform
        with suppress(NotImplementedError):
            loop.add_signal_handler(sig, _on_signal)


async def _run(settings: Settings) -> None:
    setup_logging(settings.log_level)
    pool = await open_pool(settings)
    client = await open_http_client(settings.http_timeout_seconds)
    email = HttpSmtpEmailAdapter(
        base_url=settings.smtp_base_url, client=client, sender=settings.email_sender
    )
    dispatcher = build_dispatcher(pool, email, settings)

    stop = asyncio.Event()
    _install_stop_handlers(stop)

    task = asyncio.create_task(dispatcher.run_forever())
    logger.info("outbox worker started", extra={"batch_size": settings.outbox_batch_size})
    try:
        await stop.wait()
    finally:
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task
        await email.aclose()
        await close_http_client()
        await close_pool()
    logger.info("outbox worker stopped")


def main() -> None:
    asyncio.run(_run(get_settings()))


if __name__ == "__main__":
    main()
