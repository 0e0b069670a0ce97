from __future__ import annotations

from verified_auth.domain.events import EmailPassVerifiedEvents
from verified_auth.domain.ports.email_port import EmailPort
from verified_auth.infrastructure.email.templates import (
    verification_email,
    verification_link,
)
from verified_auth.infrastructure.outbox.dispatcher import OutboxMessage


class VerificationMailer:
    """Sends the confirmation link for a code_generated event."""

    topic = EmailPassVerifiedEvents.CODE_GENERATED.value

    def __init__(self, email: EmailPort, *, subject: str) -> None:
        self._email = email
        self._subject = subject

    async def __call__(self, msg: OutboxMessage) -> None:
        payload = msg.payload
        link = verification_link(
            payload["callbackUrl"], code=payload["code"], email=payload["email"]
        )
        message = verification_email(to=payload["email"], link=link, subject=self._subject)
        # the relay drops repeats when a retry follows a lost response
        await self._email.send(message, idempotency_key=f"outbox-{msg.id}")
