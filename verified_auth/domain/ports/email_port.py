from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class OutgoingEmail:
    to: str
    subject: str
    text: str
    html: str | None = None


class EmailPort(Protocol):
    async def send(
        self, message: OutgoingEmail, *, idempotency_key: str | None = None
    ) -> None:
        """Deliver one message. Raises when the relay does not accept it."""
