from __future__ import annotations

import logging
from typing import Any

import httpx

from verified_auth.domain.ports.email_port import EmailPort, OutgoingEmail

logger = logging.getLogger(__name__)


class EmailDeliveryError(RuntimeError):
    """The SMTP relay refused the message or could not be reached."""


class HttpSmtpEmailAdapter(EmailPort):
    """
    Client for an HTTP-to-SMTP relay: one JSON POST per message.
    Pass the shared httpx client in production; without one the adapter
    opens (and later closes) its own.
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 5.0,
        send_path: str = "/send",
        sender: str | None = None,
    ) -> None:
        self._url = base_url.rstrip("/") + "/" + send_path.lstrip("/")
        self._sender = sender
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def _body(self, message: OutgoingEmail) -> dict[str, Any]:
        body: dict[str, Any] = {
            "to": message.to,
            "subject": message.subject,
            "body": message.text,
        }
        if message.html is not None:
            body["html"] = message.html
        if self._sender:
            body["from"] = self._sender
        return body

    async def send(
        self, message: OutgoingEmail, *, idempotency_key: str | None = None
    ) -> None:
        headers = {"Idempotency-Key": idempotency_key} if idempotency_key else {}
        try:
            resp = await self._client.post(self._url, json=self._body(message), headers=headers)
        except httpx.HTTPError as e:
            raise EmailDeliveryError(f"SMTP relay unreachable: {e}") from e

        if not resp.is_success:
            raise EmailDeliveryError(f"SMTP relay answered {resp.status_code}: {resp.text[:200]}")
        logger.debug("email accepted by relay", extra={"status": resp.status_code})

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
