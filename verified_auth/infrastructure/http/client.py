from __future__ import annotations

from typing import Optional

import httpx

from verified_auth.settings import get_settings

_client: Optional[httpx.AsyncClient] = None


async def open_http_client(timeout: float | None = None) -> httpx.AsyncClient:
    """
    Shared AsyncClient for outbound adapters (the SMTP gateway today).
    Opening twice returns the same client; timeout falls back to settings.
    """
    global _client
    if _client is None:
        if timeout is None:
            timeout = get_settings().http_timeout_seconds
        _client = httpx.AsyncClient(timeout=timeout)
    return _client


async def close_http_client() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
