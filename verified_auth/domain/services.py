# verified_auth/domain/services.py
from __future__ import annotations

import secrets

VERIFICATION_CODE_BYTES = 32


def generate_verification_code() -> str:
    """256 random bits, hex-encoded (64 chars)."""
    return secrets.token_bytes(VERIFICATION_CODE_BYTES).hex()


def resolve_callback_url(requested: str | None, configured: str | None) -> str | None:
    """The request's callback URL wins over the configured default."""
    if requested:
        return requested
    if isinstance(configured, str) and configured:
        return configured
    return None
