"""
Typed requests for the provider operations.

Hosts hand the provider raw body/query mappings; these parsers are the only
place their shape is checked.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from verified_auth.domain.errors import ValidationError


@dataclass(frozen=True)
class AuthenticateRequest:
    email: str
    password: str
    callback_url: str | None = None


@dataclass(frozen=True)
class CallbackRequest:
    code: str
    email: str


@dataclass(frozen=True)
class CredentialUpdate:
    entity_id: str
    password: str | None = None


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def parse_authenticate_request(body: Mapping[str, Any] | None) -> AuthenticateRequest:
    body = body or {}
    password = body.get("password")
    email = body.get("email")

    if not _non_empty_str(password):
        raise ValidationError("Password should be a string")
    if not _non_empty_str(email):
        raise ValidationError("Email should be a string")

    callback_url = body.get("callback_url")
    return AuthenticateRequest(
        email=email,
        password=password,
        callback_url=callback_url if _non_empty_str(callback_url) else None,
    )


def parse_callback_request(query: Mapping[str, Any] | None) -> CallbackRequest:
    query = query or {}
    code = query.get("code")
    email = query.get("email")

    if not isinstance(code, str):
        raise ValidationError("`code` must be a string")
    if not isinstance(email, str):
        raise ValidationError("`email` must be a string")

    return CallbackRequest(code=code, email=email)


def parse_credential_update(
    data: Mapping[str, Any] | None, *, provider: str
) -> CredentialUpdate:
    data = data or {}
    entity_id = data.get("entity_id")
    password = data.get("password")

    if not entity_id:
        raise ValidationError(
            f"Cannot update {provider} provider identity without entity_id"
        )

    # a missing password means "leave the password alone"
    return CredentialUpdate(
        entity_id=str(entity_id),
        password=password if _non_empty_str(password) else None,
    )
