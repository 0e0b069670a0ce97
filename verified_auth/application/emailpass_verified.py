"""
Email/password authentication that only creates an identity once the user
has proven they own the email address.

Flow:
    authenticate(email, password)
        unknown email -> cache {code hash, password hash} under a fresh code,
                         emit CODE_GENERATED, answer "pending_verification"
        known email   -> plain password check
    (the user receives the code out of band and follows the callback link)
    validate_callback(code, email)
        cached entry verified -> identity created with the cached password hash
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping

import verified_auth.domain.services as domain_services
from verified_auth.domain.entities import Identity
from verified_auth.domain.errors import (
    IdentityStoreError,
    UnsupportedOperation,
    ValidationError,
)
from verified_auth.domain.events import CodeGeneratedEventData, EmailPassVerifiedEvents
from verified_auth.domain.ports.event_publisher import EventPublisherPort
from verified_auth.domain.ports.identity_store import IdentityStorePort
from verified_auth.domain.ports.state_store import StateStorePort
from verified_auth.domain.requests import (
    parse_authenticate_request,
    parse_callback_request,
    parse_credential_update,
)
from verified_auth.domain.results import AuthResult, Found, NotFound, StoreFailure
from verified_auth.infrastructure.security.hashing import (
    HashConfig,
    hash_secret,
    verify_secret,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
INVALID_CODE = "Invalid code"


@dataclass(frozen=True)
class VerificationCode:
    code: str
    code_hash: str


class EmailPassVerifiedProvider:
    identifier = "emailpass-verified"
    DISPLAY_NAME = "Email Password Verified"

    def __init__(
        self,
        *,
        identity_store: IdentityStorePort,
        state_store: StateStorePort,
        event_publisher: EventPublisherPort,
        hash_config: HashConfig | None = None,
        callback_url: str | None = None,
        hasher: Callable[..., str] = hash_secret,
        verifier: Callable[[str, str], bool] = verify_secret,
    ) -> None:
        self._identities = identity_store
        self._state = state_store
        self._events = event_publisher
        self._hash_config = hash_config or HashConfig()
        self._callback_url = callback_url
        self._hasher = hasher
        self._verifier = verifier

    async def _hash(self, value: str) -> str:
        return await asyncio.to_thread(self._hasher, value, config=self._hash_config)

    async def _verify(self, value: str, hashed: str) -> bool:
        return await asyncio.to_thread(self._verifier, value, hashed)

    async def _generate_verification_code(self) -> VerificationCode:
        code = domain_services.generate_verification_code()
        return VerificationCode(code=code, code_hash=await self._hash(code))

    def register(self, data: Mapping[str, Any] | None = None) -> AuthResult:
        raise UnsupportedOperation(
            f"{self.DISPLAY_NAME} does not support registration. "
            "Use method 'authenticate' instead"
        )

    async def authenticate(self, body: Mapping[str, Any] | None) -> AuthResult:
        try:
            request = parse_authenticate_request(body)
        except ValidationError as e:
            return AuthResult.fail(str(e))

        lookup = await self._identities.retrieve(request.email, self.identifier)

        if isinstance(lookup, StoreFailure):
            return AuthResult.fail(lookup.message)

        if isinstance(lookup, NotFound):
            return await self._start_verification(
                request.email, request.password, request.callback_url
            )

        provider_identity = lookup.identity.provider_identity(self.identifier)
        password_hash = (
            provider_identity.provider_metadata.get("password")
            if provider_identity is not None
            else None
        )
        # same answer for "no usable hash" and "wrong password"
        if not isinstance(password_hash, str):
            return AuthResult.fail(INVALID_CREDENTIALS)
        if not await self._verify(request.password, password_hash):
            return AuthResult.fail(INVALID_CREDENTIALS)

        return AuthResult.ok(lookup.identity)

    async def _start_verification(
        self, email: str, password: str, requested_callback_url: str | None
    ) -> AuthResult:
        verification = await self._generate_verification_code()
        password_hash = await self._hash(password)

        await self._state.set(
            verification.code,
            {"password": password_hash, "code": verification.code_hash},
        )

        callback_url = domain_services.resolve_callback_url(
            requested_callback_url, self._callback_url
        )
        if callback_url is None:
            return AuthResult.fail(
                "`callback_url` not set in request body, nor in provider options."
            )

        payload: CodeGeneratedEventData = {
            "code": verification.code,
            "email": email,
            "callbackUrl": callback_url,
        }
        try:
            await self._events.emit(
                EmailPassVerifiedEvents.CODE_GENERATED.value, dict(payload)
            )
        except Exception:  # noqa: BLE001
            logger.exception(
                "verification event not published",
                extra={"event": EmailPassVerifiedEvents.CODE_GENERATED.value},
            )

        logger.info("verification pending", extra={"provider": self.identifier})
        return AuthResult.pending()

    async def validate_callback(self, query: Mapping[str, Any] | None) -> AuthResult:
        try:
            request = parse_callback_request(query)
        except ValidationError as e:
            return AuthResult.fail(str(e))

        pending = await self._state.get(request.code) or {}
        code_hash = pending.get("code")
        password_hash = pending.get("password")
        if not isinstance(code_hash, str) or not isinstance(password_hash, str):
            return AuthResult.fail(
                f"No code and/or password set in cache for email: {request.email}, "
                "call the authenticate route again"
            )

        if not await self._verify(request.code, code_hash):
            return AuthResult.fail(INVALID_CODE)

        lookup = await self._identities.retrieve(request.email, self.identifier)
        if isinstance(lookup, StoreFailure):
            return AuthResult.fail(lookup.message)
        if isinstance(lookup, Found):
            # completion step for first-time registration, not a login path
            return AuthResult.ok(lookup.identity)

        try:
            identity: Identity = await self._identities.create(
                request.email,
                self.identifier,
                provider_metadata={"password": password_hash},
                user_metadata={"email": request.email},
            )
        except IdentityStoreError as e:
            return AuthResult.fail(str(e))

        logger.info(
            "identity created", extra={"provider": self.identifier, "id": identity.id}
        )
        return AuthResult.ok(identity)

    async def update_credential(self, data: Mapping[str, Any] | None) -> AuthResult:
        try:
            update = parse_credential_update(data, provider=self.identifier)
        except ValidationError as e:
            return AuthResult.fail(str(e))

        if update.password is None:
            return AuthResult.ok()

        try:
            password_hash = await self._hash(update.password)
            identity = await self._identities.update(
                update.entity_id,
                self.identifier,
                provider_metadata={"password": password_hash},
            )
        except IdentityStoreError as e:
            return AuthResult.fail(str(e))

        return AuthResult.ok(identity)
