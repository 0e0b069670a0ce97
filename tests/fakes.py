from dataclasses import dataclass, field
from typing import Any

from verified_auth.domain.entities import Identity, ProviderIdentity
from verified_auth.domain.errors import IdentityNotFound, IdentityStoreError
from verified_auth.domain.ports.email_port import OutgoingEmail
from verified_auth.domain.results import Found, NotFound, StoreFailure
from verified_auth.infrastructure.outbox.dispatcher import OutboxMessage
from verified_auth.infrastructure.redis_cache.sessions import Session

CALLBACK_URL = "https://shop.test/auth/verify"
PROVIDER = "emailpass-verified"


class FakeIdentityStore:
    def __init__(self):
        self.identities: dict[tuple[str, str], Identity] = {}
        self.retrieve_calls: list[tuple[str, str]] = []
        self.create_calls: list[dict[str, Any]] = []
        self.update_calls: list[dict[str, Any]] = []
        self.retrieve_failure: str | None = None
        self.write_failure: str | None = None
        self._next = 0

    def seed(
        self,
        entity_id: str,
        provider: str,
        provider_metadata: dict[str, Any],
        user_metadata: dict[str, Any] | None = None,
    ) -> Identity:
        self._next += 1
        identity = Identity(
            id=f"authid-{self._next}",
            provider_identities=[
                ProviderIdentity(
                    id=f"provid-{self._next}",
                    entity_id=entity_id,
                    provider=provider,
                    provider_metadata=dict(provider_metadata),
                    user_metadata=dict(user_metadata or {}),
                )
            ],
        )
        self.identities[(entity_id, provider)] = identity
        return identity

    async def retrieve(self, entity_id: str, provider: str):
        self.retrieve_calls.append((entity_id, provider))
        if self.retrieve_failure:
            return StoreFailure(message=self.retrieve_failure)
        identity = self.identities.get((entity_id, provider))
        if identity is None:
            return NotFound(entity_id=entity_id)
        return Found(identity=identity)

    async def create(self, entity_id, provider, provider_metadata, user_metadata):
        self.create_calls.append(
            {
                "entity_id": entity_id,
                "provider": provider,
                "provider_metadata": provider_metadata,
                "user_metadata": user_metadata,
            }
        )
        if self.write_failure:
            raise IdentityStoreError(self.write_failure)
        return self.seed(entity_id, provider, provider_metadata, user_metadata)

    async def update(self, entity_id, provider, provider_metadata):
        self.update_calls.append(
            {
                "entity_id": entity_id,
                "provider": provider,
                "provider_metadata": provider_metadata,
            }
        )
        if self.write_failure:
            raise IdentityStoreError(self.write_failure)
        identity = self.identities.get((entity_id, provider))
        if identity is None:
            raise IdentityNotFound(f"AuthIdentity with entity_id: {entity_id} not found")
        identity.provider_identity(provider).provider_metadata.update(provider_metadata)
        return identity


class FakeStateStore:
    def __init__(self):
        self.values: dict[str, dict[str, Any]] = {}
        self.set_calls: list[tuple[str, dict[str, Any]]] = []

    async def set(self, key: str, value: dict[str, Any]) -> None:
        self.set_calls.append((key, value))
        self.values[key] = value

    async def get(self, key: str) -> dict[str, Any] | None:
        return self.values.get(key)


class FakeEventPublisher:
    def __init__(self):
        self.emitted: list[tuple[str, dict[str, Any]]] = []

    async def emit(self, name: str, payload: dict[str, Any]) -> None:
        self.emitted.append((name, payload))


class FakeErroredEventPublisher(FakeEventPublisher):
    async def emit(self, name: str, payload: dict[str, Any]) -> None:
        raise RuntimeError("outbox down")


class FakeEmailOK:
    def __init__(self):
        self.sent: list[tuple[OutgoingEmail, str | None]] = []

    async def send(self, message: OutgoingEmail, *, idempotency_key=None) -> None:
        self.sent.append((message, idempotency_key))


class FakeEmailFlaky(FakeEmailOK):
    """Raises on the first `failures` sends, then accepts."""

    def __init__(self, failures: int = 1):
        super().__init__()
        self.failures = failures
        self.attempts = 0

    async def send(self, message: OutgoingEmail, *, idempotency_key=None) -> None:
        self.attempts += 1
        if self.attempts <= self.failures:
            raise RuntimeError("relay timeout")
        await super().send(message, idempotency_key=idempotency_key)


class FakeSessions:
    def __init__(self) -> None:
        self._store: dict[str, Session] = {}
        self._next = 0

    async def create(self, session: Session) -> str:
        self._next += 1
        token = f"tok-{self._next}"
        self._store[token] = session
        return token

    async def get(self, token: str) -> Session | None:
        return self._store.get(token)

    async def revoke(self, token: str) -> None:
        self._store.pop(token, None)


@dataclass
class RecordedOutbox:
    """Rows handed to a dispatcher under test, and what it did with them."""

    pending: list[OutboxMessage] = field(default_factory=list)
    dispatched: list[int] = field(default_factory=list)
    rescheduled: list[tuple[int, int, str, int]] = field(default_factory=list)
    parked: list[tuple[int, int, str]] = field(default_factory=list)
