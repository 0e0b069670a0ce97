from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from verified_auth.domain.entities import Identity, IdentityView

PENDING_VERIFICATION = "pending_verification"


@dataclass(frozen=True)
class AuthResult:
    success: bool
    error: str | None = None
    auth_identity: IdentityView | None = None
    location: str | None = None

    def __post_init__(self):
        if self.success and self.error:
            raise ValueError("a successful result cannot carry an error")

    @classmethod
    def ok(cls, identity: Identity | None = None) -> "AuthResult":
        view = IdentityView.from_entity(identity) if identity is not None else None
        return cls(success=True, auth_identity=view)

    @classmethod
    def pending(cls) -> "AuthResult":
        return cls(success=True, location=PENDING_VERIFICATION)

    @classmethod
    def fail(cls, error: str) -> "AuthResult":
        return cls(success=False, error=error)


# Outcome of IdentityStorePort.retrieve()


@dataclass(frozen=True)
class Found:
    identity: Identity


@dataclass(frozen=True)
class NotFound:
    entity_id: str


@dataclass(frozen=True)
class StoreFailure:
    message: str


IdentityLookup = Union[Found, NotFound, StoreFailure]
