from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

# provider_metadata keys that never leave the service
SECRET_METADATA_KEYS = frozenset({"password"})


@dataclass
class ProviderIdentity:
    entity_id: str
    provider: str
    id: str | None = None
    provider_metadata: dict[str, Any] = field(default_factory=dict)
    user_metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class Identity:
    id: str | None = None
    provider_identities: list[ProviderIdentity] = field(default_factory=list)
    app_metadata: dict[str, Any] = field(default_factory=dict)

    def provider_identity(self, provider: str) -> ProviderIdentity | None:
        for provider_identity in self.provider_identities:
            if provider_identity.provider == provider:
                return provider_identity
        return None


@dataclass(frozen=True)
class ProviderIdentityView:
    id: str | None
    entity_id: str
    provider: str
    provider_metadata: Mapping[str, Any]
    user_metadata: Mapping[str, Any]

    @classmethod
    def from_entity(cls, provider_identity: ProviderIdentity) -> "ProviderIdentityView":
        public_metadata = {
            key: value
            for key, value in provider_identity.provider_metadata.items()
            if key not in SECRET_METADATA_KEYS
        }
        return cls(
            id=provider_identity.id,
            entity_id=provider_identity.entity_id,
            provider=provider_identity.provider,
            provider_metadata=MappingProxyType(public_metadata),
            user_metadata=MappingProxyType(dict(provider_identity.user_metadata)),
        )


@dataclass(frozen=True)
class IdentityView:
    """
    What callers get back from the provider: an identity without secrets.

    Built straight from an Identity; the password hash is never copied in.
    """

    id: str | None
    provider_identities: tuple[ProviderIdentityView, ...]
    app_metadata: Mapping[str, Any]

    @classmethod
    def from_entity(cls, identity: Identity) -> "IdentityView":
        return cls(
            id=identity.id,
            provider_identities=tuple(
                ProviderIdentityView.from_entity(pi)
                for pi in identity.provider_identities
            ),
            app_metadata=MappingProxyType(dict(identity.app_metadata)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "provider_identities": [
                {
                    "id": pi.id,
                    "entity_id": pi.entity_id,
                    "provider": pi.provider,
                    "provider_metadata": dict(pi.provider_metadata),
                    "user_metadata": dict(pi.user_metadata),
                }
                for pi in self.provider_identities
            ],
            "app_metadata": dict(self.app_metadata),
        }
