from __future__ import annotations

from typing import Any, Protocol

from verified_auth.domain.entities import Identity
from verified_auth.domain.results import IdentityLookup


class IdentityStorePort(Protocol):
    async def retrieve(self, entity_id: str, provider: str) -> IdentityLookup:
        """
        Look up the identity owning (entity_id, provider).
        Return Found, NotFound, or StoreFailure; never raise for those cases.
        """

    async def create(
        self,
        entity_id: str,
        provider: str,
        provider_metadata: dict[str, Any],
        user_metadata: dict[str, Any],
    ) -> Identity:
        """Create an identity with one provider identity. Raise IdentityStoreError on failure."""

    async def update(
        self, entity_id: str, provider: str, provider_metadata: dict[str, Any]
    ) -> Identity:
        """
        Merge the given keys into the provider identity's provider_metadata.
        Raise IdentityNotFound if there is nothing to update, IdentityStoreError otherwise.
        """
