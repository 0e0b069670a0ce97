from __future__ import annotations

import logging
from typing import Any, Sequence

import psycopg
from psycopg import errors as pg_errors
from psycopg.types.json import Json
from psycopg_pool import AsyncConnectionPool

from verified_auth.domain.entities import Identity, ProviderIdentity
from verified_auth.domain.errors import IdentityNotFound, IdentityStoreError
from verified_auth.domain.ports.identity_store import IdentityStorePort
from verified_auth.domain.results import Found, IdentityLookup, NotFound, StoreFailure

logger = logging.getLogger(__name__)

_SELECT_IDENTITY = """
SELECT ai.id, ai.app_metadata,
       pi.id, pi.entity_id, pi.provider, pi.provider_metadata, pi.user_metadata
FROM auth_identity ai
JOIN provider_identity pi ON pi.auth_identity_id = ai.id
WHERE ai.id = {identity_id}
ORDER BY pi.created_at, pi.id
"""

_BY_ENTITY = "(SELECT auth_identity_id FROM provider_identity WHERE entity_id = %s AND provider = %s)"


def _to_identity(rows: Sequence[tuple]) -> Identity:
    identity = Identity(id=str(rows[0][0]), app_metadata=rows[0][1] or {})
    for _, _, pi_id, entity_id, provider, provider_metadata, user_metadata in rows:
        identity.provider_identities.append(
            ProviderIdentity(
                id=str(pi_id),
                entity_id=str(entity_id),
                provider=str(provider),
                provider_metadata=provider_metadata or {},
                user_metadata=user_metadata or {},
            )
        )
    return identity


class PgIdentityStore(IdentityStorePort):
    """
    Postgres implementation of IdentityStorePort.

    Each call borrows its own connection from the pool and commits on success.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool

    async def _load(self, conn: psycopg.AsyncConnection, identity_id: Any) -> Identity | None:
        async with conn.cursor() as cur:
            await cur.execute(_SELECT_IDENTITY.format(identity_id="%s"), (identity_id,))
            rows = await cur.fetchall()
        return _to_identity(rows) if rows else None

    async def retrieve(self, entity_id: str, provider: str) -> IdentityLookup:
        try:
            async with self._pool.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        _SELECT_IDENTITY.format(identity_id=_BY_ENTITY),
                        (entity_id, provider),
                    )
                    rows = await cur.fetchall()
        except psycopg.Error as e:
            logger.warning("identity lookup failed", extra={"provider": provider, "error": str(e)})
            return StoreFailure(message=str(e))

        if not rows:
            return NotFound(entity_id=entity_id)
        return Found(identity=_to_identity(rows))

    async def create(
        self,
        entity_id: str,
        provider: str,
        provider_metadata: dict[str, Any],
        user_metadata: dict[str, Any],
    ) -> Identity:
        try:
            async with self._pool.connection() as conn:
                async with conn.transaction():
                    async with conn.cursor() as cur:
                        await cur.execute(
                            "INSERT INTO auth_identity DEFAULT VALUES RETURNING id"
                        )
                        (identity_id,) = await cur.fetchone()
                        await cur.execute(
                            """
                            INSERT INTO provider_identity
                                (auth_identity_id, entity_id, provider,
                                 provider_metadata, user_metadata)
                            VALUES (%s, %s, %s, %s, %s)
                            """,
                            (
                                identity_id,
                                entity_id,
                                provider,
                                Json(provider_metadata),
                                Json(user_metadata),
                            ),
                        )
                    identity = await self._load(conn, identity_id)
        except pg_errors.UniqueViolation as e:
            raise IdentityStoreError(
                f"Provider identity with entity_id: {entity_id}, "
                f"provider: {provider} already exists"
            ) from e
        except psycopg.Error as e:
            raise IdentityStoreError(str(e)) from e

        if identity is None:
            raise IdentityStoreError("created identity could not be read back")
        return identity

    async def update(
        self, entity_id: str, provider: str, provider_metadata: dict[str, Any]
    ) -> Identity:
        try:
            async with self._pool.connection() as conn:
                async with conn.transaction():
                    async with conn.cursor() as cur:
                        await cur.execute(
                            """
                            UPDATE provider_identity
                            SET provider_metadata = provider_metadata || %s,
                                updated_at = now()
                            WHERE entity_id = %s AND provider = %s
                            RETURNING auth_identity_id
                            """,
                            (Json(provider_metadata), entity_id, provider),
                        )
                        row = await cur.fetchone()
                    if row is None:
                        raise IdentityNotFound(
                            f"AuthIdentity with entity_id: {entity_id} not found"
                        )
                    identity = await self._load(conn, row[0])
        except psycopg.Error as e:
            raise IdentityStoreError(str(e)) from e

        if identity is None:
            raise IdentityNotFound(f"AuthIdentity with entity_id: {entity_id} not found")
        return identity
