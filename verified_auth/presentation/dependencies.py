from typing import Annotated

from fastapi import Depends

from verified_auth.application.emailpass_verified import EmailPassVerifiedProvider
from verified_auth.domain.ports.event_publisher import EventPublisherPort
from verified_auth.domain.ports.identity_store import IdentityStorePort
from verified_auth.domain.ports.state_store import StateStorePort
from verified_auth.infrastructure.db.identity_repo import PgIdentityStore
from verified_auth.infrastructure.db.pool import get_pool
from verified_auth.infrastructure.outbox.publisher import OutboxEventPublisher
from verified_auth.infrastructure.redis_cache.pool import get_redis
from verified_auth.infrastructure.redis_cache.sessions import RedisSessions
from verified_auth.infrastructure.redis_cache.state_store import RedisStateStore
from verified_auth.infrastructure.security.hashing import (
    HashConfig,
    default_hash_config,
)
from verified_auth.settings import get_settings


def get_identity_store() -> IdentityStorePort:
    return PgIdentityStore(get_pool())


def get_state_store() -> StateStorePort:
    return RedisStateStore(get_redis(), ttl_seconds=get_settings().state_ttl_seconds)


def get_event_publisher() -> EventPublisherPort:
    return OutboxEventPublisher(get_pool())


def get_hash_config() -> HashConfig:
    return default_hash_config()


def get_provider(
    identity_store: Annotated[IdentityStorePort, Depends(get_identity_store)],
    state_store: Annotated[StateStorePort, Depends(get_state_store)],
    event_publisher: Annotated[EventPublisherPort, Depends(get_event_publisher)],
    hash_config: Annotated[HashConfig, Depends(get_hash_config)],
) -> EmailPassVerifiedProvider:
    return EmailPassVerifiedProvider(
        identity_store=identity_store,
        state_store=state_store,
        event_publisher=event_publisher,
        hash_config=hash_config,
        callback_url=get_settings().callback_url,
    )


def get_sessions() -> RedisSessions:
    return RedisSessions(get_redis(), ttl_seconds=get_settings().session_ttl_seconds)
