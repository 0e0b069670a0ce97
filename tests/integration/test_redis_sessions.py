import asyncio

import pytest

from verified_auth.infrastructure.redis_cache.sessions import RedisSessions, Session
from tests.integration.conftest import flush_prefix

PREFIX = "auth:sess:itest:"
SESSION = Session(
    identity_id="authid-123", entity_id="jeremy@example.com", provider="emailpass-verified"
)


@pytest.fixture()
async def sessions(redis_client):
    await flush_prefix(redis_client, PREFIX)
    yield RedisSessions(redis_client, key_prefix=PREFIX, ttl_seconds=30)
    await flush_prefix(redis_client, PREFIX)


@pytest.mark.asyncio
async def test_token_resolves_until_revoked(sessions):
    token = await sessions.create(SESSION)

    found = await sessions.get(token)
    assert found == SESSION
    assert found.issued_at

    await sessions.revoke(token)
    assert await sessions.get(token) is None


@pytest.mark.asyncio
async def test_every_login_gets_its_own_token(sessions):
    tokens = [await sessions.create(SESSION) for _ in range(5)]

    assert len(set(tokens)) == 5
    await sessions.revoke(tokens[0])
    assert await sessions.get(tokens[1]) == SESSION


@pytest.mark.asyncio
async def test_unknown_or_garbled_token(sessions, redis_client):
    await redis_client.set(PREFIX + "garbled", "{not json")

    assert await sessions.get("never-issued") is None
    assert await sessions.get("garbled") is None


@pytest.mark.asyncio
async def test_session_expires(redis_client):
    await flush_prefix(redis_client, PREFIX)
    short = RedisSessions(redis_client, key_prefix=PREFIX, ttl_seconds=1)

    token = await short.create(SESSION)
    assert await redis_client.ttl(PREFIX + token) in (1, 2)

    await asyncio.sleep(1.5)
    assert await short.get(token) is None
