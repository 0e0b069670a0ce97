import pytest

from verified_auth.application.emailpass_verified import EmailPassVerifiedProvider
from verified_auth.infrastructure.security.hashing import HashConfig
from tests.fakes import (
    CALLBACK_URL,
    FakeEventPublisher,
    FakeIdentityStore,
    FakeStateStore,
)


@pytest.fixture()
def fast_hash_config() -> HashConfig:
    # real scrypt, tiny cost
    return HashConfig(log_n=4, block_size=8, parallelism=1)


@pytest.fixture()
def identity_store():
    return FakeIdentityStore()


@pytest.fixture()
def state_store():
    return FakeStateStore()


@pytest.fixture()
def events():
    return FakeEventPublisher()


@pytest.fixture()
def provider(identity_store, state_store, events, fast_hash_config):
    return EmailPassVerifiedProvider(
        identity_store=identity_store,
        state_store=state_store,
        event_publisher=events,
        hash_config=fast_hash_config,
        callback_url=CALLBACK_URL,
    )
