import pytest
from fastapi.testclient import TestClient

from verified_auth.application.emailpass_verified import EmailPassVerifiedProvider
from verified_auth.infrastructure.security.hashing import HashConfig
from verified_auth.main import create_app
from verified_auth.presentation.dependencies import get_provider, get_sessions
from tests.fakes import (
    CALLBACK_URL,
    FakeEventPublisher,
    FakeIdentityStore,
    FakeSessions,
    FakeStateStore,
)

BASE = "/v1/auth/emailpass-verified"


class Deps:
    def __init__(self) -> None:
        self.identities = FakeIdentityStore()
        self.state = FakeStateStore()
        self.events = FakeEventPublisher()
        self.sessions = FakeSessions()
        self.provider = EmailPassVerifiedProvider(
            identity_store=self.identities,
            state_store=self.state,
            event_publisher=self.events,
            hash_config=HashConfig(log_n=4),
            callback_url=CALLBACK_URL,
        )


@pytest.fixture()
def app_and_deps():
    app = create_app()
    deps = Deps()

    app.dependency_overrides[get_provider] = lambda: deps.provider
    app.dependency_overrides[get_sessions] = lambda: deps.sessions

    try:
        yield app, deps
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def client(app_and_deps):
    app, _ = app_and_deps
    return TestClient(app, raise_server_exceptions=False)


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
