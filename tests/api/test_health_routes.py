from verified_auth.presentation.routes import health


async def _up() -> bool:
    return True


async def _boom() -> bool:
    raise ConnectionError("redis unreachable")


def test_healthz_is_always_ok(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_readyz_when_dependencies_answer(client, monkeypatch):
    monkeypatch.setattr(health, "ping_pool", _up)
    monkeypatch.setattr(health, "ping_redis", _up)

    r = client.get("/readyz")

    assert r.status_code == 200
    assert r.json() == {"ready": True, "checks": {"postgres": True, "redis": True}}


def test_readyz_reports_the_failing_dependency(client, monkeypatch):
    monkeypatch.setattr(health, "ping_pool", _up)
    monkeypatch.setattr(health, "ping_redis", _boom)

    r = client.get("/readyz")

    assert r.status_code == 503
    assert r.json()["checks"] == {"postgres": True, "redis": False}


def test_readyz_before_startup_is_not_ready(client):
    # lifespan has not run, nothing is open
    r = client.get("/readyz")
    assert r.status_code == 503
    assert r.json()["ready"] is False
