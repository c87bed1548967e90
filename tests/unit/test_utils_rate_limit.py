import time

from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient
from fastapi_limiter import FastAPILimiter
from starlette.middleware.sessions import SessionMiddleware

from storefront.utils.rate_limit import _user_key_from_request, optional_rate_limit, rate_limit_health_info
from storefront.utils.security import set_session_user


def _make_app(times=2, seconds=60):
    app = FastAPI()
    app.add_middleware(SessionMiddleware, secret_key="test-secret")

    @app.get("/limited", dependencies=[Depends(optional_rate_limit(times, seconds))])
    def limited():
        return {"ok": True}

    @app.get("/limitedA", dependencies=[Depends(optional_rate_limit(times, seconds))])
    def limited_a():
        return {"ok": True}

    @app.get("/limitedB", dependencies=[Depends(optional_rate_limit(times, seconds))])
    def limited_b():
        return {"ok": True}

    @app.get("/login/{user_id}")
    def login(user_id: str, request: Request):
        set_session_user(request, {"id": user_id, "email": f"{user_id}@example.com"})
        return {"ok": True}

    @app.get("/rl_key")
    def rl_key(request: Request):
        return {"key": _user_key_from_request(request)}

    @app.get("/rl_info")
    def rl_info(request: Request):
        return rate_limit_health_info(request)

    return app


def test_rate_limit_fallback_blocks_after_limit(monkeypatch):
    app = _make_app(times=2, seconds=60)
    client = TestClient(app)
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")

    assert client.get("/limited").status_code == 200
    assert client.get("/limited").status_code == 200
    r3 = client.get("/limited")
    assert r3.status_code == 429


def test_rate_limit_is_per_path(monkeypatch):
    app = _make_app(times=2, seconds=60)
    client = TestClient(app)
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")

    # path A: 2 OK, 3e bloque
    assert client.get("/limitedA").status_code == 200
    assert client.get("/limitedA").status_code == 200
    assert client.get("/limitedA").status_code == 429

    # path B: indépendant de A
    assert client.get("/limitedB").status_code == 200
    assert client.get("/limitedB").status_code == 200
    assert client.get("/limitedB").status_code == 429


def test_rate_limit_is_per_session_user(monkeypatch):
    app = _make_app(times=1, seconds=60)
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")
    alice, bob = TestClient(app), TestClient(app)
    alice.get("/login/alice")
    bob.get("/login/bob")

    assert alice.get("/limited").status_code == 200
    assert alice.get("/limited").status_code == 429
    assert bob.get("/limited").status_code == 200


def test_rate_limit_key_hashes_user_id():
    client = TestClient(_make_app())
    assert client.get("/rl_key").json()["key"].startswith("ip:")

    client.get("/login/u-42")
    key = client.get("/rl_key").json()["key"]
    assert key.startswith("user:")
    assert key.endswith(":/rl_key")
    assert "u-42" not in key


def test_rate_limit_resets_after_window_sleep(monkeypatch):
    app = _make_app(times=2, seconds=1)
    client = TestClient(app)
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")

    assert client.get("/limited").status_code == 200
    assert client.get("/limited").status_code == 200
    assert client.get("/limited").status_code == 429

    # Attendre > 1s pour vider la fenêtre
    time.sleep(1.1)
    assert client.get("/limited").status_code == 200


def test_rate_limit_disabled_flag_bypasses_limit(monkeypatch):
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)
    app = _make_app(times=2, seconds=60)
    client = TestClient(app)
    app.state.rate_limit_enabled = False

    for _ in range(3):
        assert client.get("/limited").status_code == 200


def test_rate_limit_health_info(monkeypatch):
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)
    app = _make_app()
    client = TestClient(app)

    monkeypatch.setattr(FastAPILimiter, "redis", None, raising=False)
    app.state.rate_limit_enabled = True
    info = client.get("/rl_info").json()
    assert info["enabled"] is True
    assert info["ready"] is False
    assert info["backend"] is None
    assert info["local_fallback"] is False

    monkeypatch.setattr(FastAPILimiter, "redis", object(), raising=False)
    info2 = client.get("/rl_info").json()
    assert info2["ready"] is True
    assert info2["backend"] == "redis"
