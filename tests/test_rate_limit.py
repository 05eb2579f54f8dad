from __future__ import annotations
import pytest
from billtracker import create_app
from billtracker.utils.middleware import RateLimiter


def test_sliding_window():
    limiter = RateLimiter(max_requests=2, window_seconds=10)
    assert limiter.is_allowed("k", now=100.0)[0]
    allowed, info = limiter.is_allowed("k", now=101.0)
    assert allowed and info["requests_in_window"] == 2

    allowed, info = limiter.is_allowed("k", now=105.0)
    assert not allowed
    assert info["error"] == "Too many requests"
    assert info["retry_after"] == 6

    # other clients are unaffected
    assert limiter.is_allowed("other", now=105.0)[0]
    # the first hit slides out of the window
    assert limiter.is_allowed("k", now=110.5)[0]


def test_reset():
    limiter = RateLimiter(max_requests=1, window_seconds=60)
    limiter.is_allowed("k", now=1.0)
    assert not limiter.is_allowed("k", now=2.0)[0]
    limiter.reset()
    assert limiter.is_allowed("k", now=3.0)[0]


def test_idle_clients_are_forgotten():
    limiter = RateLimiter(max_requests=5, window_seconds=1)
    for i in range(1000):
        limiter.is_allowed(f"ip_10.0.{i // 256}.{i % 256}", now=0.0)
    assert len(limiter._requests) == 1000

    limiter.is_allowed("ip_192.168.1.1", now=100.0)
    assert list(limiter._requests) == ["ip_192.168.1.1"]


def test_reset_time_is_utc():
    _, info = RateLimiter(max_requests=5, window_seconds=60).is_allowed("k", now=0.0)
    assert info["reset_time"] == "1970-01-01T00:01:00+00:00"


@pytest.fixture()
def limited_client(tmp_path):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "SCHEDULER_ENABLED": False,
        "LOG_DIR": str(tmp_path / "logs"),
        "DATA_DIR": str(tmp_path / "data"),
        "UPLOAD_FOLDER": str(tmp_path / "uploads"),
        "RATE_LIMIT_MAX_REQUESTS": 3,
        "AUTH_RATE_LIMIT_MAX_REQUESTS": 2,
    })
    return app.test_client()


def test_api_requests_are_limited_per_client(limited_client):
    for _ in range(3):
        rv = limited_client.get("/api/health")
        assert rv.status_code == 200
        assert "X-RateLimit-Limit" in rv.headers
    rv = limited_client.get("/api/health")
    assert rv.status_code == 429
    assert rv.get_json()["code"] == "RATE_LIMIT_EXCEEDED"
    assert int(rv.headers["Retry-After"]) >= 1

    other = limited_client.get("/api/health", headers={"X-Forwarded-For": "10.0.0.9"})
    assert other.status_code == 200


def test_login_has_stricter_limit(limited_client):
    headers = {"X-Forwarded-For": "10.0.0.1"}
    body = {"email": "x@example.com", "password": "whatever"}
    assert limited_client.post("/api/auth/login", json=body, headers=headers).status_code == 401
    assert limited_client.post("/api/auth/login", json=body, headers=headers).status_code == 401
    assert limited_client.post("/api/auth/login", json=body, headers=headers).status_code == 429
