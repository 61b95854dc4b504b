"""
Tests for the HTTP gateway: metadata, health, error envelopes, rate limiting and CORS.
"""
import signal
from types import SimpleNamespace

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.exc import SQLAlchemyError
from starlette.requests import Request

import app.main as main_module
from app import dependencies
from app.managers import redis_manager as redis_manager_module
from app.core.config import settings
from app.dependencies import client_identity, rate_limit
from app.main import app
from app.managers.redis_manager import AsyncRedisManager, redis_manager
from app.routers import health
from app.services.coupon_service import CouponService


def make_request(headers=None, client=("203.0.113.7", 51000)) -> Request:
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw_headers, "client": client})


def test_root_metadata(client):
    response = client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Coupon API Server is running"
    assert data["version"] == settings.VERSION
    assert data["environment"] == settings.ENVIRONMENT
    assert data["endpoints"] == {"health": "/health", "coupons": "/api/coupons"}


def test_security_headers(client):
    response = client.get("/")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "SAMEORIGIN"


@pytest.mark.parametrize("connected, state", [(True, "connected"), (False, "disconnected")])
def test_health_reports_store_state(client, monkeypatch, connected, state):
    async def fake_ping(engine=None):
        return connected

    monkeypatch.setattr(health, "ping_database", fake_ping)

    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["dbState"] == state
    assert data["uptime"] >= 0
    assert "timestamp" in data


@pytest.mark.parametrize("method, path", [
    ("get", "/api/unknown"),
    ("post", "/health"),
    ("get", "/api/coupons/create"),
])
def test_unmatched_routes(client, method, path):
    response = getattr(client, method)(path)

    assert response.status_code == 404
    assert response.json() == {
        "success": False,
        "message": "Route not found. Please check the URL and HTTP method.",
    }


def test_store_failure_maps_to_generic_500(client, monkeypatch):
    async def broken_lookup(self, code):
        raise SQLAlchemyError("connection reset")

    monkeypatch.setattr(CouponService, "get_by_code", broken_lookup)

    response = client.post("/api/coupons/use/SUMMER10")

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Server error while using coupon"}


def test_uncaught_error_includes_details_outside_production(client, monkeypatch):
    async def explode(self, page, limit):
        raise RuntimeError("boom")

    monkeypatch.setattr(CouponService, "list_coupons", explode)
    unsafe_client = TestClient(app, raise_server_exceptions=False)

    response = unsafe_client.get("/api/coupons")

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "boom"
    assert "RuntimeError" in body["errorDetails"]


def test_uncaught_error_hides_details_in_production(client, monkeypatch):
    async def explode(self, page, limit):
        raise RuntimeError("boom")

    monkeypatch.setattr(CouponService, "list_coupons", explode)
    monkeypatch.setattr(settings, "ENVIRONMENT", "production")
    unsafe_client = TestClient(app, raise_server_exceptions=False)

    response = unsafe_client.get("/api/coupons")

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Server error occurred"}



def test_uncaught_error_is_readable_by_allowed_origins(client, monkeypatch):
    async def explode(self, page, limit):
        raise RuntimeError("boom")

    monkeypatch.setattr(CouponService, "list_coupons", explode)
    unsafe_client = TestClient(app, raise_server_exceptions=False)

    allowed = unsafe_client.get("/api/coupons", headers={"Origin": "http://localhost:5173"})
    unknown = unsafe_client.get("/api/coupons", headers={"Origin": "https://evil.example"})

    assert allowed.status_code == 500
    assert allowed.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert allowed.headers["access-control-allow-credentials"] == "true"
    assert allowed.headers["X-Content-Type-Options"] == "nosniff"
    assert unknown.status_code == 500
    assert "access-control-allow-origin" not in unknown.headers
    assert unknown.headers["X-Frame-Options"] == "SAMEORIGIN"

def test_cors_allows_listed_origin(client):
    response = client.options(
        "/api/coupons",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "GET"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert response.headers["access-control-allow-credentials"] == "true"


def test_cors_rejects_unknown_origin(client):
    response = client.options(
        "/api/coupons",
        headers={"Origin": "https://evil.example", "Access-Control-Request-Method": "GET"},
    )

    assert response.status_code == 400
    assert "access-control-allow-origin" not in response.headers


def test_extra_origins_from_environment(monkeypatch):
    monkeypatch.setattr(settings, "CORS_ORIGINS", "https://admin.example.com, http://localhost:3000")

    origins = settings.allowed_origins

    assert "https://admin.example.com" in origins
    assert origins.count("http://localhost:3000") == 1


class TestRateLimit:

    @pytest.fixture(autouse=True)
    def limits(self, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(settings, "RATE_LIMIT_MAX_REQUESTS", 100)
        monkeypatch.setattr(settings, "RATE_LIMIT_WINDOW_SECONDS", 900)
        monkeypatch.setattr(settings, "TRUSTED_PROXY_HOPS", 0)

    @pytest.mark.asyncio
    async def test_request_within_limit_passes(self, monkeypatch):
        keys = []

        async def fake_hit(key, window_seconds):
            keys.append((key, window_seconds))
            return 100

        monkeypatch.setattr(redis_manager, "hit", fake_hit)

        await rate_limit(make_request())

        assert keys[0][0].startswith("rate_limit:203.0.113.7:")
        assert keys[0][1] == 900

    @pytest.mark.asyncio
    async def test_request_over_limit_is_rejected(self, monkeypatch):
        async def fake_hit(key, window_seconds):
            return 101

        monkeypatch.setattr(redis_manager, "hit", fake_hit)

        with pytest.raises(HTTPException) as exc_info:
            await rate_limit(make_request())

        assert exc_info.value.status_code == 429
        assert exc_info.value.detail == "Too many requests, please try again later."
        assert int(exc_info.value.headers["Retry-After"]) <= 900

    @pytest.mark.asyncio
    async def test_redis_outage_lets_requests_through(self, monkeypatch):
        async def broken_hit(key, window_seconds):
            raise ConnectionError("redis down")

        monkeypatch.setattr(redis_manager, "hit", broken_hit)

        assert await rate_limit(make_request()) is None

    @pytest.mark.asyncio
    async def test_disabled_limiter_skips_redis(self, monkeypatch):
        async def unexpected_hit(key, window_seconds):
            raise AssertionError("limiter should not touch redis")

        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", False)
        monkeypatch.setattr(redis_manager, "hit", unexpected_hit)

        await rate_limit(make_request())

    def test_rejected_request_uses_error_envelope(self, client, monkeypatch):
        async def fake_hit(key, window_seconds):
            return 101

        monkeypatch.setattr(redis_manager, "hit", fake_hit)
        app.dependency_overrides.pop(rate_limit)

        response = client.get("/")

        assert response.status_code == 429
        assert response.json() == {"success": False, "message": "Too many requests, please try again later."}
        assert "Retry-After" in response.headers

    @pytest.mark.asyncio
    async def test_forged_forwarded_for_does_not_reset_the_counter(self, monkeypatch):
        keys = set()

        async def fake_hit(key, window_seconds):
            keys.add(key)
            return len(keys)

        monkeypatch.setattr(redis_manager, "hit", fake_hit)

        for i in range(150):
            await rate_limit(make_request(headers={"X-Forwarded-For": f"198.51.100.{i}"}))

        assert len(keys) == 1
        assert keys.pop().startswith("rate_limit:203.0.113.7:")

    def test_client_identity_ignores_forwarded_for_without_trusted_proxy(self, monkeypatch):
        monkeypatch.setattr(settings, "TRUSTED_PROXY_HOPS", 0)

        request = make_request(headers={"X-Forwarded-For": "198.51.100.1, 10.0.0.1"})

        assert client_identity(request) == "203.0.113.7"
        assert client_identity(make_request()) == "203.0.113.7"

    @pytest.mark.parametrize("hops, expected", [
        (1, "10.0.0.1"),
        (2, "198.51.100.1"),
        (5, "198.51.100.1"),
    ])
    def test_client_identity_skips_trusted_proxies_from_the_right(self, monkeypatch, hops, expected):
        monkeypatch.setattr(settings, "TRUSTED_PROXY_HOPS", hops)

        request = make_request(headers={"X-Forwarded-For": "198.51.100.1, 10.0.0.1"})

        assert client_identity(request) == expected

    def test_client_identity_behind_proxy_without_header(self, monkeypatch):
        monkeypatch.setattr(settings, "TRUSTED_PROXY_HOPS", 1)
        assert client_identity(make_request()) == "203.0.113.7"


class TestRedisReconnect:

    @pytest.fixture
    def unreachable_redis(self, monkeypatch):
        attempts = []

        class FakePool:
            def __init__(self, **kwargs):
                attempts.append(kwargs)

            async def disconnect(self):
                pass

        class FakeRedis:
            def __init__(self, connection_pool):
                self.pool = connection_pool

            async def ping(self):
                raise RedisConnectionError("timed out")

        monkeypatch.setattr(redis_manager_module, "ConnectionPool", FakePool)
        monkeypatch.setattr(redis_manager_module, "redis", SimpleNamespace(Redis=FakeRedis))
        monkeypatch.setattr(settings, "REDIS_RETRY_COOLDOWN_SECONDS", 30)
        return attempts

    @pytest.mark.asyncio
    async def test_failed_connect_is_not_retried_during_cooldown(self, unreachable_redis):
        manager = AsyncRedisManager()

        with pytest.raises(RedisConnectionError):
            await manager.hit("rate_limit:a:1", 900)
        with pytest.raises(RedisConnectionError):
            await manager.hit("rate_limit:a:1", 900)
        assert await manager.ping() is False

        assert len(unreachable_redis) == 1

    @pytest.mark.asyncio
    async def test_reconnects_once_cooldown_has_passed(self, unreachable_redis):
        manager = AsyncRedisManager()
        with pytest.raises(RedisConnectionError):
            await manager.hit("rate_limit:a:1", 900)

        manager._retry_at = 0.0
        with pytest.raises(RedisConnectionError):
            await manager.hit("rate_limit:a:1", 900)

        assert len(unreachable_redis) == 2

    @pytest.mark.asyncio
    async def test_limiter_stays_open_during_outage(self, unreachable_redis, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(redis_manager_module, "redis_manager", AsyncRedisManager())
        monkeypatch.setattr(dependencies, "redis_manager", redis_manager_module.redis_manager)

        assert await rate_limit(make_request()) is None
        assert await rate_limit(make_request()) is None

        assert len(unreachable_redis) == 1


def test_unhandled_loop_errors_trigger_shutdown(monkeypatch):
    calls = []
    monkeypatch.setattr(main_module.os, "kill", lambda pid, sig: calls.append(sig))

    main_module.handle_loop_exception(None, {"message": "Task exception was never retrieved", "exception": RuntimeError("x")})

    assert calls == [signal.SIGTERM]
