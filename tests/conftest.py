from __future__ import annotations

from collections.abc import AsyncIterator, Callable

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from uptime_guardian.config import get_settings
from uptime_guardian.main import create_app
from uptime_guardian.observability.metrics import HttpMetrics


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("PORT", "HOST", "LOG_LEVEL", "LOG_FORMAT", "METRICS_ROUTE_LABEL"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()

    yield

    get_settings.cache_clear()


@pytest.fixture
def metrics() -> HttpMetrics:
    registry = HttpMetrics()
    yield registry
    registry.close()


@pytest.fixture
def app(metrics: HttpMetrics) -> FastAPI:
    return create_app(metrics=metrics)


@pytest.fixture
async def api_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    # Unhandled handler errors come back as 500s instead of raising in the test.
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def _sample(metrics: HttpMetrics, name: str, method: str, route: str, status: str) -> float:
    value = metrics.registry.get_sample_value(name, {"method": method, "route": route, "status": status})
    return value or 0.0


@pytest.fixture
def request_count(metrics: HttpMetrics) -> Callable[..., float]:
    """``request_count(method, route, status, registry=None)`` reads ``http_request_total``."""

    def count(method: str, route: str, status: str, registry: HttpMetrics | None = None) -> float:
        return _sample(registry or metrics, "http_request_total", method, route, status)

    return count


@pytest.fixture
def observation_count(metrics: HttpMetrics) -> Callable[..., float]:
    """``observation_count(method, route, status, registry=None)`` reads the histogram's ``_count``."""

    def count(method: str, route: str, status: str, registry: HttpMetrics | None = None) -> float:
        return _sample(registry or metrics, "http_request_duration_seconds_count", method, route, status)

    return count
