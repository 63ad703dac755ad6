from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from uptime_guardian import __version__
from uptime_guardian.api.health import router as health_router
from uptime_guardian.api.metrics import router as metrics_router
from uptime_guardian.config import Settings, get_settings
from uptime_guardian.observability.metrics import HttpMetrics
from uptime_guardian.observability.middleware import RequestContextMiddleware


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    app.state.metrics.close()


def create_app(settings: Settings | None = None, metrics: HttpMetrics | None = None) -> FastAPI:
    """Build the service with its own metrics registry."""

    settings = settings or get_settings()
    metrics = metrics or HttpMetrics()

    app = FastAPI(title="Uptime Guardian", version=__version__, lifespan=_lifespan)
    app.state.metrics = metrics
    app.add_middleware(
        RequestContextMiddleware,
        metrics=metrics,
        route_label=settings.metrics_route_label,
    )
    app.include_router(health_router)
    app.include_router(metrics_router)
    return app
