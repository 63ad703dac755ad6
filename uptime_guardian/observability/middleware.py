from __future__ import annotations

import uuid
from time import perf_counter
from typing import Any, Callable

import structlog
from starlette.datastructures import MutableHeaders

from uptime_guardian.observability.metrics import HttpMetrics


UNMATCHED_ROUTE = "<unmatched>"


def _route_label(scope: dict[str, Any], mode: str) -> str:
    if mode == "path":
        return str(scope.get("path") or "/")
    # Routing stores the matched route in the (shared) scope.
    route = scope.get("route")
    template = getattr(route, "path", None)
    return template if isinstance(template, str) else UNMATCHED_ROUTE


def _request_url(scope: dict[str, Any]) -> str:
    url = str(scope.get("path") or "/")
    query = scope.get("query_string") or b""
    if query:
        url = f"{url}?{query.decode('latin-1')}"
    return url


class RequestContextMiddleware:
    """Adds request_id context, access logs, and Prometheus HTTP metrics."""

    def __init__(self, app: Callable[..., Any], metrics: HttpMetrics, route_label: str = "template") -> None:
        self.app = app
        self.metrics = metrics
        self.route_label = route_label

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())
        method = scope.get("method", "GET")
        url = _request_url(scope)

        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=scope.get("path"),
            method=method,
        )

        start = perf_counter()
        status_code: int = 500

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code

            if message.get("type") == "http.response.start":
                status_code = int(message.get("status", 500))
                headers = MutableHeaders(scope=message)
                headers["X-Request-ID"] = request_id

            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed = perf_counter() - start

            # Update metrics first so they update even if logging misbehaves.
            self.metrics.observe(method, _route_label(scope, self.route_label), status_code, elapsed)

            structlog.get_logger("access").info(
                f"{method} {url} {status_code} {round(elapsed * 1000.0)}ms",
                status_code=status_code,
                elapsed_ms=round(elapsed * 1000.0, 2),
            )

            structlog.contextvars.clear_contextvars()
