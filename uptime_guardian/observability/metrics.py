from __future__ import annotations

from threading import Lock

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    GCCollector,
    Histogram,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)


REQUEST_DURATION_BUCKETS = (0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0)
LABEL_NAMES = ("method", "route", "status")


class HttpMetrics:
    """Process-local Prometheus registry for HTTP traffic (resets on restart).

    Owns one ``CollectorRegistry`` holding the request counter, the request
    duration histogram and, unless disabled, the default process/platform/GC
    collectors. Create one per application and call ``close()`` on shutdown.
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry: CollectorRegistry | None = None, *, process_metrics: bool = True) -> None:
        self._lock = Lock()
        self.registry = registry if registry is not None else CollectorRegistry()

        self.requests_total = Counter(
            "http_request_total",
            "Total number of HTTP requests handled",
            LABEL_NAMES,
            registry=self.registry,
        )
        self.request_duration_seconds = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            LABEL_NAMES,
            buckets=REQUEST_DURATION_BUCKETS,
            registry=self.registry,
        )

        self._collectors: list[object] = [self.requests_total, self.request_duration_seconds]
        if process_metrics:
            self._collectors.extend(
                [
                    ProcessCollector(registry=self.registry),
                    PlatformCollector(registry=self.registry),
                    GCCollector(registry=self.registry),
                ]
            )

    def observe(self, method: str, route: str, status: int | str, elapsed_seconds: float) -> None:
        """Count one finished request and record its duration under the same labels."""

        labels = (method, route, str(status))
        with self._lock:
            self.requests_total.labels(*labels).inc()
            self.request_duration_seconds.labels(*labels).observe(max(float(elapsed_seconds), 0.0))

    def render(self) -> bytes:
        """Serialize the whole registry in the Prometheus text exposition format."""

        return generate_latest(self.registry)

    def close(self) -> None:
        """Unregister every collector this object added."""

        with self._lock:
            for collector in self._collectors:
                try:
                    self.registry.unregister(collector)  # type: ignore[arg-type]
                except KeyError:
                    # Already unregistered.
                    pass
            self._collectors = []
