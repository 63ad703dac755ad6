"""Observability helpers: request IDs + structlog contextvars, access logs,
and a Prometheus registry for per-request counters and latency histograms.
"""
