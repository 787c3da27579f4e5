"""Monitoring utilities leveraging Prometheus client."""

from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

http_requests_total = Counter(
    "productdb_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

http_request_latency_seconds = Histogram(
    "productdb_http_request_latency_seconds",
    "HTTP request latency",
    ["method", "path"],
)

catalog_errors_total = Counter(
    "productdb_errors_total",
    "Application errors returned to clients",
    ["code"],
)


def observe_request(method: str, path: str, status: int, duration_seconds: float) -> None:
    http_requests_total.labels(method=method, path=path, status=str(status)).inc()
    http_request_latency_seconds.labels(method=method, path=path).observe(duration_seconds)


def observe_error(code: str) -> None:
    catalog_errors_total.labels(code=code).inc()


def render_metrics() -> tuple[bytes, str]:
    """Return the exposition payload and its content type."""

    return generate_latest(), CONTENT_TYPE_LATEST
