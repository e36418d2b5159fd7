"""Prometheus metrics for PDF Drive.

Usage::

    from pdf_drive.observability.metrics import SHARE_OPERATIONS_TOTAL

    SHARE_OPERATIONS_TOTAL.labels(operation="grant", outcome="ok").inc()
"""

from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# ---------------------------------------------------------------------------
# HTTP request metrics
# ---------------------------------------------------------------------------

HTTP_REQUESTS_TOTAL = Counter(
    "pdf_drive_http_requests_total",
    "HTTP requests by method, route template, and status code.",
    labelnames=["method", "route", "status"],
    registry=REGISTRY,
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "pdf_drive_http_request_duration_seconds",
    "HTTP request latency in seconds, by route template.",
    labelnames=["method", "route"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
    registry=REGISTRY,
)

HTTP_REQUESTS_IN_FLIGHT = Gauge(
    "pdf_drive_http_requests_in_flight",
    "HTTP requests currently being served.",
    registry=REGISTRY,
)

# ---------------------------------------------------------------------------
# Sharing metrics
# ---------------------------------------------------------------------------

SHARE_OPERATIONS_TOTAL = Counter(
    "pdf_drive_share_operations_total",
    "Sharing operations by kind and outcome.",
    labelnames=["operation", "outcome"],
    registry=REGISTRY,
)

ACCESS_DENIED_TOTAL = Counter(
    "pdf_drive_access_denied_total",
    "Authorization denials by access path.",
    labelnames=["path"],
    registry=REGISTRY,
)


def metrics_text() -> tuple[bytes, str]:
    """Generate Prometheus exposition text and content-type header."""
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST
