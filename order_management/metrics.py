"""
Prometheus metrics for the Order Management Service.

Tracks HTTP traffic and calls made against the Dataverse store.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Request metrics
http_requests_total = Counter(
    "order_management_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "order_management_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# Dataverse metrics
dataverse_operations_total = Counter(
    "order_management_dataverse_operations_total",
    "Total operations issued against Dataverse",
    ["operation", "entity", "status"],
)

dataverse_operation_duration_seconds = Histogram(
    "order_management_dataverse_operation_duration_seconds",
    "Dataverse operation duration in seconds",
    ["operation", "entity"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)


def track_request(method: str, endpoint: str, status: int, duration: float) -> None:
    """Record an HTTP request."""
    http_requests_total.labels(method=method, endpoint=endpoint, status=str(status)).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)


def track_dataverse_operation(
    operation: str, entity: str, status: str, duration: float
) -> None:
    """Record a Dataverse call (status is ``success``, ``not_found`` or ``error``)."""
    dataverse_operations_total.labels(operation=operation, entity=entity, status=status).inc()
    dataverse_operation_duration_seconds.labels(operation=operation, entity=entity).observe(
        duration
    )


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
