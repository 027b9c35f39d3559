"""Prometheus metrics for user-registry.

Every metric the service exports is defined here so there is one
inventory to read.  Modules import the metric they own and update it at
the point of action; ``/metrics`` serves the default registry.

Counters only go up, so tests assert on deltas between two reads of
``REGISTRY.get_sample_value`` rather than on absolute values.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    # Everything is in memory; anything past 100ms means the process is starved.
    buckets=[0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# User store metrics (updated by app.services.users_service)
# ---------------------------------------------------------------------------

USERS_STORED = Gauge(
    "users_stored",
    "Number of user records currently held in memory",
)

USER_OPERATIONS = Counter(
    "user_operations_total",
    "User store operations by outcome",
    ["operation", "result"],  # create|get|delete, ok|rejected|not_found
)
