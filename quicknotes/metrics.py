"""Prometheus metrics for QuickNotes.

All metric objects are defined here so they can be imported from any module.
"""

from prometheus_client import Counter, Histogram

# ---------------------------------------------------------------------------
# Store operation metrics
# ---------------------------------------------------------------------------

STORE_OPERATIONS = Counter(
    "quicknotes_store_operations_total",
    "Total number of note store operations",
    ["backend", "operation", "status"],
)

STORE_DURATION = Histogram(
    "quicknotes_store_operation_seconds",
    "Duration of note store operations in seconds",
    ["backend", "operation"],
    buckets=(0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# ---------------------------------------------------------------------------
# HTTP request metrics (reference server)
# ---------------------------------------------------------------------------

HTTP_REQUESTS = Counter(
    "quicknotes_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_DURATION = Histogram(
    "quicknotes_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["endpoint"],
    buckets=(0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0),
)
