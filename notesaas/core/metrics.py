"""
Prometheus metrics for monitoring.

Metrics collected:
- HTTP request duration (histogram)
- HTTP request count by status code (counter)
- Active requests (gauge)
- Business events: notes, quota rejections, invitations, upgrade requests
"""

from prometheus_client import Counter, Gauge, Histogram, Info

# Application info (filled in during lifespan startup)
app_info = Info("notesaas_app", "NoteSaaS application information")

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0),
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests in progress",
    ["method"],
)

operation_duration_seconds = Histogram(
    "operation_duration_seconds",
    "Duration of instrumented service operations",
    ["operation", "outcome"],
    buckets=(0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

# Business metrics
notes_created_total = Counter(
    "notes_created_total",
    "Total notes created",
    ["plan"],
)

notes_deleted_total = Counter(
    "notes_deleted_total",
    "Total notes deleted",
)

quota_rejections_total = Counter(
    "quota_rejections_total",
    "Operations rejected by the plan quota",
    ["operation", "plan"],
)

invitations_total = Counter(
    "invitations_total",
    "Invitation lifecycle events",
    ["event"],  # issued, accepted, expired, revoked
)

upgrade_requests_total = Counter(
    "upgrade_requests_total",
    "Upgrade request lifecycle events",
    ["status"],  # pending, approved, rejected
)

notifications_dispatch_failures_total = Counter(
    "notifications_dispatch_failures_total",
    "Notification jobs that could not be enqueued",
    ["task_name"],
)
