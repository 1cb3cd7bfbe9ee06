"""
Prometheus metrics for GroupHug submissions.

Module-level metric objects (singletons, thread-safe) registered in the
default ``prometheus_client`` registry. A hosting web process exposes them
with its own ``/metrics`` endpoint (e.g. ``prometheus_client.make_wsgi_app``
or ``generate_latest``); this package never starts a server.

Metrics:
    SUBMISSIONS_TOTAL:            Outcomes by status (accepted/rejected/unavailable).
    CONNECTIONS_OPENED:           Backend connections successfully established.
    CONNECTIONS_CLOSED:           Backend connections released.
    SUBMISSION_DURATION_SECONDS:  Wall-clock time of one exchange.

``CONNECTIONS_OPENED - CONNECTIONS_CLOSED`` is the number of backend
sockets currently held; outside an in-flight submission it is zero.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram


SUBMISSIONS_TOTAL = Counter(
    "grouphug_submissions_total",
    "Transaction submissions by outcome status",
    ["status"],
)

CONNECTIONS_OPENED = Counter(
    "grouphug_connections_opened_total",
    "Backend relay connections established",
)

CONNECTIONS_CLOSED = Counter(
    "grouphug_connections_closed_total",
    "Backend relay connections released",
)

SUBMISSION_DURATION_SECONDS = Histogram(
    "grouphug_submission_duration_seconds",
    "Duration of one backend exchange in seconds",
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30),
)
