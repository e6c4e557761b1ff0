"""Prometheus metrics for Courier.

Request outcomes, latencies, and retry-queue traffic.
"""

from prometheus_client import Counter, Gauge, Histogram

REQUEST_COUNT = Counter(
    "courier_request_count_total",
    "Total number of lifecycle requests by outcome",
    labelnames=["outcome"],
)

REQUEST_LATENCY = Histogram(
    "courier_request_latency_seconds",
    "Time from send to response or failure",
    labelnames=["outcome"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

QUEUE_EVENTS = Counter(
    "courier_queue_events_total",
    "Retry-queue additions and removals",
    labelnames=["event"],
)

QUEUE_DEPTH = Gauge(
    "courier_queue_depth",
    "Number of not-yet-resolved queued requests",
)

FOLLOW_UP_FAILURES = Counter(
    "courier_follow_up_failures_total",
    "Follow-up actions that failed to dispatch",
)
