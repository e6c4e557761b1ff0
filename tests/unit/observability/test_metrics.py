"""Tests for Prometheus metrics."""

import pytest
from prometheus_client import REGISTRY

from courier.errors import HTTPStatusError
from courier.observability.metrics import (
    FOLLOW_UP_FAILURES,
    QUEUE_DEPTH,
    QUEUE_EVENTS,
    REQUEST_COUNT,
    REQUEST_LATENCY,
)
from courier.queue import QueueStore, add_request_to_queue, remove_request_from_queue
from tests.factories import get_user, status_handler


def _sample(name: str, labels: dict[str, str] | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestMetricDefinitions:
    """Metrics exist and accept their labels."""

    def test_request_metrics(self) -> None:
        REQUEST_COUNT.labels(outcome="succeeded").inc()
        REQUEST_LATENCY.labels(outcome="succeeded").observe(0.15)

    def test_follow_up_counter(self) -> None:
        FOLLOW_UP_FAILURES.inc()


class TestQueueMetrics:
    """QueueStore keeps queue metrics current."""

    def test_add_and_remove_counted(self) -> None:
        added = _sample("courier_queue_events_total", {"event": "add"})
        removed = _sample("courier_queue_events_total", {"event": "remove"})
        store = QueueStore()

        store.apply(add_request_to_queue("a", {"prefer_request": {}}))
        assert _sample("courier_queue_depth") == 1
        store.apply(remove_request_from_queue("a"))

        assert _sample("courier_queue_events_total", {"event": "add"}) == added + 1
        assert _sample("courier_queue_events_total", {"event": "remove"}) == removed + 1
        assert QUEUE_DEPTH._value.get() == 0

    def test_removing_unknown_id_not_counted(self) -> None:
        removed = QUEUE_EVENTS.labels(event="remove")._value.get()
        QueueStore().apply(remove_request_from_queue("missing"))
        assert QUEUE_EVENTS.labels(event="remove")._value.get() == removed


class TestRequestMetrics:
    """The engine records request outcomes."""

    async def test_failed_request_counted(self, make_store) -> None:
        before = _sample("courier_request_count_total", {"outcome": "failed"})
        store = make_store(status_handler(500))

        with pytest.raises(HTTPStatusError):
            await store.dispatch({"type": "OK", "request": get_user})

        assert _sample("courier_request_count_total", {"outcome": "failed"}) == before + 1

    async def test_metrics_can_be_disabled(self, make_store) -> None:
        before = _sample("courier_request_count_total", {"outcome": "succeeded"})
        store = make_store(metrics_enabled=False)

        await store.dispatch({"type": "OK", "request": get_user})

        assert _sample("courier_request_count_total", {"outcome": "succeeded"}) == before
