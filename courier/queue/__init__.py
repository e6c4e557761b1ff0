"""Retry queue for requests that failed at the network level."""

from courier.queue.models import (
    ADD_REQUEST_TO_QUEUE,
    REMOVE_REQUEST_FROM_QUEUE,
    QueueState,
    add_request_to_queue,
    remove_request_from_queue,
)
from courier.queue.store import QueueStore, prioritize, queue_reducer, replay_intent

__all__ = [
    "ADD_REQUEST_TO_QUEUE",
    "REMOVE_REQUEST_FROM_QUEUE",
    "QueueState",
    "QueueStore",
    "add_request_to_queue",
    "prioritize",
    "queue_reducer",
    "remove_request_from_queue",
    "replay_intent",
]
