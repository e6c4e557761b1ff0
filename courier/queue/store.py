"""Queue Store: reducer and in-process holder for the retry queue."""

from collections.abc import Callable
from typing import Any

from courier.observability import metrics
from courier.observability.logging import get_logger
from courier.queue.models import (
    ADD_REQUEST_TO_QUEUE,
    REMOVE_REQUEST_FROM_QUEUE,
    QueueState,
)

logger = get_logger(__name__)


def prioritize(entries: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Order entries by descending priority; ties keep insertion order."""
    return sorted(entries, key=lambda entry: -(entry.get("priority") or 0))


def queue_reducer(state: QueueState | None, event: dict[str, Any]) -> QueueState:
    """Apply a queue event to the state, returning a new state.

    Unknown events return the state unchanged.
    """
    if state is None:
        state = QueueState()

    event_type = event.get("type")

    if event_type == ADD_REQUEST_TO_QUEUE:
        entries = prioritize([*state.not_done_requests, dict(event["data"])])
        return state.model_copy(update={"not_done_requests": entries})

    if event_type == REMOVE_REQUEST_FROM_QUEUE:
        request_id = event.get("request_id")
        entries = [
            entry for entry in state.not_done_requests if entry.get("request_id") != request_id
        ]
        return state.model_copy(update={"not_done_requests": entries})

    return state


class QueueStore:
    """Holds the retry queue and applies add/remove events to it.

    Suitable as the queue slot of a surrounding store: feed every event
    through `apply` and read `state`.
    """

    def __init__(self, state: QueueState | None = None) -> None:
        self._state = state or QueueState()

    @property
    def state(self) -> QueueState:
        return self._state

    @property
    def entries(self) -> list[dict[str, Any]]:
        return list(self._state.not_done_requests)

    def __len__(self) -> int:
        return len(self._state.not_done_requests)

    def get(self, request_id: str) -> dict[str, Any] | None:
        """Return the entry with the given id, if queued."""
        for entry in self._state.not_done_requests:
            if entry.get("request_id") == request_id:
                return entry
        return None

    def apply(self, event: dict[str, Any]) -> QueueState:
        """Reduce an event into the queue state."""
        previous = len(self)
        self._state = queue_reducer(self._state, event)

        if event.get("type") == ADD_REQUEST_TO_QUEUE:
            metrics.QUEUE_EVENTS.labels(event="add").inc()
            logger.info(
                "request_queued",
                request_id=event["data"].get("request_id"),
                queue_depth=len(self),
            )
        elif event.get("type") == REMOVE_REQUEST_FROM_QUEUE and len(self) < previous:
            metrics.QUEUE_EVENTS.labels(event="remove").inc()
            logger.info("request_dequeued", request_id=event.get("request_id"), queue_depth=len(self))

        metrics.QUEUE_DEPTH.set(len(self))
        return self._state

    def dump(self) -> str:
        """Serialize the queue to JSON."""
        return self._state.model_dump_json()

    @classmethod
    def load(cls, raw: str | bytes) -> "QueueStore":
        """Restore a queue serialized with `dump`."""
        return cls(QueueState.model_validate_json(raw))


def replay_intent(
    entry: dict[str, Any],
    request: Callable[..., Any] | str | None = None,
) -> dict[str, Any]:
    """Build a dispatchable intent that replays a queue entry.

    The entry carries `prefer_request` and `request_id`, so dispatching the
    intent re-issues the captured call and removes the entry once a reply
    or failure is observed. `request` re-binds the request function that was
    stripped when the entry was queued; the captured call still takes
    precedence over it.
    """
    intent = dict(entry)
    if request is not None:
        intent["request"] = request
    return intent
