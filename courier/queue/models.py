"""Retry-queue state and events."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

ADD_REQUEST_TO_QUEUE = "core/ADD_REQUEST_TO_QUEUE"
REMOVE_REQUEST_FROM_QUEUE = "core/REMOVE_REQUEST_FROM_QUEUE"


class QueueState(BaseModel):
    """Ordered set of not-yet-resolved queued requests.

    Entries are plain mappings: the snapshot of the failed action plus
    `prefer_request` (the replayable options record) and `request_id`.
    """

    model_config = ConfigDict(frozen=True)

    not_done_requests: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Queued entries, highest priority first",
    )


def add_request_to_queue(request_id: str, data: dict[str, Any]) -> dict[str, Any]:
    """Event that inserts a queue entry."""
    return {
        "type": ADD_REQUEST_TO_QUEUE,
        "data": {**data, "request_id": request_id},
    }


def remove_request_from_queue(request_id: str) -> dict[str, Any]:
    """Event that removes the queue entry with the given id."""
    return {
        "type": REMOVE_REQUEST_FROM_QUEUE,
        "request_id": request_id,
    }
