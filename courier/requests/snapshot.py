"""Queue-entry snapshots of actions that failed at the network level."""

from collections.abc import Mapping
from typing import Any

from courier.requests.descriptor import ActionDescriptor
from courier.requests.registry import callback_name

# Function references a persisted entry cannot carry.
STRIPPED_KEYS: frozenset[str] = frozenset({"request", "after", "before", "after_failed"})


def snapshot_action(action: ActionDescriptor, options: Mapping[str, Any]) -> dict[str, Any]:
    """Build the queue entry for an action from the options it was sent with.

    `before`/`after` survive as registry names when the action declares a
    reducer. Other callables become names under a reducer and are dropped
    without one. Silent requests keep only the replay payload.
    """
    prefer_request = dict(options)
    if action.is_silent_request:
        return {"prefer_request": prefer_request}

    reducer = action.reducer
    snapshot: dict[str, Any] = {}

    for key, value in action.items():
        if key in STRIPPED_KEYS:
            continue
        if key == "actions_after_success":
            snapshot[key] = serialize_follow_ups(value or [])
        elif callable(value):
            if reducer:
                snapshot[key] = callback_name(value)
        else:
            snapshot[key] = value

    if reducer:
        for key in ("before", "after"):
            ref = action.get(key)
            if ref is not None:
                snapshot[key] = ref if isinstance(ref, str) else callback_name(ref)

    snapshot["prefer_request"] = prefer_request
    return snapshot


def serialize_follow_ups(actions: list[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Copy a follow-up chain, replacing function references with names.

    Recurses into nested `actions_after_success`. The input is not modified.
    """
    serialized = []
    for follow_up in actions:
        entry: dict[str, Any] = {}
        for key, value in follow_up.items():
            if key == "actions_after_success":
                entry[key] = serialize_follow_ups(value or [])
            elif callable(value):
                entry[key] = callback_name(value)
            else:
                entry[key] = value
        serialized.append(entry)
    return serialized
