"""Action descriptors: declarative descriptions of one request."""

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from courier.errors import InvalidActionError

# Keys consumed by the engine; everything else is domain payload merged
# verbatim into emitted lifecycle events.
RESERVED_KEYS: frozenset[str] = frozenset({
    "types",
    "type",
    "request_id",
    "request",
    "data",
    "origin",
    "actions_after_success",
    "is_auth_req",
    "before",
    "is_ensure_to_send",
    "after_failed",
})


def is_request_intent(intent: Any) -> bool:
    """True when the intent should be routed to the lifecycle engine."""
    if not isinstance(intent, Mapping):
        return False
    return bool(intent.get("request")) or intent.get("prefer_request") is not None


@dataclass(frozen=True)
class LifecycleLabels:
    """Event types emitted for one action.

    An action with a single `type` only gets a SUCCESS label.
    """

    start: str | None = None
    success: str | None = None
    failed: str | None = None

    @classmethod
    def from_action(cls, action: Mapping[str, Any]) -> "LifecycleLabels":
        types = action.get("types")
        if not types:
            return cls(success=action.get("type"))

        if isinstance(types, str) or not isinstance(types, Sequence) or len(types) > 3:
            raise InvalidActionError(f"types must be a (start, success, failed) triple, got {types!r}")

        padded = [*types, None, None][:3]
        return cls(
            start=padded[0],
            success=padded[1] or action.get("type"),
            failed=padded[2],
        )


class ActionDescriptor(Mapping[str, Any]):
    """Read-only view of a submitted action.

    The intent is copied on construction so later changes to the caller's
    mapping cannot leak into an in-flight request.
    """

    __slots__ = ("_fields",)

    def __init__(self, fields: Mapping[str, Any]) -> None:
        self._fields = MappingProxyType(dict(fields))

    @classmethod
    def from_intent(cls, intent: Mapping[str, Any]) -> "ActionDescriptor":
        if isinstance(intent, ActionDescriptor):
            return intent
        if not is_request_intent(intent):
            raise InvalidActionError("Action needs a request callable or a prefer_request record")
        return cls(intent)

    def __getitem__(self, key: str) -> Any:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"ActionDescriptor({dict(self._fields)!r})"

    @property
    def request(self) -> Any:
        return self._fields.get("request")

    @property
    def prefer_request(self) -> dict[str, Any] | None:
        return self._fields.get("prefer_request")

    @property
    def request_id(self) -> str | None:
        return self._fields.get("request_id")

    @property
    def reducer(self) -> str | None:
        return self._fields.get("reducer")

    @property
    def target(self) -> str | None:
        return self._fields.get("target")

    @property
    def origin(self) -> str | None:
        return self._fields.get("origin")

    @property
    def actions_after_success(self) -> list[Mapping[str, Any]]:
        return list(self._fields.get("actions_after_success") or [])

    @property
    def is_auth_req(self) -> bool:
        return bool(self._fields.get("is_auth_req"))

    @property
    def is_silent_request(self) -> bool:
        return bool(self._fields.get("is_silent_request"))

    @property
    def is_ensure_to_send(self) -> bool:
        return bool(self._fields.get("is_ensure_to_send"))

    def payload_fields(self) -> dict[str, Any]:
        """Non-reserved fields, merged into every emitted lifecycle event."""
        return {key: value for key, value in self._fields.items() if key not in RESERVED_KEYS}

    def to_dict(self) -> dict[str, Any]:
        return dict(self._fields)
