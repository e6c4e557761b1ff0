"""Interface of the surrounding state container.

Courier does not implement a store. It consumes anything that can
dispatch events and report its current state, and emits lifecycle events
through a `next` callable supplied by the middleware chain.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

Event = dict[str, Any]
NextFn = Callable[[Event], Any]


class Store(Protocol):
    """Minimal store surface used by the dispatch gate and engine."""

    def dispatch(self, event: Event) -> Any: ...

    def get_state(self) -> Any: ...


@dataclass(frozen=True)
class StoreAccess:
    """Store accessors handed to request functions and result callbacks."""

    get_state: Callable[[], Any]
    dispatch: Callable[[Event], Any]

    @classmethod
    def of(cls, store: Store) -> "StoreAccess":
        return cls(get_state=store.get_state, dispatch=store.dispatch)
