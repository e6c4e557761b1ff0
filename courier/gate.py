"""Dispatch gate: the single entry point for every intent.

Request intents start a lifecycle engine; everything else passes through
to the next stage untouched.
"""

import asyncio
from collections.abc import Callable
from typing import Any

from courier.requests.config import LifecycleConfig
from courier.requests.descriptor import is_request_intent
from courier.requests.engine import RequestLifecycleEngine
from courier.store import Event, NextFn, Store


class DispatchGate:
    """Routes intents between the lifecycle engine and the next stage.

    A request intent returns an `asyncio.Task` resolving to the shaped
    success payload (or raising the request's failure). Must be called
    from within a running event loop for request intents.
    """

    def __init__(self, config: LifecycleConfig | None, store: Store, next: NextFn) -> None:
        self.config = config if config is not None else LifecycleConfig()
        self.store = store
        self.next = next

    def intercept(self, intent: Any) -> Any:
        if not is_request_intent(intent):
            return self.next(intent)

        engine = RequestLifecycleEngine(self.store, intent, self.next, self.config)
        return asyncio.get_running_loop().create_task(engine.send())

    __call__ = intercept


def request_middleware(
    config: LifecycleConfig | None = None,
) -> Callable[[Store], Callable[[NextFn], Callable[[Event], Any]]]:
    """Curried middleware form: `request_middleware(config)(store)(next)(intent)`."""

    def bind_store(store: Store) -> Callable[[NextFn], Callable[[Event], Any]]:
        def bind_next(next: NextFn) -> Callable[[Event], Any]:
            return DispatchGate(config, store, next)

        return bind_next

    return bind_store
