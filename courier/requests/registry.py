"""Named-callback registry.

Queued actions lose their function references when snapshotted. Callbacks
an action may need after replay are registered under the action's
`reducer` and referenced by name in the queue entry.
"""

from collections.abc import Callable
from typing import Any

from courier.errors import UnknownCallbackError

Callback = Callable[..., Any]


def callback_name(fn: Callback) -> str:
    """Name under which a function is stored in a queue entry."""
    return getattr(fn, "__courier_name__", None) or getattr(fn, "__name__", repr(fn))


class CallbackRegistry:
    """Lookup table of callbacks keyed by (reducer, name).

    Usage:
        registry = CallbackRegistry()

        @registry.register("profile")
        def refresh_profile(result, dispatch, get_state):
            ...

        registry.resolve("profile", "refresh_profile")
    """

    def __init__(self) -> None:
        self._callbacks: dict[tuple[str | None, str], Callback] = {}

    def register(
        self,
        reducer: str | None,
        fn: Callback | None = None,
        *,
        name: str | None = None,
    ) -> Any:
        """Register a callback; usable directly or as a decorator."""

        def _register(func: Callback) -> Callback:
            key = name or func.__name__
            if name:
                func.__courier_name__ = name  # type: ignore[attr-defined]
            self._callbacks[(reducer, key)] = func
            return func

        if fn is not None:
            return _register(fn)
        return _register

    def resolve(self, reducer: str | None, ref: Any) -> Callback | None:
        """Return a callable for a direct reference or a registered name.

        Names are looked up under the reducer first, then among callbacks
        registered without one.
        """
        if ref is None or callable(ref):
            return ref
        if not isinstance(ref, str):
            raise TypeError(f"Callback reference must be callable or str, got {type(ref).__name__}")

        for key in ((reducer, ref), (None, ref)):
            if key in self._callbacks:
                return self._callbacks[key]
        raise UnknownCallbackError(reducer, ref)

    def __contains__(self, key: tuple[str | None, str]) -> bool:
        return key in self._callbacks

    def __len__(self) -> int:
        return len(self._callbacks)
