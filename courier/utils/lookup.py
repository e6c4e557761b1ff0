"""Path lookup into nested state trees."""

from collections.abc import Mapping, Sequence
from typing import Any

_MISSING = object()


def get_path(state: Any, path: str | Sequence[str] | None, default: Any = None) -> Any:
    """Read a value at a dotted path from nested mappings, sequences or objects.

    `get_path({"auth": {"token": "t"}}, "auth.token")` returns "t". Missing
    segments return `default`.
    """
    if not path:
        return default

    parts = path.split(".") if isinstance(path, str) else list(path)
    current = state
    for part in parts:
        current = _step(current, part)
        if current is _MISSING:
            return default
    return current


def _step(current: Any, part: str) -> Any:
    if current is None:
        return _MISSING
    if isinstance(current, Mapping):
        return current.get(part, _MISSING)
    if isinstance(current, Sequence) and not isinstance(current, str) and part.isdigit():
        index = int(part)
        return current[index] if index < len(current) else _MISSING
    return getattr(current, part, _MISSING)
