"""Request lifecycle: descriptors, engine, and the named-callback registry."""

from courier.requests.config import Hooks, LifecycleConfig
from courier.requests.descriptor import (
    RESERVED_KEYS,
    ActionDescriptor,
    LifecycleLabels,
    is_request_intent,
)
from courier.requests.engine import LifecyclePhase, RequestLifecycleEngine
from courier.requests.registry import CallbackRegistry, callback_name

__all__ = [
    "RESERVED_KEYS",
    "ActionDescriptor",
    "CallbackRegistry",
    "Hooks",
    "LifecycleConfig",
    "LifecycleLabels",
    "LifecyclePhase",
    "RequestLifecycleEngine",
    "callback_name",
    "is_request_intent",
]
