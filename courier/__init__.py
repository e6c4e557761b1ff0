"""Courier: request lifecycle orchestration with a network-failure retry queue.

Usage:
    from courier import LifecycleConfig, request_middleware

    config = LifecycleConfig(api_url="https://api.example.com", path_to_token="auth.token")
    middleware = request_middleware(config)
"""

from courier.gate import DispatchGate, request_middleware
from courier.queue import QueueState, QueueStore, queue_reducer
from courier.requests import (
    ActionDescriptor,
    CallbackRegistry,
    Hooks,
    LifecycleConfig,
    RequestLifecycleEngine,
)
from courier.transport import HttpTransport, TransportResponse

__all__ = [
    "ActionDescriptor",
    "CallbackRegistry",
    "DispatchGate",
    "Hooks",
    "HttpTransport",
    "LifecycleConfig",
    "QueueState",
    "QueueStore",
    "RequestLifecycleEngine",
    "TransportResponse",
    "queue_reducer",
    "request_middleware",
]
