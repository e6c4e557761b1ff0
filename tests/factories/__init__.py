"""Test factories: store doubles, mock transports, request functions."""

from tests.factories.stores import RecordingStore
from tests.factories.transport import (
    get_user,
    mock_transport_factory,
    offline_handler,
    ok_handler,
    post_form,
    status_handler,
)

__all__ = [
    "RecordingStore",
    "get_user",
    "mock_transport_factory",
    "offline_handler",
    "ok_handler",
    "post_form",
    "status_handler",
]
