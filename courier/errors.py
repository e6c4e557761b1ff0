"""Exception hierarchy for the request lifecycle.

Transport failures come in two kinds: network failures, where no
response was received at all, and HTTP status failures, where the server
answered with an error status. Only the first kind is eligible for the
retry queue.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from courier.transport import TransportResponse


class CourierError(Exception):
    """Base exception for all Courier errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidActionError(CourierError):
    """Raised when an action descriptor cannot be executed."""


class UnknownCallbackError(CourierError):
    """Raised when a callback referenced by name is not registered."""

    def __init__(self, reducer: str | None, name: str) -> None:
        super().__init__(f"No callback named {name!r} registered for reducer {reducer!r}")
        self.reducer = reducer
        self.name = name


class TransportError(CourierError):
    """A request that did not complete successfully.

    Attributes:
        options: Replayable transport options captured for the call
        response: The server response, or None when nothing was received
    """

    def __init__(
        self,
        message: str,
        options: dict[str, Any],
        response: "TransportResponse | None" = None,
    ) -> None:
        super().__init__(message)
        self.options = options
        self.response = response


class NetworkError(TransportError):
    """No response was received (connection refused, DNS, timeout...)."""

    def __init__(self, message: str, options: dict[str, Any]) -> None:
        super().__init__(message, options, response=None)


class HTTPStatusError(TransportError):
    """The server responded with an error status."""

    def __init__(self, options: dict[str, Any], response: "TransportResponse") -> None:
        super().__init__(
            f"Request failed with status {response.status}",
            options,
            response=response,
        )

    @property
    def status(self) -> int:
        assert self.response is not None
        return self.response.status

    @property
    def body(self) -> str:
        assert self.response is not None
        return self.response.text


def is_network_failure(error: BaseException) -> bool:
    """True when the error is a transport failure with no response."""
    return isinstance(error, TransportError) and error.response is None
