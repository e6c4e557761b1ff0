"""Injectable HTTP transport built on httpx.

The lifecycle engine never talks to httpx directly. It hands an
`HttpTransport` to the action's `request` callable, and replays queued
requests through `HttpTransport.replay`. Every call records a replayable
options record (method, absolute URL, headers, body) so a request that
failed at the network level can be re-issued exactly as it was sent.
"""

import base64
import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import httpx

from courier.errors import HTTPStatusError, NetworkError, TransportError
from courier.observability.logging import get_logger

logger = get_logger(__name__)

ResponseCallback = Callable[["TransportResponse"], Awaitable[None] | None]
ErrorCallback = Callable[[TransportError], Awaitable[None] | None]


@dataclass(frozen=True)
class TransportResponse:
    """A received response, decoded once."""

    status: int
    reason: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    text: str = ""
    data: Any = None
    options: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_httpx(cls, response: httpx.Response, options: dict[str, Any]) -> "TransportResponse":
        data = None
        if response.content and "json" in response.headers.get("content-type", ""):
            try:
                data = response.json()
            except ValueError:
                data = None
        return cls(
            status=response.status_code,
            reason=response.reason_phrase,
            headers=dict(response.headers),
            text=response.text,
            data=data,
            options=options,
        )


@dataclass
class ResponseObserver:
    """Callbacks run on every response or failure before the caller sees it."""

    on_response: ResponseCallback | None = None
    on_error: ErrorCallback | None = None


def capture_options(request: httpx.Request) -> dict[str, Any]:
    """Snapshot a prepared request as a replayable options record.

    UTF-8 bodies are kept as text. Any other body is stored base64-encoded
    and flagged with `content_encoding` so replay sends the same bytes.
    """
    options: dict[str, Any] = {
        "method": request.method,
        "url": str(request.url),
        "headers": dict(request.headers),
        "content": None,
    }
    content = request.content
    if not content:
        return options
    try:
        options["content"] = content.decode("utf-8")
    except UnicodeDecodeError:
        options["content"] = base64.b64encode(content).decode("ascii")
        options["content_encoding"] = "base64"
    return options


def replay_content(options: dict[str, Any]) -> str | bytes | None:
    """Body of an options record as it was originally sent."""
    content = options.get("content")
    if content is not None and options.get("content_encoding") == "base64":
        return base64.b64decode(content)
    return content


def failure_details(error: BaseException) -> dict[str, Any]:
    """Status, message and body of the response carried by an error, if any."""
    response = getattr(error, "response", None)
    if isinstance(response, TransportResponse):
        return {"status": response.status, "message": response.reason, "body": response.text}
    if isinstance(response, httpx.Response):
        return {
            "status": response.status_code,
            "message": response.reason_phrase,
            "body": response.text,
        }
    return {}


class HttpTransport:
    """Async HTTP transport bound to one base address.

    Responses with a status of 400 or above are raised as HTTPStatusError;
    connectivity failures are raised as NetworkError.
    """

    def __init__(
        self,
        base_url: str = "",
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.headers = dict(headers or {})
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=self.headers,
            timeout=timeout,
            transport=transport,
        )
        self._observers: list[ResponseObserver] = []

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    def observe(
        self,
        on_response: ResponseCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> ResponseObserver:
        """Install a response observer; returns it for later removal."""
        observer = ResponseObserver(on_response=on_response, on_error=on_error)
        self._observers.append(observer)
        return observer

    def remove_observer(self, observer: ResponseObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    async def send(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        content: str | bytes | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> TransportResponse:
        """Send a request and return the decoded response."""
        request = self._client.build_request(
            method,
            url,
            json=json,
            content=content,
            params=params,
            headers=headers,
        )
        options = capture_options(request)

        try:
            raw = await self._client.send(request)
        except httpx.TransportError as exc:
            error = NetworkError(str(exc) or type(exc).__name__, options)
            logger.debug("transport_network_error", method=method, url=options["url"], error=error.message)
            await self._notify_error(error)
            raise error from exc

        response = TransportResponse.from_httpx(raw, options)
        if response.status >= 400:
            status_error = HTTPStatusError(options, response)
            await self._notify_error(status_error)
            raise status_error

        await self._notify_response(response)
        return response

    async def replay(self, options: dict[str, Any]) -> TransportResponse:
        """Re-issue a captured options record verbatim."""
        return await self.send(
            options["method"],
            options["url"],
            content=replay_content(options),
            headers=options.get("headers"),
        )

    async def get(self, url: str, **kwargs: Any) -> TransportResponse:
        return await self.send("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> TransportResponse:
        return await self.send("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> TransportResponse:
        return await self.send("PUT", url, **kwargs)

    async def patch(self, url: str, **kwargs: Any) -> TransportResponse:
        return await self.send("PATCH", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> TransportResponse:
        return await self.send("DELETE", url, **kwargs)

    async def _notify_response(self, response: TransportResponse) -> None:
        for observer in list(self._observers):
            if observer.on_response is not None:
                result = observer.on_response(response)
                if inspect.isawaitable(result):
                    await result

    async def _notify_error(self, error: TransportError) -> None:
        for observer in list(self._observers):
            if observer.on_error is not None:
                result = observer.on_error(error)
                if inspect.isawaitable(result):
                    await result
