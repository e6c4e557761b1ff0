"""Request lifecycle engine.

Turns one action descriptor into a sequence of lifecycle events:

    START -> (SUCCESS | FAILED)

Global hooks always run before the action's own callbacks at the same
point. When an action asks for guaranteed delivery, a response observer on
the transport moves network-failed requests into the retry queue and
removes replayed entries once any reply arrives. A replay that fails before
reaching the transport is removed as well.
"""

import asyncio
import inspect
import time
from collections.abc import Callable, Mapping
from enum import StrEnum
from typing import Any
from uuid import uuid4

import httpx

from courier.errors import CourierError, TransportError, is_network_failure
from courier.observability import metrics
from courier.observability.logging import get_logger
from courier.queue.models import add_request_to_queue, remove_request_from_queue
from courier.requests.config import LifecycleConfig
from courier.requests.descriptor import ActionDescriptor, LifecycleLabels
from courier.requests.snapshot import snapshot_action
from courier.store import Event, NextFn, Store, StoreAccess
from courier.transport import TransportResponse, failure_details
from courier.utils.lookup import get_path

logger = get_logger(__name__)

# Follow-up dispatches still in flight; held until done so they are not collected.
_follow_up_tasks: set[asyncio.Future] = set()


class LifecyclePhase(StrEnum):
    """Phases of a single engine invocation."""

    CREATED = "created"
    BEFORE_HOOKS = "before_hooks"
    SENT = "sent"
    SUCCESS = "success"
    FAILED = "failed"
    TERMINAL = "terminal"


_TRANSITIONS: dict[LifecyclePhase, frozenset[LifecyclePhase]] = {
    LifecyclePhase.CREATED: frozenset({LifecyclePhase.BEFORE_HOOKS, LifecyclePhase.TERMINAL}),
    LifecyclePhase.BEFORE_HOOKS: frozenset({LifecyclePhase.SENT, LifecyclePhase.TERMINAL}),
    LifecyclePhase.SENT: frozenset({
        LifecyclePhase.SUCCESS,
        LifecyclePhase.FAILED,
        LifecyclePhase.TERMINAL,
    }),
    LifecyclePhase.SUCCESS: frozenset({LifecyclePhase.TERMINAL}),
    LifecyclePhase.FAILED: frozenset({LifecyclePhase.TERMINAL}),
    LifecyclePhase.TERMINAL: frozenset(),
}


class IllegalTransitionError(CourierError):
    """Raised when an engine is driven out of lifecycle order."""


def new_request_id() -> str:
    """Collision-resistant identifier for a queue entry."""
    return uuid4().hex


def response_data(result: Any) -> Any:
    """Extract the payload of a request result.

    Transport responses contribute their decoded body; any other value
    (for instance one returned by an `after` callback) is the payload itself.
    """
    if isinstance(result, TransportResponse):
        return result.data
    if isinstance(result, httpx.Response):
        try:
            return result.json() if result.content else None
        except ValueError:
            return None
    return result


def response_status(result: Any) -> int | None:
    if isinstance(result, TransportResponse):
        return result.status
    if isinstance(result, httpx.Response):
        return result.status_code
    return getattr(result, "status", None)


async def _call(fn: Callable[..., Any] | None, *args: Any, **kwargs: Any) -> Any:
    """Invoke a sync or async callback; no-op when absent."""
    if fn is None:
        return None
    result = fn(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


class RequestLifecycleEngine:
    """Executes one action against an injected transport.

    An engine is bound to a single action and a single invocation of
    `send()`; construct a new one per request.
    """

    def __init__(
        self,
        store: Store,
        action: Mapping[str, Any],
        next: NextFn,
        config: LifecycleConfig | None = None,
    ) -> None:
        self.action = ActionDescriptor.from_intent(action)
        self.labels = LifecycleLabels.from_action(self.action)
        self.store = store
        self.next = next
        self.config = config if config is not None else LifecycleConfig()
        self.phase = LifecyclePhase.CREATED

        self.transport_headers = self._auth_headers()
        self.transport = self.config.create_transport(
            self.action.origin or self.config.api_url,
            self.transport_headers,
        )
        self._raw_response: Any = None
        self._dequeued = False
        self._log = logger.bind(
            action_type=self.labels.success or self.labels.start,
            request_id=self.action.request_id,
        )

    @property
    def access(self) -> StoreAccess:
        return StoreAccess.of(self.store)

    @property
    def target(self) -> str | None:
        if not self.config.capabilities.supports_target:
            return None
        return self.action.target

    def _advance(self, phase: LifecyclePhase) -> None:
        if phase not in _TRANSITIONS[self.phase]:
            raise IllegalTransitionError(f"Cannot move from {self.phase} to {phase}")
        self.phase = phase

    def _auth_headers(self) -> dict[str, str]:
        if not (self.action.is_auth_req and self.config.capabilities.supports_auth_header):
            return {}
        token = get_path(self.store.get_state(), self.config.path_to_token)
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    def _resolve(self, ref: Any) -> Callable[..., Any] | None:
        return self.config.callbacks.resolve(self.action.reducer, ref)

    def _to_target(self, payload: Any) -> Any:
        if self.target:
            return {self.target: payload}
        return payload

    def _emit(self, event: Event) -> None:
        self.next(event)

    async def send(self) -> Any:
        """Run the full lifecycle and return the shaped success payload.

        Failures of the request are re-raised after FAILED handling.
        """
        try:
            self._advance(LifecyclePhase.BEFORE_HOOKS)
            await self._run_before_hooks()

            if self.action.is_ensure_to_send or self.action.request_id:
                self._install_queue_observer()

            self._emit_start()
            self._advance(LifecyclePhase.SENT)

            started = time.monotonic()
            try:
                result = await self._perform()
                result = await self._apply_after(result)
            except Exception as exc:
                self._advance(LifecyclePhase.FAILED)
                self._record("failed", started)
                await self._handle_failure(exc)
                raise

            self._advance(LifecyclePhase.SUCCESS)
            self._record("succeeded", started)
            return await self._handle_success(result)
        except Exception:
            self._dequeue()
            raise
        finally:
            if self.phase is not LifecyclePhase.TERMINAL:
                self._advance(LifecyclePhase.TERMINAL)
            await self.transport.aclose()

    async def _run_before_hooks(self) -> None:
        await _call(
            self.config.hook("before"),
            action=self.action,
            get_state=self.store.get_state,
            dispatch=self.store.dispatch,
            transport=self.transport,
        )
        await _call(self._resolve(self.action.get("before")), self.store.get_state(), self.store.dispatch)

    def _emit_start(self) -> None:
        if not self.labels.start:
            return
        self._log.debug("request_started", event_type=self.labels.start)
        self._emit({
            "type": self.labels.start,
            "data": self._to_target(dict(self.config.default_payload.in_progress)),
            **self.action.payload_fields(),
        })

    async def _perform(self) -> Any:
        if self.action.prefer_request is not None:
            self._raw_response = await self.transport.replay(self.action.prefer_request)
            return self._raw_response

        request = self._resolve(self.action.request)
        self._raw_response = await _call(request, self.transport, self.access)
        return self._raw_response

    async def _apply_after(self, result: Any) -> Any:
        after = self._resolve(self.action.get("after"))
        if after is None:
            return result
        replaced = await _call(after, result, self.store.dispatch, self.store.get_state)
        return result if replaced is None else replaced

    def _shape_success(self, result: Any) -> Any:
        data = response_data(result)
        if data is None:
            data = {}
        defaults = self.config.default_payload.success

        if self.target:
            return {self.target: {"response": data, **defaults}}
        if isinstance(data, Mapping):
            return {**defaults, **data}
        return data

    async def _handle_success(self, result: Any) -> Any:
        data = self._shape_success(result)

        follow_ups = self.action.actions_after_success
        if follow_ups:
            self._schedule_follow_ups(follow_ups)

        if self.labels.success:
            self._emit({"type": self.labels.success, "data": data, **self.action.payload_fields()})

        await _call(self.config.hook("after"), data=data, get_state=self.store.get_state, dispatch=self.store.dispatch)
        await _call(
            self.config.hook("after_success"),
            data=data,
            response=self._raw_response,
            get_state=self.store.get_state,
            dispatch=self.store.dispatch,
        )

        status = response_status(self._raw_response)
        if status is not None and status < 300:
            await _call(self._resolve(self.action.get("on_success_request")), data=data, store=self.access)
        if status is not None and status >= 400:
            await _call(
                self._resolve(self.action.get("on_failed_request")),
                response=self._raw_response,
                store=self.access,
            )

        self._log.info("request_succeeded", status=status)
        return data

    async def _handle_failure(self, error: Exception) -> None:
        await _call(
            self.config.hook("after_failed"),
            error=error,
            get_state=self.store.get_state,
            dispatch=self.store.dispatch,
        )
        await _call(self._resolve(self.action.get("after_failed")), error, self.store.dispatch, self.store.get_state)
        await _call(
            self._resolve(self.action.get("on_failed_request")),
            response=getattr(error, "response", None),
            store=self.access,
        )

        details = failure_details(error)
        if self.labels.failed:
            self._emit({
                "type": self.labels.failed,
                **details,
                "data": self._to_target(dict(self.config.default_payload.failed)),
                **self.action.payload_fields(),
            })
        elif details:
            self._log.info("fallback_failure_emitted", status=details.get("status"))
            self._emit({"type": self.config.fallback_failure_type, **details})

        self._log.warning(
            "request_failed",
            error=str(error),
            error_type=type(error).__name__,
            status=details.get("status"),
        )

    def _record(self, outcome: str, started: float) -> None:
        if not self.config.metrics_enabled:
            return
        metrics.REQUEST_COUNT.labels(outcome=outcome).inc()
        metrics.REQUEST_LATENCY.labels(outcome=outcome).observe(time.monotonic() - started)

    def _install_queue_observer(self) -> None:
        request_id = self.action.request_id

        def on_response(_response: TransportResponse) -> None:
            self._dequeue()

        def on_error(error: TransportError) -> None:
            try:
                if not request_id and is_network_failure(error):
                    self._enqueue(error)
                else:
                    self._dequeue()
            except Exception as exc:
                self._log.error("request_queue_failed", error=str(exc), error_type=type(exc).__name__)
                self._dequeue()

        self.transport.observe(on_response=on_response, on_error=on_error)

    def _dequeue(self) -> None:
        """Remove the replayed entry this engine runs for, at most once."""
        request_id = self.action.request_id
        if not request_id or self._dequeued:
            return
        self._dequeued = True
        self.store.dispatch(remove_request_from_queue(request_id))

    def _enqueue(self, error: TransportError) -> None:
        request_id = new_request_id()
        snapshot = snapshot_action(self.action, error.options)
        self._log.info("request_enqueued", queued_request_id=request_id, silent=self.action.is_silent_request)
        self.store.dispatch(add_request_to_queue(request_id, snapshot))

    def _schedule_follow_ups(self, follow_ups: list[Mapping[str, Any]]) -> None:
        asyncio.get_running_loop().call_soon(self._fire_follow_ups, follow_ups)

    def _fire_follow_ups(self, follow_ups: list[Mapping[str, Any]]) -> None:
        for follow_up in follow_ups:
            try:
                outcome = self.store.dispatch(dict(follow_up))
            except Exception as exc:
                self._follow_up_failed(follow_up, exc)
                continue

            if isinstance(outcome, asyncio.Future):
                _follow_up_tasks.add(outcome)
                outcome.add_done_callback(
                    lambda task, follow_up=follow_up: self._follow_up_done(follow_up, task)
                )

    def _follow_up_done(self, follow_up: Mapping[str, Any], task: asyncio.Future) -> None:
        _follow_up_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._follow_up_failed(follow_up, exc)

    def _follow_up_failed(self, follow_up: Mapping[str, Any], exc: BaseException) -> None:
        if self.config.metrics_enabled:
            metrics.FOLLOW_UP_FAILURES.inc()
        self._log.warning(
            "follow_up_action_failed",
            follow_up_type=follow_up.get("type") or follow_up.get("types"),
            error=str(exc),
            error_type=type(exc).__name__,
        )
