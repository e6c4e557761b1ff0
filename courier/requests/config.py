"""Runtime configuration threaded into every lifecycle engine."""

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from courier.config.models.request import CapabilitiesConfig, DefaultPayloadConfig
from courier.config.settings import Settings
from courier.requests.registry import CallbackRegistry
from courier.transport import HttpTransport

TransportFactory = Callable[[str, dict[str, str]], HttpTransport]


class Hooks(BaseModel):
    """Global callbacks wrapping every request. Absent hooks are no-ops."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    before: Callable[..., Any] | None = None
    after: Callable[..., Any] | None = None
    after_success: Callable[..., Any] | None = None
    after_failed: Callable[..., Any] | None = None


class LifecycleConfig(BaseModel):
    """Engine configuration: request settings plus hooks and callbacks.

    Built once and handed to the dispatch gate, which passes it to each
    engine it constructs.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    api_url: str = ""
    path_to_token: str | None = None
    timeout: float = 30.0
    fallback_failure_type: str = "common/REQUEST_FAILED"
    default_payload: DefaultPayloadConfig = Field(default_factory=DefaultPayloadConfig)
    capabilities: CapabilitiesConfig = Field(default_factory=CapabilitiesConfig)
    hooks: Hooks = Field(default_factory=Hooks)
    callbacks: CallbackRegistry = Field(default_factory=CallbackRegistry)
    transport_factory: TransportFactory | None = None
    metrics_enabled: bool = True

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: Any) -> "LifecycleConfig":
        """Build from loaded settings; keyword overrides win."""
        request = settings.request
        values: dict[str, Any] = {
            "api_url": request.api_url,
            "path_to_token": request.path_to_token,
            "timeout": request.timeout,
            "fallback_failure_type": request.fallback_failure_type,
            "default_payload": request.default_payload,
            "capabilities": request.capabilities,
            "metrics_enabled": settings.observability.metrics.enabled,
        }
        values.update(overrides)
        return cls(**values)

    def hook(self, name: str) -> Callable[..., Any] | None:
        """The global hook of that name, unless the capability set disables it."""
        if name not in self.capabilities.hook_names:
            return None
        return getattr(self.hooks, name, None)

    def create_transport(self, base_url: str, headers: dict[str, str]) -> HttpTransport:
        if self.transport_factory is not None:
            return self.transport_factory(base_url, headers)
        return HttpTransport(base_url=base_url, headers=headers, timeout=self.timeout)
