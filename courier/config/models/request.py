"""Request lifecycle configuration models.

These are the serializable parts of the engine configuration. Callables
(hooks, named callbacks, transport factory) live on
`courier.requests.config.LifecycleConfig`.
"""

from typing import Any

from pydantic import BaseModel, Field

HOOK_NAMES: tuple[str, ...] = ("before", "after", "after_success", "after_failed")


class DefaultPayloadConfig(BaseModel):
    """Fixed fields merged into the data of emitted lifecycle events."""

    in_progress: dict[str, Any] = Field(
        default_factory=dict,
        description="Merged into START event data",
    )
    success: dict[str, Any] = Field(
        default_factory=dict,
        description="Merged into SUCCESS event data",
    )
    failed: dict[str, Any] = Field(
        default_factory=dict,
        description="Merged into FAILED event data",
    )


class CapabilitiesConfig(BaseModel):
    """Feature switches for the lifecycle engine."""

    supports_auth_header: bool = Field(
        default=True,
        description="Attach a bearer token for actions with is_auth_req",
    )
    supports_target: bool = Field(
        default=True,
        description="Nest payloads under the action's target key",
    )
    hook_names: tuple[str, ...] = Field(
        default=HOOK_NAMES,
        description="Global hooks the engine is allowed to invoke",
    )


class RequestConfig(BaseModel):
    """Request lifecycle configuration."""

    api_url: str = Field(default="", description="Default transport base address")
    path_to_token: str | None = Field(
        default=None,
        description="Dotted path to the bearer token in store state",
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Default transport timeout in seconds",
    )
    fallback_failure_type: str = Field(
        default="common/REQUEST_FAILED",
        description="Event type emitted for HTTP failures of actions without a FAILED label",
    )
    default_payload: DefaultPayloadConfig = Field(
        default_factory=DefaultPayloadConfig,
        description="Default event payloads",
    )
    capabilities: CapabilitiesConfig = Field(
        default_factory=CapabilitiesConfig,
        description="Engine capability set",
    )
