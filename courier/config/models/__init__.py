"""Configuration model exports.

    from courier.config.models import RequestConfig, ObservabilityConfig
"""

from courier.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
)
from courier.config.models.request import (
    HOOK_NAMES,
    CapabilitiesConfig,
    DefaultPayloadConfig,
    RequestConfig,
)

__all__ = [
    "HOOK_NAMES",
    "CapabilitiesConfig",
    "DefaultPayloadConfig",
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
    "RequestConfig",
]
