"""Configuration models and loaders."""

from .loader import (
    ConfigError,
    get_default_config_path,
    load_config,
    load_config_with_overloads,
    load_default_config,
)
from .models import (
    AgentConfig,
    DiscoveryProperties,
    HeartbeatProperties,
    RegistrationConfig,
    RetryConfig,
)

__all__ = [
    "AgentConfig",
    "ConfigError",
    "DiscoveryProperties",
    "HeartbeatProperties",
    "RegistrationConfig",
    "RetryConfig",
    "get_default_config_path",
    "load_config",
    "load_config_with_overloads",
    "load_default_config",
]
