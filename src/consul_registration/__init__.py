"""Public API for consul_registration.

This module intentionally re-exports the stable, supported surface area of the
library. Import from here when possible.
"""

from consul_registration.config import (
    AgentConfig,
    ConfigError,
    DiscoveryProperties,
    HeartbeatProperties,
    RegistrationConfig,
    RetryConfig,
    load_config,
)
from consul_registration.core.context import RuntimeContext
from consul_registration.discover import (
    AgentClient,
    ConsulAgentClient,
    ConsulServiceRegistry,
    HeartbeatScheduler,
    HttpCheck,
    InMemoryAgentClient,
    RegistrationBuilder,
    ServiceDescriptor,
    ServiceRegistry,
    TtlCheck,
    build_check,
    normalize_for_dns,
)
from consul_registration.exceptions import (
    InvalidIdentifierError,
    MissingPortError,
    RegistrationException,
    TransportError,
)
from consul_registration.lifecycle import LifecycleController, LifecycleState

__all__ = [
    # config
    "AgentConfig",
    "ConfigError",
    "DiscoveryProperties",
    "HeartbeatProperties",
    "RegistrationConfig",
    "RetryConfig",
    "load_config",
    # registration
    "RuntimeContext",
    "AgentClient",
    "ConsulAgentClient",
    "ConsulServiceRegistry",
    "HeartbeatScheduler",
    "HttpCheck",
    "InMemoryAgentClient",
    "RegistrationBuilder",
    "ServiceDescriptor",
    "ServiceRegistry",
    "TtlCheck",
    "build_check",
    "normalize_for_dns",
    # lifecycle
    "LifecycleController",
    "LifecycleState",
    # errors
    "InvalidIdentifierError",
    "MissingPortError",
    "RegistrationException",
    "TransportError",
]
