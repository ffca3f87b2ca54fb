"""Service registration with a Consul agent.

This module provides:
- Registry-safe identifier normalization
- Health check selection (TTL heartbeat or HTTP poll)
- Descriptor building for the primary and management endpoints
- Registration against the agent with heartbeat scheduling

Example:
    from consul_registration.discover import ConsulServiceRegistry, InMemoryAgentClient

    registry = ConsulServiceRegistry(InMemoryAgentClient(), HeartbeatProperties(enabled=True))
    await registry.register(builder.build_primary())
    ...
    await registry.deregister(descriptor.id)
    await registry.close()
"""

from __future__ import annotations

from consul_registration.discover.agent import (
    AgentCall,
    AgentClient,
    ConsulAgentClient,
    InMemoryAgentClient,
)
from consul_registration.discover.entities import (
    HealthCheckSpec,
    HttpCheck,
    ServiceDescriptor,
    TtlCheck,
)
from consul_registration.discover.health import build_check
from consul_registration.discover.naming import normalize_for_dns
from consul_registration.discover.registration import HeartbeatScheduler, RegistrationBuilder
from consul_registration.discover.registry import ConsulServiceRegistry, ServiceRegistry

__all__ = [
    "AgentCall",
    "AgentClient",
    "ConsulAgentClient",
    "InMemoryAgentClient",
    "HealthCheckSpec",
    "HttpCheck",
    "ServiceDescriptor",
    "TtlCheck",
    "build_check",
    "normalize_for_dns",
    "HeartbeatScheduler",
    "RegistrationBuilder",
    "ConsulServiceRegistry",
    "ServiceRegistry",
]
