from __future__ import annotations

import pytest

from consul_registration.config import DiscoveryProperties, HeartbeatProperties
from consul_registration.core.context import RuntimeContext
from consul_registration.discover.agent import InMemoryAgentClient


@pytest.fixture
def agent() -> InMemoryAgentClient:
    return InMemoryAgentClient()


@pytest.fixture
def discovery() -> DiscoveryProperties:
    return DiscoveryProperties(service_name="orders", hostname="host-a")


@pytest.fixture
def heartbeat() -> HeartbeatProperties:
    return HeartbeatProperties()


@pytest.fixture
def fast_heartbeat() -> HeartbeatProperties:
    """TTL checks with a 20ms heartbeat interval."""
    return HeartbeatProperties(enabled=True, ttl=0.03)


@pytest.fixture
def context() -> RuntimeContext:
    ctx = RuntimeContext(app_name="orders", context_id="orders-1")
    ctx.bind_port(8080)
    return ctx
