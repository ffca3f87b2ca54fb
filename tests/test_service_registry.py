from __future__ import annotations

import asyncio

import pytest

from consul_registration.discover.agent import InMemoryAgentClient
from consul_registration.discover.entities import HttpCheck, ServiceDescriptor, TtlCheck
from consul_registration.discover.registry import ConsulServiceRegistry
from consul_registration.exceptions import TransportError


def _descriptor(service_id: str = "orders-1", check=None, acl_token: str = "") -> ServiceDescriptor:
    return ServiceDescriptor(
        id=service_id,
        name="orders",
        address="host-a",
        port=8080,
        check=check,
        acl_token=acl_token,
    )


@pytest.mark.asyncio
async def test_register_ttl_service_starts_heartbeats(agent, fast_heartbeat):
    registry = ConsulServiceRegistry(agent, fast_heartbeat)

    await registry.register(_descriptor(check=TtlCheck(ttl=0.03)))
    await asyncio.sleep(0.05)

    assert "orders-1" in agent.services
    assert registry.scheduler.is_scheduled("orders-1")
    assert agent.passes["service:orders-1"] >= 2

    await registry.close()


@pytest.mark.asyncio
async def test_register_http_service_does_not_heartbeat(agent, fast_heartbeat):
    registry = ConsulServiceRegistry(agent, fast_heartbeat)
    check = HttpCheck(url="http://host-a:8080/health", interval=10, timeout=10)

    await registry.register(_descriptor(check=check))

    assert registry.scheduler.scheduled_ids() == []
    assert agent.calls_for("pass") == []


@pytest.mark.asyncio
async def test_register_passes_descriptor_acl_token(agent):
    registry = ConsulServiceRegistry(agent)

    await registry.register(_descriptor(acl_token="secret"))
    await registry.register(_descriptor("orders-2"))

    tokens = [call.acl_token for call in agent.calls_for("register")]
    assert tokens == ["secret", None]


@pytest.mark.asyncio
async def test_registered_token_is_reused_for_heartbeat_and_deregister(agent, fast_heartbeat):
    registry = ConsulServiceRegistry(agent, fast_heartbeat)

    await registry.register(_descriptor(check=TtlCheck(ttl=0.03), acl_token="secret"))
    await asyncio.sleep(0.01)
    await registry.deregister("orders-1")
    await registry.deregister("orders-1")

    assert {call.acl_token for call in agent.calls_for("pass")} == {"secret"}
    assert [call.acl_token for call in agent.calls_for("deregister")] == ["secret", None]
    await registry.close()


@pytest.mark.asyncio
async def test_failed_register_schedules_nothing(agent, fast_heartbeat):
    registry = ConsulServiceRegistry(agent, fast_heartbeat)
    agent.fail_next("register")

    with pytest.raises(TransportError):
        await registry.register(_descriptor(check=TtlCheck(ttl=0.03)))

    assert registry.scheduler.scheduled_ids() == []


@pytest.mark.asyncio
async def test_deregister_cancels_heartbeat_before_calling_agent(agent, fast_heartbeat):
    registry = ConsulServiceRegistry(agent, fast_heartbeat)
    await registry.register(_descriptor(check=TtlCheck(ttl=0.03)))
    await asyncio.sleep(0)

    await registry.deregister("orders-1")
    await asyncio.sleep(0.05)

    operations = [call.operation for call in agent.calls]
    assert operations[-1] == "deregister"
    assert not registry.scheduler.is_scheduled("orders-1")
    assert "orders-1" not in agent.services


@pytest.mark.asyncio
async def test_failed_deregister_still_stops_heartbeat(agent, fast_heartbeat):
    registry = ConsulServiceRegistry(agent, fast_heartbeat)
    await registry.register(_descriptor(check=TtlCheck(ttl=0.03)))
    agent.fail_next("deregister")

    with pytest.raises(TransportError):
        await registry.deregister("orders-1")

    assert not registry.scheduler.is_scheduled("orders-1")


@pytest.mark.asyncio
async def test_re_register_keeps_a_single_heartbeat(agent, fast_heartbeat):
    registry = ConsulServiceRegistry(agent, fast_heartbeat)

    await registry.register(_descriptor(check=TtlCheck(ttl=0.03)))
    await registry.register(_descriptor(check=TtlCheck(ttl=0.03)))

    assert registry.scheduler.scheduled_ids() == ["orders-1"]
    await registry.close()


@pytest.mark.asyncio
async def test_pass_heartbeat_uses_service_check_id(agent):
    registry = ConsulServiceRegistry(agent)
    await registry.register(_descriptor())

    await registry.pass_heartbeat("orders-1")

    assert agent.calls_for("pass")[0].target == "service:orders-1"
