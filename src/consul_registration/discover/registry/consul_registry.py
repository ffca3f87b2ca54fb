from __future__ import annotations

import logging

from consul_registration.config.models import HeartbeatProperties
from consul_registration.discover.agent.base import AgentClient
from consul_registration.discover.entities import ServiceDescriptor
from consul_registration.discover.registration.heartbeat import HeartbeatScheduler
from consul_registration.discover.registry.service_registry import ServiceRegistry
from consul_registration.utils.constant import SERVICE_CHECK_PREFIX

logger = logging.getLogger(__name__)

__all__ = ["ConsulServiceRegistry"]


class ConsulServiceRegistry(ServiceRegistry):
    """Registers services with the Consul agent and keeps TTL checks alive.

    A descriptor's ACL token is remembered and sent again on its heartbeats
    and its deregistration.
    """

    def __init__(self, client: AgentClient, heartbeat: HeartbeatProperties | None = None) -> None:
        self.client = client
        self.heartbeat = heartbeat or HeartbeatProperties()
        self.scheduler = HeartbeatScheduler(self.heartbeat, self.pass_heartbeat)
        self._tokens: dict[str, str] = {}

    async def register(self, descriptor: ServiceDescriptor) -> None:
        logger.info("Registering service with consul: %s", descriptor.to_agent_payload())
        await self.client.register_service(descriptor, descriptor.acl_token or None)
        if descriptor.acl_token:
            self._tokens[descriptor.id] = descriptor.acl_token
        if descriptor.has_ttl_check:
            self.scheduler.add(descriptor)

    async def deregister(self, service_id: str) -> None:
        self.scheduler.remove(service_id)
        logger.info("Deregistering service with consul: %s", service_id)
        await self.client.deregister_service(service_id, self._tokens.pop(service_id, None))

    async def pass_heartbeat(self, service_id: str) -> None:
        await self.client.pass_heartbeat(f"{SERVICE_CHECK_PREFIX}{service_id}", self._tokens.get(service_id))

    async def close(self) -> None:
        await self.scheduler.close()
