"""Registration lifecycle for a running service.

The controller moves through ``STOPPED -> STARTING -> REGISTERED -> STOPPING
-> STOPPED``. Registration happens once the service port is known and the
feature is enabled; deregistration happens on shutdown and never raises.
"""

from __future__ import annotations

import asyncio
import logging
from enum import StrEnum

from consul_registration.config.models import DiscoveryProperties, RegistrationConfig
from consul_registration.core.context import RuntimeContext
from consul_registration.discover.agent.base import AgentClient
from consul_registration.discover.entities import ServiceDescriptor
from consul_registration.discover.registration.builder import RegistrationBuilder
from consul_registration.discover.registry.consul_registry import ConsulServiceRegistry
from consul_registration.discover.registry.service_registry import ServiceRegistry
from consul_registration.exceptions import TransportError
from consul_registration.resilience.retry_policy import Retrier, RetryExecutor, RetryPolicy

logger = logging.getLogger(__name__)

__all__ = ["LifecycleController", "LifecycleState"]


class LifecycleState(StrEnum):
    STOPPED = "stopped"
    STARTING = "starting"
    REGISTERED = "registered"
    STOPPING = "stopping"


class LifecycleController:
    """Drives registration and deregistration of this process's services.

    Args:
        registry: Registry the descriptors are registered with.
        builder: Builds (and caches) the primary and management descriptors.
        discovery: Switches deciding whether registration happens at all.
        retry: Executor wrapping the start operation. Defaults to a single
            attempt.
    """

    def __init__(
        self,
        registry: ServiceRegistry,
        builder: RegistrationBuilder,
        discovery: DiscoveryProperties | None = None,
        retry: Retrier | None = None,
    ) -> None:
        self.registry = registry
        self.builder = builder
        self.discovery = discovery or builder.discovery
        self._retry = retry or RetryExecutor(RetryPolicy(max_attempts=1))
        self._state = LifecycleState.STOPPED
        self._lock = asyncio.Lock()
        self._registered: list[str] = []

    @classmethod
    def from_config(
        cls,
        config: RegistrationConfig,
        client: AgentClient,
        context: RuntimeContext | None = None,
    ) -> "LifecycleController":
        """Assemble a controller with the default registry and retry executor."""
        builder = RegistrationBuilder(config.discovery, config.heartbeat, context or RuntimeContext())
        registry = ConsulServiceRegistry(client, config.heartbeat)
        return cls(
            registry,
            builder,
            discovery=config.discovery,
            retry=RetryExecutor(config.retry.to_policy()),
        )

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def context(self) -> RuntimeContext:
        return self.builder.context

    def is_enabled(self) -> bool:
        return self.discovery.enabled

    def is_running(self) -> bool:
        return self._state is LifecycleState.REGISTERED

    async def on_port_bound(self, port: int) -> None:
        """Called by the hosting process once its service listener is bound."""
        self.context.bind_port(port)
        await self.start()

    def on_management_port_bound(self, port: int) -> None:
        """Called by the hosting process once its management listener is bound."""
        self.context.bind_management_port(port)

    async def start(self) -> None:
        if not self.is_enabled():
            logger.debug("Discovery lifecycle disabled. Not starting")
            return
        if self._state is not LifecycleState.STOPPED:
            return
        if self.context.port <= 0:
            logger.warning("Service port is not known yet. Not registering")
            return

        self._state = LifecycleState.STARTING
        async with self._lock:
            try:
                await self._retry.execute(self._register_all)
            except BaseException:
                await self._deregister_all()
                self._state = LifecycleState.STOPPED
                raise
            self._state = LifecycleState.REGISTERED

    async def stop(self) -> None:
        async with self._lock:
            if self._state is LifecycleState.REGISTERED:
                self._state = LifecycleState.STOPPING
                try:
                    await self._deregister_all()
                finally:
                    await self.registry.close()
                    self._state = LifecycleState.STOPPED
            else:
                await self.registry.close()

    async def _register_all(self) -> None:
        await self._register(self.builder.build_primary())
        if self.builder.should_register_management():
            await self._register(self.builder.build_management())

    async def _register(self, descriptor: ServiceDescriptor) -> None:
        await self.registry.register(descriptor)
        if descriptor.id not in self._registered:
            self._registered.append(descriptor.id)

    async def _deregister_all(self) -> None:
        """Deregister in reverse registration order, management before primary."""
        while self._registered:
            await self._deregister_quietly(self._registered.pop())

    async def _deregister_quietly(self, service_id: str) -> None:
        try:
            await self.registry.deregister(service_id)
        except TransportError as exc:
            logger.warning("Failed to deregister %s: %s", service_id, exc)
        except Exception:
            logger.exception("Unexpected error deregistering %s", service_id)
