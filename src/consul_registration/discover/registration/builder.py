from __future__ import annotations

import logging

from consul_registration.config.models import DiscoveryProperties, HeartbeatProperties
from consul_registration.core.context import RuntimeContext
from consul_registration.discover.entities import ServiceDescriptor
from consul_registration.discover.health.check_strategy import build_check
from consul_registration.discover.naming import normalize_for_dns
from consul_registration.exceptions import MissingPortError
from consul_registration.utils.build_once import BuildOnce
from consul_registration.utils.constant import CONTEXT_PATH_TAG_PREFIX, SEPARATOR

logger = logging.getLogger(__name__)

__all__ = ["RegistrationBuilder"]


class RegistrationBuilder:
    """Builds the primary and management descriptors for this process.

    Each descriptor is built on first use and the same instance is returned
    for the rest of the run.
    """

    def __init__(
        self,
        discovery: DiscoveryProperties,
        heartbeat: HeartbeatProperties,
        context: RuntimeContext,
    ) -> None:
        self.discovery = discovery
        self.heartbeat = heartbeat
        self.context = context
        self._primary: BuildOnce[ServiceDescriptor] = BuildOnce()
        self._management: BuildOnce[ServiceDescriptor] = BuildOnce()

    @property
    def app_name(self) -> str:
        return self.discovery.service_name or self.context.app_name

    @property
    def service_id(self) -> str:
        return normalize_for_dns(self.discovery.instance_id or self.context.context_id)

    @property
    def management_service_id(self) -> str:
        return f"{normalize_for_dns(self.context.context_id)}{SEPARATOR}{self.discovery.management_suffix}"

    @property
    def management_service_name(self) -> str:
        return f"{normalize_for_dns(self.app_name)}{SEPARATOR}{self.discovery.management_suffix}"

    @property
    def management_port(self) -> int | None:
        if self.discovery.management_port is not None:
            return self.discovery.management_port
        return self.context.management_port

    def should_register_management(self) -> bool:
        """True when the management endpoint listens on its own port."""
        return self.context.management_port_differs

    def build_primary(self) -> ServiceDescriptor:
        return self._primary.get(self._create_primary)

    def build_management(self) -> ServiceDescriptor:
        return self._management.get(self._create_management)

    @property
    def primary(self) -> ServiceDescriptor | None:
        """The cached primary descriptor, if it has been built."""
        return self._primary.peek()

    def _create_primary(self) -> ServiceDescriptor:
        bound_port = self.context.port
        if not bound_port or bound_port <= 0:
            raise MissingPortError()

        service_id = self.service_id
        name = normalize_for_dns(self.app_name)
        address = None if self.discovery.prefer_agent_address else self.discovery.hostname
        port = self.discovery.port if self.discovery.port is not None else bound_port

        check = None
        if self.discovery.register_health_check:
            if self.should_register_management():
                check_port = self.management_port
            else:
                check_port = port
            check = build_check(check_port, self.discovery, self.heartbeat)

        descriptor = ServiceDescriptor(
            id=service_id,
            name=name,
            address=address,
            port=port,
            tags=tuple(self._create_tags()),
            check=check,
            acl_token=self.discovery.acl_token or "",
        )
        logger.debug("Built service descriptor %s", descriptor.id)
        return descriptor

    def _create_management(self) -> ServiceDescriptor:
        port = self.management_port
        if not port or port <= 0:
            raise MissingPortError(message="management port has not been set")

        descriptor = ServiceDescriptor(
            id=self.management_service_id,
            name=self.management_service_name,
            address=self.discovery.hostname,
            port=port,
            tags=tuple(self.discovery.management_tags),
            check=build_check(port, self.discovery, self.heartbeat),
            acl_token=self.discovery.acl_token or "",
        )
        logger.debug("Built management descriptor %s", descriptor.id)
        return descriptor

    def _create_tags(self) -> list[str]:
        tags = list(self.discovery.tags)
        context_path = self.context.context_path
        if context_path and context_path.replace("/", ""):
            tags.append(f"{CONTEXT_PATH_TAG_PREFIX}{context_path}")
        return tags
