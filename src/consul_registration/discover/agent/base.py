from abc import ABC, abstractmethod

from consul_registration.discover.entities import ServiceDescriptor


class AgentClient(ABC):
    """Abstract client for the registry agent's service endpoints."""

    @abstractmethod
    async def register_service(self, descriptor: ServiceDescriptor, acl_token: str | None = None) -> None:
        """Registers a service with the local agent.

        Args:
            descriptor: The service to register.
            acl_token: Token sent with the request; empty means the client default.
        """

    @abstractmethod
    async def deregister_service(self, service_id: str, acl_token: str | None = None) -> None:
        """Removes a service from the local agent.

        Args:
            service_id: The id the service was registered under.
            acl_token: Token sent with the request; empty means the client default.
        """

    @abstractmethod
    async def pass_heartbeat(self, check_id: str, acl_token: str | None = None) -> None:
        """Marks a TTL check as passing.

        Args:
            check_id: The check to mark, ``service:<id>`` for service checks.
            acl_token: Token sent with the request; empty means the client default.
        """
