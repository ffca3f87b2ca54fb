from abc import ABC, abstractmethod

from consul_registration.discover.entities import ServiceDescriptor


class ServiceRegistry(ABC):
    """Abstract base class for a service registry."""

    @abstractmethod
    async def register(self, descriptor: ServiceDescriptor) -> None:
        """Registers a service with the registry.

        Args:
            descriptor: The service to register.
        """

    @abstractmethod
    async def deregister(self, service_id: str) -> None:
        """Deregisters a service from the registry.

        Args:
            service_id: The id the service was registered under.
        """

    async def close(self) -> None:
        """Releases background resources held by the registry."""
