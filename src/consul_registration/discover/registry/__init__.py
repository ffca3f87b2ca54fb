from .service_registry import ServiceRegistry
from .consul_registry import ConsulServiceRegistry

__all__ = ["ConsulServiceRegistry", "ServiceRegistry"]
