from .base import AgentClient
from .consul import ConsulAgentClient
from .in_memory import AgentCall, InMemoryAgentClient

__all__ = ["AgentCall", "AgentClient", "ConsulAgentClient", "InMemoryAgentClient"]
