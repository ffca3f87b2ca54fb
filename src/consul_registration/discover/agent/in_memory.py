from __future__ import annotations

from dataclasses import dataclass

from consul_registration.discover.agent.base import AgentClient
from consul_registration.discover.entities import ServiceDescriptor
from consul_registration.exceptions import TransportError


@dataclass(frozen=True)
class AgentCall:
    """One call received by :class:`InMemoryAgentClient`."""

    operation: str
    target: str
    acl_token: str | None = None


class InMemoryAgentClient(AgentClient):
    """Agent client that keeps registrations in memory.

    Every call is appended to :attr:`calls`. ``fail_next(operation, n)``
    makes the next ``n`` calls of that operation raise ``TransportError``.
    Heartbeats for unknown checks are rejected like the real agent does.
    """

    def __init__(self) -> None:
        self.services: dict[str, ServiceDescriptor] = {}
        self.passes: dict[str, int] = {}
        self.calls: list[AgentCall] = []
        self._failures: dict[str, int] = {}

    def fail_next(self, operation: str, times: int = 1) -> None:
        self._failures[operation] = self._failures.get(operation, 0) + times

    def calls_for(self, operation: str) -> list[AgentCall]:
        return [call for call in self.calls if call.operation == operation]

    async def register_service(self, descriptor: ServiceDescriptor, acl_token: str | None = None) -> None:
        self._record("register", descriptor.id, acl_token)
        self.services[descriptor.id] = descriptor

    async def deregister_service(self, service_id: str, acl_token: str | None = None) -> None:
        self._record("deregister", service_id, acl_token)
        self.services.pop(service_id, None)

    async def pass_heartbeat(self, check_id: str, acl_token: str | None = None) -> None:
        self._record("pass", check_id, acl_token)
        service_id = check_id.split(":", 1)[-1]
        if service_id not in self.services:
            raise TransportError(
                message=f"Unknown check ID {check_id!r}",
                data={"status_code": 404},
            )
        self.passes[check_id] = self.passes.get(check_id, 0) + 1

    def _record(self, operation: str, target: str, acl_token: str | None = None) -> None:
        self.calls.append(AgentCall(operation, target, acl_token))
        remaining = self._failures.get(operation, 0)
        if remaining > 0:
            self._failures[operation] = remaining - 1
            raise TransportError(
                message=f"Injected {operation} failure for {target}",
                data={"operation": operation},
            )
