"""Runtime facts about the running application.

The hosting process owns a :class:`RuntimeContext` and fills in the ports as
its listeners bind. The registration builder reads it when it first builds a
descriptor.
"""

from __future__ import annotations

from dataclasses import dataclass

from consul_registration.utils.constant import DEFAULT_APP_NAME
from consul_registration.utils.id_utils import IdUtils

__all__ = ["RuntimeContext"]


@dataclass
class RuntimeContext:
    """Mutable runtime context.

    Args:
        app_name: Default application name when no service name is configured.
        context_id: Process-unique fallback identifier for the service id.
        port: Port the service listener bound to, ``0`` while unknown.
        management_port: Port of the management listener, if any.
        context_path: Web context path the service is mounted under.
    """

    app_name: str = DEFAULT_APP_NAME
    context_id: str = ""
    port: int = 0
    management_port: int | None = None
    context_path: str | None = None

    def __post_init__(self) -> None:
        if not self.context_id:
            self.context_id = IdUtils.generate_context_id(self.app_name)

    def bind_port(self, port: int) -> bool:
        """Record the service port; the first bound port wins."""
        if self.port == 0 and port > 0:
            self.port = port
            return True
        return False

    def bind_management_port(self, port: int) -> None:
        self.management_port = port

    @property
    def management_port_differs(self) -> bool:
        return self.management_port is not None and self.management_port != self.port
