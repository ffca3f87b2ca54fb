from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from consul_registration.config.models import AgentConfig
from consul_registration.discover.agent.base import AgentClient
from consul_registration.discover.entities import ServiceDescriptor
from consul_registration.exceptions import TransportError
from consul_registration.utils.constant import ACL_TOKEN_HEADER

logger = logging.getLogger(__name__)

__all__ = ["ConsulAgentClient"]


class ConsulAgentClient(AgentClient):
    """Talks to the Consul agent HTTP API.

    Args:
        config: Agent location, default ACL token and request timeout.
        http_client: Optional pre-built ``httpx.AsyncClient``. A client passed
            in is not closed by :meth:`aclose`.
    """

    def __init__(self, config: AgentConfig | None = None, http_client: httpx.AsyncClient | None = None) -> None:
        self._config = config or AgentConfig()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=self._config.timeout_seconds)

    @property
    def config(self) -> AgentConfig:
        return self._config

    async def register_service(self, descriptor: ServiceDescriptor, acl_token: str | None = None) -> None:
        await self._put(
            "/v1/agent/service/register",
            json=descriptor.to_agent_payload(),
            acl_token=acl_token,
        )

    async def deregister_service(self, service_id: str, acl_token: str | None = None) -> None:
        await self._put(f"/v1/agent/service/deregister/{quote(service_id, safe='')}", acl_token=acl_token)

    async def pass_heartbeat(self, check_id: str, acl_token: str | None = None) -> None:
        await self._put(f"/v1/agent/check/pass/{quote(check_id, safe=':')}", acl_token=acl_token)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ConsulAgentClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def _headers(self, acl_token: str | None) -> dict[str, str]:
        token = acl_token or self._config.acl_token
        if token:
            return {ACL_TOKEN_HEADER: token}
        return {}

    async def _put(self, path: str, *, json: Any | None = None, acl_token: str | None = None) -> None:
        url = f"{self._config.base_url}{path}"
        try:
            response = await self._client.put(url, json=json, headers=self._headers(acl_token))
        except httpx.HTTPError as exc:
            raise TransportError(
                message=f"Consul agent request failed: PUT {path}: {exc}",
                data={"path": path},
                cause=exc,
            )
        if response.is_error:
            raise TransportError(
                message=f"Consul agent rejected PUT {path}: HTTP {response.status_code} {response.text.strip()}",
                data={"path": path, "status_code": response.status_code},
            )
        logger.debug("PUT %s -> %s", path, response.status_code)
