from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from consul_registration.utils.durations import format_duration


class TtlCheck(BaseModel):
    """Push-style check: the agent expects a heartbeat within ``ttl`` seconds."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["ttl"] = "ttl"
    ttl: float = Field(gt=0)

    def to_agent_payload(self) -> dict[str, Any]:
        return {"TTL": format_duration(self.ttl)}


class HttpCheck(BaseModel):
    """Pull-style check: the agent polls ``url`` every ``interval`` seconds."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["http"] = "http"
    url: str
    interval: float = Field(gt=0)
    timeout: float = Field(gt=0)

    def to_agent_payload(self) -> dict[str, Any]:
        return {
            "HTTP": self.url,
            "Interval": format_duration(self.interval),
            "Timeout": format_duration(self.timeout),
        }


HealthCheckSpec = Union[TtlCheck, HttpCheck]


class ServiceDescriptor(BaseModel):
    """Represents one registrable endpoint in the Consul agent."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    address: str | None = None
    port: int = Field(gt=0)
    tags: tuple[str, ...] = ()
    check: HealthCheckSpec | None = None
    acl_token: str = ""

    @property
    def has_ttl_check(self) -> bool:
        return isinstance(self.check, TtlCheck)

    def to_agent_payload(self) -> dict[str, Any]:
        """Return the JSON body expected by ``/v1/agent/service/register``."""
        payload: dict[str, Any] = {
            "ID": self.id,
            "Name": self.name,
            "Tags": list(self.tags),
            "Port": self.port,
        }
        if self.address:
            payload["Address"] = self.address
        if self.check is not None:
            payload["Check"] = self.check.to_agent_payload()
        return payload
