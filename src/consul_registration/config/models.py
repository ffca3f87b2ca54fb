from __future__ import annotations

import socket
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar, TypeVar

from consul_registration.resilience.retry_policy import RetryPolicy, RetryStrategy
from consul_registration.utils.constant import (
    DEFAULT_HEALTH_CHECK_PATH,
    DEFAULT_MANAGEMENT_SUFFIX,
    Schemes,
)
from consul_registration.utils.durations import parse_duration

S = TypeVar("S", bound="_Section")
Coercer = Callable[[Any, str], Any]

MIN_HEARTBEAT_INTERVAL_SECONDS = 1.0

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def as_bool(value: Any, label: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str) and value.strip().lower() in _TRUE | _FALSE:
        return value.strip().lower() in _TRUE
    raise TypeError(f"{label} must be a bool")


def as_int(value: Any, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise TypeError(f"{label} must be an int")
    if isinstance(value, float) and not value.is_integer():
        raise TypeError(f"{label} must be an int")
    return int(value.strip() if isinstance(value, str) else value)


def as_float(value: Any, label: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise TypeError(f"{label} must be a number")
    return float(value)


def as_str(value: Any, label: str) -> str:
    return value if isinstance(value, str) else str(value)


def as_duration(value: Any, label: str) -> float:
    """Seconds from a number or a ``500ms`` / ``10s`` / ``1m`` / ``1h`` string."""
    try:
        return parse_duration(value)
    except (TypeError, ValueError) as exc:
        raise TypeError(f"{label} must be a duration") from exc


def as_str_list(value: Any, label: str) -> list[str]:
    """A list of strings; a comma-separated string is split."""
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        return [as_str(item, label) for item in value]
    raise TypeError(f"{label} must be a list of strings")


def optional(coerce: Coercer) -> Coercer:
    return lambda value, label: None if value is None else coerce(value, label)


def one_of(enum_cls: type[Enum]) -> Coercer:
    """Match an enum member by name or value, ignoring case."""

    def coerce(value: Any, label: str) -> Enum:
        if isinstance(value, enum_cls):
            return value
        wanted = str(value).strip().lower()
        for member in enum_cls:
            if wanted in (member.name.lower(), str(member.value).lower()):
                return member
        raise ValueError(f"{label} must be one of {[m.value for m in enum_cls]}, got {value!r}")

    return coerce


class _Section:
    """Dataclass mixin: coerce every field listed in ``_coercers`` on init.

    ``from_dict`` passes on only the keys the dataclass declares, so missing
    keys keep their defaults.
    """

    _section: ClassVar[str]
    _coercers: ClassVar[dict[str, Coercer]]

    @classmethod
    def from_dict(cls: type[S], data: Mapping[str, Any] | None) -> S:
        if data is None:
            return cls()
        if isinstance(data, cls):
            return data
        if not isinstance(data, Mapping):
            raise TypeError(f"{cls._section} must be a mapping")
        known = {f.name for f in fields(cls)}  # type: ignore[arg-type]
        return cls(**{key: value for key, value in data.items() if key in known})

    def _coerce_fields(self) -> None:
        for name, coerce in self._coercers.items():
            setattr(self, name, coerce(getattr(self, name), f"{self._section}.{name}"))


@dataclass
class DiscoveryProperties(_Section):
    """How this service describes itself to the agent."""

    _section: ClassVar[str] = "discovery"
    _coercers: ClassVar[dict[str, Coercer]] = {
        "lifecycle_enabled": as_bool,
        "register": as_bool,
        "service_name": optional(as_str),
        "instance_id": optional(as_str),
        "hostname": as_str,
        "scheme": one_of(Schemes),
        "prefer_agent_address": as_bool,
        "tags": as_str_list,
        "port": optional(as_int),
        "management_port": optional(as_int),
        "management_suffix": as_str,
        "management_tags": as_str_list,
        "acl_token": optional(as_str),
        "register_health_check": as_bool,
        "health_check_url": optional(as_str),
        "health_check_path": as_str,
        "health_check_interval": as_duration,
        "health_check_timeout": as_duration,
    }

    lifecycle_enabled: bool = True
    register: bool = True
    service_name: str | None = None
    instance_id: str | None = None
    hostname: str = field(default_factory=socket.gethostname)
    scheme: Schemes = Schemes.HTTP
    prefer_agent_address: bool = False
    tags: list[str] = field(default_factory=list)
    port: int | None = None
    management_port: int | None = None
    management_suffix: str = DEFAULT_MANAGEMENT_SUFFIX
    management_tags: list[str] = field(default_factory=list)
    acl_token: str | None = None
    register_health_check: bool = True
    health_check_url: str | None = None
    health_check_path: str = DEFAULT_HEALTH_CHECK_PATH
    health_check_interval: float = 10.0
    health_check_timeout: float = 10.0

    def __post_init__(self) -> None:
        self._coerce_fields()
        for name in ("port", "management_port"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"discovery.{name} must be > 0")
        if not self.management_suffix:
            raise ValueError("discovery.management_suffix must not be empty")
        if self.health_check_interval <= 0 or self.health_check_timeout <= 0:
            raise ValueError("discovery health check interval and timeout must be > 0")

    @property
    def enabled(self) -> bool:
        """Registration happens only when both switches are on."""
        return self.lifecycle_enabled and self.register


@dataclass
class HeartbeatProperties(_Section):
    """TTL check settings. When enabled, registrations use a TTL check."""

    _section: ClassVar[str] = "heartbeat"
    _coercers: ClassVar[dict[str, Coercer]] = {
        "enabled": as_bool,
        "ttl": as_duration,
        "interval_ratio": as_float,
    }

    enabled: bool = False
    ttl: float = 30.0
    interval_ratio: float = 2.0 / 3.0

    def __post_init__(self) -> None:
        self._coerce_fields()
        if self.ttl <= 0:
            raise ValueError("heartbeat.ttl must be > 0")
        if not 0 < self.interval_ratio < 1:
            raise ValueError("heartbeat.interval_ratio must be between 0 and 1")

    def compute_heartbeat_interval(self, ttl: float | None = None) -> float:
        """Seconds between heartbeats, always strictly shorter than the TTL.

        ``ttl * interval_ratio`` with a one second floor, then pulled back to
        one second under the TTL. When that leaves nothing (TTLs of a second
        or less) the plain ratio is used.
        """
        ttl = self.ttl if ttl is None else ttl
        interval = max(ttl * self.interval_ratio, MIN_HEARTBEAT_INTERVAL_SECONDS)
        interval = min(interval, ttl - MIN_HEARTBEAT_INTERVAL_SECONDS)
        if interval <= 0:
            interval = ttl * self.interval_ratio
        return interval


@dataclass
class AgentConfig(_Section):
    """Where the Consul agent listens."""

    _section: ClassVar[str] = "agent"
    _coercers: ClassVar[dict[str, Coercer]] = {
        "host": as_str,
        "port": as_int,
        "scheme": one_of(Schemes),
        "acl_token": optional(as_str),
        "timeout_seconds": as_duration,
    }

    host: str = "localhost"
    port: int = 8500
    scheme: Schemes = Schemes.HTTP
    acl_token: str | None = None
    timeout_seconds: float = 10.0

    def __post_init__(self) -> None:
        self._coerce_fields()
        if self.port <= 0:
            raise ValueError("agent.port must be > 0")
        if self.timeout_seconds <= 0:
            raise ValueError("agent.timeout_seconds must be > 0")

    @property
    def base_url(self) -> str:
        return f"{self.scheme.value}://{self.host}:{self.port}"


@dataclass
class RetryConfig(_Section):
    """Backoff applied to the registration start operation."""

    _section: ClassVar[str] = "retry"
    _coercers: ClassVar[dict[str, Coercer]] = {
        "enabled": as_bool,
        "max_attempts": as_int,
        "strategy": one_of(RetryStrategy),
        "initial_delay_ms": as_int,
        "max_delay_ms": as_int,
        "backoff_multiplier": as_float,
        "jitter": as_float,
    }

    enabled: bool = True
    max_attempts: int = 6
    strategy: RetryStrategy = RetryStrategy.EXPONENTIAL
    initial_delay_ms: int = 1000
    max_delay_ms: int = 2000
    backoff_multiplier: float = 1.1
    jitter: float = 0.0

    def __post_init__(self) -> None:
        self._coerce_fields()
        if self.max_attempts < 1:
            raise ValueError("retry.max_attempts must be >= 1")
        if self.initial_delay_ms < 0:
            raise ValueError("retry.initial_delay_ms must be >= 0")

    def to_policy(self) -> RetryPolicy:
        """A disabled retry still makes one attempt."""
        return RetryPolicy(
            max_attempts=self.max_attempts if self.enabled else 1,
            strategy=self.strategy,
            initial_delay_ms=self.initial_delay_ms,
            max_delay_ms=self.max_delay_ms,
            backoff_multiplier=self.backoff_multiplier,
            jitter=self.jitter,
        )


@dataclass
class RegistrationConfig:
    discovery: DiscoveryProperties = field(default_factory=DiscoveryProperties)
    heartbeat: HeartbeatProperties = field(default_factory=HeartbeatProperties)
    agent: AgentConfig = field(default_factory=AgentConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "RegistrationConfig":
        if data is None:
            return cls()
        if isinstance(data, cls):
            return data
        if not isinstance(data, Mapping):
            raise TypeError("config must be a mapping")
        return cls(**{name: data[name] for name in ("discovery", "heartbeat", "agent", "retry") if name in data})

    def __post_init__(self) -> None:
        self.discovery = DiscoveryProperties.from_dict(self.discovery)
        self.heartbeat = HeartbeatProperties.from_dict(self.heartbeat)
        self.agent = AgentConfig.from_dict(self.agent)
        self.retry = RetryConfig.from_dict(self.retry)
