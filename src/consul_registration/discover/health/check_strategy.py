from __future__ import annotations

from consul_registration.config.models import DiscoveryProperties, HeartbeatProperties
from consul_registration.discover.entities import HealthCheckSpec, HttpCheck, TtlCheck

__all__ = ["build_check", "build_check_url"]


def build_check_url(port: int, discovery: DiscoveryProperties) -> str:
    """Return the URL the agent should poll for the service on ``port``."""
    if discovery.health_check_url is not None:
        return discovery.health_check_url
    return (
        f"{discovery.scheme}://{discovery.hostname}:{port}"
        f"{discovery.health_check_path}"
    )


def build_check(
    port: int,
    discovery: DiscoveryProperties,
    heartbeat: HeartbeatProperties,
) -> HealthCheckSpec:
    """Pick the health check for a registration.

    With heartbeats enabled the agent gets a TTL check and the HTTP settings
    are ignored. Otherwise the agent polls an HTTP endpoint: the configured
    ``health_check_url`` verbatim, or one synthesized from the scheme,
    hostname, ``port`` and ``health_check_path``.

    ``port`` is the port being checked, which is the management port when the
    management endpoint is registered separately.
    """
    if heartbeat.enabled:
        return TtlCheck(ttl=heartbeat.ttl)

    return HttpCheck(
        url=build_check_url(port, discovery),
        interval=discovery.health_check_interval,
        timeout=discovery.health_check_timeout,
    )
