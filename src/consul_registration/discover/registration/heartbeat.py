from __future__ import annotations

import asyncio
import logging
import threading
from typing import Awaitable, Callable

from consul_registration.config.models import HeartbeatProperties
from consul_registration.discover.entities import ServiceDescriptor, TtlCheck
from consul_registration.exceptions import TransportError
from consul_registration.observability.logging import LogContext
from consul_registration.utils.constant import SERVICE_CHECK_PREFIX

logger = logging.getLogger(__name__)

HeartbeatSender = Callable[[str], Awaitable[None]]

__all__ = ["HeartbeatScheduler", "HeartbeatSender"]


class HeartbeatScheduler:
    """Keeps TTL checks passing with one periodic task per service id.

    ``sender`` is awaited with the service id on every tick. Tasks are created
    on the running event loop; ``add``/``remove`` must be called from it.
    """

    def __init__(self, heartbeat: HeartbeatProperties, sender: HeartbeatSender) -> None:
        self._heartbeat = heartbeat
        self._sender = sender
        self._lock = threading.Lock()
        self._tasks: dict[str, asyncio.Task[None]] = {}

    def add(self, descriptor: ServiceDescriptor) -> None:
        """Start heartbeating ``descriptor`` if it carries a TTL check.

        An existing task for the same id is cancelled and replaced.
        """
        check = descriptor.check
        if not isinstance(check, TtlCheck):
            return
        interval = self._heartbeat.compute_heartbeat_interval(check.ttl)
        service_id = descriptor.id
        with self._lock:
            previous = self._tasks.pop(service_id, None)
            if previous is not None:
                previous.cancel()
            self._tasks[service_id] = asyncio.get_running_loop().create_task(
                self._run(service_id, interval),
                name=f"heartbeat:{service_id}",
            )
        logger.debug("Scheduled heartbeat for %s every %.3fs", service_id, interval)

    def remove(self, service_id: str) -> None:
        """Stop heartbeating ``service_id``; a no-op when it is not scheduled."""
        with self._lock:
            task = self._tasks.pop(service_id, None)
        if task is not None:
            task.cancel()
            logger.debug("Cancelled heartbeat for %s", service_id)

    def is_scheduled(self, service_id: str) -> bool:
        with self._lock:
            task = self._tasks.get(service_id)
        return task is not None and not task.done()

    def scheduled_ids(self) -> list[str]:
        with self._lock:
            return list(self._tasks)

    async def close(self) -> None:
        """Cancel every heartbeat task and wait until they have finished."""
        with self._lock:
            tasks = list(self._tasks.values())
            self._tasks.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _run(self, service_id: str, interval: float) -> None:
        with LogContext(service_id=service_id, check_id=f"{SERVICE_CHECK_PREFIX}{service_id}"):
            while True:
                await self._beat(service_id)
                await asyncio.sleep(interval)

    async def _beat(self, service_id: str) -> None:
        try:
            await self._sender(service_id)
        except TransportError as exc:
            logger.warning("Heartbeat for %s failed: %s", service_id, exc)
        except Exception:
            logger.exception("Unexpected error sending heartbeat for %s", service_id)
