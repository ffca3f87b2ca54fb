"""Register command for consul-registration.

Registers the service with the agent, keeps TTL heartbeats running until the
process receives SIGINT or SIGTERM, then deregisters.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from typing import Final

from consul_registration.cli.commands.descriptor import (
    add_runtime_arguments,
    build_context,
    load_runtime_config,
)
from consul_registration.config import ConfigError, RegistrationConfig
from consul_registration.core.context import RuntimeContext
from consul_registration.discover.agent import ConsulAgentClient
from consul_registration.exceptions import RegistrationException
from consul_registration.lifecycle import LifecycleController

__all__ = ["register_parser", "run"]

logger = logging.getLogger(__name__)

EXIT_SUCCESS: Final = 0
EXIT_ERROR: Final = 1
EXIT_CONFIG_INVALID: Final = 2


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "register",
        help="Register with the Consul agent until interrupted.",
        description=(
            "Register the service, keep heartbeats running until SIGINT/SIGTERM, "
            "then deregister."
        ),
    )
    add_runtime_arguments(parser)
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace) -> int:
    try:
        config = load_runtime_config(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_INVALID
    try:
        asyncio.run(_serve(config, build_context(args)))
    except RegistrationException as e:
        print(f"Error: registration failed: {e.message}", file=sys.stderr)
        return EXIT_ERROR
    return EXIT_SUCCESS


async def _serve(
    config: RegistrationConfig,
    context: RuntimeContext,
    stop_event: asyncio.Event | None = None,
) -> None:
    stop_event = stop_event or _install_stop_event()
    async with ConsulAgentClient(config.agent) as client:
        controller = LifecycleController.from_config(config, client, context)
        try:
            await controller.start()
            if controller.is_running():
                logger.info("Registered; waiting for shutdown signal")
                await stop_event.wait()
        finally:
            await controller.stop()


def _install_stop_event() -> asyncio.Event:
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows event loops do not support signal handlers
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(stop_event.set))
    return stop_event
