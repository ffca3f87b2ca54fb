"""Descriptor command for consul-registration.

Prints the agent payloads this process would register, without contacting
the agent.
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Final

from consul_registration.config import (
    ConfigError,
    RegistrationConfig,
    get_default_config_path,
    load_config,
)
from consul_registration.core.context import RuntimeContext
from consul_registration.discover.registration import RegistrationBuilder
from consul_registration.exceptions import RegistrationException
from consul_registration.utils.constant import DEFAULT_APP_NAME

__all__ = ["add_runtime_arguments", "build_context", "load_runtime_config", "register_parser", "run"]

EXIT_SUCCESS: Final = 0
EXIT_ERROR: Final = 1
EXIT_CONFIG_INVALID: Final = 2


def add_runtime_arguments(parser: argparse.ArgumentParser) -> None:
    """Arguments describing the running service, shared with ``register``."""
    parser.add_argument(
        "--config",
        dest="config_file",
        type=Path,
        default=None,
        help="YAML configuration file (default: first consul_registration.yaml found).",
    )
    parser.add_argument(
        "--port",
        type=int,
        required=True,
        help="Port the service listener is bound to.",
    )
    parser.add_argument(
        "--management-port",
        type=int,
        default=None,
        help="Port the management listener is bound to, if separate.",
    )
    parser.add_argument(
        "--context-path",
        default=None,
        help="Web context path the service is mounted under.",
    )
    parser.add_argument(
        "--app-name",
        default=None,
        help="Application name used when no service name is configured.",
    )


def build_context(args: argparse.Namespace) -> RuntimeContext:
    context = RuntimeContext(
        app_name=args.app_name or DEFAULT_APP_NAME,
        context_path=args.context_path,
    )
    context.bind_port(args.port)
    if args.management_port is not None:
        context.bind_management_port(args.management_port)
    return context


def load_runtime_config(args: argparse.Namespace) -> RegistrationConfig:
    """Load the given file, else the default file, else built-in defaults."""
    path = args.config_file or get_default_config_path()
    if path is None:
        return RegistrationConfig()
    return load_config(path)


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "descriptor",
        help="Print the registration payloads without contacting the agent.",
        description="Build the primary (and management) descriptors and print them as JSON.",
    )
    add_runtime_arguments(parser)
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace) -> int:
    try:
        config = load_runtime_config(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_INVALID

    builder = RegistrationBuilder(config.discovery, config.heartbeat, build_context(args))
    try:
        payloads = [builder.build_primary().to_agent_payload()]
        if builder.should_register_management():
            payloads.append(builder.build_management().to_agent_payload())
    except RegistrationException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_ERROR

    print(json.dumps(payloads, indent=2))
    return EXIT_SUCCESS
