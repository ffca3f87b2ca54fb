"""``consul-registration`` command line."""
from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence

from consul_registration.cli.commands import config, descriptor, normalize, register
from consul_registration.observability.logging import LOG_FORMAT_CONSOLE, LOG_FORMAT_JSON, get_logger

__all__ = ["build_parser", "main"]

COMMANDS = (normalize, config, descriptor, register)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="consul-registration",
        description="Register a service with the local Consul agent.",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG.")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Log warnings and errors only.")
    parser.add_argument(
        "--log-format",
        choices=[LOG_FORMAT_JSON, LOG_FORMAT_CONSOLE],
        help="Log line format (default: $CONSUL_REGISTRATION_LOG_FORMAT, then json).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")
    for command in COMMANDS:
        command.register_parser(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    get_logger("consul_registration", log_format=args.log_format, level=level)

    return int(args.handler(args))
