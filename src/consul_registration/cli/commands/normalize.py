"""Normalize command for consul-registration.

Prints the registry-safe form of one or more names.
"""
from __future__ import annotations

import argparse
import sys
from typing import Final

from consul_registration.discover.naming import normalize_for_dns
from consul_registration.exceptions import InvalidIdentifierError

__all__ = ["register_parser", "run"]

EXIT_SUCCESS: Final = 0
EXIT_INVALID: Final = 2


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "normalize",
        help="Normalize names into Consul service ids.",
        description="Print the normalized form of each NAME, one per line.",
    )
    parser.add_argument("names", nargs="+", metavar="NAME", help="Name to normalize.")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace) -> int:
    """Normalize every name; invalid names are reported and make the exit code 2."""
    exit_code = EXIT_SUCCESS
    for name in args.names:
        try:
            print(normalize_for_dns(name))
        except InvalidIdentifierError as exc:
            print(f"Error: {name!r}: {exc.message}", file=sys.stderr)
            exit_code = EXIT_INVALID
    return exit_code
