"""``config`` command: check a configuration file before deploying it."""
from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path

from consul_registration.config import ConfigError, load_config

__all__ = ["register_parser", "run"]


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "config",
        help="Validate a configuration file.",
        description="Load a YAML configuration file exactly as the registration would.",
        epilog="example: consul-registration config validate consul_registration.yaml --show",
    )
    actions = parser.add_subparsers(dest="action", required=True, metavar="ACTION")

    validate = actions.add_parser("validate", help="Load FILE and report any error.")
    validate.add_argument("config_file", type=Path, metavar="FILE")
    validate.add_argument("--show", action="store_true", help="Print the resolved settings as JSON.")
    validate.set_defaults(handler=run)


def run(args: argparse.Namespace) -> int:
    """Exit 0 when the file loads, 1 when it is missing, 2 when it is invalid."""
    if not args.config_file.is_file():
        print(f"Error: no such file: {args.config_file}", file=sys.stderr)
        return 1
    try:
        settings = load_config(args.config_file)
    except ConfigError as e:
        print(f"Validation failed: {e}", file=sys.stderr)
        return 2

    print(f"{args.config_file}: valid")
    if args.show:
        print(json.dumps(asdict(settings), indent=2, default=str))
    return 0
