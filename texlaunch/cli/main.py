"""Main CLI entry point for texlaunch."""

from __future__ import annotations

import argparse
import logging
import sys

from .. import __version__
from .doctor_cli import build_doctor_parser
from .resolve_cli import build_resolve_parsers


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="texlaunch",
        description="Resolve the texlab language server and its workspace settings",
    )
    parser.add_argument("--version", action="version", version=f"texlaunch {__version__}")
    parser.add_argument(
        "--log-level",
        metavar="LEVEL",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level written to stderr (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command")
    build_resolve_parsers(subparsers)
    build_doctor_parser(subparsers)
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if args.command is None:
        parser.print_help()
        return 0
    return args.func(args)


def cli_entry() -> None:
    sys.exit(main())
