"""
CLI commands that resolve the texlab launch command and workspace settings.

Usage:
    texlaunch command --settings lsp-texlab.json
    texlaunch config --settings lsp-texlab.yaml --work-dir ~/.cache/texlaunch
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from ..config import LaunchConfig, default_work_dir, load_lsp_settings
from ..exceptions import TexLaunchError
from ..session import LatexSession


def _make_session(args: argparse.Namespace) -> LatexSession:
    work_dir = Path(args.work_dir) if args.work_dir else default_work_dir()
    return LatexSession(config=LaunchConfig(work_dir=work_dir, request_timeout_s=args.timeout))


def _load(args: argparse.Namespace):
    return load_lsp_settings(Path(args.settings) if args.settings else None)


def cmd_command(args: argparse.Namespace) -> int:
    """Handler for ``texlaunch command``."""
    try:
        lsp_settings = _load(args)
        session = _make_session(args)
        launch = session.language_server_command(lsp_settings)
    except TexLaunchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(json.dumps(launch.to_dict(), indent=2))
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    """Handler for ``texlaunch config``."""
    try:
        lsp_settings = _load(args)
        session = _make_session(args)
        session.detect()
        settings = session.workspace_configuration(lsp_settings)
    except TexLaunchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(json.dumps(settings, indent=2))
    return 0


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--settings", default=None,
        help="JSON or YAML file holding the lsp.texlab settings block",
    )
    p.add_argument(
        "--work-dir", default=None,
        help="Directory for downloaded releases (default: ~/.cache/texlaunch)",
    )
    p.add_argument(
        "--timeout", type=float, default=60.0,
        help="Network timeout in seconds (default: 60)",
    )


def build_resolve_parsers(subparsers: argparse._SubParsersAction) -> None:
    """Register the ``command`` and ``config`` subcommands."""
    p = subparsers.add_parser(
        "command",
        help="Print the texlab launch command as JSON",
        description="Locate or download texlab and print {command, args, env}.",
    )
    _add_common(p)
    p.set_defaults(func=cmd_command)

    p = subparsers.add_parser(
        "config",
        help="Print the merged texlab workspace settings as JSON",
        description="Merge defaults and previewer settings into the user's texlab settings.",
    )
    _add_common(p)
    p.set_defaults(func=cmd_config)
