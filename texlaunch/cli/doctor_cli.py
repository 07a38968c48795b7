"""CLI command printing what the resolvers see on this machine."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from ..config import default_work_dir
from ..detection import format_diagnostics, probe_system
from ..exceptions import TexLaunchError
from ..platform_probe import LocalEnvironment


def cmd_doctor(args: argparse.Namespace) -> int:
    work_dir = Path(args.work_dir) if args.work_dir else default_work_dir()
    try:
        report = probe_system(LocalEnvironment(), work_dir)
    except TexLaunchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(format_diagnostics(report, work_dir))
    return 0


def build_doctor_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser("doctor", help="Show detected editor, viewers and texlab")
    p.add_argument("--work-dir", default=None)
    p.set_defaults(func=cmd_doctor)
