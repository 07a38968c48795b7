"""
System probing and diagnostics.

Reports what the resolvers would see on this machine: the platform, the
editor command, which PDF viewers and texlab are on the search path, and
which texlab releases are already downloaded.  Nothing is downloaded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from texlaunch.acquisition import PRODUCT, binary_name
from texlaunch.editor_command import EditorCommand
from texlaunch.platform_probe import HostEnvironment
from texlaunch.previewers import (
    EVINCE_SCRIPT_NAME,
    SKIM_DISPLAYLINE,
    PreviewerKind,
    helper_script_is_fresh,
)
from texlaunch.types import Os, PlatformInfo

logger = logging.getLogger(__name__)


@dataclass
class ToolProbe:
    """Result of probing a single external tool."""
    name: str
    found: bool
    path: Optional[str]
    notes: Optional[str] = None


@dataclass
class SystemReport:
    platform: PlatformInfo
    editor_command: Optional[EditorCommand]
    texlab: ToolProbe
    viewers: Dict[str, ToolProbe] = field(default_factory=dict)
    cached_releases: List[str] = field(default_factory=list)
    helper_script_fresh: bool = False


def _probe_tool(env: HostEnvironment, name: str, lookup: str | None = None) -> ToolProbe:
    path = env.which(lookup or name)
    return ToolProbe(name=name, found=path is not None, path=path)


def _viewer_lookup(kind: PreviewerKind) -> str:
    return SKIM_DISPLAYLINE if kind is PreviewerKind.SKIM else kind.value


def cached_releases(work_dir: Path, os_: Os) -> list[str]:
    """Return the release directories in *work_dir* holding a binary, sorted."""
    if not work_dir.is_dir():
        return []
    binary = binary_name(os_)
    return sorted(
        entry.name
        for entry in work_dir.iterdir()
        if entry.name.startswith(f"{PRODUCT}-") and (entry / binary).is_file()
    )


def probe_system(env: HostEnvironment, work_dir: Path) -> SystemReport:
    """Probe *env* for everything the resolvers depend on."""
    info = env.current_platform()
    viewers: Dict[str, ToolProbe] = {}
    for kind in PreviewerKind:
        if kind is PreviewerKind.SUMATRAPDF:
            continue
        if kind is PreviewerKind.SKIM and info.os is not Os.MAC:
            continue
        viewers[kind.value] = _probe_tool(env, kind.value, _viewer_lookup(kind))

    script = work_dir / EVINCE_SCRIPT_NAME
    fresh = helper_script_is_fresh(script)
    if viewers["evince"].found and not fresh:
        viewers["evince"].notes = f"{EVINCE_SCRIPT_NAME} will be downloaded on first use"

    return SystemReport(
        platform=info,
        editor_command=EditorCommand.determine(env),
        texlab=_probe_tool(env, PRODUCT),
        viewers=viewers,
        cached_releases=cached_releases(work_dir, info.os),
        helper_script_fresh=fresh,
    )


def format_diagnostics(report: SystemReport, work_dir: Path) -> str:
    """Return a human-readable diagnostics report."""
    cmd = report.editor_command
    lines = ["texlaunch diagnostics", "=" * 40,
             f"Platform:       {report.platform.os.value} {report.platform.arch.value}",
             f"Editor command: {cmd.invocation if cmd else 'NOT FOUND (defaulting to zed)'}",
             f"Work dir:       {work_dir}", "",
             "Language server:"]
    t = report.texlab
    status = "FOUND" if t.found else "NOT FOUND (will download)"
    path = f"  [{t.path}]" if t.path else ""
    lines.append(f"  {t.name:20s} {status}{path}")

    lines += ["", "PDF viewers (priority order):"]
    for name, p in report.viewers.items():
        status = "FOUND" if p.found else "NOT FOUND"
        path = f"  [{p.path}]" if p.path else ""
        lines.append(f"  {name:20s} {status}{path}")
        if p.notes:
            lines.append(f"    {p.notes}")

    lines += ["", "Downloaded releases:"]
    if report.cached_releases:
        lines += [f"  {name}" for name in report.cached_releases]
    else:
        lines.append("  (none)")
    lines.append("")
    return "\n".join(lines)
