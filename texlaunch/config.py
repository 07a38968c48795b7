"""
Runtime configuration.

Locates the working directory where downloaded texlab releases and the
evince helper script are kept, and loads the user's per-server settings
block from disk.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from texlaunch.exceptions import ConfigurationError
from texlaunch.settings import LspSettings

TEXLAB_REPO = "latex-lsp/texlab"


def default_work_dir() -> Path:
    """Return the platform-appropriate default working directory."""
    override = os.environ.get("TEXLAUNCH_WORK_DIR")
    if override:
        return Path(override)
    xdg = os.environ.get("XDG_CACHE_HOME")
    if xdg:
        base = Path(xdg)
    elif os.name == "nt":
        base = Path(os.environ.get(
            "LOCALAPPDATA",
            str(Path.home() / "AppData" / "Local"),
        ))
    else:
        base = Path.home() / ".cache"
    return base / "texlaunch"


@dataclass(frozen=True)
class LaunchConfig:
    """Settings for one session, fixed when the session is created."""
    work_dir: Path = field(default_factory=default_work_dir)
    github_repo: str = TEXLAB_REPO
    request_timeout_s: float | None = 60.0


def load_lsp_settings(path: Path | None) -> LspSettings:
    """
    Read the ``lsp.texlab`` block from a JSON or YAML file.

    A missing *path* yields empty settings.  YAML is a superset of JSON so
    one loader serves both formats.
    """
    if path is None:
        return LspSettings()
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"cannot read settings file: {exc}", str(path)) from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"invalid JSON/YAML: {exc}", str(path)) from exc
    return LspSettings.from_dict(data)
