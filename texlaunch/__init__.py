"""
texlaunch -- launch and configure the texlab LaTeX language server.

Resolves the texlab binary (settings, PATH, previous download, or a fresh
GitHub release), detects a PDF previewer and the editor command used for
inverse search, and merges the resulting defaults into the user's texlab
workspace settings.
"""

__version__ = "0.1.0"

from texlaunch.editor_command import EditorCommand
from texlaunch.previewers import Previewer, PreviewerKind
from texlaunch.session import LatexSession
from texlaunch.types import (
    Arch,
    InstallationStatus,
    LaunchCommand,
    Os,
    PlatformInfo,
)
from texlaunch.workspace_config import merge

__all__ = [
    "Arch",
    "EditorCommand",
    "InstallationStatus",
    "LatexSession",
    "LaunchCommand",
    "Os",
    "PlatformInfo",
    "Previewer",
    "PreviewerKind",
    "merge",
]
