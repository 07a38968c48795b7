"""
Detection of the command that launches the Zed editor.

The result is substituted into the inverse-search callbacks handed to PDF
viewers, so that clicking in the PDF reopens the source in the editor.

Handled installations:
  - Standard installs that put ``zed`` on PATH.
  - Flatpak installs on Linux.
  - Third-party Linux packages shipping ``zeditor``, ``zedit`` or
    ``zed-editor``.
"""

from __future__ import annotations

import enum
import logging

from texlaunch.platform_probe import HostEnvironment
from texlaunch.types import Os

logger = logging.getLogger(__name__)

# Set inside the flatpak sandbox only.
FLATPAK_ENV_VAR = "ZED_FLATPAK_LIB_PATH"


class EditorCommand(enum.Enum):
    """Ways of invoking Zed from a shell."""
    ZED = "zed"
    ZEDITOR = "zeditor"
    ZEDIT = "zedit"
    ZED_EDITOR = "zed-editor"
    FLATPAK = "flatpak run dev.zed.Zed"

    @property
    def invocation(self) -> str:
        return self.value

    @classmethod
    def default(cls) -> EditorCommand:
        return cls.ZED

    @classmethod
    def determine(cls, env: HostEnvironment) -> EditorCommand | None:
        """
        Return the command that launches Zed on this machine, or None.

        Only the flatpak check is reliable: the variable being set means
        this process descends from the flatpak sandbox even if another Zed
        is on PATH.  The PATH lookups are a heuristic and may pick an
        install other than the one currently running.
        """
        is_linux = env.current_platform().os is Os.LINUX

        if is_linux and env.getenv(FLATPAK_ENV_VAR) is not None:
            logger.debug("%s is set, using flatpak wrapper", FLATPAK_ENV_VAR)
            return cls.FLATPAK

        if env.which(cls.ZED.value) is not None:
            return cls.ZED

        if is_linux:
            for candidate in _LINUX_PACKAGE_NAMES:
                if env.which(candidate.value) is not None:
                    logger.debug("Found Zed packaged as %r", candidate.value)
                    return candidate

        logger.debug("No Zed executable found on PATH")
        return None


# Order matters: first match wins.
_LINUX_PACKAGE_NAMES = (
    EditorCommand.ZEDITOR,
    EditorCommand.ZEDIT,
    EditorCommand.ZED_EDITOR,
)
