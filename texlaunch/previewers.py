"""
PDF previewer detection and forward-search presets.

Viewers are probed in a fixed priority order and the first one found wins.
Each known viewer maps to a preset for ``texlab.forwardSearch`` whose
arguments also register an inverse-search callback into the editor.

Placeholders such as ``%f`` (tex file), ``%p`` (pdf file) and ``%l``
(line) are substituted by texlab when it runs the command; doubled ``%%``
escapes reach the viewer as a single ``%`` for its own substitution.

Evince cannot perform synctex search on its own.  It is driven through
``evince_synctex.py``, a helper script fetched once into the working
directory and re-fetched whenever the local copy predates the version this
release pins.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from texlaunch.editor_command import EditorCommand
from texlaunch.exceptions import DownloadError
from texlaunch.platform_probe import HostEnvironment
from texlaunch.releases import DownloadedFileType, ReleaseClient
from texlaunch.settings import ForwardSearchSettings
from texlaunch.types import Os

logger = logging.getLogger(__name__)

SKIM_DISPLAYLINE = "/Applications/Skim.app/Contents/SharedSupport/displayline"

EVINCE_SCRIPT_NAME = "evince_synctex.py"
EVINCE_SCRIPT_REPO = "lnay/evince-synctex"
EVINCE_SCRIPT_COMMIT = "635f7863408a44f3aaa0dbad512f2ba6ac1ad6ff"
EVINCE_SCRIPT_URL = (
    f"https://raw.githubusercontent.com/{EVINCE_SCRIPT_REPO}/"
    f"{EVINCE_SCRIPT_COMMIT}/{EVINCE_SCRIPT_NAME}"
)
# Latest date a release of this package changed the pinned commit above.
# Local copies older than this are stale.
EVINCE_SCRIPT_UPDATED = datetime(2025, 3, 20, tzinfo=timezone.utc)


class PreviewerKind(enum.Enum):
    """Known PDF viewers."""
    SKIM = "skim"
    EVINCE = "evince"
    ZATHURA = "zathura"
    SIOYEK = "sioyek"
    QPDFVIEW = "qpdfview"
    OKULAR = "okular"
    # Detecting SumatraPDF requires the user's AppData path; it is never
    # returned by determine() and has no preset.
    SUMATRAPDF = "sumatrapdf"


# Viewers found by a plain PATH lookup, after Skim and Evince.
_PLAIN_LOOKUP_ORDER = (
    PreviewerKind.ZATHURA,
    PreviewerKind.SIOYEK,
    PreviewerKind.QPDFVIEW,
    PreviewerKind.OKULAR,
)


def helper_script_is_fresh(path: Path, updated: datetime = EVINCE_SCRIPT_UPDATED) -> bool:
    """Return True if *path* is a file modified at or after *updated*."""
    try:
        st = path.stat()
    except OSError:
        return False
    if not path.is_file():
        return False
    return st.st_mtime >= updated.timestamp()


def fetch_helper_script(work_dir: Path, client: ReleaseClient) -> Path | None:
    """
    Return the path of a usable evince_synctex.py, downloading it if needed.

    Returns None if the script is missing or stale and the download fails.
    """
    script = work_dir / EVINCE_SCRIPT_NAME
    if helper_script_is_fresh(script):
        return script
    try:
        client.download_file(EVINCE_SCRIPT_URL, script, DownloadedFileType.UNCOMPRESSED)
    except DownloadError as exc:
        logger.warning("Could not fetch %s, skipping evince: %s", EVINCE_SCRIPT_NAME, exc)
        return None
    return script


@dataclass(frozen=True)
class Previewer:
    """A detected viewer; Evince also carries the helper script path."""
    kind: PreviewerKind
    helper_script: Path | None = None

    @classmethod
    def determine(
        cls,
        env: HostEnvironment,
        work_dir: Path,
        client: ReleaseClient,
    ) -> Previewer | None:
        """Probe for an installed viewer; None leaves forward search alone."""
        if env.current_platform().os is Os.MAC:
            if env.which(SKIM_DISPLAYLINE) is not None:
                return cls(PreviewerKind.SKIM)

        if env.which("evince") is not None:
            script = fetch_helper_script(Path(work_dir).absolute(), client)
            if script is not None:
                return cls(PreviewerKind.EVINCE, helper_script=script)

        for kind in _PLAIN_LOOKUP_ORDER:
            if env.which(kind.value) is not None:
                return cls(kind)

        logger.debug("No supported PDF viewer found")
        return None

    def create_preset(self, command: EditorCommand) -> ForwardSearchSettings:
        """Build the forwardSearch settings for this viewer."""
        cmd = command.invocation
        kind = self.kind
        if kind is PreviewerKind.ZATHURA:
            return ForwardSearchSettings(
                executable="zathura",
                args=["--synctex-forward", "%l:1:%f",
                      "-x", f"{cmd} %%{{input}}:%%{{line}}",
                      "%p"],
            )
        if kind is PreviewerKind.SKIM:
            return ForwardSearchSettings(
                executable=SKIM_DISPLAYLINE,
                args=["-r", "%l", "%p", "%f"],
            )
        if kind is PreviewerKind.SIOYEK:
            return ForwardSearchSettings(
                executable="sioyek",
                args=["--reuse-window",
                      "--inverse-search", f'{cmd} "%%1":%%2',
                      "--forward-search-file", "%f",
                      "--forward-search-line", "%l",
                      "%p"],
            )
        if kind is PreviewerKind.OKULAR:
            # --unique clashes with --editor-cmd once okular is running, so
            # retry without it; the editor command is already set by then.
            return ForwardSearchSettings(
                executable="sh",
                args=["-c",
                      f"okular --unique --noraise --editor-cmd \"{cmd} '%%f':%%l:%%c\" "
                      f"\"%p#src:%l %f\" || okular --unique --noraise \"%p#src:%l %f\""],
            )
        if kind is PreviewerKind.QPDFVIEW:
            return ForwardSearchSettings(
                executable="qpdfview",
                args=["--unique", "%p#src:%f:%l:1"],
            )
        if kind is PreviewerKind.EVINCE and self.helper_script is not None:
            return ForwardSearchSettings(
                executable="python",
                args=[str(self.helper_script),
                      "-f", "%l", "-t", "%f", "%p",
                      f"{cmd} %%f:%%l"],
            )
        return ForwardSearchSettings()
