"""
Location and download of the texlab language server binary.

texlab is looked for in this order, first hit wins:

  1. A user-provided path from settings (trusted, not checked on disk).
  2. ``texlab`` on the search path.
  3. The binary this resolver downloaded earlier, if it still exists.
  4. The latest GitHub release, downloaded into the working directory.
     If GitHub cannot be reached, the newest previously downloaded
     release found in the working directory is used instead.

Downloaded releases live in ``<work_dir>/texlab-<version>/``.  After a
successful download every other release directory is removed.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Callable

from texlaunch.config import TEXLAB_REPO
from texlaunch.exceptions import AcquisitionError, DownloadError, ReleaseQueryError
from texlaunch.platform_probe import HostEnvironment
from texlaunch.releases import DownloadedFileType, ReleaseClient, make_executable
from texlaunch.settings import LspSettings
from texlaunch.types import Arch, InstallationStatus, LaunchCommand, Os, PlatformInfo

logger = logging.getLogger(__name__)

StatusSink = Callable[[InstallationStatus], None]

PRODUCT = "texlab"

_ASSET_ARCH = {
    Arch.AARCH64: "aarch64",
    Arch.X86: "i686",
    Arch.X86_64: "x86_64",
}

_ASSET_OS = {
    Os.MAC: "macos",
    Os.LINUX: "linux",
    Os.WINDOWS: "windows",
}


def log_status(status: InstallationStatus) -> None:
    """Default status sink: write the report to the log."""
    if status.message:
        logger.warning("texlab installation %s", status)
    else:
        logger.info("texlab installation %s", status)


# ---------------------------------------------------------------------------
# Naming conventions
# ---------------------------------------------------------------------------

def binary_name(os_: Os) -> str:
    return f"{PRODUCT}.exe" if os_ is Os.WINDOWS else PRODUCT


def archive_type(os_: Os) -> DownloadedFileType:
    return DownloadedFileType.ZIP if os_ is Os.WINDOWS else DownloadedFileType.GZIP_TAR


def asset_name(info: PlatformInfo) -> str:
    """Return e.g. ``texlab-x86_64-linux.tar.gz``."""
    return (f"{PRODUCT}-{_ASSET_ARCH[info.arch]}-{_ASSET_OS[info.os]}"
            f".{archive_type(info.os).value}")


def download_url(repo: str, version: str, info: PlatformInfo) -> str:
    return f"https://github.com/{repo}/releases/download/{version}/{asset_name(info)}"


def version_dir_name(version: str) -> str:
    return f"{PRODUCT}-{version}"


def launch_env(lsp_settings: LspSettings, os_: Os) -> dict[str, str]:
    """
    Build the environment overlay for the server process.

    ``extra_tex_inputs`` directories are prepended to TEXINPUTS.  The
    trailing separator keeps TeX's default search path after them.
    """
    env: dict[str, str] = {}
    if lsp_settings.binary is not None and lsp_settings.binary.env:
        env.update(lsp_settings.binary.env)
    extra = lsp_settings.extra_tex_inputs()
    if extra:
        sep = ";" if os_ is Os.WINDOWS else ":"
        env["TEXINPUTS"] = sep.join(extra) + sep
    return env


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class TexlabResolver:
    """Resolves the texlab launch command; remembers downloads for the session."""

    def __init__(
        self,
        env: HostEnvironment,
        work_dir: Path,
        client: ReleaseClient,
        status_sink: StatusSink | None = None,
        repo: str = TEXLAB_REPO,
    ) -> None:
        self.env = env
        self.work_dir = Path(work_dir)
        self.client = client
        self.status_sink = status_sink or log_status
        self.repo = repo
        self.cached_path: str | None = None

    def resolve_command(self, lsp_settings: LspSettings) -> LaunchCommand:
        """
        Return the command that starts texlab.

        Raises
        ------
        AcquisitionError
            If the download fails, or GitHub is unreachable and nothing
            was downloaded before.
        """
        info = self.env.current_platform()
        binary = lsp_settings.binary
        args = list(binary.arguments) if binary and binary.arguments is not None else []
        env = launch_env(lsp_settings, info.os)

        if binary is not None and binary.path is not None:
            logger.info("Using texlab from settings: %s", binary.path)
            return LaunchCommand(binary.path, args, env)

        on_path = self.env.which(PRODUCT)
        if on_path is not None:
            logger.info("Using texlab from PATH: %s", on_path)
            return LaunchCommand(on_path, args, env)

        if self.cached_path is not None and os.path.exists(self.cached_path):
            logger.debug("Reusing downloaded texlab: %s", self.cached_path)
            return LaunchCommand(self.cached_path, args, env)

        path = self.acquire_latest()
        return LaunchCommand(path, args, env)

    def acquire_latest(self) -> str:
        """Download the latest release if needed and return its binary path."""
        info = self.env.current_platform()
        self.status_sink(InstallationStatus.checking_for_update())
        try:
            release = self.client.latest_release(
                self.repo, require_assets=True, pre_release=False)
        except ReleaseQueryError as exc:
            self.status_sink(InstallationStatus.failed(
                f"Error finding latest GitHub release for texlab: {exc}"))
            # Not remembered, so a later call retries the network.
            return self.find_cached_release()

        version_dir = self.work_dir / version_dir_name(release.version)
        binary_path = version_dir / binary_name(info.os)

        if not binary_path.is_file():
            self.status_sink(InstallationStatus.downloading())
            url = download_url(self.repo, release.version, info)
            logger.info("Downloading texlab %s from %s", release.version, url)
            try:
                self.client.download_file(url, version_dir, archive_type(info.os))
                if not binary_path.is_file():
                    raise DownloadError(f"{asset_name(info)} did not contain {binary_path.name}")
                make_executable(binary_path)
            except DownloadError as exc:
                shutil.rmtree(version_dir, ignore_errors=True)
                self.status_sink(InstallationStatus.failed(str(exc)))
                raise AcquisitionError(f"Failed to download texlab: {exc}") from exc
            self.prune_releases(keep=version_dir.name)

        self.cached_path = str(binary_path)
        self.status_sink(InstallationStatus.done())
        return self.cached_path

    def find_cached_release(self) -> str:
        """
        Return the newest previously downloaded binary in the working directory.

        Versions compare as strings, which matches numeric order only while
        all versions have the same number of digits per component.
        """
        binary = binary_name(self.env.current_platform().os)
        try:
            entries = list(self.work_dir.iterdir())
        except OSError as exc:
            raise AcquisitionError(
                f"Failed to list working directory {self.work_dir}: {exc}") from exc

        candidates = [
            str(entry / binary)
            for entry in entries
            if entry.name.startswith(f"{PRODUCT}-") and (entry / binary).is_file()
        ]
        if not candidates:
            raise AcquisitionError(
                "Failed to acquire latest texlab release and no cached version found")
        latest = max(candidates)
        logger.warning("GitHub unreachable, falling back to %s", latest)
        return latest

    def prune_releases(self, keep: str) -> None:
        """Remove every directory in the working directory except *keep*."""
        try:
            entries = list(self.work_dir.iterdir())
        except OSError as exc:
            logger.warning("Could not list %s for cleanup: %s", self.work_dir, exc)
            return
        for entry in entries:
            if entry.name == keep or not entry.is_dir():
                continue
            try:
                shutil.rmtree(entry)
                logger.debug("Removed old release %s", entry.name)
            except OSError as exc:
                logger.warning("Could not remove %s: %s", entry, exc)
