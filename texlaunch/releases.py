"""
GitHub release lookup and file download.

Two operations are needed from the network: asking GitHub for the latest
stable release of a project, and fetching a file (optionally an archive to
unpack) into the working directory.  Both live on ReleaseClient so the
resolvers can be given a fake client in tests.
"""

from __future__ import annotations

import enum
import http.client
import json
import logging
import os
import shutil
import stat
import tarfile
import tempfile
import urllib.error
import urllib.request
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from texlaunch.exceptions import DownloadError, ReleaseQueryError

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"
USER_AGENT = "texlaunch"


class DownloadedFileType(enum.Enum):
    """How a downloaded file should be unpacked."""
    GZIP_TAR = "tar.gz"
    ZIP = "zip"
    UNCOMPRESSED = "uncompressed"


@dataclass(frozen=True)
class ReleaseAsset:
    name: str
    download_url: str


@dataclass(frozen=True)
class Release:
    """A published release: its tag and downloadable assets."""
    version: str
    assets: list[ReleaseAsset] = field(default_factory=list)


def _select_release(
    payload: list[dict[str, Any]],
    require_assets: bool,
    pre_release: bool,
) -> Release | None:
    for entry in payload:
        if entry.get("draft"):
            continue
        if entry.get("prerelease") and not pre_release:
            continue
        assets = [
            ReleaseAsset(name=a["name"], download_url=a["browser_download_url"])
            for a in entry.get("assets") or []
            if isinstance(a.get("name"), str)
            and isinstance(a.get("browser_download_url"), str)
        ]
        if require_assets and not assets:
            continue
        tag = entry.get("tag_name")
        if not isinstance(tag, str):
            continue
        return Release(version=tag, assets=assets)
    return None


# ---------------------------------------------------------------------------
# Archive helpers
# ---------------------------------------------------------------------------

def _check_member(dest: Path, name: str) -> None:
    target = (dest / name).resolve()
    if target != dest.resolve() and dest.resolve() not in target.parents:
        raise DownloadError(f"Archive member escapes destination: {name!r}")


def extract_archive(archive: Path, dest: Path, file_type: DownloadedFileType) -> None:
    """Unpack *archive* into *dest* according to *file_type*."""
    dest.mkdir(parents=True, exist_ok=True)
    try:
        if file_type is DownloadedFileType.GZIP_TAR:
            with tarfile.open(archive, "r:gz") as tf:
                for member in tf.getmembers():
                    _check_member(dest, member.name)
                # Older patch releases lack extraction filters; members were
                # already checked above.
                if hasattr(tarfile, "data_filter"):
                    tf.extractall(dest, filter="data")
                else:
                    tf.extractall(dest)
        elif file_type is DownloadedFileType.ZIP:
            with zipfile.ZipFile(archive) as zf:
                for name in zf.namelist():
                    _check_member(dest, name)
                zf.extractall(dest)
        else:
            raise ValueError(f"Not an archive type: {file_type}")
    except (tarfile.TarError, zipfile.BadZipFile, OSError) as exc:
        raise DownloadError(f"Failed to extract {archive.name}: {exc}") from exc


def make_executable(path: Path) -> None:
    """Add execute permission bits to *path*."""
    try:
        mode = path.stat().st_mode
        path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as exc:
        raise DownloadError(f"Failed to make {path} executable: {exc}") from exc


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class ReleaseClient:
    """Blocking HTTP client for GitHub releases and raw downloads."""

    def __init__(self, timeout_s: float | None = 60.0, api_url: str = GITHUB_API) -> None:
        self.timeout_s = timeout_s
        self.api_url = api_url.rstrip("/")

    def _open(self, url: str, accept: str | None = None):
        headers = {"User-Agent": USER_AGENT}
        if accept:
            headers["Accept"] = accept
        req = urllib.request.Request(url, headers=headers)
        return urllib.request.urlopen(req, timeout=self.timeout_s)

    def latest_release(
        self,
        repo: str,
        require_assets: bool = True,
        pre_release: bool = False,
    ) -> Release:
        """
        Return the newest release of *repo* (``owner/name``).

        Drafts are always skipped; prereleases unless *pre_release*.  With
        *require_assets* a release without downloadable assets is skipped.

        Raises
        ------
        ReleaseQueryError
            On any network failure or when no release qualifies.
        """
        url = f"{self.api_url}/repos/{repo}/releases"
        try:
            with self._open(url, accept="application/vnd.github+json") as resp:
                payload = json.loads(resp.read().decode("utf-8"))
        except (urllib.error.URLError, http.client.HTTPException,
                OSError, ValueError) as exc:
            raise ReleaseQueryError(f"Failed to query releases of {repo}: {exc}") from exc

        if not isinstance(payload, list):
            raise ReleaseQueryError(f"Unexpected response from {url}")
        release = _select_release(payload, require_assets, pre_release)
        if release is None:
            raise ReleaseQueryError(f"No matching release found for {repo}")
        logger.debug("Latest release of %s is %s", repo, release.version)
        return release

    def download_file(
        self,
        url: str,
        dest: Path,
        file_type: DownloadedFileType,
    ) -> None:
        """
        Download *url* to *dest*.

        For archive types *dest* is the directory the archive is unpacked
        into; for UNCOMPRESSED it is the target file path.
        """
        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".download-", dir=dest.parent)
        tmp = Path(tmp_name)
        try:
            try:
                with os.fdopen(fd, "wb") as out, self._open(url) as resp:
                    shutil.copyfileobj(resp, out)
            except (urllib.error.URLError, http.client.HTTPException, OSError) as exc:
                raise DownloadError(f"Failed to download {url}: {exc}") from exc

            if file_type is DownloadedFileType.UNCOMPRESSED:
                os.replace(tmp, dest)
            else:
                extract_archive(tmp, dest, file_type)
        finally:
            tmp.unlink(missing_ok=True)
        logger.debug("Downloaded %s -> %s", url, dest)
