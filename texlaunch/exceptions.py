"""
Custom exception hierarchy for texlaunch.

All texlaunch exceptions inherit from TexLaunchError so callers can catch
the entire family with a single except clause.
"""

from __future__ import annotations


class TexLaunchError(Exception):
    """Base exception for all texlaunch errors."""


class ConfigurationError(TexLaunchError):
    """Raised when user-supplied settings do not match the expected shape."""

    def __init__(self, message: str, key_path: str = "") -> None:
        if key_path:
            message = f"{key_path}: {message}"
        super().__init__(message)
        self.key_path = key_path


class UnsupportedPlatformError(TexLaunchError):
    """Raised when the host reports an OS or architecture we cannot map."""


class ReleaseQueryError(TexLaunchError):
    """Raised when the release metadata lookup fails."""


class DownloadError(TexLaunchError):
    """Raised when fetching or extracting a remote file fails."""


class AcquisitionError(TexLaunchError):
    """Raised when no texlab binary could be located or downloaded."""
