"""
Host environment queries.

Every resolver asks the host three things: which platform it is running
on, whether an executable can be found on the search path, and what the
user's shell environment looks like.  These are gathered behind the
HostEnvironment interface so the resolvers can be exercised against a
fake host in tests.
"""

from __future__ import annotations

import abc
import os
import platform
import shutil

from texlaunch.exceptions import UnsupportedPlatformError
from texlaunch.types import Arch, Os, PlatformInfo


class HostEnvironment(abc.ABC):
    """Abstract interface to the editor's execution environment."""

    @abc.abstractmethod
    def current_platform(self) -> PlatformInfo:
        """Return the OS and architecture of the host."""

    @abc.abstractmethod
    def which(self, name: str) -> str | None:
        """Return the full path of *name* on the search path, or None."""

    @abc.abstractmethod
    def shell_env(self) -> list[tuple[str, str]]:
        """Return the user's shell environment as ordered key/value pairs."""

    def getenv(self, key: str) -> str | None:
        for name, value in self.shell_env():
            if name == key:
                return value
        return None


# ---------------------------------------------------------------------------
# Local machine
# ---------------------------------------------------------------------------

_OS_MAP = {
    "Darwin": Os.MAC,
    "Linux": Os.LINUX,
    "Windows": Os.WINDOWS,
}

_ARCH_MAP = {
    "x86_64": Arch.X86_64,
    "amd64": Arch.X86_64,
    "i386": Arch.X86,
    "i686": Arch.X86,
    "x86": Arch.X86,
    "arm64": Arch.AARCH64,
    "aarch64": Arch.AARCH64,
}


def detect_platform(system: str | None = None, machine: str | None = None) -> PlatformInfo:
    """Map ``platform.system()`` / ``platform.machine()`` onto PlatformInfo."""
    system = system if system is not None else platform.system()
    machine = machine if machine is not None else platform.machine()
    os_ = _OS_MAP.get(system)
    if os_ is None:
        raise UnsupportedPlatformError(f"Unsupported operating system: {system!r}")
    arch = _ARCH_MAP.get(machine.lower())
    if arch is None:
        raise UnsupportedPlatformError(f"Unsupported architecture: {machine!r}")
    return PlatformInfo(os=os_, arch=arch)


class LocalEnvironment(HostEnvironment):
    """HostEnvironment backed by the running Python process."""

    def __init__(self, env: dict[str, str] | None = None) -> None:
        self._env = dict(os.environ) if env is None else dict(env)
        self._platform: PlatformInfo | None = None

    def current_platform(self) -> PlatformInfo:
        if self._platform is None:
            self._platform = detect_platform()
        return self._platform

    def which(self, name: str) -> str | None:
        return shutil.which(name, path=self._env.get("PATH"))

    def shell_env(self) -> list[tuple[str, str]]:
        return list(self._env.items())
