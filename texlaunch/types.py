"""
Core data structures shared by the resolvers.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class Os(enum.Enum):
    """Operating systems the host can report."""
    MAC = "mac"
    LINUX = "linux"
    WINDOWS = "windows"


class Arch(enum.Enum):
    """CPU architectures the host can report."""
    X86 = "x86"
    X86_64 = "x86_64"
    AARCH64 = "aarch64"


@dataclass(frozen=True)
class PlatformInfo:
    """Operating system and architecture of the machine running the editor."""
    os: Os
    arch: Arch


class StatusKind(enum.Enum):
    """Installation states reported while acquiring the language server."""
    NONE = "none"
    CHECKING_FOR_UPDATE = "checking-for-update"
    DOWNLOADING = "downloading"
    FAILED = "failed"


@dataclass(frozen=True)
class InstallationStatus:
    """One report sent to the installation-status sink."""
    kind: StatusKind
    message: str = ""

    @classmethod
    def done(cls) -> InstallationStatus:
        return cls(StatusKind.NONE)

    @classmethod
    def checking_for_update(cls) -> InstallationStatus:
        return cls(StatusKind.CHECKING_FOR_UPDATE)

    @classmethod
    def downloading(cls) -> InstallationStatus:
        return cls(StatusKind.DOWNLOADING)

    @classmethod
    def failed(cls, message: str) -> InstallationStatus:
        return cls(StatusKind.FAILED, message)

    def __str__(self) -> str:
        if self.message:
            return f"{self.kind.value}: {self.message}"
        return self.kind.value


@dataclass(frozen=True)
class LaunchCommand:
    """Everything needed to spawn the language server process."""
    command: str
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {
            "command": self.command,
            "args": list(self.args),
            "env": dict(self.env),
        }
