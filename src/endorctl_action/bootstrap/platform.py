"""Platform resolution for endorctl binaries.

Maps the runner OS and architecture to the names used in endorctl download
URLs and checksum keys.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from endorctl_action.core.environment import ExecutionEnvironment


class RunnerOS(str, Enum):
    """Operating systems reported by the runner (RUNNER_OS)."""

    LINUX = "Linux"
    WINDOWS = "Windows"
    MACOS = "macOS"


class RunnerArch(str, Enum):
    """Architectures reported by the runner (RUNNER_ARCH)."""

    AMD64 = "X64"
    ARM64 = "ARM64"


class EndorctlOS(str, Enum):
    """Operating systems endorctl is published for."""

    LINUX = "linux"
    WINDOWS = "windows"
    MACOS = "macos"


class EndorctlArch(str, Enum):
    """Architectures endorctl is published for."""

    AMD64 = "amd64"
    ARM64 = "arm64"


RUNNER_TO_ENDORCTL_OS = {
    RunnerOS.LINUX: EndorctlOS.LINUX,
    RunnerOS.WINDOWS: EndorctlOS.WINDOWS,
    RunnerOS.MACOS: EndorctlOS.MACOS,
}

RUNNER_TO_ENDORCTL_ARCH = {
    RunnerArch.AMD64: EndorctlArch.AMD64,
    RunnerArch.ARM64: EndorctlArch.ARM64,
}

# Only macOS ships an ARM64 build
ARM64_RUNNER_OS = frozenset({RunnerOS.MACOS})

_RUNNER_OS_VALUES = {member.value: member for member in RunnerOS}
_RUNNER_ARCH_VALUES = {member.value: member for member in RunnerArch}


@dataclass(frozen=True)
class PlatformInfo:
    """Resolved endorctl platform, or the reason it could not be resolved.

    Exactly one of (os and arch) or error is set.

    Attributes:
        os: endorctl OS name.
        arch: endorctl architecture name.
        error: Human readable reason the runner platform is unsupported.
    """

    os: Optional[EndorctlOS] = None
    arch: Optional[EndorctlArch] = None
    error: Optional[str] = None

    @property
    def is_windows(self) -> bool:
        return self.os == EndorctlOS.WINDOWS

    @property
    def binary_name(self) -> str:
        """File name of the installed endorctl binary."""
        return "endorctl.exe" if self.is_windows else "endorctl"


def resolve_platform(host_os: str, host_arch: str) -> PlatformInfo:
    """Resolve runner OS/architecture names to an endorctl platform.

    Args:
        host_os: Runner OS name, e.g. "Linux" or "macOS".
        host_arch: Runner architecture name, e.g. "X64" or "ARM64".

    Returns:
        PlatformInfo with os and arch set, or with error set when the
        combination is not supported.
    """
    runner_os = _RUNNER_OS_VALUES.get(host_os) if host_os else None
    if runner_os is None:
        return PlatformInfo(
            error="Unsupported OS! This actions requires one of [Linux, macOS, Windows]."
        )

    runner_arch = _RUNNER_ARCH_VALUES.get(host_arch) if host_arch else None
    if runner_arch is None:
        return PlatformInfo(
            error="Unsupported Architecture! This actions requires one of [AMD64(X64), ARM64]."
        )

    if runner_arch == RunnerArch.ARM64 and runner_os not in ARM64_RUNNER_OS:
        return PlatformInfo(
            error=f"Architecture {runner_arch.value} not supported for {runner_os.value}!"
        )

    return PlatformInfo(
        os=RUNNER_TO_ENDORCTL_OS[runner_os],
        arch=RUNNER_TO_ENDORCTL_ARCH[runner_arch],
    )


def get_platform_info(env: ExecutionEnvironment) -> PlatformInfo:
    """Resolve the endorctl platform for the given execution environment."""
    return resolve_platform(env.runner_os, env.runner_arch)
