"""Checksum selection and file hashing for endorctl binaries."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Mapping, Optional, Union

from endorctl_action.bootstrap.platform import EndorctlArch, EndorctlOS

_FILE_READ_CHUNK_BYTES = 1024 * 1024

# Checksum keys published by the version endpoint, by "{os}_{arch}"
CHECKSUM_KEYS = {
    f"{EndorctlOS.LINUX.value}_{EndorctlArch.AMD64.value}": "ARCH_TYPE_LINUX_AMD64",
    f"{EndorctlOS.MACOS.value}_{EndorctlArch.AMD64.value}": "ARCH_TYPE_MACOS_AMD64",
    f"{EndorctlOS.MACOS.value}_{EndorctlArch.ARM64.value}": "ARCH_TYPE_MACOS_ARM64",
    f"{EndorctlOS.WINDOWS.value}_{EndorctlArch.AMD64.value}": "ARCH_TYPE_WINDOWS_AMD64",
}


def _value(member: Union[EndorctlOS, EndorctlArch, str, None]) -> str:
    if isinstance(member, (EndorctlOS, EndorctlArch)):
        return member.value
    return str(member)


def select_checksum(
    checksums: Mapping[str, str],
    os: Optional[EndorctlOS],
    arch: Optional[EndorctlArch],
) -> str:
    """Return the expected checksum for a platform.

    Returns an empty string when the platform has no checksum key or the
    metadata does not contain one for it.
    """
    key = CHECKSUM_KEYS.get(f"{_value(os)}_{_value(arch)}")
    if key is None:
        return ""
    value = checksums.get(key)
    return value if isinstance(value, str) else ""


def sha256_file(path: Union[str, Path], *, chunk_size: int = _FILE_READ_CHUNK_BYTES) -> str:
    """Return the lower-case SHA-256 hex digest of a file read in chunks."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()
