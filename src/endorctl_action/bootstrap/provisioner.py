"""endorctl binary provisioning.

Resolves the endorctl version and checksum, downloads the platform binary,
verifies it and installs it into the job's working directory.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Tuple

from endorctl_action.bootstrap.checksums import select_checksum, sha256_file
from endorctl_action.bootstrap.download import DownloadError, download_tool
from endorctl_action.bootstrap.platform import PlatformInfo, get_platform_info
from endorctl_action.bootstrap.versions import VersionMetadataClient
from endorctl_action.core.environment import ExecutionEnvironment
from endorctl_action.core.logging import get_logger
from endorctl_action.core.workflow import add_path

LOGGER = get_logger(__name__)

DEFAULT_API = "https://api.endorlabs.com"


class ProvisioningError(Exception):
    """Error installing the endorctl binary."""

    pass


class UnsupportedPlatformError(ProvisioningError):
    """The runner platform has no endorctl build."""

    pass


class ChecksumMismatchError(ProvisioningError):
    """The downloaded binary does not match its expected checksum."""

    pass


@dataclass
class SetupSpec:
    """Which endorctl to install and where to get it.

    When version is empty the checksum is ignored and both are taken from
    the latest release metadata.
    """

    version: str = ""
    checksum: str = ""
    api: str = DEFAULT_API


def construct_download_url(api: str, version: str, platform_info: PlatformInfo) -> str:
    """Construct the download URL of an endorctl binary.

    Example: {api}/download/endorlabs/v1.6.0/binaries/endorctl_v1.6.0_linux_amd64
    """
    if platform_info.os is None or platform_info.arch is None:
        raise UnsupportedPlatformError(platform_info.error or "Unsupported platform for endorctl")
    suffix = ".exe" if platform_info.is_windows else ""
    return (
        f"{api.rstrip('/')}/download/endorlabs/{version}/binaries/"
        f"endorctl_{version}_{platform_info.os.value}_{platform_info.arch.value}{suffix}"
    )


class BinaryProvisioner:
    """Installs a verified endorctl binary and puts it on PATH.

    Steps run strictly in order; a failure before installation leaves no
    binary in the working directory.
    """

    def __init__(
        self,
        env: ExecutionEnvironment,
        metadata_client_factory: Optional[Callable[[str], VersionMetadataClient]] = None,
        downloader: Optional[Callable[[str, Path], Path]] = None,
    ) -> None:
        self._env = env
        self._metadata_client_factory = metadata_client_factory or VersionMetadataClient
        self._downloader = downloader or download_tool

    def provision(self, spec: SetupSpec) -> Path:
        """Download, verify and install endorctl.

        Args:
            spec: Requested version, checksum and API base URL.

        Returns:
            Path of the installed binary.

        Raises:
            UnsupportedPlatformError: If the runner platform is unsupported.
            MetadataError: If the latest version cannot be determined.
            DownloadError: If the binary cannot be downloaded.
            ChecksumMismatchError: If the binary fails verification.
            ProvisioningError: If the binary cannot be installed.
        """
        platform_info = get_platform_info(self._env)
        if platform_info.error:
            raise UnsupportedPlatformError(platform_info.error)

        version, checksum = self._resolve_version(spec, platform_info)

        LOGGER.info(f"Downloading endorctl version {version}")
        url = construct_download_url(spec.api, version, platform_info)
        download_path = self._downloader(url, self._env.temp_dir)

        try:
            self._verify(download_path, checksum)
            self._make_executable(download_path, platform_info)
            installed = self._install(download_path, platform_info)
        except Exception:
            download_path.unlink(missing_ok=True)
            raise

        add_path(installed.parent, self._env.github_path_file)
        LOGGER.info("Endorctl downloaded and added to the path")
        return installed

    def _resolve_version(self, spec: SetupSpec, platform_info: PlatformInfo) -> Tuple[str, str]:
        if spec.version:
            return spec.version, spec.checksum

        LOGGER.info("Endorctl version not provided, using latest version")
        metadata = self._metadata_client_factory(spec.api).fetch_latest()
        checksum = select_checksum(
            metadata.client_checksums, platform_info.os, platform_info.arch
        )
        return metadata.client_version, checksum

    def _verify(self, path: Path, expected: str) -> None:
        try:
            digest = sha256_file(path)
        except OSError as e:
            raise ProvisioningError(f"Failed to verify downloaded endorctl binary: {e}") from e
        if digest != expected:
            raise ChecksumMismatchError(
                "The checksum of the downloaded binary does not match the expected value!"
            )
        LOGGER.info(f"Binary checksum: {expected}")

    def _make_executable(self, path: Path, platform_info: PlatformInfo) -> None:
        if platform_info.is_windows:
            return
        try:
            path.chmod(path.stat().st_mode | 0o111)
        except OSError as e:
            raise ProvisioningError(f"Failed to make endorctl executable: {e}") from e

    def _install(self, path: Path, platform_info: PlatformInfo) -> Path:
        destination = self._env.workspace / platform_info.binary_name
        try:
            shutil.move(str(path), str(destination))
        except OSError as e:
            raise ProvisioningError(f"Failed to install endorctl to {destination}: {e}") from e
        return destination


__all__ = [
    "BinaryProvisioner",
    "ChecksumMismatchError",
    "DEFAULT_API",
    "DownloadError",
    "ProvisioningError",
    "SetupSpec",
    "UnsupportedPlatformError",
    "construct_download_url",
]
