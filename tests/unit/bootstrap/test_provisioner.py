"""Tests for endorctl binary provisioning."""

from __future__ import annotations

import hashlib
import os
import stat
from pathlib import Path
from typing import List
from unittest.mock import MagicMock, patch

import pytest

from endorctl_action.bootstrap.download import DownloadError
from endorctl_action.bootstrap.platform import EndorctlArch, EndorctlOS, PlatformInfo
from endorctl_action.bootstrap.provisioner import (
    BinaryProvisioner,
    ChecksumMismatchError,
    ProvisioningError,
    SetupSpec,
    UnsupportedPlatformError,
    construct_download_url,
)
from endorctl_action.bootstrap.versions import MetadataNetworkError, VersionMetadata
from endorctl_action.core.environment import ExecutionEnvironment

CONTENT = b"#!/bin/sh\necho endorctl\n"
CONTENT_SHA = hashlib.sha256(CONTENT).hexdigest()


@pytest.fixture
def env(tmp_path: Path) -> ExecutionEnvironment:
    (tmp_path / "temp").mkdir()
    (tmp_path / "workspace").mkdir()
    return ExecutionEnvironment(
        runner_os="Linux",
        runner_arch="X64",
        temp_dir=tmp_path / "temp",
        workspace=tmp_path / "workspace",
        github_path_file=tmp_path / "github_path",
    )


@pytest.fixture(autouse=True)
def _isolated_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PATH", os.defpath)


class FakeDownloader:
    """Writes fixed content where download_tool would."""

    def __init__(self, content: bytes = CONTENT) -> None:
        self.content = content
        self.urls: List[str] = []
        self.paths: List[Path] = []

    def __call__(self, url: str, dest_dir: Path) -> Path:
        self.urls.append(url)
        path = dest_dir / "download"
        path.write_bytes(self.content)
        self.paths.append(path)
        return path


class TestConstructDownloadUrl:
    """Tests for construct_download_url."""

    def test_linux(self) -> None:
        info = PlatformInfo(os=EndorctlOS.LINUX, arch=EndorctlArch.AMD64)
        assert construct_download_url("https://api.endorlabs.com", "v1.6.0", info) == (
            "https://api.endorlabs.com/download/endorlabs/v1.6.0/binaries/"
            "endorctl_v1.6.0_linux_amd64"
        )

    def test_windows_has_exe_suffix(self) -> None:
        info = PlatformInfo(os=EndorctlOS.WINDOWS, arch=EndorctlArch.AMD64)
        url = construct_download_url("https://api.endorlabs.com/", "v1.6.0", info)
        assert url.endswith("/binaries/endorctl_v1.6.0_windows_amd64.exe")
        assert "com//download" not in url

    def test_unresolved_platform(self) -> None:
        info = PlatformInfo(error="ARM64 not supported for Linux")
        with pytest.raises(UnsupportedPlatformError, match="ARM64 not supported for Linux"):
            construct_download_url("https://api.endorlabs.com", "v1.6.0", info)


class TestBinaryProvisioner:
    """Tests for BinaryProvisioner.provision."""

    def test_installs_pinned_version(self, env: ExecutionEnvironment) -> None:
        downloader = FakeDownloader()
        factory = MagicMock()
        provisioner = BinaryProvisioner(env, metadata_client_factory=factory, downloader=downloader)

        installed = provisioner.provision(SetupSpec(version="v1.6.0", checksum=CONTENT_SHA))

        assert installed == env.workspace / "endorctl"
        assert installed.read_bytes() == CONTENT
        assert installed.stat().st_mode & stat.S_IXUSR
        assert downloader.urls == [
            "https://api.endorlabs.com/download/endorlabs/v1.6.0/binaries/"
            "endorctl_v1.6.0_linux_amd64"
        ]
        factory.assert_not_called()

    def test_registers_install_directory_on_path(self, env: ExecutionEnvironment) -> None:
        provisioner = BinaryProvisioner(env, downloader=FakeDownloader())
        provisioner.provision(SetupSpec(version="v1.6.0", checksum=CONTENT_SHA))

        workspace = str(env.workspace.resolve())
        assert env.github_path_file.read_text().splitlines() == [workspace]
        assert os.environ["PATH"].split(os.pathsep)[0] == workspace

    def test_latest_version_from_metadata(self, env: ExecutionEnvironment) -> None:
        client = MagicMock()
        client.fetch_latest.return_value = VersionMetadata(
            service_version="v1.5.0",
            client_version="v1.6.2",
            client_checksums={"ARCH_TYPE_LINUX_AMD64": CONTENT_SHA},
        )
        factory = MagicMock(return_value=client)
        downloader = FakeDownloader()
        provisioner = BinaryProvisioner(env, metadata_client_factory=factory, downloader=downloader)

        provisioner.provision(SetupSpec(checksum="ignored", api="https://api.example.com"))

        factory.assert_called_once_with("https://api.example.com")
        assert "/v1.6.2/binaries/endorctl_v1.6.2_linux_amd64" in downloader.urls[0]
        assert (env.workspace / "endorctl").exists()

    def test_checksum_mismatch_installs_nothing(self, env: ExecutionEnvironment) -> None:
        downloader = FakeDownloader()
        provisioner = BinaryProvisioner(env, downloader=downloader)

        with pytest.raises(ChecksumMismatchError, match="does not match the expected value"):
            provisioner.provision(SetupSpec(version="v1.6.0", checksum="0" * 64))

        assert not (env.workspace / "endorctl").exists()
        assert not downloader.paths[0].exists()
        assert not env.github_path_file.exists()

    def test_empty_checksum_is_a_mismatch(self, env: ExecutionEnvironment) -> None:
        provisioner = BinaryProvisioner(env, downloader=FakeDownloader())
        with pytest.raises(ChecksumMismatchError):
            provisioner.provision(SetupSpec(version="v1.6.0"))

    def test_unsupported_platform_fails_before_download(self, tmp_path: Path) -> None:
        env = ExecutionEnvironment(runner_os="Linux", runner_arch="ARM64", temp_dir=tmp_path)
        downloader = FakeDownloader()
        provisioner = BinaryProvisioner(env, downloader=downloader)

        with pytest.raises(UnsupportedPlatformError, match="ARM64 not supported for Linux"):
            provisioner.provision(SetupSpec(version="v1.6.0", checksum=CONTENT_SHA))

        assert downloader.urls == []

    def test_metadata_failure_propagates(self, env: ExecutionEnvironment) -> None:
        client = MagicMock()
        client.fetch_latest.side_effect = MetadataNetworkError("offline")
        downloader = FakeDownloader()
        provisioner = BinaryProvisioner(
            env, metadata_client_factory=MagicMock(return_value=client), downloader=downloader
        )

        with pytest.raises(MetadataNetworkError):
            provisioner.provision(SetupSpec())

        assert downloader.urls == []

    def test_download_failure_propagates(self, env: ExecutionEnvironment) -> None:
        downloader = MagicMock(side_effect=DownloadError("HTTP 404"))
        provisioner = BinaryProvisioner(env, downloader=downloader)

        with pytest.raises(DownloadError):
            provisioner.provision(SetupSpec(version="v1.6.0", checksum=CONTENT_SHA))

        assert not (env.workspace / "endorctl").exists()

    def test_windows_binary_name(self, env: ExecutionEnvironment) -> None:
        windows_env = ExecutionEnvironment(
            runner_os="Windows",
            runner_arch="X64",
            temp_dir=env.temp_dir,
            workspace=env.workspace,
        )
        downloader = FakeDownloader()
        installed = BinaryProvisioner(windows_env, downloader=downloader).provision(
            SetupSpec(version="v1.6.0", checksum=CONTENT_SHA)
        )

        assert installed.name == "endorctl.exe"
        assert downloader.urls[0].endswith("_windows_amd64.exe")

    def test_unreadable_download_is_a_provisioning_error(self, env: ExecutionEnvironment) -> None:
        downloader = FakeDownloader()
        provisioner = BinaryProvisioner(env, downloader=downloader)

        with patch(
            "endorctl_action.bootstrap.provisioner.sha256_file",
            side_effect=PermissionError("denied"),
        ):
            with pytest.raises(ProvisioningError, match="Failed to verify downloaded endorctl"):
                provisioner.provision(SetupSpec(version="v1.6.0", checksum=CONTENT_SHA))

        assert not downloader.paths[0].exists()
        assert not (env.workspace / "endorctl").exists()

    def test_chmod_failure_is_a_provisioning_error(self, env: ExecutionEnvironment) -> None:
        downloader = FakeDownloader()
        provisioner = BinaryProvisioner(env, downloader=downloader)

        with patch.object(Path, "chmod", side_effect=PermissionError("read-only")):
            with pytest.raises(ProvisioningError, match="Failed to make endorctl executable"):
                provisioner.provision(SetupSpec(version="v1.6.0", checksum=CONTENT_SHA))

        assert not downloader.paths[0].exists()
        assert not env.github_path_file.exists()
