"""Tests for scan result export."""

from __future__ import annotations

import random
from dataclasses import replace
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from endorctl_action.artifacts.client import ArtifactError, DirectoryArtifactClient, UploadResult
from endorctl_action.artifacts.exporter import ArtifactExporter
from endorctl_action.core.environment import ExecutionEnvironment

RESULT = '{"findings": []}'


def _client(existing=()) -> MagicMock:
    client = MagicMock()
    client.exists.side_effect = lambda name: name in existing
    client.upload.side_effect = lambda name, files, root: UploadResult(id=name, size=len(RESULT))
    return client


class TestArtifactExporter:
    """Tests for ArtifactExporter.export."""

    def test_exports_under_base_name(self, linux_env: ExecutionEnvironment) -> None:
        client = _client()
        exporter = ArtifactExporter(client, linux_env)

        name = exporter.export(RESULT)

        assert name == "endor-scan"
        result_file = linux_env.temp_dir / "result-1234.json"
        assert result_file.read_text() == RESULT
        client.upload.assert_called_once_with("endor-scan", [result_file], linux_env.temp_dir)
        assert linux_env.github_output_file.read_text().splitlines() == ["scan_result=endor-scan"]

    def test_taken_name_gets_random_suffix(self, linux_env: ExecutionEnvironment) -> None:
        client = _client(existing={"endor-scan"})
        exporter = ArtifactExporter(client, linux_env, rng=random.Random(0))

        name = exporter.export(RESULT)

        assert name is not None
        assert name.startswith("endor-scan")
        assert len(name) == len("endor-scan") + 1
        assert name[-1].islower()

    def test_gives_up_after_eight_existing_names(
        self, linux_env: ExecutionEnvironment, caplog: pytest.LogCaptureFixture
    ) -> None:
        client = MagicMock()
        client.exists.return_value = True
        exporter = ArtifactExporter(client, linux_env)

        assert exporter.export(RESULT) is None

        assert client.exists.call_count == 8
        client.upload.assert_not_called()
        assert "Can't find a unique artifact name for scan results after 8 tries" in caplog.text
        assert not (linux_env.temp_dir / "result-1234.json").exists()

    def test_upload_failure_is_a_warning(
        self, linux_env: ExecutionEnvironment, caplog: pytest.LogCaptureFixture
    ) -> None:
        client = _client()
        client.upload.side_effect = ArtifactError("disk full")
        exporter = ArtifactExporter(client, linux_env)

        assert exporter.export(RESULT) is None

        assert "Some items failed to export: disk full" in caplog.text
        assert not linux_env.github_output_file.exists()

    def test_write_failure_is_a_warning(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        blocker = tmp_path / "temp"
        blocker.write_text("not a directory")
        env = ExecutionEnvironment(runner_os="Linux", runner_arch="X64", temp_dir=blocker)
        client = _client()

        assert ArtifactExporter(client, env).export(RESULT) is None

        client.upload.assert_not_called()
        assert "Unable to write JSON document" in caplog.text

    def test_output_failure_keeps_artifact_name(
        self, linux_env: ExecutionEnvironment, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        env = replace(linux_env, github_output_file=tmp_path / "missing" / "github_output")
        client = _client()

        assert ArtifactExporter(client, env).export(RESULT) == "endor-scan"

        client.upload.assert_called_once()
        assert "Unable to set output scan_result" in caplog.text

    def test_with_directory_client(self, linux_env: ExecutionEnvironment) -> None:
        client = DirectoryArtifactClient(linux_env.temp_dir / "artifacts")
        exporter = ArtifactExporter(client, linux_env)

        assert exporter.export(RESULT) == "endor-scan"
        assert exporter.export(RESULT) != "endor-scan"

        stored = linux_env.temp_dir / "artifacts" / "endor-scan" / "result-1234.json"
        assert stored.read_text() == RESULT
