"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator

import pytest

from endorctl_action.core.environment import ExecutionEnvironment

# Runner variables that would leak into InputSource and ExecutionEnvironment
_RUNNER_VARIABLES = (
    "GITHUB_ACTIONS",
    "GITHUB_EVENT_PATH",
    "GITHUB_OUTPUT",
    "GITHUB_PATH",
    "ENDOR_ARTIFACT_DIR",
)


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    """Undo configure_logging calls made by a test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    root.setLevel(logging.DEBUG)
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def _clean_runner_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("INPUT_"):
            monkeypatch.delenv(name)
    for name in _RUNNER_VARIABLES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def linux_env(tmp_path: Path) -> ExecutionEnvironment:
    """Linux x64 runner environment rooted in tmp_path."""
    for name in ("temp", "workspace", "home"):
        (tmp_path / name).mkdir()
    return ExecutionEnvironment(
        runner_os="Linux",
        runner_arch="X64",
        run_id="1234",
        temp_dir=tmp_path / "temp",
        home_dir=tmp_path / "home",
        workspace=tmp_path / "workspace",
        github_path_file=tmp_path / "github_path",
        github_output_file=tmp_path / "github_output",
        repository="acme/widgets",
    )
