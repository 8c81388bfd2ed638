"""Execution environment of a single action run.

Everything the action needs from the process environment is read once into
an :class:`ExecutionEnvironment` and passed explicitly to the components that
need it, so tests can build one without touching ``os.environ``.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from endorctl_action.core.logging import get_logger

LOGGER = get_logger(__name__)

# platform.system() values mapped to runner OS names
_SYSTEM_TO_RUNNER_OS = {
    "linux": "Linux",
    "darwin": "macOS",
    "windows": "Windows",
}

# platform.machine() values mapped to runner architecture names
_MACHINE_TO_RUNNER_ARCH = {
    "x86_64": "X64",
    "amd64": "X64",
    "arm64": "ARM64",
    "aarch64": "ARM64",
}


def detect_runner_os() -> str:
    """Return the runner-style OS name of this host, or "" if unknown."""
    return _SYSTEM_TO_RUNNER_OS.get(platform.system().lower(), "")


def detect_runner_arch() -> str:
    """Return the runner-style architecture name of this host, or "" if unknown."""
    return _MACHINE_TO_RUNNER_ARCH.get(platform.machine().lower(), "")


@dataclass(frozen=True)
class ExecutionEnvironment:
    """Values the runner provides through environment variables.

    Attributes:
        runner_os: Runner OS name (Linux, macOS, Windows).
        runner_arch: Runner architecture name (X64, ARM64).
        run_id: Unique identifier of the workflow run.
        temp_dir: Directory for temporary files (RUNNER_TEMP).
        home_dir: User home directory, None if unknown.
        workspace: Working directory of the job.
        github_path_file: File collecting PATH additions for later steps.
        github_output_file: File collecting step outputs.
        event_path: JSON payload of the triggering event.
        repository: ``owner/name`` of the repository being built.
        is_github_actions: Whether the process runs inside GitHub Actions.
    """

    runner_os: str
    runner_arch: str
    run_id: str = ""
    temp_dir: Path = Path(tempfile.gettempdir())
    home_dir: Optional[Path] = None
    workspace: Path = Path(".")
    github_path_file: Optional[Path] = None
    github_output_file: Optional[Path] = None
    event_path: Optional[Path] = None
    repository: str = ""
    is_github_actions: bool = False

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> "ExecutionEnvironment":
        """Build the environment from process environment variables.

        Outside of a runner RUNNER_OS and RUNNER_ARCH are unset; the host
        platform is used instead so the action can run locally.
        """
        env = os.environ if environ is None else environ

        def _path(name: str) -> Optional[Path]:
            value = env.get(name)
            return Path(value) if value else None

        return cls(
            runner_os=env.get("RUNNER_OS") or detect_runner_os(),
            runner_arch=env.get("RUNNER_ARCH") or detect_runner_arch(),
            run_id=env.get("GITHUB_RUN_ID", ""),
            temp_dir=_path("RUNNER_TEMP") or Path(tempfile.gettempdir()),
            home_dir=_path("HOME") or _path("USERPROFILE"),
            workspace=Path("."),
            github_path_file=_path("GITHUB_PATH"),
            github_output_file=_path("GITHUB_OUTPUT"),
            event_path=_path("GITHUB_EVENT_PATH"),
            repository=env.get("GITHUB_REPOSITORY", ""),
            is_github_actions=env.get("GITHUB_ACTIONS", "").lower() == "true",
        )

    @property
    def repository_name(self) -> str:
        """Repository name without the owner prefix."""
        return self.repository.rsplit("/", 1)[-1]

    def event_payload(self) -> Dict[str, Any]:
        """Load the triggering event payload, empty if unavailable."""
        if self.event_path is None or not self.event_path.exists():
            return {}
        try:
            data = json.loads(self.event_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            LOGGER.warning(f"Failed to read event payload {self.event_path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def pull_request_number(self) -> Optional[int]:
        """Number of the pull request that triggered the run, if any."""
        pull_request = self.event_payload().get("pull_request")
        if not isinstance(pull_request, dict):
            return None
        number = pull_request.get("number")
        return number if isinstance(number, int) else None
