"""Scan result export.

Stores the captured endorctl output as a job artifact. Export problems are
only ever logged as warnings: the scan itself already succeeded.
"""

from __future__ import annotations

import random
import string
from pathlib import Path
from typing import Optional

from endorctl_action.artifacts.client import ArtifactClient
from endorctl_action.core.environment import ExecutionEnvironment
from endorctl_action.core.logging import get_logger
from endorctl_action.core.workflow import set_output

LOGGER = get_logger(__name__)

DEFAULT_ARTIFACT_NAME = "endor-scan"
MAX_EXISTING_CHECKS = 8
SCAN_RESULT_OUTPUT = "scan_result"


class ArtifactExporter:
    """Writes scan results to a file and uploads it under a free name."""

    def __init__(
        self,
        client: ArtifactClient,
        env: ExecutionEnvironment,
        base_name: str = DEFAULT_ARTIFACT_NAME,
        max_attempts: int = MAX_EXISTING_CHECKS,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._client = client
        self._env = env
        self._base_name = base_name
        self._max_attempts = max_attempts
        self._rng = rng or random.Random()

    def export(self, result_text: str) -> Optional[str]:
        """Export a scan result.

        Returns:
            Name of the uploaded artifact, or None if the export was skipped.
        """
        name = self._find_free_name()
        if name is None:
            return None

        try:
            file_path = self.write_result_file(result_text)
        except OSError as e:
            LOGGER.warning(f"Unable to write JSON document for scan result to file: {e}")
            return None

        LOGGER.info(f"Writing artifact {name}")
        try:
            result = self._client.upload(name, [file_path], file_path.parent)
        except Exception as e:
            LOGGER.warning(f"Some items failed to export: {e}")
            return None

        LOGGER.info(f"Scan result exported to artifact {result.id}, size {result.size}")
        try:
            set_output(SCAN_RESULT_OUTPUT, name, self._env.github_output_file)
        except OSError as e:
            LOGGER.warning(f"Unable to set output {SCAN_RESULT_OUTPUT}: {e}")
        return name

    def write_result_file(self, result_text: str) -> Path:
        """Write the result to ``result-{run_id}.json`` in the temp directory."""
        self._env.temp_dir.mkdir(parents=True, exist_ok=True)
        file_path = self._env.temp_dir / f"result-{self._env.run_id}.json"
        file_path.write_text(result_text, encoding="utf-8")
        return file_path

    def _find_free_name(self) -> Optional[str]:
        # Each taken name gets a random lowercase letter appended.
        name = self._base_name
        for _ in range(self._max_attempts):
            if not self._client.exists(name):
                return name
            LOGGER.info(f"Found existing artifact '{name}'")
            name += self._rng.choice(string.ascii_lowercase)

        LOGGER.warning(
            f"Can't find a unique artifact name for scan results after {self._max_attempts} tries"
        )
        return None
