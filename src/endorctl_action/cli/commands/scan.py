"""Scan command implementation."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

from endorctl_action.artifacts.client import DirectoryArtifactClient
from endorctl_action.artifacts.exporter import ArtifactExporter
from endorctl_action.bootstrap.tsserver import ensure_tsserver
from endorctl_action.cli.commands.endorctl import EndorctlCommand
from endorctl_action.config.models import ActionConfig
from endorctl_action.core.logging import get_logger
from endorctl_action.options.assembler import Subcommand

LOGGER = get_logger(__name__)

JSON_OUTPUT_TYPE = "json"


class ScanCommand(EndorctlCommand):
    """Scans the repository and routes the scan summary."""

    subcommand = Subcommand.SCAN

    def __init__(
        self,
        *args,
        exporter_factory: Optional[Callable[[], ArtifactExporter]] = None,
        tsserver_check: Callable[[], bool] = ensure_tsserver,
        **kwargs,
    ) -> None:
        super().__init__(*args, **kwargs)
        self._exporter_factory = exporter_factory or self._default_exporter
        self._tsserver_check = tsserver_check

    def prepare(self, config: ActionConfig) -> None:
        if self.env.repository:
            LOGGER.info(f"Scanning repository {self.env.repository}")
        self._tsserver_check()

    def handle_output(self, output: str, config: ActionConfig) -> None:
        """Export and store the scan summary printed by endorctl."""
        if not output:
            LOGGER.info("No vulnerabilities found for given filters.")

        if (
            config.export_scan_result_artifact
            and config.scan_summary_output_type == JSON_OUTPUT_TYPE
            and output
        ):
            self._exporter_factory().export(output)

        if config.output_file:
            self._write_output_file(Path(config.output_file), output)

    def _write_output_file(self, path: Path, output: str) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(output, encoding="utf-8")
        except OSError as e:
            LOGGER.warning(f"Unable to write scan output to {path}: {e}")
            return
        LOGGER.info(f"Scan output written to {path}")

    def _default_exporter(self) -> ArtifactExporter:
        return ArtifactExporter(DirectoryArtifactClient.for_environment(self.env), self.env)
