"""Shared endorctl command flow.

Every sub-command runs the same pipeline: check the platform and the
structural inputs, provision endorctl, assemble the command line, run it and
hand its output to the sub-command. Sub-commands customise the steps around
the run through :meth:`EndorctlCommand.prepare` and
:meth:`EndorctlCommand.handle_output`.
"""

from __future__ import annotations

import subprocess
from argparse import Namespace
from typing import Callable, ClassVar, List, Optional

from endorctl_action.bootstrap.download import DownloadError
from endorctl_action.bootstrap.platform import get_platform_info
from endorctl_action.bootstrap.provisioner import (
    DEFAULT_API,
    BinaryProvisioner,
    ProvisioningError,
    SetupSpec,
)
from endorctl_action.bootstrap.versions import MetadataError
from endorctl_action.cli.commands import Command
from endorctl_action.cli.exit_codes import (
    EXIT_BOOTSTRAP_FAILURE,
    EXIT_ENDORCTL_ERROR,
    EXIT_INVALID_USAGE,
    EXIT_SUCCESS,
)
from endorctl_action.config.endorctl_config import EndorctlConfigError
from endorctl_action.config.models import ActionConfig
from endorctl_action.core.environment import ExecutionEnvironment
from endorctl_action.core.logging import get_logger
from endorctl_action.core.subprocess_runner import run_with_capture
from endorctl_action.core.workflow import mask_value
from endorctl_action.options.assembler import (
    Subcommand,
    assemble,
    check_prerequisites,
    redact_args,
)
from endorctl_action.options.rules import AssembledCommand, OptionError
from endorctl_action.options.timing import apply_timing_wrapper, timing_available

LOGGER = get_logger(__name__)

CommandRunner = Callable[[List[str]], subprocess.CompletedProcess]


class EndorctlCommand(Command):
    """Provisions endorctl and runs one of its sub-commands."""

    subcommand: ClassVar[Subcommand]

    def __init__(
        self,
        env: Optional[ExecutionEnvironment] = None,
        provisioner: Optional[BinaryProvisioner] = None,
        runner: Optional[CommandRunner] = None,
        timing_probe: Optional[Callable[[str], bool]] = None,
    ) -> None:
        self._env = env or ExecutionEnvironment.from_environ()
        self._provisioner = provisioner or BinaryProvisioner(self._env)
        self._runner = runner or run_with_capture
        self._timing_probe = timing_probe or timing_available

    @property
    def name(self) -> str:
        return self.subcommand.value

    @property
    def env(self) -> ExecutionEnvironment:
        return self._env

    def execute(self, args: Namespace, config: ActionConfig) -> int:
        """Run the full provision-assemble-run pipeline.

        Returns:
            Exit code.
        """
        platform_info = get_platform_info(self._env)
        if platform_info.error:
            LOGGER.error(platform_info.error)
            return EXIT_BOOTSTRAP_FAILURE

        LOGGER.info(f"Endor Namespace: {config.namespace}")
        try:
            check_prerequisites(config)
        except OptionError as e:
            LOGGER.error(str(e))
            return EXIT_INVALID_USAGE

        if self._env.is_github_actions:
            self._mask_secrets(config)

        try:
            self._provisioner.provision(
                SetupSpec(
                    version=config.endorctl_version,
                    checksum=config.endorctl_checksum,
                    api=config.api or DEFAULT_API,
                )
            )
        except (ProvisioningError, MetadataError, DownloadError) as e:
            LOGGER.error(str(e))
            return EXIT_BOOTSTRAP_FAILURE

        try:
            self.prepare(config)
        except EndorctlConfigError as e:
            LOGGER.error(str(e))
            LOGGER.error(f"Endorctl {self.name} failed")
            return EXIT_ENDORCTL_ERROR

        try:
            command = assemble(self.subcommand, config, self._env.pull_request_number())
        except OptionError as e:
            LOGGER.error(str(e))
            return EXIT_INVALID_USAGE

        if config.run_stats:
            apply_timing_wrapper(command, platform_info, self._timing_probe)

        result = self._run(command)
        if result is None or result.returncode != 0:
            LOGGER.error(f"Endorctl {self.name} failed")
            return EXIT_ENDORCTL_ERROR

        self.handle_output(result.stdout or "", config)
        LOGGER.info(f"{self.name.capitalize()} completed successfully!")
        return EXIT_SUCCESS

    def prepare(self, config: ActionConfig) -> None:
        """Hook run after provisioning and before assembling the command."""

    def handle_output(self, output: str, config: ActionConfig) -> None:
        """Hook receiving endorctl's captured standard output."""

    def _run(self, command: AssembledCommand) -> Optional[subprocess.CompletedProcess]:
        LOGGER.info(f"Running {' '.join(redact_args(command.argv))}")
        try:
            return self._runner(command.argv)
        except (OSError, subprocess.SubprocessError) as e:
            LOGGER.error(f"Failed to run {command.program}: {e}")
            return None

    def _mask_secrets(self, config: ActionConfig) -> None:
        for secret in (
            config.api_key,
            config.api_secret,
            config.github_token,
            config.gcp_service_account,
        ):
            mask_value(secret)
