"""Setup command implementation.

Installs endorctl, stores the namespace, API and credentials in
``~/.endorctl/config.yaml`` so later workflow steps can call endorctl
directly, and checks the tenant is reachable.
"""

from __future__ import annotations

from endorctl_action.cli.commands.endorctl import EndorctlCommand
from endorctl_action.config.endorctl_config import write_endorctl_config
from endorctl_action.config.models import ActionConfig
from endorctl_action.options.assembler import Subcommand


class SetupCommand(EndorctlCommand):
    """Provisions and configures endorctl for later steps."""

    subcommand = Subcommand.SETUP

    def prepare(self, config: ActionConfig) -> None:
        write_endorctl_config(config, self.env.home_dir)
