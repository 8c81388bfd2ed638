"""Sign command implementation."""

from __future__ import annotations

from endorctl_action.cli.commands.endorctl import EndorctlCommand
from endorctl_action.options.assembler import Subcommand


class SignCommand(EndorctlCommand):
    """Signs a build artifact with ``endorctl artifact sign``."""

    subcommand = Subcommand.SIGN
