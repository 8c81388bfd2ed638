"""Verify command implementation."""

from __future__ import annotations

from endorctl_action.cli.commands.endorctl import EndorctlCommand
from endorctl_action.options.assembler import Subcommand


class VerifyCommand(EndorctlCommand):
    """Verifies an artifact signature with ``endorctl artifact verify``."""

    subcommand = Subcommand.VERIFY
