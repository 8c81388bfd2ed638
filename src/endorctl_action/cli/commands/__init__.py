"""CLI commands package.

This module provides the base Command class and exports all command implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from argparse import Namespace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from endorctl_action.config.models import ActionConfig


class Command(ABC):
    """Base class for CLI commands.

    All CLI commands should inherit from this class and implement
    the execute method.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Command identifier.

        Returns:
            String name of the command.
        """

    @abstractmethod
    def execute(self, args: Namespace, config: "ActionConfig") -> int:
        """Execute the command.

        Args:
            args: Parsed command-line arguments.
            config: Typed action configuration.

        Returns:
            Exit code (0 for success, non-zero for error).
        """


# Import command implementations for convenience
# ruff: noqa: E402
from endorctl_action.cli.commands.endorctl import EndorctlCommand
from endorctl_action.cli.commands.scan import ScanCommand
from endorctl_action.cli.commands.setup import SetupCommand
from endorctl_action.cli.commands.sign import SignCommand
from endorctl_action.cli.commands.verify import VerifyCommand

__all__ = [
    "Command",
    "EndorctlCommand",
    "ScanCommand",
    "SetupCommand",
    "SignCommand",
    "VerifyCommand",
]
