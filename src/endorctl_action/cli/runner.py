"""CLI runner orchestration.

This module handles command dispatch and execution for the endorctl-action CLI.
"""

from __future__ import annotations

from argparse import Namespace
from typing import Dict, Iterable, Optional

from importlib.metadata import version, PackageNotFoundError

from endorctl_action.cli.arguments import build_parser
from endorctl_action.cli.commands import (
    Command,
    ScanCommand,
    SetupCommand,
    SignCommand,
    VerifyCommand,
)
from endorctl_action.cli.exit_codes import (
    EXIT_ENDORCTL_ERROR,
    EXIT_INVALID_USAGE,
    EXIT_SUCCESS,
)
from endorctl_action.config.inputs import InputError, InputSource
from endorctl_action.config.models import ActionConfig, load_action_config
from endorctl_action.core.logging import configure_logging, get_logger

LOGGER = get_logger(__name__)

# Values of the legacy ``command`` input that select a sub-command.
LEGACY_COMMANDS = ("scan", "sign")


def get_version() -> str:
    """Get endorctl-action version.

    Returns:
        Version string from package metadata or fallback.
    """
    try:
        return version("endorctl-action")
    except PackageNotFoundError:
        # Fallback for editable installs that have not yet built metadata.
        from endorctl_action import __version__
        return __version__


class CLIRunner:
    """Orchestrates CLI execution with subcommand dispatch."""

    def __init__(self, commands: Optional[Dict[str, Command]] = None) -> None:
        """Initialize CLIRunner with parser and commands.

        Commands are created on first use so that the runner environment is
        only read when a command actually runs.
        """
        self.parser = build_parser()
        self._version = get_version()
        self._commands: Dict[str, Command] = dict(commands or {})

    def get_command(self, name: str) -> Command:
        if name not in self._commands:
            factories = {
                "scan": ScanCommand,
                "sign": SignCommand,
                "verify": VerifyCommand,
                "setup": SetupCommand,
            }
            self._commands[name] = factories[name]()
        return self._commands[name]

    def run(self, argv: Optional[Iterable[str]] = None) -> int:
        """Run the CLI.

        Args:
            argv: Command-line arguments (defaults to sys.argv).

        Returns:
            Exit code.
        """
        # Handle --help specially to return 0
        if argv is not None:
            argv_list = list(argv)
            if argv_list in (["--help"], ["-h"]):
                self.parser.print_help()
                return EXIT_SUCCESS
        else:
            argv_list = None

        args = self.parser.parse_args(argv_list)

        # Configure logging as early as possible
        configure_logging(
            debug=args.debug,
            verbose=args.verbose,
            quiet=args.quiet,
        )

        if args.version:
            print(self._version)
            return EXIT_SUCCESS

        try:
            source = InputSource.load(
                inputs_file=getattr(args, "inputs_file", None),
                overrides=getattr(args, "inputs", None) or [],
            )
            config = load_action_config(source)
        except InputError as e:
            LOGGER.error(str(e))
            return EXIT_INVALID_USAGE

        command = getattr(args, "command", None) or self._legacy_command(config)
        if command is None:
            # No command specified - show help
            self.parser.print_help()
            return EXIT_SUCCESS

        return self._dispatch(command, args, config)

    def _legacy_command(self, config: ActionConfig) -> Optional[str]:
        """Sub-command selected by the ``command`` input, if any."""
        if not config.command:
            return None
        if config.command not in LEGACY_COMMANDS:
            LOGGER.warning(
                f"Unknown command input '{config.command}', expected one of {list(LEGACY_COMMANDS)}"
            )
            return None
        return config.command

    def _dispatch(self, name: str, args: Namespace, config: ActionConfig) -> int:
        """Run a command, turning unexpected failures into an exit code.

        Args:
            name: Sub-command name.
            args: Parsed command-line arguments.
            config: Typed action configuration.

        Returns:
            Exit code.
        """
        try:
            return self.get_command(name).execute(args, config)
        except Exception as e:
            if args.debug:
                import traceback
                traceback.print_exc()
            LOGGER.error(f"Endorctl {name} failed: {e}")
            return EXIT_ENDORCTL_ERROR
