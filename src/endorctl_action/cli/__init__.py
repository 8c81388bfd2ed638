"""Command-line interface for endorctl-action."""

from __future__ import annotations

from typing import Iterable, Optional

from endorctl_action.cli.runner import CLIRunner


def main(argv: Optional[Iterable[str]] = None) -> int:
    """Main entry point for the endorctl-action CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv).

    Returns:
        Exit code.
    """
    runner = CLIRunner()
    return runner.run(argv)


__all__ = ["main", "CLIRunner"]
