"""Argument parser construction for the endorctl-action CLI.

This module builds the argument parser with subcommands:
- endorctl-action scan   - Scan the repository
- endorctl-action sign   - Sign an artifact
- endorctl-action verify - Verify an artifact signature
- endorctl-action setup  - Install endorctl and store its configuration
"""

from __future__ import annotations

import argparse
from pathlib import Path

SUBCOMMAND_HELP = {
    "scan": "Scan the repository with endorctl.",
    "sign": "Sign an artifact with endorctl.",
    "verify": "Verify the signature of an artifact with endorctl.",
    "setup": "Install endorctl and write its configuration for later steps.",
}


def _add_global_options(parser: argparse.ArgumentParser) -> None:
    """Add global options available to all commands."""
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show endorctl-action version and exit.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (info-level) logging.",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Reduce logging output to errors only.",
    )


def _add_input_options(parser: argparse.ArgumentParser) -> None:
    """Add options that supply action inputs outside of a runner."""
    parser.add_argument(
        "--input", "-i",
        dest="inputs",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Set an action input, overriding INPUT_<KEY> (repeatable).",
    )
    parser.add_argument(
        "--inputs-file",
        type=Path,
        metavar="PATH",
        help="YAML file mapping input names to values.",
    )


def _build_subcommand_parser(subparsers: argparse._SubParsersAction, name: str) -> None:
    subparser = subparsers.add_parser(
        name,
        help=SUBCOMMAND_HELP[name],
        description=SUBCOMMAND_HELP[name],
    )
    _add_input_options(subparser)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser for the endorctl-action CLI.

    Returns:
        Configured ArgumentParser instance with subcommands.
    """
    parser = argparse.ArgumentParser(
        prog="endorctl-action",
        description="Install and run the Endor Labs endorctl CLI in CI jobs.",
        epilog=(
            "Inputs are read from INPUT_<NAME> environment variables.\n\n"
            "Examples:\n"
            "  endorctl-action scan                              # Scan using runner inputs\n"
            "  endorctl-action scan -i namespace=acme -i pr=false\n"
            "  endorctl-action sign --inputs-file inputs.yml\n"
            "  endorctl-action setup                             # Install and configure endorctl\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    _add_global_options(parser)

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands:",
        metavar="COMMAND",
    )

    for name in SUBCOMMAND_HELP:
        _build_subcommand_parser(subparsers, name)

    return parser
