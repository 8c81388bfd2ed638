"""Runner workflow commands.

Small file-based protocol the Actions runner uses to collect PATH additions,
step outputs and secrets to mask from the job log.
"""

from __future__ import annotations

import os
import sys
import uuid
from pathlib import Path
from typing import Optional, TextIO

from endorctl_action.core.logging import get_logger

LOGGER = get_logger(__name__)


def _append_line(path: Path, line: str) -> None:
    with open(path, "a", encoding="utf-8") as f:
        f.write(f"{line}{os.linesep}")


def add_path(directory: Path, path_file: Optional[Path]) -> None:
    """Prepend a directory to PATH for this process and later steps."""
    resolved = str(directory.resolve())
    if path_file is not None:
        _append_line(path_file, resolved)
    os.environ["PATH"] = f"{resolved}{os.pathsep}{os.environ.get('PATH', '')}"
    LOGGER.debug(f"Added {resolved} to PATH")


def set_output(name: str, value: str, output_file: Optional[Path]) -> None:
    """Record a step output.

    Multi-line values use the heredoc form with a random delimiter.
    """
    if output_file is None:
        LOGGER.debug(f"No output file configured, skipping output {name}")
        return
    if "\n" in value:
        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        _append_line(output_file, f"{name}<<{delimiter}{os.linesep}{value}{os.linesep}{delimiter}")
    else:
        _append_line(output_file, f"{name}={value}")


def mask_value(value: str, stream: Optional[TextIO] = None) -> None:
    """Ask the runner to mask a secret value in the job log."""
    if value:
        stream = stream or sys.stdout
        stream.write(f"::add-mask::{value}\n")
        stream.flush()
