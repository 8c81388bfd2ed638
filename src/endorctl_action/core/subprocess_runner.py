"""Subprocess runner with output capture.

Runs external programs so that their standard output is both echoed to the
job log in real time and captured for later processing.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import List, Optional, TextIO, Union


def run_with_capture(
    cmd: List[str],
    cwd: Union[str, Path] = ".",
    echo: Optional[TextIO] = None,
    timeout: Optional[int] = None,
) -> subprocess.CompletedProcess:
    """Run a command, echoing and capturing its standard output.

    Standard error is inherited so diagnostics reach the job log unchanged.

    Args:
        cmd: Command and arguments to run.
        cwd: Working directory for the command.
        echo: Stream that receives each output line as it arrives
            (defaults to sys.stdout).
        timeout: Timeout in seconds, None to wait indefinitely.

    Returns:
        CompletedProcess with the captured stdout; stderr is None.

    Raises:
        subprocess.TimeoutExpired: If the command times out.
        FileNotFoundError: If the program cannot be found.
    """
    out = echo or sys.stdout
    captured: List[str] = []

    with subprocess.Popen(
        cmd,
        stdout=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",
        cwd=str(cwd),
    ) as proc:
        assert proc.stdout is not None
        for line in proc.stdout:
            captured.append(line)
            out.write(line)
        out.flush()
        try:
            proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            proc.kill()
            raise

    return subprocess.CompletedProcess(
        args=cmd,
        returncode=proc.returncode,
        stdout="".join(captured),
        stderr=None,
    )


def run_quiet(cmd: List[str], timeout: int = 60) -> subprocess.CompletedProcess:
    """Run a short helper command with all output captured."""
    return subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        timeout=timeout,
    )
