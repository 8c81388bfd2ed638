"""Resource usage statistics for endorctl runs.

With ``run_stats`` enabled the command is wrapped in the platform's ``time``
utility, which reports wall-clock time and memory use on stderr.
"""

from __future__ import annotations

import shutil
import subprocess
from typing import Callable, Dict, List, Optional, Tuple

from endorctl_action.bootstrap.platform import EndorctlOS, PlatformInfo
from endorctl_action.core.logging import get_logger
from endorctl_action.core.subprocess_runner import run_quiet
from endorctl_action.options.rules import AssembledCommand

LOGGER = get_logger(__name__)

# (timing program, flags placed before the wrapped program)
TIMING_WRAPPERS: Dict[EndorctlOS, Tuple[str, Tuple[str, ...]]] = {
    EndorctlOS.LINUX: ("time", ("-v",)),
    EndorctlOS.MACOS: ("/usr/bin/time", ("-l",)),
}


def timing_available(
    program: str,
    runner: Callable[[List[str]], subprocess.CompletedProcess] = run_quiet,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> bool:
    """Check that a timing program exists and can run ``true``."""
    if which(program) is None:
        return False
    try:
        return runner([program, "true"]).returncode == 0
    except (OSError, subprocess.SubprocessError):
        return False


def apply_timing_wrapper(
    command: AssembledCommand,
    platform_info: PlatformInfo,
    probe: Callable[[str], bool] = timing_available,
) -> AssembledCommand:
    """Wrap the command in the platform timing utility, in place.

    Unsupported platforms and missing utilities leave the command
    unwrapped and record a warning.
    """
    if platform_info.is_windows:
        command.record_warning("Timing is not supported on Windows runners")
        return command

    wrapper = TIMING_WRAPPERS.get(platform_info.os) if platform_info.os else None
    if wrapper is None:
        command.record_warning("Timing not supported on this OS")
        return command

    program, flags = wrapper
    if not probe(program):
        command.record_warning(
            f"Timing utility '{program}' not found, running endorctl without run statistics"
        )
        return command

    command.prepend([*flags, command.program])
    command.program = program
    LOGGER.debug(f"Wrapped endorctl in {program}")
    return command
