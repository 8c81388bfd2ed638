"""TypeScript server prerequisite.

endorctl needs ``tsserver`` to build JavaScript call graphs. When it is
missing and node is recent enough, a matching typescript package is installed
globally with npm. Nothing here is fatal: without tsserver the scan still runs,
only without JavaScript call graphs.
"""

from __future__ import annotations

import re
import shutil
import subprocess
from typing import Callable, List, Optional

from endorctl_action.core.logging import get_logger
from endorctl_action.core.subprocess_runner import run_quiet

LOGGER = get_logger(__name__)

MIN_NODE_VERSION = 4.2

# (node below this version, typescript release to install)
TYPESCRIPT_FOR_NODE = [
    (12.2, "4.9"),
    (14.17, "5.0"),
]

_NODE_VERSION_PATTERN = re.compile(r"^v?(\d+)(?:\.(\d+))?")


def parse_node_version(text: str) -> Optional[float]:
    """Parse ``node --version`` output into a major.minor float.

    The minor part is compared as a decimal fraction, e.g. "v14.17.0" is
    14.17 and "v12.2.0" is 12.2.
    """
    match = _NODE_VERSION_PATTERN.match(text.strip())
    if not match:
        return None
    major, minor = match.group(1), match.group(2) or "0"
    return float(f"{major}.{minor}")


def typescript_package(node_version: float) -> str:
    """npm package spec of the typescript release compatible with node."""
    for upper_bound, release in TYPESCRIPT_FOR_NODE:
        if node_version < upper_bound:
            return f"typescript@{release}"
    return "typescript"


def ensure_tsserver(
    runner: Callable[[List[str]], subprocess.CompletedProcess] = run_quiet,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> bool:
    """Make sure tsserver is on PATH, installing typescript if possible.

    Returns:
        True if tsserver is available afterwards.
    """
    LOGGER.info("Checking for tsserver")
    if which("tsserver"):
        return True

    node_version = _node_version(runner)
    if node_version is None or node_version < MIN_NODE_VERSION:
        LOGGER.warning(
            f"Unable to install >=typescript@4.7 (node >= {MIN_NODE_VERSION} is required). "
            "JavaScript call graphs will not be generated."
        )
        return False

    package = typescript_package(node_version)
    LOGGER.info(f"Installing {package}")
    try:
        result = runner(["npm", "install", "-g", package])
    except (OSError, subprocess.SubprocessError) as e:
        LOGGER.warning(f"Unable to install {package}: {e}. JavaScript call graphs will not be generated")
        return False

    if result.returncode != 0:
        LOGGER.warning(
            f"Unable to install {package}. JavaScript call graphs will not be generated"
        )
        return False
    return True


def _node_version(runner: Callable[[List[str]], subprocess.CompletedProcess]) -> Optional[float]:
    try:
        result = runner(["node", "--version"])
    except (OSError, subprocess.SubprocessError):
        return None
    if result.returncode != 0:
        return None
    return parse_node_version(result.stdout or "")
