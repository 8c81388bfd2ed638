"""Exit codes for the endorctl-action CLI.

- 0: Success
- 2: endorctl ran and failed
- 3: Invalid usage (bad arguments, missing or malformed inputs)
- 4: Bootstrap failure (platform, version lookup, download or checksum)
"""

from __future__ import annotations

EXIT_SUCCESS = 0
EXIT_ENDORCTL_ERROR = 2
EXIT_INVALID_USAGE = 3
EXIT_BOOTSTRAP_FAILURE = 4
