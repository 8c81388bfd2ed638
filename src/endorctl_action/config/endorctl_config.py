"""endorctl configuration file.

The setup sub-command persists the namespace, API and credentials to
``~/.endorctl/config.yaml`` so later workflow steps can call endorctl
without repeating them.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from endorctl_action.config.models import ActionConfig
from endorctl_action.core.logging import get_logger

LOGGER = get_logger(__name__)

CONFIG_DIR_NAME = ".endorctl"
CONFIG_FILE_NAME = "config.yaml"


class EndorctlConfigError(Exception):
    """The endorctl configuration file could not be written."""

    pass


def build_endorctl_config(config: ActionConfig) -> Dict[str, Any]:
    """Build the endorctl configuration mapping.

    Exactly one authentication block is included, chosen in the same order
    the command line options use.
    """
    data: Dict[str, Any] = {"ENDOR_NAMESPACE": config.namespace}
    if config.api:
        data["ENDOR_API"] = config.api

    if config.enable_github_action_token:
        data["ENDOR_GITHUB_ACTION_TOKEN_ENABLE"] = True
    elif config.has_api_credentials:
        data["ENDOR_API_CREDENTIALS_KEY"] = config.api_key
        data["ENDOR_API_CREDENTIALS_SECRET"] = config.api_secret
    elif config.gcp_service_account:
        data["ENDOR_GCP_CREDENTIALS_SERVICE_ACCOUNT"] = config.gcp_service_account
    return data


def endorctl_config_path(home_dir: Optional[Path]) -> Path:
    """Location of the endorctl config file under a home directory.

    Raises:
        EndorctlConfigError: If no home directory is known.
    """
    if home_dir is None:
        raise EndorctlConfigError("HOME not found in the environment")
    return home_dir / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def write_endorctl_config(config: ActionConfig, home_dir: Optional[Path]) -> Path:
    """Write ``~/.endorctl/config.yaml``.

    Returns:
        Path of the written file.

    Raises:
        EndorctlConfigError: If the file cannot be written.
    """
    path = endorctl_config_path(home_dir)
    content = yaml.safe_dump(build_endorctl_config(config), default_flow_style=False, sort_keys=False)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise EndorctlConfigError(f"Failed to write {path}: {e}") from e

    LOGGER.info(f"Wrote endorctl configuration to {path}")
    return path
