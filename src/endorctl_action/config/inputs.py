"""Action input loading and merging.

Inputs are a flat key/value mapping. They are layered with this precedence
(highest to lowest):
1. CLI overrides (``--input KEY=VALUE``)
2. Inputs file (``--inputs-file inputs.yml``)
3. Runner-provided environment variables (``INPUT_<NAME>``)
4. Built-in defaults (the action manifest defaults)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import yaml

from endorctl_action.core.logging import get_logger

LOGGER = get_logger(__name__)

INPUT_ENV_PREFIX = "INPUT_"

TRUE_VALUES = frozenset({"true", "True", "TRUE"})
FALSE_VALUES = frozenset({"false", "False", "FALSE"})

# Defaults declared by the action manifest
DEFAULT_INPUTS: Dict[str, str] = {
    "api": "https://api.endorlabs.com",
    "enable_github_action_token": "true",
    "log_verbose": "false",
    "log_level": "info",
    "run_stats": "false",
    "scan_dependencies": "true",
    "scan_secrets": "false",
    "scan_tools": "false",
    "scan_git_logs": "false",
    "phantom_dependencies": "false",
    "ci_run": "true",
    "pr": "true",
    "enable_pr_comments": "false",
    "use_bazel": "false",
    "export_scan_result_artifact": "true",
    "scan_summary_output_type": "table",
    "sarif_file": "",
}


class InputError(Exception):
    """An action input is missing or malformed."""

    pass


def input_env_name(name: str) -> str:
    """Environment variable the runner uses for an input."""
    return f"{INPUT_ENV_PREFIX}{name.replace(' ', '_').upper()}"


def parse_override(item: str) -> Tuple[str, str]:
    """Split a ``KEY=VALUE`` override.

    Raises:
        InputError: If the item has no ``=``.
    """
    key, sep, value = item.partition("=")
    if not sep or not key.strip():
        raise InputError(f"Invalid input override '{item}', expected KEY=VALUE")
    return key.strip(), value


def load_inputs_file(path: Path) -> Dict[str, str]:
    """Load a YAML mapping of input names to values.

    Raises:
        InputError: If the file is missing, invalid YAML or not a mapping.
    """
    if not path.exists():
        raise InputError(f"Inputs file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise InputError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InputError(f"Inputs file {path} must contain a mapping of input names to values")
    return {str(key): _stringify(value) for key, value in data.items()}


def _stringify(value: Any) -> str:
    # YAML booleans come back as Python bools; inputs are always strings.
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


class InputSource:
    """Flat, read-only view over the action inputs."""

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        overrides: Optional[Mapping[str, str]] = None,
        defaults: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._environ = os.environ if environ is None else environ
        self._overrides = dict(overrides or {})
        self._defaults = dict(DEFAULT_INPUTS if defaults is None else defaults)

    @classmethod
    def load(
        cls,
        inputs_file: Optional[Path] = None,
        overrides: Optional[Iterable[str]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "InputSource":
        """Build an input source from the environment, a file and CLI overrides."""
        merged: Dict[str, str] = {}
        sources: List[str] = ["env"]

        if inputs_file is not None:
            merged.update(load_inputs_file(inputs_file))
            sources.append(f"file:{inputs_file}")
            LOGGER.debug(f"Loaded inputs from {inputs_file}")

        if overrides:
            for item in overrides:
                key, value = parse_override(item)
                merged[key] = value
            sources.append("cli")

        LOGGER.debug(f"Inputs loaded from sources: {sources}")
        return cls(environ=environ, overrides=merged)

    def get_raw(self, name: str) -> Optional[str]:
        if name in self._overrides:
            return self._overrides[name]
        env_name = input_env_name(name)
        if env_name in self._environ:
            return self._environ[env_name]
        return self._defaults.get(name)

    def get_input(self, name: str, required: bool = False) -> str:
        """Return a trimmed string input, "" when unset.

        Raises:
            InputError: If the input is required and empty.
        """
        value = (self.get_raw(name) or "").strip()
        if required and not value:
            raise InputError(f"Input required and not supplied: {name}")
        return value

    def get_boolean_input(self, name: str) -> bool:
        """Return a boolean input following the YAML 1.2 core schema.

        Raises:
            InputError: If the value is not one of true/True/TRUE/false/False/FALSE.
        """
        value = self.get_input(name)
        if value in TRUE_VALUES:
            return True
        if value in FALSE_VALUES:
            return False
        raise InputError(
            f'Input does not meet YAML 1.2 "Core Schema" specification: {name}\n'
            "Support boolean input list: `true | True | TRUE | false | False | FALSE`"
        )
