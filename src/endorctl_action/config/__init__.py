"""Action configuration: inputs, typed config and the endorctl config file."""

from endorctl_action.config.inputs import InputError, InputSource
from endorctl_action.config.models import ActionConfig, load_action_config

__all__ = [
    "ActionConfig",
    "InputError",
    "InputSource",
    "load_action_config",
]
