"""endorctl command line assembly."""

from endorctl_action.options.assembler import Subcommand, assemble, check_prerequisites, redact_args
from endorctl_action.options.rules import AssembledCommand, OptionError, OptionRule, RuleContext
from endorctl_action.options.timing import apply_timing_wrapper

__all__ = [
    "AssembledCommand",
    "OptionError",
    "OptionRule",
    "RuleContext",
    "Subcommand",
    "apply_timing_wrapper",
    "assemble",
    "check_prerequisites",
    "redact_args",
]
