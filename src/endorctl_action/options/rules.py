"""Declarative option rules.

A rule turns configuration into command line tokens. Rules are evaluated in
table order because endorctl reads some arguments positionally.

Each rule may carry checks that state its prerequisites. When a check fails
the rule's tokens are not appended; a fatal rule aborts assembly with an
:class:`OptionError`, any other rule records the problem and assembly
continues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Tuple

from endorctl_action.config.models import ActionConfig
from endorctl_action.core.logging import get_logger

LOGGER = get_logger(__name__)

ENDORCTL_PROGRAM = "endorctl"


class OptionError(Exception):
    """The configuration cannot produce a usable endorctl command."""

    pass


@dataclass(frozen=True)
class RuleContext:
    """Inputs available to option rules.

    Attributes:
        config: Typed action configuration.
        pull_request_number: Number of the triggering pull request, if any.
    """

    config: ActionConfig
    pull_request_number: Optional[int] = None


Predicate = Callable[[RuleContext], bool]
TokenBuilder = Callable[[RuleContext], List[str]]
Check = Callable[[RuleContext], Optional[str]]


def always(ctx: RuleContext) -> bool:
    return True


def no_tokens(ctx: RuleContext) -> List[str]:
    return []


@dataclass(frozen=True)
class OptionRule:
    """One step of command line assembly.

    Attributes:
        name: Identifier used in debug logs.
        when: Whether the rule applies to this configuration.
        tokens: Tokens appended when the rule applies and all checks pass.
        checks: Prerequisites; each returns an error message or None.
        fatal: Whether a failed check aborts assembly.
    """

    name: str
    tokens: TokenBuilder
    when: Predicate = always
    checks: Tuple[Check, ...] = ()
    fatal: bool = False


@dataclass
class AssembledCommand:
    """Program and ordered argument vector for one endorctl invocation.

    Tokens are only ever appended or prepended. Recorded errors and
    warnings did not stop assembly.
    """

    program: str = ENDORCTL_PROGRAM
    args: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def argv(self) -> List[str]:
        return [self.program, *self.args]

    def append(self, tokens: Iterable[str]) -> None:
        self.args.extend(tokens)

    def prepend(self, tokens: Iterable[str]) -> None:
        self.args[:0] = list(tokens)

    def record_error(self, message: str) -> None:
        LOGGER.error(message)
        self.errors.append(message)

    def record_warning(self, message: str) -> None:
        LOGGER.warning(message)
        self.warnings.append(message)


def apply_rules(rules: Iterable[OptionRule], ctx: RuleContext, command: AssembledCommand) -> None:
    """Evaluate rules in order, appending tokens to the command.

    Raises:
        OptionError: On the first failed check of a fatal rule.
    """
    for rule in rules:
        if not rule.when(ctx):
            continue

        failures = [message for message in (check(ctx) for check in rule.checks) if message]
        if failures:
            if rule.fatal:
                raise OptionError(failures[0])
            for message in failures:
                command.record_error(message)
            continue

        tokens = rule.tokens(ctx)
        if tokens:
            LOGGER.debug(f"Option rule {rule.name} added {len(tokens)} token(s)")
            command.append(tokens)
