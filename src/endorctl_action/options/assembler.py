"""endorctl command line assembly.

One rule table per sub-command. Every table produces the complete argument
vector after the sub-command words, in the order endorctl expects.
"""

from __future__ import annotations

import shlex
from enum import Enum
from typing import Dict, List, Optional, Tuple

from endorctl_action.config.models import ActionConfig
from endorctl_action.core.logging import get_logger
from endorctl_action.options.rules import (
    AssembledCommand,
    OptionError,
    OptionRule,
    RuleContext,
    apply_rules,
    no_tokens,
)

LOGGER = get_logger(__name__)


class Subcommand(str, Enum):
    """endorctl operations the action can run."""

    SCAN = "scan"
    SIGN = "sign"
    VERIFY = "verify"
    SETUP = "setup"


SUBCOMMAND_WORDS: Dict[Subcommand, Tuple[str, ...]] = {
    Subcommand.SCAN: ("scan",),
    Subcommand.SIGN: ("artifact", "sign"),
    Subcommand.VERIFY: ("artifact", "verify"),
    Subcommand.SETUP: ("api", "get"),
}

NAMESPACE_REQUIRED = "namespace is required and must be passed as an input from the workflow"
AUTHENTICATION_REQUIRED = (
    "Authentication info not found. Either set enable_github_action_token: true "
    "or provide one of gcp_service_account or api_key and api_secret combination"
)

# Flags whose values are credentials and must not be logged
SECRET_FLAGS = ("--api-key", "--api-secret", "--github-token", "--gcp-service-account")


def check_prerequisites(config: ActionConfig) -> None:
    """Check the inputs every sub-command needs.

    Raises:
        OptionError: If the namespace or all authentication methods are missing.
    """
    if not config.namespace:
        raise OptionError(NAMESPACE_REQUIRED)
    if not config.has_authentication:
        raise OptionError(AUTHENTICATION_REQUIRED)


def _flag(name: str, value: object) -> str:
    if isinstance(value, bool):
        value = "true" if value else "false"
    return f"--{name}={value}"


# Common rules

NAMESPACE_RULE = OptionRule(
    name="namespace",
    tokens=lambda ctx: [_flag("namespace", ctx.config.namespace)],
)
VERBOSE_RULE = OptionRule(
    name="verbose",
    tokens=lambda ctx: [_flag("verbose", ctx.config.log_verbose)],
)
OUTPUT_TYPE_RULE = OptionRule(
    name="output_type",
    tokens=lambda ctx: [_flag("output-type", ctx.config.scan_summary_output_type)],
)
LOG_LEVEL_RULE = OptionRule(
    name="log_level",
    tokens=lambda ctx: [_flag("log-level", ctx.config.log_level)],
)
API_RULE = OptionRule(
    name="api",
    when=lambda ctx: bool(ctx.config.api),
    tokens=lambda ctx: [_flag("api", ctx.config.api)],
)

# Authentication: the first configured method wins
AUTH_RULES: Tuple[OptionRule, ...] = (
    OptionRule(
        name="auth_github_action_token",
        when=lambda ctx: ctx.config.enable_github_action_token,
        tokens=lambda ctx: [_flag("enable-github-action-token", True)],
    ),
    OptionRule(
        name="auth_api_key",
        when=lambda ctx: not ctx.config.enable_github_action_token
        and ctx.config.has_api_credentials,
        tokens=lambda ctx: [
            _flag("api-key", ctx.config.api_key),
            _flag("api-secret", ctx.config.api_secret),
        ],
    ),
    OptionRule(
        name="auth_gcp_service_account",
        when=lambda ctx: not ctx.config.enable_github_action_token
        and not ctx.config.has_api_credentials
        and bool(ctx.config.gcp_service_account),
        tokens=lambda ctx: [_flag("gcp-service-account", ctx.config.gcp_service_account)],
    ),
)


# Scan rules

def _scan_type_selected(ctx: RuleContext) -> Optional[str]:
    config = ctx.config
    if config.scan_dependencies or config.scan_secrets or config.scan_tools:
        return None
    return "At least one of `scan_dependencies`, `scan_secrets` or `scan_tools` must be enabled"


def _git_logs_need_secrets(ctx: RuleContext) -> Optional[str]:
    if ctx.config.scan_secrets:
        return None
    return "Please also enable `scan_secrets` to scan Git logs for secrets"


def _pr_comments_need_pr(ctx: RuleContext) -> Optional[str]:
    if ctx.config.pr:
        return None
    return (
        "The `pr` option must be enabled for PR comments. "
        "Either set `pr: true` or disable PR comments"
    )


def _pr_comments_need_ci_run(ctx: RuleContext) -> Optional[str]:
    if ctx.config.ci_run:
        return None
    return (
        "The `ci-run` option has been renamed to `pr` and must be enabled for PR comments. "
        "Remove the `ci-run` configuration or disable PR comments"
    )


def _pr_comments_need_token(ctx: RuleContext) -> Optional[str]:
    if ctx.config.github_token:
        return None
    return "`github_token` is required to enable PR comments"


def _pr_baseline_needs_pr(ctx: RuleContext) -> Optional[str]:
    if ctx.config.pr:
        return None
    return (
        "The `pr` option must also be enabled if `pr_baseline` is set. "
        "Either set `pr: true` or remove the PR baseline"
    )


def _pr_baseline_needs_ci_run(ctx: RuleContext) -> Optional[str]:
    # Reported only once `pr` is on, so a missing `pr` yields a single error.
    if ctx.config.ci_run or not ctx.config.pr:
        return None
    return (
        "The `ci-run` option has been renamed to `pr` and must be enabled if `pr_baseline` is set. "
        "Remove the `ci-run` configuration or the PR baseline"
    )


def _additional_args_parse(ctx: RuleContext) -> Optional[str]:
    try:
        shlex.split(ctx.config.additional_args)
    except ValueError as e:
        return f"Unable to parse `additional_args`: {e}"
    return None


def _bazel_tokens(ctx: RuleContext) -> List[str]:
    config = ctx.config
    tokens = [_flag("use-bazel", True)]
    if config.bazel_exclude_targets:
        tokens.append(_flag("bazel-exclude-targets", config.bazel_exclude_targets))
    if config.bazel_include_targets:
        tokens.append(_flag("bazel-include-targets", config.bazel_include_targets))
    if config.bazel_targets_query:
        tokens.append(_flag("bazel-targets-query", config.bazel_targets_query))
    return tokens


SCAN_RULES: Tuple[OptionRule, ...] = (
    OptionRule(name="scan_type_selected", tokens=no_tokens, checks=(_scan_type_selected,)),
    OptionRule(
        name="dependencies",
        when=lambda ctx: ctx.config.scan_dependencies,
        tokens=lambda ctx: [_flag("dependencies", True)],
    ),
    OptionRule(
        name="secrets",
        when=lambda ctx: ctx.config.scan_secrets,
        tokens=lambda ctx: [_flag("secrets", True)],
    ),
    OptionRule(
        name="tools",
        when=lambda ctx: ctx.config.scan_tools,
        tokens=lambda ctx: [_flag("tools", True)],
    ),
    OptionRule(
        name="phantom_dependencies",
        when=lambda ctx: ctx.config.phantom_dependencies,
        tokens=lambda ctx: [_flag("phantom-dependencies", True)],
    ),
    OptionRule(name="bazel", when=lambda ctx: ctx.config.use_bazel, tokens=_bazel_tokens),
    OptionRule(
        name="git_logs",
        when=lambda ctx: ctx.config.scan_git_logs,
        checks=(_git_logs_need_secrets,),
        tokens=lambda ctx: [_flag("git-logs", True)],
    ),
    OptionRule(
        name="pr_comments",
        when=lambda ctx: ctx.config.enable_pr_comments and bool(ctx.pull_request_number),
        checks=(_pr_comments_need_pr, _pr_comments_need_ci_run, _pr_comments_need_token),
        tokens=lambda ctx: [
            _flag("enable-pr-comments", True),
            _flag("github-pr-id", ctx.pull_request_number),
            _flag("github-token", ctx.config.github_token),
        ],
    ),
    OptionRule(
        name="pr",
        when=lambda ctx: ctx.config.ci_run and ctx.config.pr,
        tokens=lambda ctx: [_flag("pr", True)],
    ),
    OptionRule(
        name="pr_baseline",
        when=lambda ctx: bool(ctx.config.pr_baseline),
        checks=(_pr_baseline_needs_pr, _pr_baseline_needs_ci_run),
        tokens=lambda ctx: [_flag("pr-baseline", ctx.config.pr_baseline)],
    ),
    OptionRule(
        name="ci_run_tags",
        when=lambda ctx: bool(ctx.config.ci_run_tags),
        tokens=lambda ctx: [_flag("ci-run-tags", ctx.config.ci_run_tags)],
    ),
    OptionRule(
        name="tags",
        when=lambda ctx: bool(ctx.config.tags),
        tokens=lambda ctx: [_flag("tags", ctx.config.tags)],
    ),
    OptionRule(
        name="path",
        when=lambda ctx: bool(ctx.config.scan_path),
        tokens=lambda ctx: [_flag("path", ctx.config.scan_path)],
    ),
    OptionRule(
        name="additional_args",
        when=lambda ctx: bool(ctx.config.additional_args),
        checks=(_additional_args_parse,),
        tokens=lambda ctx: shlex.split(ctx.config.additional_args),
    ),
    OptionRule(
        name="sarif_file",
        when=lambda ctx: bool(ctx.config.sarif_file),
        tokens=lambda ctx: [_flag("sarif-file", ctx.config.sarif_file)],
    ),
)


# Sign / verify rules

def _require_artifact_name(command: str):
    def check(ctx: RuleContext) -> Optional[str]:
        if ctx.config.artifact_name:
            return None
        return (
            f"artifact_name is required for the {command} command "
            "and must be passed as an input from the workflow"
        )

    return check


def _sign_provenance_inputs(ctx: RuleContext) -> Optional[str]:
    if ctx.config.certificate_oidc_issuer and ctx.config.source_repository_ref:
        return None
    return (
        "Required information not found. Either set enable_github_action_token: true "
        "or provide certificate_oidc_issuer and source_repository_ref"
    )


def _require_oidc_issuer(ctx: RuleContext) -> Optional[str]:
    if ctx.config.certificate_oidc_issuer:
        return None
    return "certificate_oidc_issuer is required and must be passed as an input from the workflow"


SIGN_RULES: Tuple[OptionRule, ...] = (
    OptionRule(
        name="artifact_name",
        checks=(_require_artifact_name("sign"),),
        tokens=lambda ctx: [_flag("name", ctx.config.artifact_name)],
        fatal=True,
    ),
    # With the action token the provenance comes from the token's claims.
    OptionRule(
        name="sign_provenance",
        when=lambda ctx: not ctx.config.enable_github_action_token,
        checks=(_sign_provenance_inputs,),
        tokens=lambda ctx: [
            _flag("certificate-oidc-issuer", ctx.config.certificate_oidc_issuer),
            _flag("source-repository-ref", ctx.config.source_repository_ref),
        ],
        fatal=True,
    ),
)

VERIFY_RULES: Tuple[OptionRule, ...] = (
    OptionRule(
        name="artifact_name",
        checks=(_require_artifact_name("verify"),),
        tokens=lambda ctx: [_flag("name", ctx.config.artifact_name)],
        fatal=True,
    ),
    OptionRule(
        name="certificate_oidc_issuer",
        checks=(_require_oidc_issuer,),
        tokens=lambda ctx: [_flag("certificate-oidc-issuer", ctx.config.certificate_oidc_issuer)],
        fatal=True,
    ),
)

# Setup checks the stored credentials by reading the public "oss" tenant.
SETUP_RULES: Tuple[OptionRule, ...] = (
    OptionRule(name="resource", tokens=lambda ctx: [_flag("resource", "tenant")]),
    OptionRule(name="tenant_name", tokens=lambda ctx: [_flag("name", "oss")]),
)


RULE_TABLES: Dict[Subcommand, Tuple[OptionRule, ...]] = {
    Subcommand.SCAN: SCAN_RULES
    + (NAMESPACE_RULE, VERBOSE_RULE, OUTPUT_TYPE_RULE, LOG_LEVEL_RULE, API_RULE)
    + AUTH_RULES,
    Subcommand.SIGN: SIGN_RULES
    + (NAMESPACE_RULE, VERBOSE_RULE, LOG_LEVEL_RULE, API_RULE)
    + AUTH_RULES,
    Subcommand.VERIFY: VERIFY_RULES
    + (NAMESPACE_RULE, VERBOSE_RULE, LOG_LEVEL_RULE, API_RULE)
    + AUTH_RULES,
    Subcommand.SETUP: (VERBOSE_RULE, LOG_LEVEL_RULE) + SETUP_RULES,
}


def assemble(
    subcommand: Subcommand,
    config: ActionConfig,
    pull_request_number: Optional[int] = None,
) -> AssembledCommand:
    """Build the endorctl command for a sub-command.

    Args:
        subcommand: Sub-command to build.
        config: Typed action configuration.
        pull_request_number: Number of the triggering pull request, if any.

    Returns:
        The assembled command with any recorded configuration errors.

    Raises:
        OptionError: If a structural prerequisite is missing.
    """
    check_prerequisites(config)

    command = AssembledCommand()
    command.append(SUBCOMMAND_WORDS[subcommand])
    ctx = RuleContext(config=config, pull_request_number=pull_request_number)
    apply_rules(RULE_TABLES[subcommand], ctx, command)
    return command


def redact_args(args: List[str]) -> List[str]:
    """Replace credential values in an argument vector with ``***``."""
    redacted = []
    for arg in args:
        flag, sep, value = arg.partition("=")
        if sep and value and flag in SECRET_FLAGS:
            redacted.append(f"{flag}=***")
        else:
            redacted.append(arg)
    return redacted
