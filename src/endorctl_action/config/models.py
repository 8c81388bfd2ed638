"""Typed action configuration."""

from __future__ import annotations

from dataclasses import dataclass

from endorctl_action.config.inputs import InputSource


@dataclass(frozen=True)
class ActionConfig:
    """Every action input, read once and typed.

    Common inputs are shared by all sub-commands; the scan, sign and verify
    groups are only consulted by their own sub-command.
    """

    # Common
    api: str = ""
    api_key: str = ""
    api_secret: str = ""
    gcp_service_account: str = ""
    enable_github_action_token: bool = True
    namespace: str = ""
    endorctl_version: str = ""
    endorctl_checksum: str = ""
    log_verbose: bool = False
    log_level: str = "info"
    run_stats: bool = False
    command: str = ""

    # Scan
    scan_dependencies: bool = True
    scan_secrets: bool = False
    scan_tools: bool = False
    scan_git_logs: bool = False
    phantom_dependencies: bool = False
    ci_run: bool = True
    ci_run_tags: str = ""
    pr: bool = True
    pr_baseline: str = ""
    tags: str = ""
    scan_path: str = ""
    additional_args: str = ""
    sarif_file: str = ""
    enable_pr_comments: bool = False
    github_token: str = ""
    use_bazel: bool = False
    bazel_exclude_targets: str = ""
    bazel_include_targets: str = ""
    bazel_targets_query: str = ""
    export_scan_result_artifact: bool = True
    scan_summary_output_type: str = "table"
    output_file: str = ""

    # Sign / verify
    artifact_name: str = ""
    certificate_oidc_issuer: str = ""
    source_repository_ref: str = ""

    @property
    def has_api_credentials(self) -> bool:
        return bool(self.api_key and self.api_secret)

    @property
    def has_authentication(self) -> bool:
        """Whether any of the supported authentication methods is configured."""
        return (
            self.enable_github_action_token
            or self.has_api_credentials
            or bool(self.gcp_service_account)
        )


_STRING_INPUTS = (
    "api",
    "api_key",
    "api_secret",
    "gcp_service_account",
    "namespace",
    "endorctl_version",
    "endorctl_checksum",
    "log_level",
    "command",
    "ci_run_tags",
    "pr_baseline",
    "tags",
    "scan_path",
    "additional_args",
    "sarif_file",
    "github_token",
    "bazel_exclude_targets",
    "bazel_include_targets",
    "bazel_targets_query",
    "scan_summary_output_type",
    "output_file",
    "artifact_name",
    "certificate_oidc_issuer",
    "source_repository_ref",
)

_BOOLEAN_INPUTS = (
    "enable_github_action_token",
    "log_verbose",
    "run_stats",
    "scan_dependencies",
    "scan_secrets",
    "scan_tools",
    "scan_git_logs",
    "phantom_dependencies",
    "ci_run",
    "pr",
    "enable_pr_comments",
    "use_bazel",
    "export_scan_result_artifact",
)


def load_action_config(source: InputSource) -> ActionConfig:
    """Read every input from the source into an ActionConfig.

    Raises:
        InputError: If a boolean input is malformed.
    """
    values = {name: source.get_input(name) for name in _STRING_INPUTS}
    values.update({name: source.get_boolean_input(name) for name in _BOOLEAN_INPUTS})
    return ActionConfig(**values)
