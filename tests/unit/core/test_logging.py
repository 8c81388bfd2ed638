"""Tests for logging configuration."""

from __future__ import annotations

import logging

import pytest

from endorctl_action.core.logging import (
    WorkflowCommandFormatter,
    configure_logging,
    get_logger,
)


def _record(level: int, message: str) -> logging.LogRecord:
    return logging.LogRecord("test", level, __file__, 1, message, None, None)


class TestWorkflowCommandFormatter:
    """Tests for GitHub Actions annotations."""

    def test_error_becomes_error_command(self) -> None:
        formatter = WorkflowCommandFormatter()
        assert formatter.format(_record(logging.ERROR, "boom")) == "::error::boom"

    def test_warning_becomes_warning_command(self) -> None:
        formatter = WorkflowCommandFormatter()
        assert formatter.format(_record(logging.WARNING, "careful")) == "::warning::careful"

    def test_info_is_plain(self) -> None:
        formatter = WorkflowCommandFormatter()
        assert formatter.format(_record(logging.INFO, "progress")) == "progress"

    def test_multiline_message_is_escaped(self) -> None:
        formatter = WorkflowCommandFormatter()
        result = formatter.format(_record(logging.ERROR, "100% broken\nsecond line"))
        assert result == "::error::100%25 broken%0Asecond line"


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_default_level_is_info(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GITHUB_ACTIONS", raising=False)
        configure_logging()
        assert logging.getLogger().level == logging.INFO

    def test_debug_level(self) -> None:
        configure_logging(debug=True)
        assert logging.getLogger().level == logging.DEBUG

    def test_quiet_wins_over_debug(self) -> None:
        configure_logging(debug=True, quiet=True)
        assert logging.getLogger().level == logging.ERROR

    def test_workflow_formatter_under_actions(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_ACTIONS", "true")
        configure_logging()
        handler = logging.getLogger().handlers[0]
        assert isinstance(handler.formatter, WorkflowCommandFormatter)

    def test_get_logger_uses_name(self) -> None:
        assert get_logger("endorctl_action.test").name == "endorctl_action.test"
