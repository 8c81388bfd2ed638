"""Tests for subprocess execution with output capture."""

from __future__ import annotations

import io
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from endorctl_action.core.subprocess_runner import run_quiet, run_with_capture


def _popen(lines, returncode=0):
    proc = MagicMock()
    proc.stdout = iter(lines)
    proc.returncode = returncode
    proc.__enter__.return_value = proc
    proc.__exit__.return_value = False
    return proc


class TestRunWithCapture:
    """Tests for run_with_capture."""

    def test_echoes_and_captures_stdout(self) -> None:
        echo = io.StringIO()
        proc = _popen(['{"findings": []}\n', "done\n"])

        with patch("subprocess.Popen", return_value=proc) as mock_popen:
            result = run_with_capture(["endorctl", "scan"], echo=echo)

        assert result.returncode == 0
        assert result.stdout == '{"findings": []}\ndone\n'
        assert result.stderr is None
        assert echo.getvalue() == result.stdout
        assert mock_popen.call_args.kwargs["stdout"] == subprocess.PIPE
        assert "stderr" not in mock_popen.call_args.kwargs

    def test_returns_non_zero_exit(self) -> None:
        proc = _popen([], returncode=1)
        with patch("subprocess.Popen", return_value=proc):
            result = run_with_capture(["endorctl", "scan"], echo=io.StringIO())
        assert result.returncode == 1
        assert result.stdout == ""

    def test_timeout_kills_process(self) -> None:
        proc = _popen([])
        proc.wait.side_effect = subprocess.TimeoutExpired(cmd="endorctl", timeout=1)

        with patch("subprocess.Popen", return_value=proc):
            with pytest.raises(subprocess.TimeoutExpired):
                run_with_capture(["endorctl"], echo=io.StringIO(), timeout=1)

        proc.kill.assert_called_once()

    def test_missing_program_raises(self) -> None:
        with patch("subprocess.Popen", side_effect=FileNotFoundError("endorctl")):
            with pytest.raises(FileNotFoundError):
                run_with_capture(["endorctl"], echo=io.StringIO())


class TestRunQuiet:
    """Tests for run_quiet."""

    def test_captures_output(self) -> None:
        completed = subprocess.CompletedProcess(args=["node"], returncode=0, stdout="v18.0.0\n")
        with patch("subprocess.run", return_value=completed) as mock_run:
            result = run_quiet(["node", "--version"])

        assert result.stdout == "v18.0.0\n"
        assert mock_run.call_args.kwargs["capture_output"] is True
