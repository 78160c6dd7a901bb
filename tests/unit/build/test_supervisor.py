"""Tests for external tool supervision."""

import signal
import subprocess
import sys
from unittest.mock import MagicMock, patch

import pytest

from kbuild.build.supervisor import ToolResult, check_tool, get_subprocess_creation_flags, run_tool
from kbuild.errors import ToolFailedError, ToolStartError


class TestGetSubprocessCreationFlags:
    """Test get_subprocess_creation_flags()."""

    @pytest.mark.skipif(sys.platform != "win32", reason="Windows-specific test")
    def test_returns_create_no_window_on_windows(self):
        assert get_subprocess_creation_flags() == subprocess.CREATE_NO_WINDOW

    @pytest.mark.skipif(sys.platform == "win32", reason="Unix-specific test")
    def test_returns_zero_on_unix(self):
        assert get_subprocess_creation_flags() == 0


class TestRunTool:
    """Test run_tool()."""

    @patch("subprocess.run")
    def test_inherits_output_and_closes_stdin(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0)

        result = run_tool(["gcc", "-c", "a.c"])

        args, kwargs = mock_run.call_args
        assert args[0] == ["gcc", "-c", "a.c"]
        assert kwargs["stdin"] == subprocess.DEVNULL
        assert kwargs["check"] is False
        assert "stdout" not in kwargs
        assert "stderr" not in kwargs
        assert result.succeeded
        assert result.command == ("gcc", "-c", "a.c")

    @patch("subprocess.run")
    def test_stringifies_arguments(self, mock_run, tmp_path):
        mock_run.return_value = MagicMock(returncode=0)
        run_tool(["gcc", tmp_path / "a.c"])
        assert mock_run.call_args[0][0] == ["gcc", str(tmp_path / "a.c")]

    @patch("subprocess.run")
    @patch("kbuild.build.supervisor.get_subprocess_creation_flags", return_value=0x08000000)
    def test_merges_creation_flags(self, _mock_flags, mock_run):
        mock_run.return_value = MagicMock(returncode=0)
        run_tool(["gcc"], creationflags=0x00000200)
        assert mock_run.call_args[1]["creationflags"] == 0x08000200

    @patch("subprocess.run", side_effect=FileNotFoundError(2, "No such file or directory"))
    def test_start_failure(self, _mock_run):
        with pytest.raises(ToolStartError, match="failed to start nosuchcc: No such file or directory"):
            run_tool(["nosuchcc", "-c", "a.c"])

    @patch("subprocess.run")
    def test_nonzero_exit_is_returned(self, mock_run):
        mock_run.return_value = MagicMock(returncode=1)
        result = run_tool(["gcc"])
        assert not result.succeeded
        assert result.term_signal is None


class TestCheckTool:
    """Test check_tool()."""

    @patch("subprocess.run")
    def test_success(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0)
        assert check_tool(["gcc"]).returncode == 0

    @patch("subprocess.run")
    def test_nonzero_exit_is_fatal(self, mock_run):
        mock_run.return_value = MagicMock(returncode=1)
        with pytest.raises(ToolFailedError, match="subprocess trouble, check output") as exc_info:
            check_tool(["gcc"])
        assert exc_info.value.returncode == 1

    @patch("subprocess.run")
    def test_signal_is_fatal(self, mock_run):
        mock_run.return_value = MagicMock(returncode=-signal.SIGSEGV)
        with pytest.raises(ToolFailedError) as exc_info:
            check_tool(["gcc"])
        assert exc_info.value.returncode == -signal.SIGSEGV

    @pytest.mark.skipif(sys.platform == "win32", reason="needs POSIX true/false")
    def test_real_processes(self):
        assert check_tool(["true"]).succeeded
        with pytest.raises(ToolFailedError):
            check_tool(["false"])


class TestToolResult:
    """Test ToolResult."""

    def test_describe_exit(self):
        assert ToolResult(command=("gcc",), returncode=2).describe() == "exit status 2"

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
    def test_describe_signal(self):
        result = ToolResult(command=("gcc",), returncode=-signal.SIGKILL)
        assert result.term_signal == signal.SIGKILL
        assert result.describe() == "killed by SIGKILL"

    def test_describe_unknown_signal(self):
        assert ToolResult(command=("gcc",), returncode=-250).describe() == "killed by signal 250"
