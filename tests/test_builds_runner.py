"""Tests for builds/runner.py module.

Uses mocked subprocess for execution tests.
"""

from unittest.mock import MagicMock, patch

import pytest

from release_builder.builds.runner import CommandExecutionError, CommandRunner


class TestCommandRunner:
    """Tests for CommandRunner.run."""

    def test_success(self, tmp_path):
        """Should run the command in the given directory."""
        mock_result = MagicMock(returncode=0)
        with patch("subprocess.run", return_value=mock_result) as mock_run:
            CommandRunner().run(["tar", "-czf", "out.tgz", "src"], cwd=tmp_path)

        mock_run.assert_called_once()
        args, kwargs = mock_run.call_args
        assert args[0] == ["tar", "-czf", "out.tgz", "src"]
        assert kwargs["cwd"] == tmp_path
        assert kwargs["stdout"] is None
        assert kwargs["env"] is None
        assert kwargs["check"] is False

    def test_stdout_passed_through(self, tmp_path):
        """Should hand the stdout handle to the process."""
        report = tmp_path / "report.txt"
        with report.open("w") as handle, patch(
            "subprocess.run", return_value=MagicMock(returncode=0)
        ) as mock_run:
            CommandRunner().run(["license-lint"], cwd=tmp_path, stdout=handle)
            assert mock_run.call_args.kwargs["stdout"] is handle

    def test_env_override_merges_environment(self, tmp_path):
        """Should merge overrides into the current environment."""
        with patch.dict("os.environ", {"EXISTING": "1"}), patch(
            "subprocess.run", return_value=MagicMock(returncode=0)
        ) as mock_run:
            CommandRunner().run(["make"], cwd=tmp_path, env_override={"TAG": "1.0"})

        env = mock_run.call_args.kwargs["env"]
        assert env["TAG"] == "1.0"
        assert env["EXISTING"] == "1"

    def test_nonzero_exit(self, tmp_path):
        """Should raise CommandExecutionError with the exit code."""
        with patch("subprocess.run", return_value=MagicMock(returncode=2)):
            with pytest.raises(CommandExecutionError) as exc_info:
                CommandRunner().run(["go", "mod", "download"], cwd=tmp_path)

        assert exc_info.value.exit_code == 2
        assert exc_info.value.code == "command_failed"
        assert "go mod download" in str(exc_info.value)
        assert "status 2" in str(exc_info.value)

    def test_os_error(self, tmp_path):
        """Should wrap OSError when the command cannot start."""
        with patch("subprocess.run", side_effect=FileNotFoundError("no such file")):
            with pytest.raises(CommandExecutionError) as exc_info:
                CommandRunner().run(["missing-tool"], cwd=tmp_path)

        assert exc_info.value.exit_code is None
        assert exc_info.value.code == "execution_error"

    def test_real_command(self, tmp_path):
        """Should run a real process and capture its stdout."""
        out = tmp_path / "out.txt"
        with out.open("w") as handle:
            CommandRunner().run(["echo", "hello"], cwd=tmp_path, stdout=handle)
        assert out.read_text() == "hello\n"

    def test_real_command_failure(self, tmp_path):
        with pytest.raises(CommandExecutionError) as exc_info:
            CommandRunner().run(["false"], cwd=tmp_path)
        assert exc_info.value.exit_code == 1

