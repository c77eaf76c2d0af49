"""Tests for validate command."""

from __future__ import annotations

from argparse import Namespace
from pathlib import Path

from covsubmit.cli.commands.validate import ValidateCommand
from covsubmit.cli.exit_codes import EXIT_INVALID_USAGE, EXIT_PROCESSING_ERROR, EXIT_SUCCESS


class TestValidateCommand:
    """Tests for ValidateCommand."""

    def test_command_name(self) -> None:
        """Test command name property."""
        cmd = ValidateCommand()
        assert cmd.name == "validate"

    def test_valid_config_returns_success(self, tmp_path: Path, monkeypatch, capsys) -> None:
        """Test valid config returns exit code 0."""
        config_file = tmp_path / ".covsubmit.yml"
        config_file.write_text("repo_token: abc\nformat: jacoco\n")

        monkeypatch.chdir(tmp_path)
        result = ValidateCommand().execute(Namespace(config=None))

        assert result == EXIT_SUCCESS
        captured = capsys.readouterr()
        assert "configuration is valid" in captured.out.lower()

    def test_invalid_config_returns_processing_error(self, tmp_path: Path, monkeypatch, capsys) -> None:
        """Test config with errors returns exit code 1."""
        config_file = tmp_path / ".covsubmit.yml"
        config_file.write_text("parallel: 123\n")

        monkeypatch.chdir(tmp_path)
        result = ValidateCommand().execute(Namespace(config=None))

        assert result == EXIT_PROCESSING_ERROR
        captured = capsys.readouterr()
        assert "errors (1)" in captured.out.lower()

    def test_warnings_only_is_valid(self, tmp_path: Path, capsys) -> None:
        """Test unknown keys are reported but do not fail validation."""
        config_file = tmp_path / "custom.yml"
        config_file.write_text("formt: jacoco\n")

        result = ValidateCommand().execute(Namespace(config=str(config_file)))

        assert result == EXIT_SUCCESS
        captured = capsys.readouterr()
        assert "Did you mean 'format'?" in captured.out
        assert "1 warning(s)" in captured.out

    def test_missing_config_returns_invalid_usage(self, tmp_path: Path, monkeypatch, capsys) -> None:
        """Test missing config file returns exit code 3."""
        monkeypatch.chdir(tmp_path)
        result = ValidateCommand().execute(Namespace(config=None))

        assert result == EXIT_INVALID_USAGE
        captured = capsys.readouterr()
        assert "no configuration file found" in captured.out.lower()

    def test_nonexistent_custom_path(self, tmp_path: Path, capsys) -> None:
        """Test a --config path that does not exist."""
        result = ValidateCommand().execute(Namespace(config=str(tmp_path / "nope.yml")))

        assert result == EXIT_INVALID_USAGE
        assert "not found" in capsys.readouterr().out
