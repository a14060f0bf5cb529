"""End-to-end tests for the dirtree CLI.

This module tests the CLI interface using Typer's CliRunner against small
real directory trees.
"""

from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from dirtree import __version__
from dirtree.cli import app, parse_mode


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a CliRunner instance for testing."""
    return CliRunner()


class TestVersionFlag:
    """Tests for --version flag."""

    def test_version_flag_short(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["-v"])
        assert result.exit_code == 0
        assert f"dirtree v{__version__}" in result.stdout

    def test_version_flag_long(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestHelpFlags:
    """Tests for --help output of each command."""

    @pytest.mark.parametrize("command", ["copy", "delete", "move", "prune", "profile", "list"])
    def test_command_help(self, cli_runner: CliRunner, command: str) -> None:
        result = cli_runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0
        assert "Usage" in result.stdout


class TestParseMode:
    """Tests for octal mode parsing."""

    @pytest.mark.parametrize("text,expected", [("644", 0o644), ("0o755", 0o755), ("0600", 0o600)])
    def test_valid_modes(self, text: str, expected: int) -> None:
        assert parse_mode(text) == expected

    def test_none(self) -> None:
        assert parse_mode(None) is None

    def test_invalid_mode_exits_non_zero(self, cli_runner: CliRunner, nested_tree: Path) -> None:
        result = cli_runner.invoke(app, ["list", str(nested_tree), "--mode", "9z"])
        assert result.exit_code != 0


class TestCopyCommand:
    """Tests for the copy command."""

    def test_pattern_copy(self, cli_runner: CliRunner, sample_tree) -> None:
        source, target = sample_tree["source"], sample_tree["target"]

        result = cli_runner.invoke(app, ["copy", str(source), str(target), "-p", "*.txt"])

        assert result.exit_code == 0
        assert "Copy Summary" in result.stdout
        assert (target / "f1.txt").exists()
        assert not (target / "sub").exists()

    def test_list_files(self, cli_runner: CliRunner, sample_tree) -> None:
        source, target = sample_tree["source"], sample_tree["target"]

        result = cli_runner.invoke(app, ["copy", str(source), str(target), "--list-files"])

        assert result.exit_code == 0
        assert "Copied Files (2)" in result.stdout

    def test_dry_run(self, cli_runner: CliRunner, sample_tree) -> None:
        source, target = sample_tree["source"], sample_tree["target"]

        result = cli_runner.invoke(app, ["copy", str(source), str(target), "--dry-run"])

        assert result.exit_code == 0
        assert "DRY RUN" in result.stdout
        assert not target.exists()

    def test_missing_source(self, cli_runner: CliRunner, temp_dir: Path) -> None:
        result = cli_runner.invoke(app, ["copy", str(temp_dir / "nope"), str(temp_dir / "out")])

        assert result.exit_code == 1
        assert "does not exist" in result.stdout

    def test_source_is_file(self, cli_runner: CliRunner, temp_dir: Path) -> None:
        file_path = temp_dir / "file.txt"
        file_path.write_text("x")

        result = cli_runner.invoke(app, ["copy", str(file_path), str(temp_dir / "out")])

        assert result.exit_code == 1
        assert "not a directory" in result.stdout

    def test_invalid_regex(self, cli_runner: CliRunner, sample_tree) -> None:
        source, target = sample_tree["source"], sample_tree["target"]

        result = cli_runner.invoke(app, ["copy", str(source), str(target), "--regex", "["])

        assert result.exit_code == 1
        assert "Invalid regular expression" in result.stdout
        assert not target.exists()

    def test_every_file_kind_excluded(self, cli_runner: CliRunner, sample_tree) -> None:
        source, target = sample_tree["source"], sample_tree["target"]

        result = cli_runner.invoke(
            app,
            ["copy", str(source), str(target), "--no-regular", "--no-symlinks", "--no-other"],
        )

        assert result.exit_code == 1
        assert not target.exists()

    def test_log_file_written(self, cli_runner: CliRunner, sample_tree, temp_dir: Path) -> None:
        source, target = sample_tree["source"], sample_tree["target"]
        log_path = temp_dir / "copy.log"

        result = cli_runner.invoke(app, ["copy", str(source), str(target), "--log-file", str(log_path)])

        assert result.exit_code == 0
        content = log_path.read_text()
        assert "dirtree - COPY Log" in content
        assert "SUMMARY" in content

    def test_copy_errors_exit_non_zero(self, cli_runner: CliRunner, sample_tree) -> None:
        source, target = sample_tree["source"], sample_tree["target"]

        with patch(
            "dirtree.operations.file_operations.shutil.copy2",
            side_effect=PermissionError("denied"),
        ):
            result = cli_runner.invoke(app, ["copy", str(source), str(target)])

        assert result.exit_code == 1
        assert "Completed with 2 error(s)" in result.stdout


class TestDeleteCommand:
    """Tests for the delete command."""

    def test_delete_with_yes(self, cli_runner: CliRunner, nested_tree: Path) -> None:
        result = cli_runner.invoke(app, ["delete", str(nested_tree), "-p", "*.log", "--yes"])

        assert result.exit_code == 0
        assert "Delete Summary" in result.stdout
        assert not (nested_tree / "b.log").exists()
        assert (nested_tree / "a.txt").exists()

    @patch("dirtree.ui.tree_tui.Confirm.ask", return_value=False)
    def test_declined_confirmation(self, mock_confirm, cli_runner: CliRunner, nested_tree: Path) -> None:
        result = cli_runner.invoke(app, ["delete", str(nested_tree)])

        assert result.exit_code == 0
        assert "Delete cancelled" in result.stdout
        assert (nested_tree / "a.txt").exists()
        mock_confirm.assert_called_once()

    @patch("dirtree.ui.tree_tui.Confirm.ask")
    def test_dry_run_skips_confirmation(self, mock_confirm, cli_runner: CliRunner, nested_tree: Path) -> None:
        result = cli_runner.invoke(app, ["delete", str(nested_tree), "--dry-run"])

        assert result.exit_code == 0
        mock_confirm.assert_not_called()
        assert (nested_tree / "d1" / "c.txt").exists()

    def test_skip_root(self, cli_runner: CliRunner, nested_tree: Path) -> None:
        result = cli_runner.invoke(app, ["delete", str(nested_tree), "-p", "*.txt", "--skip-root", "-y"])

        assert result.exit_code == 0
        assert (nested_tree / "a.txt").exists()
        assert not (nested_tree / "d1" / "c.txt").exists()

    def test_failed_delete_is_fatal(self, cli_runner: CliRunner, nested_tree: Path) -> None:
        with patch("dirtree.operations.file_operations.os.remove", side_effect=PermissionError("denied")):
            result = cli_runner.invoke(app, ["delete", str(nested_tree), "-y"])

        assert result.exit_code == 1
        assert "Operation Aborted" in result.stdout


class TestMoveCommand:
    """Tests for the move command."""

    def test_move_with_yes(self, cli_runner: CliRunner, nested_tree: Path, temp_dir: Path) -> None:
        target = temp_dir / "moved"

        result = cli_runner.invoke(app, ["move", str(nested_tree), str(target), "--yes"])

        assert result.exit_code == 0
        assert "Move Summary" in result.stdout
        assert not nested_tree.exists()
        assert (target / "d1" / "d11" / "e.txt").exists()

    def test_subdirs_only(self, cli_runner: CliRunner, nested_tree: Path, temp_dir: Path) -> None:
        target = temp_dir / "moved"

        result = cli_runner.invoke(app, ["move", str(nested_tree), str(target), "--subdirs-only", "-y"])

        assert result.exit_code == 0
        assert (nested_tree / "a.txt").exists()
        assert not (nested_tree / "d1").exists()
        assert (target / "d1" / "c.txt").exists()

    @patch("dirtree.ui.tree_tui.Confirm.ask", return_value=False)
    def test_declined_confirmation(self, mock_confirm, cli_runner: CliRunner, nested_tree: Path, temp_dir: Path) -> None:
        result = cli_runner.invoke(app, ["move", str(nested_tree), str(temp_dir / "moved")])

        assert result.exit_code == 0
        assert "Move cancelled" in result.stdout
        assert (nested_tree / "a.txt").exists()
        assert not (temp_dir / "moved").exists()

    def test_failed_copy_keeps_source(self, cli_runner: CliRunner, nested_tree: Path, temp_dir: Path) -> None:
        with patch(
            "dirtree.operations.file_operations.shutil.copy2",
            side_effect=PermissionError("denied"),
        ):
            result = cli_runner.invoke(app, ["move", str(nested_tree), str(temp_dir / "moved"), "-y"])

        assert result.exit_code == 1
        assert "Operation Aborted" in result.stdout
        assert (nested_tree / "a.txt").exists()

    def test_target_inside_source(self, cli_runner: CliRunner, nested_tree: Path) -> None:
        result = cli_runner.invoke(app, ["move", str(nested_tree), str(nested_tree / "sub"), "-y"])

        assert result.exit_code == 1
        assert "Error" in result.stdout
        assert (nested_tree / "a.txt").exists()
        assert not (nested_tree / "sub").exists()


class TestPruneCommand:
    """Tests for the prune command."""

    def test_prune_with_list(self, cli_runner: CliRunner, nested_tree: Path) -> None:
        result = cli_runner.invoke(app, ["prune", str(nested_tree), "--yes", "--list-dirs"])

        assert result.exit_code == 0
        assert "Removed 2 subdirectories" in result.stdout
        assert not (nested_tree / "d1").exists()
        assert (nested_tree / "a.txt").exists()

    @patch("dirtree.ui.tree_tui.Confirm.ask", return_value=False)
    def test_declined_confirmation(self, mock_confirm, cli_runner: CliRunner, nested_tree: Path) -> None:
        result = cli_runner.invoke(app, ["prune", str(nested_tree)])

        assert result.exit_code == 0
        assert (nested_tree / "d1").exists()


class TestProfileAndListCommands:
    """Tests for the read-only profile and list commands."""

    def test_profile_directory(self, cli_runner: CliRunner, nested_tree: Path) -> None:
        result = cli_runner.invoke(app, ["profile", str(nested_tree)])

        assert result.exit_code == 0
        assert "Directory Profile" in result.stdout

    def test_profile_tree(self, cli_runner: CliRunner, nested_tree: Path) -> None:
        result = cli_runner.invoke(app, ["profile", str(nested_tree), "--tree"])

        assert result.exit_code == 0
        assert "Tree Profile" in result.stdout
        assert "150 B" in result.stdout

    def test_profile_missing_directory(self, cli_runner: CliRunner, temp_dir: Path) -> None:
        result = cli_runner.invoke(app, ["profile", str(temp_dir / "gone")])

        assert result.exit_code == 1
        assert "does not exist" in result.stdout

    def test_list_selected_files(self, cli_runner: CliRunner, nested_tree: Path) -> None:
        result = cli_runner.invoke(app, ["list", str(nested_tree), "-p", "*.txt"])

        assert result.exit_code == 0
        assert "Selected Files (3)" in result.stdout
        assert "80 bytes in 3 files" in result.stdout
