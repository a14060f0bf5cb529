"""Unit tests for OperationLogger."""

import os
import re
from pathlib import Path

import pytest

from dirtree.models import (
    DeleteDirFilesStats,
    DirectoryCollection,
    DirectoryCopyStats,
    DirectoryMoveStats,
    DirectoryProfile,
    TreeCopyResult,
    TreeCopyStats,
    TreeDeleteResult,
    TreeDeleteStats,
    TreeMoveResult,
)
from dirtree.orchestration import OperationLogger, TreeCopyEngine, TreeMoveEngine


class TestOperationLoggerBasic:
    """Test basic OperationLogger functionality."""

    def test_auto_generated_filename(self, temp_dir: Path):
        original_cwd = os.getcwd()
        try:
            os.chdir(temp_dir)
            with OperationLogger(operation="delete") as oplog:
                log_path = oplog.get_log_path()
                assert log_path.parent == temp_dir
                assert re.match(r"dirtree_delete_\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2}\.log", log_path.name)
        finally:
            os.chdir(original_cwd)

    def test_context_manager_creates_file(self, temp_dir: Path):
        log_path = temp_dir / "run.log"
        oplog = OperationLogger(log_file_path=log_path)

        assert not log_path.exists()
        with oplog:
            assert log_path.exists()
            oplog.log_header(source="/a", target="/b")

        content = log_path.read_text()
        assert "dirtree - COPY Log" in content
        assert "Source: /a" in content
        assert "Target: /b" in content

    def test_missing_parent_directory_rejected(self, temp_dir: Path):
        with pytest.raises(OSError):
            OperationLogger(log_file_path=temp_dir / "missing" / "run.log")

    @pytest.mark.parametrize("dry_run,expected", [(True, "Mode: DRY RUN"), (False, "Mode: LIVE")])
    def test_mode_in_header(self, temp_dir: Path, dry_run, expected):
        log_path = temp_dir / "mode.log"
        with OperationLogger(log_file_path=log_path, dry_run=dry_run) as oplog:
            oplog.log_header()

        assert expected in log_path.read_text()

    def test_write_after_close_does_not_raise(self, temp_dir: Path, capsys):
        log_path = temp_dir / "closed.log"
        oplog = OperationLogger(log_file_path=log_path)
        with oplog:
            pass

        oplog.log_fatal("late")

        assert "closed log file" in capsys.readouterr().err


class TestOperationLoggerSections:
    """Tests for the discovery, per-directory and summary sections."""

    def test_directory_copy_entry(self, temp_dir: Path, resolver):
        log_path = temp_dir / "copy.log"
        source = resolver.resolve_directory("/src/photos")
        target = resolver.resolve_directory("/dst/photos")
        stats = DirectoryCopyStats(
            dirs_created=1, files_processed=3, files_copied=2,
            file_bytes_copied=2048, files_not_copied=1, errors=["Permission denied: /src/photos/x"],
        )

        with OperationLogger(log_file_path=log_path) as oplog:
            oplog.log_directory_copy(source, target, stats)

        content = log_path.read_text()
        assert "COPY PHASE" in content
        assert "-> /dst/photos" in content
        assert "copied: 2" in content
        assert "Bytes copied: 2,048" in content
        assert "Target directory created" in content
        assert "- Permission denied: /src/photos/x" in content

    def test_phase_heading_written_once(self, temp_dir: Path, resolver):
        log_path = temp_dir / "delete.log"
        directory = resolver.resolve_directory("/data")

        with OperationLogger(log_file_path=log_path, operation="DELETE") as oplog:
            oplog.log_directory_delete(directory, DeleteDirFilesStats(files_deleted=1))
            oplog.log_directory_delete(directory, DeleteDirFilesStats(files_remaining=4))

        content = log_path.read_text()
        assert content.count("DELETE PHASE") == 1
        assert "remaining: 4" in content

    def test_copy_summary(self, temp_dir: Path):
        log_path = temp_dir / "summary.log"
        result = TreeCopyResult(
            stats=TreeCopyStats(dirs_scanned=4, files_copied=1500, file_bytes_copied=1_000_000),
            interrupted=True,
        )

        with OperationLogger(log_file_path=log_path) as oplog:
            oplog.log_copy_summary(result, 3725)

        content = log_path.read_text()
        assert "SUMMARY" in content
        assert "Files copied: 1,500 (1,000,000 bytes)" in content
        assert "Interrupted before completion" in content
        assert "Duration: 1h 2m 5s" in content
        assert f"Log file: {log_path}" in content

    def test_delete_summary_with_profile(self, temp_dir: Path):
        log_path = temp_dir / "summary.log"
        result = TreeDeleteResult(
            stats=TreeDeleteStats(files_deleted=3, errors=["one", "two"]),
            profile=DirectoryProfile(absolute_path="/data", exists=True, total_files=7, sub_directories=2),
        )

        with OperationLogger(log_file_path=log_path, operation="DELETE") as oplog:
            oplog.log_delete_summary(result, 45)

        content = log_path.read_text()
        assert "Remaining tree:" in content
        assert "Files: 7 (0 bytes)" in content
        assert "Total errors: 2" in content
        assert "Duration: 45s" in content

    def test_prune_summary(self, temp_dir: Path, resolver):
        log_path = temp_dir / "prune.log"
        removed = DirectoryCollection([resolver.resolve_directory("/p/a"), resolver.resolve_directory("/p/b")])

        with OperationLogger(log_file_path=log_path, operation="PRUNE") as oplog:
            oplog.log_directory_removed(removed.peek_first())
            oplog.log_prune_summary(removed, 65)

        content = log_path.read_text()
        assert "Removed: /p/a" in content
        assert "Directories removed: 2" in content
        assert "Duration: 1m 5s" in content

    def test_move_summary(self, temp_dir: Path):
        log_path = temp_dir / "move.log"
        result = TreeMoveResult(
            stats=DirectoryMoveStats(
                total_dirs_processed=3, source_files_moved=8, source_file_bytes_moved=2048,
                source_dir_was_deleted=True,
            )
        )

        with OperationLogger(log_file_path=log_path, operation="MOVE") as oplog:
            oplog.log_move_summary(result, 5)

        content = log_path.read_text()
        assert "Files moved: 8 (2,048 bytes)" in content
        assert "Source removed: yes" in content
        assert "Duration: 5s" in content

    def test_separator_line_length(self, temp_dir: Path):
        log_path = temp_dir / "sep.log"
        with OperationLogger(log_file_path=log_path) as oplog:
            oplog.log_header()

        separators = [line for line in log_path.read_text().splitlines() if line.startswith("=")]
        assert separators
        assert all(len(line) == 65 for line in separators)


class TestOperationLoggerWithEngine:
    """The copy engine writes discovery and per-directory entries."""

    def test_engine_writes_every_directory(self, temp_dir: Path, nested_tree: Path):
        log_path = temp_dir / "engine.log"

        with OperationLogger(log_file_path=log_path) as oplog:
            engine = TreeCopyEngine(operation_logger=oplog)
            engine.copy_tree(str(nested_tree), str(temp_dir / "out"))

        content = log_path.read_text()
        assert "DISCOVERY PHASE" in content
        assert "Subdirectories discovered: 4" in content
        assert content.count("-> ") == 5

    def test_move_engine_logs_copy_and_removal(self, temp_dir: Path, nested_tree: Path):
        log_path = temp_dir / "move.log"

        with OperationLogger(log_file_path=log_path, operation="MOVE") as oplog:
            TreeMoveEngine(operation_logger=oplog).move_tree(str(nested_tree), str(temp_dir / "out"))

        content = log_path.read_text()
        assert content.count("MOVE PHASE") == 1
        assert content.count("-> ") == 5
        assert f"Removed: {nested_tree}" in content
