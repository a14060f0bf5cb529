"""OperationLogger for writing tree operation log files.

This module provides the OperationLogger class that writes a structured,
sectioned log file for a copy, delete, move or prune run: a header, the discovery
phase, one entry per processed directory, and a closing summary.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, TextIO

from dirtree.models import (
    DeleteDirFilesStats,
    DirectoryCollection,
    DirectoryCopyStats,
    DirectoryHandle,
    DirectoryProfile,
    TreeCopyResult,
    TreeDeleteResult,
    TreeMoveResult,
)


class OperationLogger:
    """Structured log file writer for tree operations.

    Usage:
        with OperationLogger(operation="COPY", dry_run=True) as oplog:
            oplog.log_header(source=src, target=dst)
            oplog.log_discovery(src, total_sub_dirs=12, include_root=True)
            # ... one log_directory_copy() per directory ...
            oplog.log_copy_summary(result, duration_seconds)

    Attributes:
        SEPARATOR: The 65-character separator line used between sections.
    """

    SEPARATOR = "=" * 65

    def __init__(
        self,
        log_file_path: Optional[Path] = None,
        operation: str = "COPY",
        dry_run: bool = False,
    ) -> None:
        """Initialize the OperationLogger.

        Args:
            log_file_path: Optional path for the log file. If not provided,
                generates a timestamped filename in the current directory.
            operation: Operation name written in the header (COPY, DELETE, MOVE, PRUNE).
            dry_run: Whether this is a dry run (no actual changes made).

        Raises:
            OSError: If the log file path is not writable.
        """
        self._operation = operation.upper()
        self._dry_run = dry_run
        self._start_timestamp = datetime.now()
        self._file_handle: Optional[TextIO] = None
        self._directory_counter = 0

        if log_file_path is None:
            timestamp_str = self._start_timestamp.strftime("%Y-%m-%d_%H-%M-%S")
            self._log_file_path = Path.cwd() / f"dirtree_{self._operation.lower()}_{timestamp_str}.log"
        else:
            self._log_file_path = Path(log_file_path)

        self._validate_path()

    def _validate_path(self) -> None:
        """Validate that the log file's directory exists and is writable.

        Raises:
            OSError: If the parent directory doesn't exist or is not writable.
        """
        parent = self._log_file_path.parent
        if not parent.exists():
            raise OSError(f"Parent directory does not exist: {parent}")
        if not parent.is_dir():
            raise OSError(f"Parent path is not a directory: {parent}")
        try:
            write_check = parent / f".dirtree_write_check_{id(self)}"
            write_check.touch()
            write_check.unlink()
        except PermissionError:
            raise OSError(f"Permission denied: cannot write to {parent}")

    def __enter__(self) -> "OperationLogger":
        try:
            self._file_handle = open(self._log_file_path, "w", encoding="utf-8")
        except OSError as e:
            raise OSError(f"Cannot open log file for writing: {e}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._file_handle is not None:
            try:
                self._file_handle.close()
            except OSError as e:
                print(f"Warning: Error closing log file: {e}", file=sys.stderr)
            finally:
                self._file_handle = None

    def get_log_path(self) -> Path:
        return self._log_file_path

    def log_header(self, **paths: Any) -> None:
        """Write the header section.

        Args:
            **paths: Labelled paths to record, e.g. source=..., target=...
        """
        self._write_separator()
        self._write_line(f"dirtree - {self._operation} Log")
        self._write_separator()
        self._write_line(f"Timestamp: {self._format_timestamp(self._start_timestamp)}")
        mode = "DRY RUN" if self._dry_run else "LIVE"
        self._write_line(f"Mode: {mode}")
        for label, value in paths.items():
            self._write_line(f"{label.replace('_', ' ').title()}: {value}")
        self._write_line("")

    def log_discovery(self, root: DirectoryHandle, total_sub_dirs: int, include_root: bool) -> None:
        """Write the discovery phase section."""
        self._write_separator()
        self._write_line("DISCOVERY PHASE")
        self._write_separator()
        self._write_line(f"Root: {root.path_str}")
        self._write_line(f"Root included: {'yes' if include_root else 'no'}")
        self._write_line(f"Subdirectories discovered: {total_sub_dirs:,}")
        self._write_line("")

    def log_directory_copy(
        self,
        source: DirectoryHandle,
        target: DirectoryHandle,
        stats: DirectoryCopyStats,
    ) -> None:
        """Write the result of copying one directory."""
        self._start_directory_section()
        self._write_line(f"[{self._format_timestamp(datetime.now())}] {source.path_str}")
        self._write_line(f"-> {target.path_str}", indent=2)
        self._write_line(
            f"Files processed: {stats.files_processed}  copied: {stats.files_copied}  "
            f"not copied: {stats.files_not_copied}",
            indent=4,
        )
        self._write_line(f"Bytes copied: {stats.file_bytes_copied:,}", indent=4)
        if stats.dirs_created:
            self._write_line("Target directory created", indent=4)
        self._write_errors(stats.errors, indent=4)

    def log_directory_delete(self, directory: DirectoryHandle, stats: DeleteDirFilesStats) -> None:
        """Write the result of deleting files in one directory."""
        self._start_directory_section()
        self._write_line(f"[{self._format_timestamp(datetime.now())}] {directory.path_str}")
        self._write_line(
            f"Files processed: {stats.files_processed}  deleted: {stats.files_deleted}  "
            f"remaining: {stats.files_remaining}",
            indent=4,
        )
        self._write_line(f"Bytes deleted: {stats.file_bytes_deleted:,}", indent=4)
        self._write_errors(stats.errors, indent=4)

    def log_directory_removed(self, directory: DirectoryHandle) -> None:
        self._start_directory_section()
        self._write_line(f"[{self._format_timestamp(datetime.now())}] Removed: {directory.path_str}")

    def log_fatal(self, message: str) -> None:
        """Write a fatal error line; the run ends after it."""
        self._write_line("")
        self._write_line(f"FATAL: {message}")
        self._write_line("")

    def log_copy_summary(self, result: TreeCopyResult, duration_seconds: float) -> None:
        stats = result.stats
        self._write_summary_heading()
        self._write_line(f"Directories scanned: {stats.dirs_scanned:,}")
        self._write_line(f"Directories copied: {stats.dirs_copied:,}")
        self._write_line(f"Directories created: {stats.dirs_created:,}")
        self._write_line(f"Files processed: {stats.files_processed:,}")
        self._write_line(f"Files copied: {stats.files_copied:,} ({stats.file_bytes_copied:,} bytes)")
        self._write_line(
            f"Files not copied: {stats.files_not_copied:,} ({stats.file_bytes_not_copied:,} bytes)"
        )
        if result.interrupted:
            self._write_line("Interrupted before completion")
        self._write_summary_footer(stats.errors, duration_seconds)

    def log_delete_summary(self, result: TreeDeleteResult, duration_seconds: float) -> None:
        stats = result.stats
        self._write_summary_heading()
        self._write_line(f"Directories scanned: {stats.dirs_scanned:,}")
        self._write_line(f"Directories where files deleted: {stats.dirs_where_files_deleted:,}")
        self._write_line(f"Files processed: {stats.files_processed:,}")
        self._write_line(f"Files deleted: {stats.files_deleted:,} ({stats.file_bytes_deleted:,} bytes)")
        self._write_line(
            f"Files remaining: {stats.files_remaining:,} ({stats.file_bytes_remaining:,} bytes)"
        )
        if result.profile is not None:
            self._write_profile(result.profile)
        if result.interrupted:
            self._write_line("Interrupted before completion")
        self._write_summary_footer(stats.errors, duration_seconds)

    def log_move_summary(self, result: TreeMoveResult, duration_seconds: float) -> None:
        stats = result.stats
        self._write_summary_heading()
        self._write_line(f"Directories processed: {stats.total_dirs_processed:,}")
        self._write_line(f"Directories created: {stats.dirs_created:,}")
        self._write_line(f"Subdirectories moved: {stats.num_of_sub_directories:,}")
        self._write_line(f"Files processed: {stats.total_src_files_processed:,}")
        self._write_line(f"Files moved: {stats.source_files_moved:,} ({stats.source_file_bytes_moved:,} bytes)")
        self._write_line(
            f"Files remaining in source: {stats.source_files_remaining:,} "
            f"({stats.source_file_bytes_remaining:,} bytes)"
        )
        self._write_line(f"Source removed: {'yes' if stats.source_dir_was_deleted else 'no'}")
        if result.interrupted:
            self._write_line("Interrupted before completion")
        self._write_summary_footer(stats.errors, duration_seconds)

    def log_prune_summary(self, removed: DirectoryCollection, duration_seconds: float) -> None:
        self._write_summary_heading()
        self._write_line(f"Directories removed: {len(removed):,}")
        self._write_summary_footer([], duration_seconds)

    def _start_directory_section(self) -> None:
        if self._directory_counter == 0:
            self._write_separator()
            self._write_line(f"{self._operation} PHASE")
            self._write_separator()
        self._directory_counter += 1

    def _write_profile(self, profile: DirectoryProfile) -> None:
        self._write_line("Remaining tree:")
        self._write_line(f"Subdirectories: {profile.sub_directories:,}", indent=2)
        self._write_line(
            f"Files: {profile.total_files:,} ({profile.total_file_bytes:,} bytes)", indent=2
        )

    def _write_summary_heading(self) -> None:
        self._write_line("")
        self._write_separator()
        self._write_line("SUMMARY")
        self._write_separator()

    def _write_summary_footer(self, errors: List[str], duration_seconds: float) -> None:
        if errors:
            self._write_line(f"Total errors: {len(errors)}")
            self._write_errors(errors, indent=0)
        self._write_line(f"Duration: {self._format_duration(duration_seconds)}")
        self._write_line("")
        self._write_line(f"Log file: {self._log_file_path}")
        self._write_separator()

    def _write_errors(self, errors: List[str], indent: int) -> None:
        if not errors:
            return
        self._write_line("Errors:", indent=indent)
        for error in errors:
            self._write_line(f"- {error}", indent=indent + 2)

    def _format_duration(self, seconds: float) -> str:
        """Format duration as "45s", "5m 23s" or "1h 5m 30s"."""
        total_seconds = int(seconds)

        if total_seconds < 60:
            return f"{total_seconds}s"

        hours, remainder = divmod(total_seconds, 3600)
        minutes, secs = divmod(remainder, 60)

        if hours > 0:
            return f"{hours}h {minutes}m {secs}s"
        return f"{minutes}m {secs}s"

    def _format_timestamp(self, dt: datetime) -> str:
        return dt.strftime("%Y-%m-%d %H:%M:%S")

    def _write_separator(self) -> None:
        self._write_line(self.SEPARATOR)

    def _write_line(self, text: str, indent: int = 0) -> None:
        """Write a line to the log file with optional indentation.

        Args:
            text: The text to write.
            indent: Number of spaces to indent the line.
        """
        if self._file_handle is None:
            print(
                f"Warning: Attempted to write to closed log file: {text}",
                file=sys.stderr,
            )
            return

        try:
            self._file_handle.write(" " * indent + text + "\n")
        except OSError as e:
            print(f"Warning: Error writing to log file: {e}", file=sys.stderr)
