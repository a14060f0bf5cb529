"""
dirtree - CLI Interface.

A command-line interface for copying, deleting, moving and profiling directory trees
with file selection by name pattern, regular expression, age and mode.

Usage Examples:
    # Copy every .py file of a tree, mirroring its layout
    dirtree copy ~/projects /backup/projects --pattern "*.py"

    # Preview deleting build artifacts older than a date
    dirtree delete ./build -p "*.o" -p "*.tmp" --older-than 2024-01-01 --dry-run

    # Move a tree, removing the source once every file is copied
    dirtree move ./incoming /archive/incoming --yes

    # Remove every subdirectory of a parent directory
    dirtree prune /tmp/scratch --yes

    # Profile a whole tree
    dirtree profile /data --tree
"""

import logging
import os
import time
from contextlib import nullcontext
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from dirtree.exceptions import (
    CriteriaError,
    DirTreeError,
    TreeOperationError,
)
from dirtree.models import FileTypeMask, SelectCriterionMode, SelectionCriteria
from dirtree.orchestration import (
    OperationLogger,
    SubtreePruner,
    TreeCopyEngine,
    TreeDeleteEngine,
    TreeMoveEngine,
)
from dirtree.scanning import DirectoryScanner, PathResolver
from dirtree.ui import TreeTUI

__version__ = "1.0.0"

DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S"]

# Initialize Typer app
app = typer.Typer(
    name="dirtree",
    help="dirtree - Copy, delete, move and profile directory trees with file selection.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for consistent output formatting
console = Console()


def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(f"dirtree v{__version__}")
        raise typer.Exit()


def parse_mode(value: Optional[str]) -> Optional[int]:
    """
    Parse an octal file mode such as 644 or 0o755.

    Raises:
        typer.BadParameter: If the value is not an octal number.
    """
    if value is None:
        return None
    text = value.strip().lower()
    if text.startswith("0o"):
        text = text[2:]
    try:
        return int(text, 8)
    except ValueError:
        raise typer.BadParameter(f"'{value}' is not an octal file mode")


def configure_logging(verbose: bool) -> None:
    """Route library log records through Rich; DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def validate_directory(path: Path, label: str) -> None:
    """
    Validate that an existing directory was given.

    Args:
        path: Path to validate.
        label: Name of the argument, used in error messages.

    Raises:
        typer.Exit: If validation fails with descriptive error message.
    """
    if not path.exists():
        console.print(f"[red]Error:[/red] {label} does not exist: {path}")
        raise typer.Exit(1)

    if not path.is_dir():
        console.print(f"[red]Error:[/red] {label} is not a directory: {path}")
        raise typer.Exit(1)

    if not os.access(path, os.R_OK):
        console.print(f"[red]Error:[/red] Permission denied - cannot read: {path}")
        raise typer.Exit(1)


def build_criteria(
    patterns: Optional[List[str]],
    regex: Optional[str],
    older_than: Optional[datetime],
    newer_than: Optional[datetime],
    mode: Optional[str],
    or_mode: bool,
) -> SelectionCriteria:
    """
    Build SelectionCriteria from command line options.

    Raises:
        typer.Exit: If the regular expression is invalid.
    """
    try:
        return SelectionCriteria(
            file_name_patterns=list(patterns or []),
            files_older_than=older_than,
            files_newer_than=newer_than,
            regex=regex,
            select_by_file_mode=parse_mode(mode),
            select_mode=SelectCriterionMode.OR_SELECT if or_mode else SelectCriterionMode.AND_SELECT,
        )
    except CriteriaError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def open_operation_logger(
    log_file: Optional[Path], operation: str, dry_run: bool
) -> Optional[OperationLogger]:
    """Create an OperationLogger, or None when no log file was requested."""
    if not log_file:
        return None
    try:
        return OperationLogger(log_file, operation=operation, dry_run=dry_run)
    except OSError as e:
        console.print(f"[red]Error:[/red] Failed to create log file: {e}")
        raise typer.Exit(1)


def report_fatal(tui: TreeTUI, error: TreeOperationError) -> None:
    partial = getattr(error.result, "errors", None)
    tui.display_fatal(str(error), partial)
    console.print("[dim]Work completed before the failure has not been undone.[/dim]")


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """dirtree - Copy, delete, move and profile directory trees with file selection."""
    pass


@app.command()
def copy(
    source: Path = typer.Argument(..., help="Root of the tree to copy."),
    target: Path = typer.Argument(..., help="Root of the mirrored tree (created on demand)."),
    skip_root: bool = typer.Option(False, "--skip-root", help="Do not copy files directly in SOURCE."),
    create_empty: bool = typer.Option(
        False, "--create-empty", help="Create target directories even when no file qualifies."
    ),
    patterns: Optional[List[str]] = typer.Option(
        None, "--pattern", "-p", help="File name glob; repeat for several."
    ),
    regex: Optional[str] = typer.Option(None, "--regex", help="Regular expression searched in file names."),
    older_than: Optional[datetime] = typer.Option(
        None, "--older-than", formats=DATE_FORMATS, help="Select files modified before this time."
    ),
    newer_than: Optional[datetime] = typer.Option(
        None, "--newer-than", formats=DATE_FORMATS, help="Select files modified after this time."
    ),
    mode: Optional[str] = typer.Option(None, "--mode", help="Select files with this octal mode."),
    or_mode: bool = typer.Option(False, "--or", help="Select files matching ANY criterion."),
    no_regular: bool = typer.Option(False, "--no-regular", help="Exclude regular files."),
    no_symlinks: bool = typer.Option(False, "--no-symlinks", help="Exclude symbolic links."),
    no_other: bool = typer.Option(False, "--no-other", help="Exclude pipes, sockets and devices."),
    list_files: bool = typer.Option(False, "--list-files", help="List every copied file."),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Simulate without making changes."),
    log_file: Optional[Path] = typer.Option(None, "--log-file", "-l", help="Path for log file output."),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose output."),
) -> None:
    """
    Copy selected files of a directory tree into a mirrored target tree.

    Files that fail to copy are reported and the copy continues.
    """
    configure_logging(verbose)
    validate_directory(source, "Source directory")
    criteria = build_criteria(patterns, regex, older_than, newer_than, mode, or_mode)
    mask = FileTypeMask(regular=not no_regular, symlink=not no_symlinks, other_non_regular=not no_other)

    tui = TreeTUI(console)
    oplog = open_operation_logger(log_file, "COPY", dry_run)

    if dry_run:
        console.print("[yellow][DRY RUN MODE][/yellow] No files will be modified.\n")

    start = time.monotonic()

    try:
        with oplog if oplog is not None else nullcontext():
            if oplog is not None:
                oplog.log_header(source=source, target=target)

            progress, callback = tui.create_progress_callback("Copying")
            engine = TreeCopyEngine(
                dry_run=dry_run,
                progress_callback=callback,
                operation_logger=oplog,
            )
            with progress:
                result = engine.copy_tree(
                    str(source),
                    str(target),
                    include_root=not skip_root,
                    create_empty_targets=create_empty,
                    file_type_mask=mask,
                    criteria=criteria,
                    return_copied_list=list_files,
                )

            duration = time.monotonic() - start
            if oplog is not None:
                oplog.log_copy_summary(result, duration)

    except KeyboardInterrupt:
        console.print("\n[yellow]Copy interrupted by user.[/yellow]")
        raise typer.Exit(130)

    except TreeOperationError as e:
        report_fatal(tui, e)
        raise typer.Exit(1)

    except (DirTreeError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if list_files:
        tui.display_file_list(result.copied_files, title="Copied Files")
    tui.display_copy_summary(result, dry_run, duration)

    if oplog is not None:
        console.print(f"[dim]Log written to: {oplog.get_log_path()}[/dim]")

    if result.interrupted:
        raise typer.Exit(130)
    if result.errors:
        console.print(f"\n[yellow]Completed with {len(result.errors)} error(s).[/yellow]")
        raise typer.Exit(1)


@app.command()
def delete(
    target: Path = typer.Argument(..., help="Root of the tree whose files are deleted."),
    skip_root: bool = typer.Option(False, "--skip-root", help="Keep files directly in TARGET."),
    patterns: Optional[List[str]] = typer.Option(
        None, "--pattern", "-p", help="File name glob; repeat for several."
    ),
    regex: Optional[str] = typer.Option(None, "--regex", help="Regular expression searched in file names."),
    older_than: Optional[datetime] = typer.Option(
        None, "--older-than", formats=DATE_FORMATS, help="Select files modified before this time."
    ),
    newer_than: Optional[datetime] = typer.Option(
        None, "--newer-than", formats=DATE_FORMATS, help="Select files modified after this time."
    ),
    mode: Optional[str] = typer.Option(None, "--mode", help="Select files with this octal mode."),
    or_mode: bool = typer.Option(False, "--or", help="Select files matching ANY criterion."),
    no_regular: bool = typer.Option(False, "--no-regular", help="Keep regular files."),
    no_symlinks: bool = typer.Option(False, "--no-symlinks", help="Keep symbolic links."),
    no_other: bool = typer.Option(False, "--no-other", help="Keep pipes, sockets and devices."),
    list_files: bool = typer.Option(False, "--list-files", help="List every deleted file."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Simulate without making changes."),
    log_file: Optional[Path] = typer.Option(None, "--log-file", "-l", help="Path for log file output."),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose output."),
) -> None:
    """
    Delete selected files across a directory tree. Directories are kept.

    A selected file that cannot be deleted aborts the run.
    """
    configure_logging(verbose)
    validate_directory(target, "Target directory")
    criteria = build_criteria(patterns, regex, older_than, newer_than, mode, or_mode)
    mask = FileTypeMask(regular=not no_regular, symlink=not no_symlinks, other_non_regular=not no_other)

    tui = TreeTUI(console)

    if not dry_run and not yes and not tui.confirm_delete(str(target), criteria.is_active()):
        console.print("[yellow]Delete cancelled.[/yellow]")
        raise typer.Exit(0)

    oplog = open_operation_logger(log_file, "DELETE", dry_run)

    if dry_run:
        console.print("[yellow][DRY RUN MODE][/yellow] No files will be deleted.\n")

    start = time.monotonic()

    try:
        with oplog if oplog is not None else nullcontext():
            if oplog is not None:
                oplog.log_header(target=target)

            progress, callback = tui.create_progress_callback("Deleting")
            engine = TreeDeleteEngine(
                dry_run=dry_run,
                progress_callback=callback,
                operation_logger=oplog,
            )
            with progress:
                result = engine.delete_tree_files(
                    str(target),
                    include_root=not skip_root,
                    file_type_mask=mask,
                    criteria=criteria,
                    return_deleted_list=list_files,
                )

            duration = time.monotonic() - start
            if oplog is not None:
                oplog.log_delete_summary(result, duration)

    except KeyboardInterrupt:
        console.print("\n[yellow]Delete interrupted by user.[/yellow]")
        raise typer.Exit(130)

    except TreeOperationError as e:
        report_fatal(tui, e)
        raise typer.Exit(1)

    except (DirTreeError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if list_files:
        tui.display_file_list(result.deleted_files, title="Deleted Files")
    tui.display_delete_summary(result, dry_run, duration)

    if oplog is not None:
        console.print(f"[dim]Log written to: {oplog.get_log_path()}[/dim]")

    if result.interrupted:
        raise typer.Exit(130)
    if result.errors:
        console.print(f"\n[yellow]Completed with {len(result.errors)} error(s).[/yellow]")
        raise typer.Exit(1)


@app.command()
def move(
    source: Path = typer.Argument(..., help="Root of the tree to move."),
    target: Path = typer.Argument(..., help="Root of the destination tree (created on demand)."),
    subdirs_only: bool = typer.Option(
        False, "--subdirs-only", help="Move only the subdirectories of SOURCE; keep its own files."
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Simulate without making changes."),
    log_file: Optional[Path] = typer.Option(None, "--log-file", "-l", help="Path for log file output."),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose output."),
) -> None:
    """
    Move a directory tree: copy every file, then remove the source.

    The source is kept if any file fails to copy.
    """
    configure_logging(verbose)
    validate_directory(source, "Source directory")

    tui = TreeTUI(console)

    if not dry_run and not yes and not tui.confirm_move(str(source), str(target), not subdirs_only):
        console.print("[yellow]Move cancelled.[/yellow]")
        raise typer.Exit(0)

    oplog = open_operation_logger(log_file, "MOVE", dry_run)

    if dry_run:
        console.print("[yellow][DRY RUN MODE][/yellow] No files will be moved.\n")

    start = time.monotonic()

    try:
        with oplog if oplog is not None else nullcontext():
            if oplog is not None:
                oplog.log_header(source=source, target=target)

            progress, callback = tui.create_progress_callback("Moving")
            engine = TreeMoveEngine(
                dry_run=dry_run,
                progress_callback=callback,
                operation_logger=oplog,
            )
            with progress:
                result = engine.move_tree(str(source), str(target), include_root=not subdirs_only)

            duration = time.monotonic() - start
            if oplog is not None:
                oplog.log_move_summary(result, duration)

    except KeyboardInterrupt:
        console.print("\n[yellow]Move interrupted by user.[/yellow]")
        raise typer.Exit(130)

    except TreeOperationError as e:
        report_fatal(tui, e)
        raise typer.Exit(1)

    except (DirTreeError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    tui.display_move_summary(result, dry_run, duration)

    if oplog is not None:
        console.print(f"[dim]Log written to: {oplog.get_log_path()}[/dim]")

    if result.interrupted:
        raise typer.Exit(130)


@app.command()
def prune(
    parent: Path = typer.Argument(..., help="Directory whose subdirectories are removed."),
    list_dirs: bool = typer.Option(False, "--list-dirs", help="List every removed directory."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Simulate without making changes."),
    log_file: Optional[Path] = typer.Option(None, "--log-file", "-l", help="Path for log file output."),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose output."),
) -> None:
    """
    Remove every subdirectory of PARENT. Files directly in PARENT are kept.
    """
    configure_logging(verbose)
    validate_directory(parent, "Parent directory")

    tui = TreeTUI(console)

    if not dry_run and not yes and not tui.confirm_prune(str(parent)):
        console.print("[yellow]Prune cancelled.[/yellow]")
        raise typer.Exit(0)

    oplog = open_operation_logger(log_file, "PRUNE", dry_run)
    start = time.monotonic()

    try:
        with oplog if oplog is not None else nullcontext():
            if oplog is not None:
                oplog.log_header(parent=parent)

            pruner = SubtreePruner(dry_run=dry_run, operation_logger=oplog)
            removed = pruner.prune_subdirectories(str(parent), return_deleted_list=True)

            if oplog is not None:
                oplog.log_prune_summary(removed, time.monotonic() - start)

    except KeyboardInterrupt:
        console.print("\n[yellow]Prune interrupted by user.[/yellow]")
        raise typer.Exit(130)

    except TreeOperationError as e:
        tui.display_fatal(str(e))
        if e.result:
            tui.display_directory_list(e.result, title="Removed Before Failure")
        raise typer.Exit(1)

    except (DirTreeError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    tui.display_prune_summary(str(parent), removed, dry_run, show_list=list_dirs)


@app.command()
def profile(
    path: Path = typer.Argument(..., help="Directory to profile."),
    tree: bool = typer.Option(False, "--tree", help="Profile the whole tree beneath PATH."),
    skip_root: bool = typer.Option(False, "--skip-root", help="With --tree, do not count files directly in PATH."),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose output."),
) -> None:
    """
    Count the subdirectories and files of a directory by kind.
    """
    configure_logging(verbose)

    tui = TreeTUI(console)
    scanner = DirectoryScanner()

    try:
        handle = PathResolver().resolve_directory(str(path))
        if tree:
            result = scanner.profile_tree(handle, include_root=not skip_root)
        else:
            result = scanner.profile_directory(handle)
    except (DirTreeError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    tui.display_profile(result, title="Tree Profile" if tree else "Directory Profile")

    if not result.exists or result.errors:
        raise typer.Exit(1)


@app.command("list")
def list_command(
    path: Path = typer.Argument(..., help="Root of the tree to list."),
    skip_root: bool = typer.Option(False, "--skip-root", help="Do not list files directly in PATH."),
    patterns: Optional[List[str]] = typer.Option(
        None, "--pattern", "-p", help="File name glob; repeat for several."
    ),
    regex: Optional[str] = typer.Option(None, "--regex", help="Regular expression searched in file names."),
    older_than: Optional[datetime] = typer.Option(
        None, "--older-than", formats=DATE_FORMATS, help="Select files modified before this time."
    ),
    newer_than: Optional[datetime] = typer.Option(
        None, "--newer-than", formats=DATE_FORMATS, help="Select files modified after this time."
    ),
    mode: Optional[str] = typer.Option(None, "--mode", help="Select files with this octal mode."),
    or_mode: bool = typer.Option(False, "--or", help="Select files matching ANY criterion."),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose output."),
) -> None:
    """
    List the selected files of a directory tree without changing anything.
    """
    configure_logging(verbose)
    validate_directory(path, "Directory")
    criteria = build_criteria(patterns, regex, older_than, newer_than, mode, or_mode)

    tui = TreeTUI(console)

    try:
        root = PathResolver().resolve_directory(str(path))
        files = DirectoryScanner().list_tree_files(root, include_root=not skip_root, criteria=criteria)
    except (DirTreeError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    tui.display_file_list(files, title="Selected Files")
    console.print(f"[dim]{files.total_bytes():,} bytes in {len(files):,} files[/dim]")


if __name__ == "__main__":
    app()
