"""Terminal output for dirtree operations.

This module provides the TreeTUI class, a Rich-based presenter for copy,
delete, move, prune and profile results, destructive-action confirmations and
per-directory progress.

Example:
    from dirtree.ui import TreeTUI

    tui = TreeTUI()
    progress, callback = tui.create_progress_callback("Copying")
    with progress:
        result = TreeCopyEngine(progress_callback=callback).copy_tree(src, dst)
    tui.display_copy_summary(result, dry_run=False, duration_seconds=1.2)
"""

from typing import Callable, List, Optional, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)
from rich.prompt import Confirm
from rich.table import Table

from dirtree.models import (
    DirectoryCollection,
    DirectoryHandle,
    DirectoryProfile,
    FileCollection,
    TreeCopyResult,
    TreeDeleteResult,
    TreeMoveResult,
)


class TreeTUI:
    """Rich-based presenter for tree operations.

    Args:
        console: Optional Rich Console instance for output. Pass a Console
            writing to a StringIO to capture output in tests.

    Attributes:
        console: The Rich Console instance used for all output.
    """

    MAX_ERRORS_DISPLAYED = 10

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def display_copy_summary(
        self, result: TreeCopyResult, dry_run: bool, duration_seconds: float = 0.0
    ) -> None:
        """Display the statistics of a tree copy.

        Args:
            result: Result returned by TreeCopyEngine.copy_tree.
            dry_run: If True, displays a "[DRY RUN]" indicator.
            duration_seconds: Wall time of the operation.
        """
        stats = result.stats
        self._print_header("Copy Summary", dry_run, result.interrupted)

        table = self._metrics_table()
        table.add_row("Directories scanned", f"{stats.dirs_scanned:,}")
        table.add_row("Subdirectories discovered", f"{stats.sub_dirs_discovered:,}")
        table.add_row("Directories copied", f"{stats.dirs_copied:,}")
        table.add_row("Directories created", f"{stats.dirs_created:,}")
        table.add_row("Files processed", f"{stats.files_processed:,}")
        table.add_row(
            "Files copied",
            f"{stats.files_copied:,} ({self._format_size(stats.file_bytes_copied)})",
        )
        table.add_row(
            "Files not copied",
            f"{stats.files_not_copied:,} ({self._format_size(stats.file_bytes_not_copied)})",
        )
        table.add_row("Duration", self._format_duration(duration_seconds))
        self.console.print(table)

        if stats.errors:
            self._display_errors(stats.errors)

    def display_delete_summary(
        self, result: TreeDeleteResult, dry_run: bool, duration_seconds: float = 0.0
    ) -> None:
        """Display the statistics of a tree delete and the remaining tree."""
        stats = result.stats
        self._print_header("Delete Summary", dry_run, result.interrupted)

        table = self._metrics_table()
        table.add_row("Directories scanned", f"{stats.dirs_scanned:,}")
        table.add_row("Directories where files deleted", f"{stats.dirs_where_files_deleted:,}")
        table.add_row("Files processed", f"{stats.files_processed:,}")
        table.add_row(
            "Files deleted",
            f"{stats.files_deleted:,} ({self._format_size(stats.file_bytes_deleted)})",
        )
        table.add_row(
            "Files remaining",
            f"{stats.files_remaining:,} ({self._format_size(stats.file_bytes_remaining)})",
        )
        table.add_row("Duration", self._format_duration(duration_seconds))
        self.console.print(table)

        if result.profile is not None:
            self.display_profile(result.profile, title="Remaining Tree")

        if stats.errors:
            self._display_errors(stats.errors)

    def display_move_summary(
        self, result: TreeMoveResult, dry_run: bool, duration_seconds: float = 0.0
    ) -> None:
        """Display the statistics of a tree move and whether the source was removed."""
        stats = result.stats
        self._print_header("Move Summary", dry_run, result.interrupted)

        table = self._metrics_table()
        table.add_row("Directories processed", f"{stats.total_dirs_processed:,}")
        table.add_row("Directories created", f"{stats.dirs_created:,}")
        table.add_row("Subdirectories moved", f"{stats.num_of_sub_directories:,}")
        table.add_row("Files processed", f"{stats.total_src_files_processed:,}")
        table.add_row(
            "Files moved",
            f"{stats.source_files_moved:,} ({self._format_size(stats.source_file_bytes_moved)})",
        )
        table.add_row(
            "Files remaining in source",
            f"{stats.source_files_remaining:,} ({self._format_size(stats.source_file_bytes_remaining)})",
        )
        table.add_row("Source removed", "yes" if stats.source_dir_was_deleted else "no")
        table.add_row("Duration", self._format_duration(duration_seconds))
        self.console.print(table)

        if stats.errors:
            self._display_errors(stats.errors)

    def display_prune_summary(
        self,
        parent: str,
        removed: Optional[DirectoryCollection],
        dry_run: bool,
        show_list: bool = False,
    ) -> None:
        """Display the number of directories removed beneath parent."""
        self._print_header("Prune Summary", dry_run, False)
        count = len(removed) if removed is not None else 0
        self.console.print(f"Removed [cyan]{count:,}[/cyan] subdirectories of {parent}")

        if show_list and removed:
            self.display_directory_list(removed, title="Removed Directories")

    def display_profile(self, profile: DirectoryProfile, title: str = "Directory Profile") -> None:
        """Display a DirectoryProfile as a table of counts and sizes."""
        if not profile.exists:
            self.console.print(f"[yellow]Directory does not exist: {profile.absolute_path}[/yellow]")
            return

        table = Table(title=f"{title}: {self._truncate_name(profile.absolute_path)}")
        table.add_column("Kind", style="cyan")
        table.add_column("Count", justify="right")
        table.add_column("Size", justify="right")

        table.add_row("Subdirectories", f"{profile.sub_directories:,}",
                      self._format_size(profile.sub_directory_bytes))
        table.add_row("Regular files", f"{profile.regular_files:,}",
                      self._format_size(profile.regular_file_bytes))
        table.add_row("Symlinks", f"{profile.symlink_files:,}",
                      self._format_size(profile.symlink_file_bytes))
        table.add_row("Other files", f"{profile.non_regular_files:,}",
                      self._format_size(profile.non_regular_file_bytes))
        table.add_row("[bold]Total files[/bold]", f"[bold]{profile.total_files:,}[/bold]",
                      f"[bold]{self._format_size(profile.total_file_bytes)}[/bold]")

        if not profile.parent_dir_included:
            table.caption = "Files directly in the root directory are not counted"

        self.console.print(table)

        if profile.errors:
            self._display_errors(profile.errors)

    def display_file_list(self, files: FileCollection, title: str = "Files") -> None:
        table = Table(title=f"{title} ({len(files):,})")
        table.add_column("Path", style="white")
        table.add_column("Size", justify="right")
        table.add_column("Modified", style="dim")

        for handle in files:
            table.add_row(
                str(handle.absolute_path),
                self._format_size(handle.size),
                handle.modified.strftime("%Y-%m-%d %H:%M"),
            )

        self.console.print(table)

    def display_directory_list(self, directories: DirectoryCollection, title: str = "Directories") -> None:
        table = Table(title=f"{title} ({len(directories):,})")
        table.add_column("#", justify="right", style="cyan")
        table.add_column("Path", style="white")

        for idx, directory in enumerate(directories, start=1):
            table.add_row(str(idx), directory.path_str)

        self.console.print(table)

    def display_fatal(self, message: str, partial_errors: Optional[List[str]] = None) -> None:
        """Display a fatal error and any non-fatal errors collected before it."""
        self.console.print(Panel(message, title="Operation Aborted", border_style="red"))
        if partial_errors:
            self._display_errors(partial_errors)

    def confirm_delete(self, target: str, criteria_active: bool) -> bool:
        """Ask before deleting files in a tree.

        Returns:
            True if the user confirms.
        """
        scope = "selected files" if criteria_active else "[bold]ALL[/bold] files"
        text = (
            f"[bold]Target tree:[/bold] {target}\n\n"
            f"[yellow]This will permanently delete {scope} in this tree. "
            f"Directories are kept.[/yellow]"
        )
        self.console.print(Panel(text, title="Delete Confirmation", border_style="yellow"))
        return Confirm.ask("Proceed with delete?", default=False)

    def confirm_prune(self, parent: str) -> bool:
        """Ask before removing every subdirectory of parent."""
        text = (
            f"[bold]Parent directory:[/bold] {parent}\n\n"
            "[yellow]This will permanently remove every subdirectory and all "
            "of its contents.[/yellow]"
        )
        self.console.print(Panel(text, title="Prune Confirmation", border_style="yellow"))
        return Confirm.ask("Proceed with prune?", default=False)

    def confirm_move(self, source: str, target: str, include_root: bool) -> bool:
        """Ask before moving a tree; the source is removed afterwards."""
        removed = "the source directory" if include_root else "every subdirectory of the source"
        text = (
            f"[bold]Source:[/bold] {source}\n"
            f"[bold]Target:[/bold] {target}\n\n"
            f"[yellow]Every file will be copied, then {removed} will be removed.[/yellow]"
        )
        self.console.print(Panel(text, title="Move Confirmation", border_style="yellow"))
        return Confirm.ask("Proceed with move?", default=False)

    def create_progress_callback(
        self, description: str
    ) -> Tuple[Progress, Callable[[int, int, DirectoryHandle], None]]:
        """Create a progress bar and a per-directory callback for the tree engines.

        The caller must use the returned Progress as a context manager.

        Example:
            progress, callback = tui.create_progress_callback("Deleting")
            with progress:
                engine = TreeDeleteEngine(progress_callback=callback)
                engine.delete_tree_files(target)
        """
        progress = Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeRemainingColumn(),
            console=self.console,
        )
        task_id = progress.add_task(f"{description}...", total=None)

        def callback(index: int, total: int, directory: DirectoryHandle) -> None:
            progress.update(
                task_id,
                total=total,
                completed=index,
                description=f"{description} {self._truncate_name(directory.name or directory.path_str, 40)}",
            )

        return progress, callback

    def _print_header(self, title: str, dry_run: bool, interrupted: bool) -> None:
        if dry_run:
            title += " [yellow][DRY RUN][/yellow]"
        if interrupted:
            title += " [red][INTERRUPTED][/red]"
        border = "yellow" if dry_run or interrupted else "green"
        self.console.print(Panel(title, border_style=border))

    def _metrics_table(self) -> Table:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")
        return table

    def _display_errors(self, errors: List[str]) -> None:
        """Display error messages in a separate panel.

        Args:
            errors: List of error messages to display.
        """
        displayed_errors = errors[: self.MAX_ERRORS_DISPLAYED]
        remaining = len(errors) - self.MAX_ERRORS_DISPLAYED

        error_text = "\n".join(f"- {e}" for e in displayed_errors)
        if remaining > 0:
            error_text += f"\n\n... and {remaining} more errors"

        self.console.print(Panel(error_text, title=f"Errors ({len(errors)})", border_style="red"))

    def _format_size(self, bytes_size: int) -> str:
        """Convert bytes to human-readable format (e.g. "10.5 MB")."""
        if bytes_size < 1024:
            return f"{bytes_size} B"
        elif bytes_size < 1024 * 1024:
            return f"{bytes_size / 1024:.1f} KB"
        elif bytes_size < 1024 * 1024 * 1024:
            return f"{bytes_size / (1024 * 1024):.1f} MB"
        else:
            return f"{bytes_size / (1024 * 1024 * 1024):.1f} GB"

    def _format_duration(self, seconds: float) -> str:
        if seconds < 0:
            seconds = 0
        minutes = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{minutes}m {secs}s"

    def _truncate_name(self, name: str, max_length: int = 60) -> str:
        if len(name) > max_length:
            return name[: max_length - 3] + "..."
        return name
