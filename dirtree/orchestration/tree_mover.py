"""TreeMoveEngine for moving directory trees.

A move is a full copy followed by removal of the source. Every file of the
source tree is copied, empty directories included; the source is removed
only when the copy finished with no errors and every file was copied.

With include_root=False only the subdirectories of the source are moved:
files residing directly in the source root are neither copied nor removed,
and the source root itself is kept.

Example:
    from dirtree.orchestration import TreeMoveEngine

    result = TreeMoveEngine().move_tree("/data/incoming", "/archive/2024")
    print(result.stats.source_files_moved, result.stats.source_dir_was_deleted)
"""

import logging
import os
from typing import Callable, Optional, Union

from dirtree.exceptions import PathValidationError, TreeOperationError
from dirtree.models import (
    DirectoryHandle,
    DirectoryMoveStats,
    TreeCopyResult,
    TreeMoveResult,
)
from dirtree.operations import FileOperations
from dirtree.orchestration.operation_logger import OperationLogger
from dirtree.orchestration.subtree_pruner import SubtreePruner
from dirtree.orchestration.tree_copier import TreeCopyEngine
from dirtree.scanning import DirectoryScanner, PathResolver

logger = logging.getLogger('dirtree_tree')


class TreeMoveEngine:
    """Moves a directory tree, or the subdirectories of one, to a new root.

    The source is never removed after a partial copy. Any copy error, any
    file left uncopied, or a cancellation leaves the source in place; the
    files already copied to the target are not rolled back.

    Attributes:
        dry_run: Compute statistics without changing the filesystem.
        should_cancel: Optional callable polled once per copied directory.
        progress_callback: Optional callable receiving (index, total, directory).
        operation_logger: Optional OperationLogger receiving per-directory results.
    """

    def __init__(
        self,
        file_operations: Optional[FileOperations] = None,
        scanner: Optional[DirectoryScanner] = None,
        resolver: Optional[PathResolver] = None,
        dry_run: bool = False,
        should_cancel: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[int, int, DirectoryHandle], None]] = None,
        operation_logger: Optional[OperationLogger] = None,
    ) -> None:
        self.dry_run = dry_run
        self._resolver = resolver if resolver is not None else PathResolver()
        self._scanner = scanner if scanner is not None else DirectoryScanner(resolver=self._resolver)
        self._file_operations = (
            file_operations
            if file_operations is not None
            else FileOperations(scanner=self._scanner, dry_run=dry_run)
        )
        self.should_cancel = should_cancel
        self.progress_callback = progress_callback
        self.operation_logger = operation_logger

    def move_tree(
        self,
        source_root: Union[str, DirectoryHandle],
        target_root: Union[str, DirectoryHandle],
        include_root: bool = True,
    ) -> TreeMoveResult:
        """Copy every file of the source tree to the target, then remove the source.

        Args:
            source_root: Root of the tree to move; must exist.
            target_root: Root of the destination tree; created on demand.
                Must not be source_root or lie beneath it.
            include_root: Move the whole tree and remove source_root. When
                False only the subdirectories of source_root are moved and
                removed.

        Returns:
            TreeMoveResult. stats.source_dir_was_deleted is False only when
            the copy was cancelled.

        Raises:
            PathValidationError: If source_root does not exist or target_root
                lies inside it.
            TreeDiscoveryError: If the source tree cannot be discovered.
            TreeOperationError: If the copy aborted, left files or errors
                behind, or the source could not be removed. .result holds
                the partial TreeMoveResult; the source is kept in the first
                two cases.
        """
        source = self._as_handle(source_root)
        if not source.exists:
            raise PathValidationError(f"Source directory does not exist: {source.path_str}")
        target = self._as_handle(target_root)

        if self._is_within(target.path_str, source.path_str):
            raise PathValidationError(
                f"Target directory {target.path_str} lies inside source directory {source.path_str}"
            )

        result = TreeMoveResult()
        copy_engine = TreeCopyEngine(
            file_operations=self._file_operations,
            scanner=self._scanner,
            resolver=self._resolver,
            dry_run=self.dry_run,
            should_cancel=self.should_cancel,
            progress_callback=self.progress_callback,
            operation_logger=self.operation_logger,
        )

        logger.info(f"Moving {source.path_str} to {target.path_str}")

        try:
            copy_result = copy_engine.copy_tree(
                source,
                target,
                include_root=include_root,
                create_empty_targets=True,
            )
        except TreeOperationError as e:
            if isinstance(e.result, TreeCopyResult):
                result.copy_result = e.result
                self._record_copy(result.stats, e.result)
            result.stats.errors.append(f"Source directory was not removed: {source.path_str}")
            raise TreeOperationError(
                f"Move aborted while copying {source.path_str}: {e}", result=result
            ) from e

        result.copy_result = copy_result
        self._record_copy(result.stats, copy_result)

        if copy_result.interrupted:
            logger.warning(f"Move cancelled; source directory kept: {source.path_str}")
            result.interrupted = True
            return result

        if copy_result.errors or result.stats.source_files_remaining:
            error_msg = (
                f"{result.stats.source_files_remaining} files were not copied and "
                f"{len(copy_result.errors)} errors occurred; "
                f"source directory was not removed: {source.path_str}"
            )
            logger.error(error_msg)
            result.stats.errors.append(error_msg)
            raise TreeOperationError(f"Move incomplete: {error_msg}", result=result)

        if include_root:
            self._remove_source_tree(source, result)
        else:
            self._remove_source_subdirectories(source, result)

        result.stats.source_dir_was_deleted = True
        result.stats.source_files_moved = copy_result.stats.files_copied
        result.stats.source_file_bytes_moved = copy_result.stats.file_bytes_copied

        logger.info(
            f"Moved {result.stats.source_files_moved} files from {source.path_str} "
            f"to {target.path_str}"
        )

        return result

    def _record_copy(self, stats: DirectoryMoveStats, copy_result: TreeCopyResult) -> None:
        copy_stats = copy_result.stats
        stats.total_src_files_processed = copy_stats.files_processed
        stats.source_files_remaining = copy_stats.files_not_copied
        stats.source_file_bytes_remaining = copy_stats.file_bytes_not_copied
        stats.total_dirs_processed = copy_stats.dirs_scanned
        stats.dirs_created = copy_stats.dirs_created
        stats.num_of_sub_directories = copy_stats.sub_dirs_discovered
        stats.errors.extend(copy_stats.errors)

    def _remove_source_tree(self, source: DirectoryHandle, result: TreeMoveResult) -> None:
        try:
            self._file_operations.remove_all(source)
        except OSError as e:
            error_msg = f"Files were copied but the source tree could not be removed: {source.path_str} - {e}"
            logger.critical(error_msg)
            result.stats.errors.append(error_msg)
            raise TreeOperationError(error_msg, result=result) from e

        if self.operation_logger is not None:
            self.operation_logger.log_directory_removed(source)

    def _remove_source_subdirectories(self, source: DirectoryHandle, result: TreeMoveResult) -> None:
        pruner = SubtreePruner(
            file_operations=self._file_operations,
            scanner=self._scanner,
            resolver=self._resolver,
            operation_logger=self.operation_logger,
        )
        try:
            pruner.prune_subdirectories(source)
        except TreeOperationError as e:
            error_msg = f"Files were copied but the source subdirectories could not be removed: {e}"
            result.stats.errors.append(error_msg)
            raise TreeOperationError(error_msg, result=result) from e

    def _as_handle(self, root: Union[str, DirectoryHandle]) -> DirectoryHandle:
        path_str = root.path_str if isinstance(root, DirectoryHandle) else root
        return self._resolver.resolve_directory(path_str)

    @staticmethod
    def _is_within(path: str, root: str) -> bool:
        return path == root or path.startswith(root.rstrip(os.sep) + os.sep)
