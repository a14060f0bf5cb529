"""TreeDeleteEngine for deleting selected files across a directory tree.

Directories are never removed: only files matching the file type mask and
selection criteria are deleted, in place. After the walk a profile of the
remaining tree is computed and returned.

Example:
    from dirtree.orchestration import TreeDeleteEngine
    from dirtree.models import SelectionCriteria

    engine = TreeDeleteEngine()
    result = engine.delete_tree_files(
        "/var/cache/builds",
        criteria=SelectionCriteria(file_name_patterns=["*.o", "*.tmp"]),
    )
    print(result.stats.files_deleted, result.profile.total_files)
"""

import logging
from typing import Callable, Optional, Union

from dirtree.exceptions import (
    CollectionEmptyError,
    CollectionIndexError,
    FatalOperationError,
    PathValidationError,
    TreeOperationError,
)
from dirtree.models import (
    DirectoryHandle,
    FileTypeMask,
    SelectionCriteria,
    StatsAggregator,
    TreeDeleteResult,
    TreeDeleteStats,
)
from dirtree.operations import FileOperations
from dirtree.orchestration.operation_logger import OperationLogger
from dirtree.scanning import DirectoryScanner, PathResolver

logger = logging.getLogger('dirtree_tree')


class TreeDeleteEngine:
    """Deletes selected files from every directory of a tree.

    Unlike a copy, a selected file which cannot be deleted stops the walk:
    the engine raises TreeOperationError with the partial result and no
    profile is computed.

    Attributes:
        dry_run: Compute statistics without deleting anything.
        should_cancel: Optional callable polled once per directory.
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

    def delete_tree_files(
        self,
        target_root: Union[str, DirectoryHandle],
        include_root: bool = True,
        file_type_mask: Optional[FileTypeMask] = None,
        criteria: Optional[SelectionCriteria] = None,
        return_deleted_list: bool = False,
    ) -> TreeDeleteResult:
        """Delete selected files from every directory of the tree.

        Args:
            target_root: Root of the tree; must exist.
            include_root: Delete files residing directly in target_root.
            file_type_mask: File kinds eligible for deletion. Defaults to all.
            criteria: Optional file selection criteria.
            return_deleted_list: Collect handles of every deleted file.

        Returns:
            TreeDeleteResult with merged statistics and the profile of the
            remaining tree.

        Raises:
            FileTypeMaskError: If the mask excludes every kind of file.
            PathValidationError: If target_root does not exist.
            TreeDiscoveryError: If the tree cannot be discovered.
            TreeOperationError: If a directory cannot be listed or a selected
                file cannot be deleted; .result holds the partial result.
        """
        mask = file_type_mask if file_type_mask is not None else FileTypeMask()
        mask.validate()

        path_str = target_root.path_str if isinstance(target_root, DirectoryHandle) else target_root
        root = self._resolver.resolve_directory(path_str)
        if not root.exists:
            raise PathValidationError(f"Target directory does not exist: {root.path_str}")

        discovery = self._scanner.discover(root, include_root)

        if self.operation_logger is not None:
            self.operation_logger.log_discovery(root, discovery.total_sub_dirs, include_root)

        result = TreeDeleteResult(
            stats=TreeDeleteStats(
                sub_dirs_discovered=discovery.total_sub_dirs,
                errors=discovery.unlisted_errors(),
            )
        )
        queue = discovery.directories
        total = len(queue)
        cursor = 0

        logger.info(f"Deleting selected files in {total} directories beneath {root.path_str}")

        while True:
            if self.should_cancel is not None and self.should_cancel():
                logger.warning("Delete cancelled before completion")
                result.interrupted = True
                break

            try:
                directory = queue.peek_at(cursor)
            except (CollectionIndexError, CollectionEmptyError):
                break

            cursor += 1
            if self.progress_callback is not None:
                self.progress_callback(cursor, total, directory)

            try:
                dir_stats, deleted = self._file_operations.delete_files_in_directory(
                    directory,
                    mask,
                    criteria,
                    return_deleted_list=return_deleted_list,
                )
            except FatalOperationError as e:
                if e.stats is not None:
                    result.stats = StatsAggregator.merge(result.stats, e.stats)
                result.stats.deleted_files_documented = len(result.deleted_files)
                if self.operation_logger is not None:
                    self.operation_logger.log_fatal(str(e))
                raise TreeOperationError(
                    f"Delete aborted in {directory.path_str}: {e}", result=result
                ) from e

            result.stats = StatsAggregator.merge(result.stats, dir_stats)

            if return_deleted_list:
                result.deleted_files.add_all(deleted)

            if self.operation_logger is not None:
                self.operation_logger.log_directory_delete(directory, dir_stats)

        result.stats.deleted_files_documented = len(result.deleted_files)
        result.profile = self._scanner.profile_tree(root, include_root=include_root)

        return result
