"""TreeCopyEngine for copying directory trees.

The engine discovers every subdirectory of a source tree, then drains the
resulting queue front to back, copying the selected files of each source
directory into the matching directory beneath the target root. Statistics of
each directory are merged into a running total.

Example:
    from dirtree.orchestration import TreeCopyEngine
    from dirtree.models import SelectionCriteria

    engine = TreeCopyEngine()
    result = engine.copy_tree(
        "/data/projects",
        "/backup/projects",
        criteria=SelectionCriteria(file_name_patterns=["*.py"]),
    )
    print(result.stats.files_copied)
"""

import logging
import os
from typing import Callable, Optional, Union

from dirtree.exceptions import (
    CollectionEmptyError,
    FatalOperationError,
    PathValidationError,
    TreeOperationError,
)
from dirtree.models import (
    DirectoryHandle,
    FileTypeMask,
    SelectionCriteria,
    StatsAggregator,
    TreeCopyResult,
    TreeCopyStats,
)
from dirtree.operations import FileOperations
from dirtree.orchestration.operation_logger import OperationLogger
from dirtree.scanning import DirectoryScanner, PathResolver

logger = logging.getLogger('dirtree_tree')

ProgressCallback = Callable[[int, int, DirectoryHandle], None]


class TreeCopyEngine:
    """Copies the files of a directory tree into a mirrored target tree.

    A file that fails to copy is recorded in the result's error list and the
    walk continues. Anything that stops the walk (a directory that cannot be
    listed or created, a full disk) raises TreeOperationError carrying the
    partial result. Completed work is never rolled back.

    Attributes:
        dry_run: Compute statistics without changing the filesystem.
        should_cancel: Optional callable polled once per directory; when it
            returns True the drain stops and the result is marked interrupted.
        progress_callback: Optional callable receiving (index, total, directory)
            before each directory is processed.
        operation_logger: Optional OperationLogger receiving per-directory results.
    """

    def __init__(
        self,
        file_operations: Optional[FileOperations] = None,
        scanner: Optional[DirectoryScanner] = None,
        resolver: Optional[PathResolver] = None,
        dry_run: bool = False,
        should_cancel: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[ProgressCallback] = None,
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

    def copy_tree(
        self,
        source_root: Union[str, DirectoryHandle],
        target_root: Union[str, DirectoryHandle],
        include_root: bool = True,
        create_empty_targets: bool = False,
        file_type_mask: Optional[FileTypeMask] = None,
        criteria: Optional[SelectionCriteria] = None,
        return_copied_list: bool = False,
    ) -> TreeCopyResult:
        """Copy selected files from every directory of the source tree.

        Args:
            source_root: Root of the tree to copy; must exist.
            target_root: Root of the mirrored tree; created on demand.
            include_root: Copy the files residing directly in source_root.
            create_empty_targets: Create target directories even when no file
                in the source directory qualifies.
            file_type_mask: File kinds eligible for copying. Defaults to all.
            criteria: Optional file selection criteria.
            return_copied_list: Collect handles of every copied source file.

        Returns:
            TreeCopyResult with merged statistics and non-fatal errors.

        Raises:
            FileTypeMaskError: If the mask excludes every kind of file. Raised
                before the filesystem is touched.
            PathValidationError: If source_root does not exist or either root
                is not a valid directory path.
            TreeDiscoveryError: If the source tree cannot be discovered.
            TreeOperationError: If the walk aborts; .result holds the partial
                TreeCopyResult.
        """
        mask = file_type_mask if file_type_mask is not None else FileTypeMask()
        mask.validate()

        source = self._as_handle(source_root)
        if not source.exists:
            raise PathValidationError(f"Source directory does not exist: {source.path_str}")
        target = self._as_handle(target_root)

        discovery = self._scanner.discover(source, include_root)

        if self.operation_logger is not None:
            self.operation_logger.log_discovery(source, discovery.total_sub_dirs, include_root)

        result = TreeCopyResult(
            stats=TreeCopyStats(
                sub_dirs_discovered=discovery.total_sub_dirs,
                errors=discovery.unlisted_errors(),
            )
        )
        queue = discovery.directories
        total = len(queue)
        source_prefix_len = len(source.path_str)
        index = 0

        logger.info(
            f"Copying {total} directories from {source.path_str} to {target.path_str}"
        )

        while True:
            if self.should_cancel is not None and self.should_cancel():
                logger.warning("Copy cancelled before completion")
                result.interrupted = True
                break

            try:
                directory = queue.pop_first()
            except CollectionEmptyError:
                break

            index += 1
            if self.progress_callback is not None:
                self.progress_callback(index, total, directory)

            target_dir = self._target_for(target, directory, source_prefix_len, result)

            try:
                dir_stats, copied = self._file_operations.copy_files_in_directory(
                    directory,
                    target_dir,
                    mask,
                    criteria,
                    create_empty_target=create_empty_targets,
                    return_copied_list=return_copied_list,
                )
            except FatalOperationError as e:
                if e.stats is not None:
                    result.stats = StatsAggregator.merge(result.stats, e.stats)
                result.stats.dirs_scanned += 1
                self._finish(result)
                if self.operation_logger is not None:
                    self.operation_logger.log_fatal(str(e))
                raise TreeOperationError(
                    f"Copy aborted in {directory.path_str}: {e}", result=result
                ) from e

            result.stats = StatsAggregator.merge(result.stats, dir_stats)
            result.stats.dirs_scanned += 1

            if return_copied_list:
                result.copied_files.add_all(copied)

            if self.operation_logger is not None:
                self.operation_logger.log_directory_copy(directory, target_dir, dir_stats)

        self._finish(result)
        return result

    def _as_handle(self, root: Union[str, DirectoryHandle]) -> DirectoryHandle:
        if isinstance(root, DirectoryHandle):
            return self._resolver.resolve_directory(root.path_str)
        return self._resolver.resolve_directory(root)

    def _target_for(
        self,
        target: DirectoryHandle,
        directory: DirectoryHandle,
        source_prefix_len: int,
        result: TreeCopyResult,
    ) -> DirectoryHandle:
        """Mirror a source directory beneath the target root.

        The source root prefix is removed from the directory's absolute path
        by length and the remainder appended to the target root path.
        """
        relative = directory.path_str[source_prefix_len:]
        if relative and not relative.startswith(os.sep):
            relative = os.sep + relative

        target_path = target.path_str.rstrip(os.sep) + relative if relative else target.path_str

        try:
            return self._resolver.resolve_directory(target_path)
        except PathValidationError as e:
            self._finish(result)
            raise TreeOperationError(
                f"Cannot build target path for {directory.path_str}: {e}", result=result
            ) from e

    def _finish(self, result: TreeCopyResult) -> None:
        result.stats.copied_files_documented = len(result.copied_files)
