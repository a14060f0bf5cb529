"""SubtreePruner for removing every subdirectory of a parent directory.

The parent directory and the files residing directly in it are left intact;
each immediate child directory is removed recursively, along with everything
beneath it.
"""

import logging
from typing import Optional, Union

from dirtree.exceptions import PathValidationError, TreeOperationError
from dirtree.models import DirectoryCollection, DirectoryHandle
from dirtree.operations import FileOperations
from dirtree.orchestration.operation_logger import OperationLogger
from dirtree.scanning import DirectoryScanner, PathResolver

logger = logging.getLogger('dirtree_tree')


class SubtreePruner:
    """Removes the immediate subdirectories of a parent directory.

    Symbolic links to directories are files, not subdirectories, and are
    left in place.

    Example:
        >>> pruner = SubtreePruner()
        >>> removed = pruner.prune_subdirectories("/tmp/build", return_deleted_list=True)
        >>> removed.absolute_paths()
        ['/tmp/build/lib', '/tmp/build/obj']
    """

    def __init__(
        self,
        file_operations: Optional[FileOperations] = None,
        scanner: Optional[DirectoryScanner] = None,
        resolver: Optional[PathResolver] = None,
        dry_run: bool = False,
        operation_logger: Optional[OperationLogger] = None,
    ) -> None:
        self._resolver = resolver if resolver is not None else PathResolver()
        self._scanner = scanner if scanner is not None else DirectoryScanner(resolver=self._resolver)
        self._file_operations = (
            file_operations
            if file_operations is not None
            else FileOperations(scanner=self._scanner, dry_run=dry_run)
        )
        self.operation_logger = operation_logger

    def prune_subdirectories(
        self,
        parent: Union[str, DirectoryHandle],
        return_deleted_list: bool = False,
    ) -> Optional[DirectoryCollection]:
        """Remove every immediate subdirectory of parent.

        Removal stops at the first subdirectory that cannot be removed.

        Args:
            parent: Parent directory; must exist.
            return_deleted_list: Return the handles of removed directories.

        Returns:
            DirectoryCollection of removed directories when
            return_deleted_list is True, otherwise None.

        Raises:
            PathValidationError: If parent does not exist.
            TreeOperationError: If a subdirectory cannot be listed or removed;
                .result holds the DirectoryCollection removed so far.
        """
        path_str = parent.path_str if isinstance(parent, DirectoryHandle) else parent
        parent_handle = self._resolver.resolve_directory(path_str)
        if not parent_handle.exists:
            raise PathValidationError(f"Parent directory does not exist: {parent_handle.path_str}")

        removed = DirectoryCollection()

        try:
            listing = self._scanner.list_entries(
                parent_handle,
                want_subdirs=True,
                want_regular=False,
                want_symlink=False,
                want_other=False,
            )
        except OSError as e:
            raise TreeOperationError(
                f"Cannot list subdirectories of {parent_handle.path_str}: {e}", result=removed
            ) from e

        for subdir in listing.subdirectories:
            try:
                self._file_operations.remove_all(subdir)
            except OSError as e:
                logger.critical(f"Failed to remove directory {subdir.path_str} - {e}")
                raise TreeOperationError(
                    f"Failed to remove directory {subdir.path_str} - {e}", result=removed
                ) from e

            removed.add(subdir)
            if self.operation_logger is not None:
                self.operation_logger.log_directory_removed(subdir)

        logger.info(f"Removed {len(removed)} subdirectories of {parent_handle.path_str}")

        return removed if return_deleted_list else None
