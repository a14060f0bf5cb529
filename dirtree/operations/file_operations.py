"""
File operations module for dirtree.

This module contains the FileOperations class which copies or deletes the
files of a single directory and recursively removes directories. The tree
engines call it once per directory of a discovered tree.
"""

import errno
import logging
import os
import shutil
import stat
from typing import Optional, Tuple, Union

from dirtree.exceptions import FatalOperationError
from dirtree.matching import FileSelector
from dirtree.models import (
    DeleteDirFilesStats,
    DirectoryCopyStats,
    DirectoryHandle,
    FileClass,
    FileCollection,
    FileHandle,
    FileTypeMask,
    SelectionCriteria,
)
from dirtree.scanning import DirectoryScanner

# Configure module logger
logger = logging.getLogger('dirtree_ops')


class FileOperations:
    """
    Copies and deletes the files of one directory.

    Per-file copy failures are recorded and the directory walk continues.
    Directory-level failures (listing, target creation) and failed deletions
    of selected files raise FatalOperationError. All operations support
    dry-run mode, which computes the same statistics without touching the
    filesystem.
    """

    def __init__(
        self,
        scanner: Optional[DirectoryScanner] = None,
        selector: Optional[FileSelector] = None,
        dry_run: bool = False,
    ) -> None:
        """
        Create a FileOperations instance.

        Parameters:
            scanner (DirectoryScanner): Used to list directory entries.
            selector (FileSelector): Applies selection criteria to files.
            dry_run (bool): If True, simulate operations without making filesystem changes.
        """
        self.selector = selector if selector is not None else FileSelector()
        self.scanner = scanner if scanner is not None else DirectoryScanner(selector=self.selector)
        self.dry_run = dry_run

    def copy_files_in_directory(
        self,
        source: DirectoryHandle,
        target: DirectoryHandle,
        mask: FileTypeMask,
        criteria: Optional[SelectionCriteria] = None,
        create_empty_target: bool = False,
        return_copied_list: bool = False,
    ) -> Tuple[DirectoryCopyStats, FileCollection]:
        """
        Copy the selected files of source into target. Subdirectories are ignored.

        Every non-directory entry is counted as processed. Entries excluded by
        the file type mask or the selection criteria are counted as not
        copied, as are files whose copy fails.

        Parameters:
            source (DirectoryHandle): Directory whose files are copied.
            target (DirectoryHandle): Destination directory; created on demand.
            mask (FileTypeMask): File kinds eligible for copying.
            criteria (SelectionCriteria): Optional selection criteria.
            create_empty_target (bool): Create target even when no file qualifies.
            return_copied_list (bool): Collect handles of the copied source files.

        Returns:
            Tuple of (DirectoryCopyStats, FileCollection of copied files).

        Raises:
            FileTypeMaskError: If mask excludes every kind of file.
            FatalOperationError: If source cannot be listed, target cannot be
                created, or the disk is full.
        """
        mask.validate()

        stats = DirectoryCopyStats()
        copied = FileCollection()

        try:
            listing = self.scanner.list_entries(
                source,
                want_subdirs=False,
                want_regular=True,
                want_symlink=True,
                want_other=True,
            )
        except OSError as e:
            error_msg = f"Error listing source directory {source.path_str}: {e}"
            logger.critical(error_msg)
            raise FatalOperationError(error_msg, stats=stats) from e

        stats.errors.extend(listing.errors)

        target_ready = False
        if create_empty_target:
            self._ensure_target(target, stats)
            target_ready = True

        for handle in listing.files:
            stats.files_processed += 1

            if not mask.allows(handle.file_class):
                stats.files_not_copied += 1
                stats.file_bytes_not_copied += handle.size
                logger.debug(f"Excluded by type: {handle.absolute_path}")
                continue

            if criteria is not None and not self.selector.matches(handle, criteria):
                stats.files_not_copied += 1
                stats.file_bytes_not_copied += handle.size
                logger.debug(f"Not selected: {handle.absolute_path}")
                continue

            if not target_ready:
                self._ensure_target(target, stats)
                target_ready = True

            dest = target.joinpath(handle.name)

            try:
                self._copy_entry(handle, dest)
            except PermissionError as e:
                self._copy_failed(stats, handle, f"Permission denied: {handle.absolute_path} - {e}")
                continue
            except OSError as e:
                if e.errno == errno.ENOSPC or "No space left on device" in str(e):
                    error_msg = f"Disk full - aborting copy operation: {e}"
                    logger.critical(error_msg)
                    stats.errors.append(error_msg)
                    raise FatalOperationError(error_msg, stats=stats) from e
                self._copy_failed(stats, handle, f"Error copying {handle.absolute_path}: {e}")
                continue

            stats.files_copied += 1
            stats.file_bytes_copied += handle.size
            logger.debug(f"Copied: {handle.absolute_path} -> {dest}")

            if return_copied_list:
                copied.add(handle)

        if target_ready:
            stats.dirs_copied = 1

        logger.info(
            f"Copied {stats.files_copied} of {stats.files_processed} files "
            f"from {source.path_str}"
        )

        return stats, copied

    def delete_files_in_directory(
        self,
        directory: DirectoryHandle,
        mask: FileTypeMask,
        criteria: Optional[SelectionCriteria] = None,
        return_deleted_list: bool = False,
    ) -> Tuple[DeleteDirFilesStats, FileCollection]:
        """
        Delete the selected files of a directory. Subdirectories are never removed.

        Entries excluded by the file type mask are ignored entirely. Eligible
        files which do not match the criteria are counted as remaining.

        Parameters:
            directory (DirectoryHandle): Directory whose files are deleted.
            mask (FileTypeMask): File kinds eligible for deletion.
            criteria (SelectionCriteria): Optional selection criteria.
            return_deleted_list (bool): Collect handles of the deleted files.

        Returns:
            Tuple of (DeleteDirFilesStats, FileCollection of deleted files).

        Raises:
            FileTypeMaskError: If mask excludes every kind of file.
            FatalOperationError: If the directory cannot be listed or a
                selected file cannot be deleted. The exception carries the
                statistics accumulated up to the failure.
        """
        mask.validate()

        stats = DeleteDirFilesStats()
        deleted = FileCollection()

        try:
            listing = self.scanner.list_entries(
                directory,
                want_subdirs=False,
                want_regular=mask.regular,
                want_symlink=mask.symlink,
                want_other=mask.other_non_regular,
            )
        except OSError as e:
            error_msg = f"Error listing directory {directory.path_str}: {e}"
            logger.critical(error_msg)
            raise FatalOperationError(error_msg, stats=stats) from e

        stats.dirs_scanned = 1
        stats.errors.extend(listing.errors)

        for handle in listing.files:
            stats.files_processed += 1

            if criteria is not None and not self.selector.matches(handle, criteria):
                stats.files_remaining += 1
                stats.file_bytes_remaining += handle.size
                continue

            if self.dry_run:
                logger.debug(f"[DRY RUN] Would delete: {handle.absolute_path}")
            else:
                try:
                    os.remove(handle.absolute_path)
                except OSError as e:
                    error_msg = f"Failed to delete selected file {handle.absolute_path} - {e}"
                    logger.critical(error_msg)
                    stats.errors.append(error_msg)
                    raise FatalOperationError(error_msg, stats=stats) from e
                logger.debug(f"Deleted: {handle.absolute_path}")

            stats.files_deleted += 1
            stats.file_bytes_deleted += handle.size
            stats.dirs_where_files_deleted = 1

            if return_deleted_list:
                deleted.add(handle)

        logger.info(
            f"Deleted {stats.files_deleted} of {stats.files_processed} files "
            f"in {directory.path_str}"
        )

        return stats, deleted

    def remove_all(self, directory: Union[DirectoryHandle, str]) -> None:
        """
        Recursively remove a directory and everything beneath it.

        Parameters:
            directory: Directory handle or path string.

        Raises:
            OSError: If any part of the tree cannot be removed.
        """
        path_str = directory.path_str if isinstance(directory, DirectoryHandle) else directory

        if self.dry_run:
            logger.debug(f"[DRY RUN] Would remove directory tree: {path_str}")
            return

        shutil.rmtree(path_str)
        logger.debug(f"Removed directory tree: {path_str}")

    def _ensure_target(self, target: DirectoryHandle, stats: DirectoryCopyStats) -> None:
        """Create the target directory when it does not exist yet."""
        if os.path.isdir(target.path_str):
            return

        if self.dry_run:
            logger.debug(f"[DRY RUN] Would create directory: {target.path_str}")
            stats.dirs_created = 1
            return

        try:
            os.makedirs(target.path_str, exist_ok=True)
        except OSError as e:
            error_msg = f"Failed to create target directory {target.path_str} - {e}"
            logger.critical(error_msg)
            stats.errors.append(error_msg)
            raise FatalOperationError(error_msg, stats=stats) from e

        stats.dirs_created = 1
        logger.debug(f"Created directory: {target.path_str}")

    def _copy_entry(self, handle: FileHandle, dest: str) -> None:
        """
        Copy one file, preserving metadata. Symlinks are copied as links and
        pipes, sockets and devices are recreated as nodes.
        """
        if self.dry_run:
            logger.debug(f"[DRY RUN] Would copy: {handle.absolute_path} -> {dest}")
            return

        if handle.file_class == FileClass.REGULAR:
            # copy2 would write through an existing link at dest
            if os.path.islink(dest):
                os.remove(dest)
            shutil.copy2(handle.absolute_path, dest)
            return

        if os.path.lexists(dest):
            os.remove(dest)

        if handle.file_class == FileClass.SYMLINK:
            shutil.copy2(handle.absolute_path, dest, follow_symlinks=False)
        elif stat.S_ISFIFO(handle.mode):
            os.mkfifo(dest, stat.S_IMODE(handle.mode))
        else:
            os.mknod(dest, handle.mode, os.lstat(handle.absolute_path).st_rdev)

    def _copy_failed(self, stats: DirectoryCopyStats, handle: FileHandle, error_msg: str) -> None:
        logger.warning(error_msg)
        stats.errors.append(error_msg)
        stats.files_not_copied += 1
        stats.file_bytes_not_copied += handle.size
