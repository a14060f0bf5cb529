"""Directory listing, tree discovery and profiling.

This module provides the DirectoryScanner class, the only component which
reads directory contents. Every higher level operation (copy, delete, prune,
profile) lists directories through it.

Entries are classified with lstat: a symbolic link is always a symlink file,
even when it points at a directory, so symlinked directories are never
descended into.

Example:
    >>> from dirtree.scanning import DirectoryScanner, PathResolver
    >>> scanner = DirectoryScanner()
    >>> root = PathResolver().resolve_directory("/data/photos")
    >>> discovery = scanner.discover(root, include_root=True)
    >>> print(f"{discovery.total_sub_dirs} subdirectories")
"""

import logging
import os
from typing import List, Optional

from dirtree.exceptions import (
    CollectionEmptyError,
    CollectionIndexError,
    FileTypeMaskError,
    TreeDiscoveryError,
)
from dirtree.matching.file_selector import FileSelector
from dirtree.models import (
    DirectoryCollection,
    DirectoryHandle,
    DirectoryListing,
    DirectoryProfile,
    DiscoveryResult,
    FileClass,
    FileCollection,
    FileTypeMask,
    SelectionCriteria,
    StatsAggregator,
)
from .path_resolver import PathResolver, classify_mode

logger = logging.getLogger('dirtree_scan')


class DirectoryScanner:
    """Lists directories, discovers trees and builds directory profiles.

    Attributes:
        _resolver: PathResolver used to build child handles.
        _selector: FileSelector applied to optional criteria.
        _errors: Entry-level errors recorded since the last discover call.

    Example:
        >>> scanner = DirectoryScanner()
        >>> listing = scanner.list_entries(handle, want_subdirs=True,
        ...     want_regular=True, want_symlink=False, want_other=False)
        >>> [f.name for f in listing.files]
        ['a.txt', 'b.txt']
    """

    def __init__(
        self,
        resolver: Optional[PathResolver] = None,
        selector: Optional[FileSelector] = None,
    ) -> None:
        self._resolver = resolver if resolver is not None else PathResolver()
        self._selector = selector if selector is not None else FileSelector()
        self._errors: List[str] = []

    def list_entries(
        self,
        directory: DirectoryHandle,
        want_subdirs: bool,
        want_regular: bool,
        want_symlink: bool,
        want_other: bool,
        dir_criteria: Optional[SelectionCriteria] = None,
        file_criteria: Optional[SelectionCriteria] = None,
    ) -> DirectoryListing:
        """List the entries of one directory, filtered by kind and criteria.

        Args:
            directory: Directory to list.
            want_subdirs: Return subdirectories.
            want_regular: Return regular files.
            want_symlink: Return symbolic links.
            want_other: Return pipes, sockets and devices.
            dir_criteria: Optional criteria applied to subdirectory names,
                modification times and modes.
            file_criteria: Optional criteria applied to files.

        Returns:
            DirectoryListing with entries sorted by name.

        Raises:
            FileTypeMaskError: If every want_* flag is False.
            OSError: If the directory itself cannot be listed.
        """
        if not (want_subdirs or want_regular or want_symlink or want_other):
            raise FileTypeMaskError(
                f"No entry kinds requested while listing {directory.path_str}: "
                "subdirectories, regular, symlink and other files are all disabled."
            )

        listing = DirectoryListing(directory=directory)
        wanted = {
            FileClass.REGULAR: want_regular,
            FileClass.SYMLINK: want_symlink,
            FileClass.OTHER: want_other,
        }

        with os.scandir(directory.path_str) as it:
            entries = sorted(it, key=lambda e: e.name)

        for entry in entries:
            try:
                st = entry.stat(follow_symlinks=False)
            except PermissionError as e:
                self._record(listing, f"Permission denied: {entry.path} - {e}")
                continue
            except OSError as e:
                self._record(listing, f"Error accessing {entry.path}: {e}")
                continue

            file_class = classify_mode(st.st_mode)

            if file_class == FileClass.DIRECTORY:
                if not want_subdirs:
                    continue
                if dir_criteria is not None and dir_criteria.is_active():
                    entry_handle = self._resolver.file_handle_from_stat(
                        self._resolver.normalize(entry.path), directory, st
                    )
                    if not self._selector.matches(entry_handle, dir_criteria):
                        continue
                try:
                    listing.subdirectories.add(
                        self._resolver.child_directory(directory, entry.name)
                    )
                except ValueError as e:
                    self._record(listing, f"Invalid subdirectory {entry.path} - {e}")
                continue

            if not wanted[file_class]:
                continue

            handle = self._resolver.file_handle_from_stat(
                self._resolver.normalize(entry.path), directory, st
            )

            if file_criteria is not None and not self._selector.matches(handle, file_criteria):
                continue

            listing.files.add(handle)

        return listing

    def discover(self, root: DirectoryHandle, include_root: bool) -> DiscoveryResult:
        """Find every subdirectory beneath root, breadth first.

        The queue is walked with an index cursor: each directory is peeked at
        the cursor position and its subdirectories are appended to the end,
        so the walk ends when the cursor passes the last element.

        Entries whose metadata cannot be read are skipped; their messages are
        returned in DiscoveryResult.errors, and those found in root itself
        also in DiscoveryResult.root_errors. The scanner's own error list is
        reset at the start of each discovery.

        Args:
            root: Root of the tree.
            include_root: Place root itself at the head of the returned queue.

        Returns:
            DiscoveryResult. total_sub_dirs never counts root.

        Raises:
            TreeDiscoveryError: If root is missing or any directory of the
                tree cannot be listed.
        """
        if not root.exists:
            raise TreeDiscoveryError(f"Directory tree root does not exist: {root.path_str}")

        if not os.path.isdir(root.path_str):
            raise TreeDiscoveryError(f"Directory tree root is not a directory: {root.path_str}")

        self.clear_errors()
        queue = DirectoryCollection()
        queue.add(root)
        errors: List[str] = []
        root_errors: List[str] = []
        cursor = 0

        while True:
            try:
                current = queue.peek_at(cursor)
            except (CollectionIndexError, CollectionEmptyError):
                break

            try:
                listing = self.list_entries(
                    current,
                    want_subdirs=True,
                    want_regular=False,
                    want_symlink=False,
                    want_other=False,
                )
            except OSError as e:
                raise TreeDiscoveryError(
                    f"Error listing directory {current.path_str} during discovery: {e}"
                ) from e

            queue.add_all(listing.subdirectories)
            errors.extend(listing.errors)
            if cursor == 0:
                root_errors.extend(listing.errors)
            cursor += 1

        total_sub_dirs = len(queue) - 1

        if not include_root:
            queue.pop_first()

        logger.debug(f"Discovered {total_sub_dirs} subdirectories beneath {root.path_str}")

        return DiscoveryResult(
            root=root,
            directories=queue,
            total_sub_dirs=total_sub_dirs,
            root_included=include_root,
            errors=errors,
            root_errors=root_errors,
        )

    def profile_directory(
        self,
        directory: DirectoryHandle,
        criteria: Optional[SelectionCriteria] = None,
    ) -> DirectoryProfile:
        """Count the entries of a single directory by kind.

        Subdirectories are always counted. When criteria are given, only
        selected files contribute to the file counters.

        Args:
            directory: Directory to profile. A missing directory yields a
                profile with exists=False and zero counters.
            criteria: Optional file selection criteria.

        Raises:
            OSError: If an existing directory cannot be listed.
        """
        profile = DirectoryProfile(
            absolute_path=directory.path_str,
            exists=os.path.isdir(directory.path_str),
            parent_dir_included=True,
        )

        if not profile.exists:
            return profile

        listing = self.list_entries(
            directory,
            want_subdirs=True,
            want_regular=True,
            want_symlink=True,
            want_other=True,
            file_criteria=criteria,
        )
        profile.errors.extend(listing.errors)

        for subdir in listing.subdirectories:
            profile.sub_directories += 1
            try:
                profile.sub_directory_bytes += os.lstat(subdir.path_str).st_size
            except OSError as e:
                profile.errors.append(f"Error accessing {subdir.path_str}: {e}")

        for handle in listing.files:
            profile.total_files += 1
            profile.total_file_bytes += handle.size

            if handle.file_class == FileClass.REGULAR:
                profile.regular_files += 1
                profile.regular_file_bytes += handle.size
            elif handle.file_class == FileClass.SYMLINK:
                profile.symlink_files += 1
                profile.symlink_file_bytes += handle.size
            else:
                profile.non_regular_files += 1
                profile.non_regular_file_bytes += handle.size

        if not profile.is_consistent():
            profile.errors.append(
                f"Profile of {directory.path_str} is inconsistent: total files "
                f"{profile.total_files} != regular {profile.regular_files} + "
                f"symlink {profile.symlink_files} + other {profile.non_regular_files}"
            )

        return profile

    def profile_tree(
        self,
        root: DirectoryHandle,
        include_root: bool = True,
        criteria: Optional[SelectionCriteria] = None,
    ) -> DirectoryProfile:
        """Profile every directory of a tree and sum the results.

        Args:
            root: Root of the tree. A missing root yields exists=False.
            include_root: Count root's own entries.
            criteria: Optional file selection criteria.

        Raises:
            TreeDiscoveryError: If the tree cannot be discovered.
            OSError: If a discovered directory cannot be listed.
        """
        total = DirectoryProfile(
            absolute_path=root.path_str,
            exists=os.path.isdir(root.path_str),
            parent_dir_included=include_root,
        )

        if not total.exists:
            return total

        discovery = self.discover(root, include_root)
        total.errors.extend(discovery.unlisted_errors())

        partials = (self.profile_directory(d, criteria) for d in discovery.directories)
        return StatsAggregator.fold(total, partials)

    def list_tree_files(
        self,
        root: DirectoryHandle,
        include_root: bool = True,
        mask: Optional[FileTypeMask] = None,
        criteria: Optional[SelectionCriteria] = None,
    ) -> FileCollection:
        """Collect every selected file in a directory tree.

        Args:
            root: Root of the tree.
            include_root: Include files residing directly in root.
            mask: File kinds to return. Defaults to every kind.
            criteria: Optional file selection criteria.

        Returns:
            FileCollection in discovery order, sorted by name within each
            directory.

        Raises:
            FileTypeMaskError: If mask excludes every kind of file.
            TreeDiscoveryError: If the tree cannot be discovered.
        """
        mask = mask if mask is not None else FileTypeMask()
        mask.validate()

        discovery = self.discover(root, include_root)
        files = FileCollection()

        for directory in discovery.directories:
            try:
                listing = self.list_entries(
                    directory,
                    want_subdirs=False,
                    want_regular=mask.regular,
                    want_symlink=mask.symlink,
                    want_other=mask.other_non_regular,
                    file_criteria=criteria,
                )
            except OSError as e:
                raise TreeDiscoveryError(
                    f"Error listing directory {directory.path_str}: {e}"
                ) from e
            files.add_all(listing.files)

        return files

    def get_errors(self) -> List[str]:
        """Get list of entry-level errors recorded since the last discovery.

        Returns:
            List of error message strings.
        """
        return self._errors.copy()

    def clear_errors(self) -> None:
        """Clear the list of accumulated errors."""
        self._errors.clear()

    def _record(self, listing: DirectoryListing, message: str) -> None:
        logger.warning(message)
        listing.errors.append(message)
        self._errors.append(message)
