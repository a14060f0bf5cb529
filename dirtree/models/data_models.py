"""
Core data models for dirtree.

This module contains the following dataclasses:
- DirectoryHandle: Canonical, validated representation of a directory path
- FileHandle: Canonical representation of a file and its cached metadata
- SelectionCriteria: File selection criteria (patterns, age, regex, mode)
- FileTypeMask: Which file kinds are eligible for an operation
- DirectoryCopyStats: Results of copying the files of one directory
- TreeCopyStats: Results of copying a directory tree
- DeleteDirFilesStats: Results of deleting the files of one directory
- TreeDeleteStats: Results of deleting files across a directory tree
- DirectoryMoveStats: Results of moving a directory tree
- DirectoryProfile: Point-in-time snapshot of a directory or tree
"""

import os
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Pattern, Union

from dirtree.exceptions import CriteriaError, FileTypeMaskError

from .select_mode import FileClass, SelectCriterionMode


@dataclass(frozen=True)
class DirectoryHandle:
    """Represents a directory path with cached metadata."""
    absolute_path: Path               # Absolute path (symlinks not resolved)
    original_path: str                # Path string supplied by the caller
    parent_path: Path                 # Absolute path of the parent directory
    name: str                         # Leaf directory name
    volume: str                       # Drive or anchor ('/' on POSIX)
    exists: bool                      # Directory existed when the handle was built
    mode: Optional[int] = None        # st_mode when the directory exists
    modified: Optional[datetime] = None  # Modification time when the directory exists

    @property
    def path_str(self) -> str:
        """Absolute path as a string."""
        return str(self.absolute_path)

    def joinpath(self, name: str) -> str:
        """Build the absolute path string of an entry inside this directory."""
        return os.path.join(self.path_str, name)


@dataclass(frozen=True)
class FileHandle:
    """Represents a file with the metadata captured when it was listed."""
    absolute_path: Path               # Absolute path including file name
    name: str                         # File name
    directory: DirectoryHandle        # Owning directory (by value)
    size: int                         # Size in bytes (lstat)
    mode: int                         # st_mode (lstat)
    modified: datetime                # Modification time
    file_class: FileClass             # Regular, symlink or other
    exists: bool = True               # File existed when the handle was built


@dataclass
class SelectionCriteria:
    """File selection criteria.

    A criterion is active only when it is populated. When no criterion is
    active every file is selected, whatever the combination mode.
    """
    file_name_patterns: List[str] = field(default_factory=list)  # Glob patterns
    files_older_than: Optional[datetime] = None   # Select files modified before
    files_newer_than: Optional[datetime] = None   # Select files modified after
    regex: Optional[Union[str, Pattern[str]]] = None  # Searched in the file name
    select_by_file_mode: Optional[int] = None     # Mode or permission bits to match
    select_mode: SelectCriterionMode = SelectCriterionMode.AND_SELECT

    def __post_init__(self) -> None:
        """Compile the regular expression and validate field types.

        Raises:
            CriteriaError: If the regular expression does not compile or the
                file mode is negative.
        """
        if isinstance(self.regex, str):
            if self.regex == "":
                self.regex = None
            else:
                try:
                    self.regex = re.compile(self.regex)
                except re.error as e:
                    raise CriteriaError(f"Invalid regular expression '{self.regex}': {e}")

        if self.select_by_file_mode is not None and self.select_by_file_mode < 0:
            raise CriteriaError(
                f"select_by_file_mode must be non-negative, got {self.select_by_file_mode}"
            )

    @property
    def active_patterns(self) -> List[str]:
        """Non-empty file name patterns."""
        return [p for p in self.file_name_patterns if p]

    def are_patterns_active(self) -> bool:
        return len(self.active_patterns) > 0

    def is_active(self) -> bool:
        """Return True if at least one selection criterion is populated."""
        return (
            self.are_patterns_active()
            or self.files_older_than is not None
            or self.files_newer_than is not None
            or self.regex is not None
            or self.select_by_file_mode is not None
        )


@dataclass(frozen=True)
class FileTypeMask:
    """Three-way filter gating which file kinds are eligible."""
    regular: bool = True              # Regular files
    symlink: bool = True              # Symbolic links
    other_non_regular: bool = True    # Pipes, sockets, devices

    def is_empty(self) -> bool:
        return not (self.regular or self.symlink or self.other_non_regular)

    def validate(self) -> None:
        """Reject a mask which excludes every kind of file.

        Raises:
            FileTypeMaskError: If all three flags are False.
        """
        if self.is_empty():
            raise FileTypeMaskError(
                "File type filters are conflicted: regular, symlink and "
                "other_non_regular are all False, so no file could ever be selected."
            )

    def allows(self, file_class: FileClass) -> bool:
        """Return True if files of the given class pass this mask."""
        if file_class == FileClass.REGULAR:
            return self.regular
        if file_class == FileClass.SYMLINK:
            return self.symlink
        if file_class == FileClass.OTHER:
            return self.other_non_regular
        return False


@dataclass
class DirectoryCopyStats:
    """Results of copying the files of a single directory."""
    dirs_created: int = 0             # Target directories created (0 or 1)
    dirs_copied: int = 0              # Target holds this directory's copy (0 or 1)
    files_processed: int = 0          # Non-directory entries examined
    files_copied: int = 0             # Files copied successfully
    file_bytes_copied: int = 0        # Bytes copied successfully
    files_not_copied: int = 0         # Files excluded or failed
    file_bytes_not_copied: int = 0    # Bytes excluded or failed
    errors: List[str] = field(default_factory=list)  # Non-fatal error messages


@dataclass
class TreeCopyStats:
    """Results of copying a directory tree."""
    dirs_scanned: int = 0             # Directories drained from the queue
    dirs_copied: int = 0              # Directories mirrored onto the target
    dirs_created: int = 0             # Target directories created
    files_processed: int = 0          # Non-directory entries examined
    files_copied: int = 0             # Files copied successfully
    file_bytes_copied: int = 0        # Bytes copied successfully
    files_not_copied: int = 0         # Files excluded or failed
    file_bytes_not_copied: int = 0    # Bytes excluded or failed
    sub_dirs_discovered: int = 0      # Subdirectories found beneath the root
    copied_files_documented: int = 0  # Entries in the returned copied-files list
    errors: List[str] = field(default_factory=list)  # Non-fatal error messages


@dataclass
class DeleteDirFilesStats:
    """Results of deleting files from a single directory."""
    dirs_scanned: int = 0             # Always 1 once the directory is listed
    dirs_where_files_deleted: int = 0  # 1 if at least one file was deleted
    files_processed: int = 0          # Eligible files examined
    files_deleted: int = 0            # Files deleted
    file_bytes_deleted: int = 0       # Bytes deleted
    files_remaining: int = 0          # Eligible files not selected
    file_bytes_remaining: int = 0     # Bytes of eligible files not selected
    errors: List[str] = field(default_factory=list)  # Non-fatal error messages


@dataclass
class TreeDeleteStats:
    """Results of deleting files across a directory tree.

    Directories are never removed by a file delete, so there is no
    directories-deleted counter.
    """
    dirs_scanned: int = 0
    dirs_where_files_deleted: int = 0
    files_processed: int = 0
    files_deleted: int = 0
    file_bytes_deleted: int = 0
    files_remaining: int = 0
    file_bytes_remaining: int = 0
    sub_dirs_discovered: int = 0      # Subdirectories found beneath the root
    deleted_files_documented: int = 0  # Entries in the returned deleted-files list
    errors: List[str] = field(default_factory=list)


@dataclass
class DirectoryMoveStats:
    """Results of moving a directory tree (copy, then remove the source)."""
    total_src_files_processed: int = 0   # Source files examined by the copy
    source_files_moved: int = 0          # Files copied to the target
    source_file_bytes_moved: int = 0
    source_files_remaining: int = 0      # Files left behind in the source
    source_file_bytes_remaining: int = 0
    total_dirs_processed: int = 0        # Source directories drained
    dirs_created: int = 0                # Target directories created
    num_of_sub_directories: int = 0      # Source subdirectories moved
    source_dir_was_deleted: bool = False  # Source tree (or its subdirectories) removed
    errors: List[str] = field(default_factory=list)


@dataclass
class DirectoryProfile:
    """Point-in-time snapshot of a directory or a directory tree."""
    absolute_path: str = ""           # Directory (or tree root) described
    exists: bool = False              # Directory exists on storage
    parent_dir_included: bool = False  # Root's own entries are counted
    total_files: int = 0              # Regular + symlink + other files
    total_file_bytes: int = 0
    sub_directories: int = 0          # Subdirectory entries
    sub_directory_bytes: int = 0
    regular_files: int = 0
    regular_file_bytes: int = 0
    symlink_files: int = 0
    symlink_file_bytes: int = 0
    non_regular_files: int = 0
    non_regular_file_bytes: int = 0
    errors: List[str] = field(default_factory=list)

    def is_consistent(self) -> bool:
        """Return True if the per-class file counts add up to total_files."""
        return self.total_files == (
            self.regular_files + self.symlink_files + self.non_regular_files
        )
