"""
Result containers returned by scanning and tree operations.

- DirectoryListing: Entries of one directory split into subdirectories and files
- DiscoveryResult: Discovery-ordered queue of every subdirectory of a root
- TreeCopyResult: Statistics and copied files of a tree copy
- TreeDeleteResult: Statistics, deleted files and post-delete profile of a tree delete
- TreeMoveResult: Move statistics plus the underlying copy result
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .collections import DirectoryCollection, FileCollection
from .data_models import (
    DirectoryHandle,
    DirectoryMoveStats,
    DirectoryProfile,
    TreeCopyStats,
    TreeDeleteStats,
)


@dataclass
class DirectoryListing:
    """Entries of a single directory."""
    directory: DirectoryHandle
    subdirectories: DirectoryCollection = field(default_factory=DirectoryCollection)
    files: FileCollection = field(default_factory=FileCollection)
    errors: List[str] = field(default_factory=list)  # Entries that could not be read


@dataclass
class DiscoveryResult:
    """Every transitive subdirectory of a root, in discovery order."""
    root: DirectoryHandle
    directories: DirectoryCollection  # Queue; root first when included
    total_sub_dirs: int               # Subdirectories beneath root (root never counted)
    root_included: bool = False
    errors: List[str] = field(default_factory=list)  # Entries skipped during the walk
    root_errors: List[str] = field(default_factory=list)  # Subset found in root itself

    def unlisted_errors(self) -> List[str]:
        """Errors a drain of this queue will not report again.

        Every queued directory is listed again by the drain, which records
        its unreadable entries itself; only a skipped root is never re-listed.
        """
        return [] if self.root_included else list(self.root_errors)


@dataclass
class TreeCopyResult:
    """Outcome of TreeCopyEngine.copy_tree."""
    stats: TreeCopyStats = field(default_factory=TreeCopyStats)
    copied_files: FileCollection = field(default_factory=FileCollection)
    interrupted: bool = False         # Drain stopped by a cancellation request

    @property
    def errors(self) -> List[str]:
        """Non-fatal errors collected during the walk."""
        return self.stats.errors


@dataclass
class TreeDeleteResult:
    """Outcome of TreeDeleteEngine.delete_tree_files."""
    stats: TreeDeleteStats = field(default_factory=TreeDeleteStats)
    deleted_files: FileCollection = field(default_factory=FileCollection)
    profile: Optional[DirectoryProfile] = None  # Remaining tree after the drain
    interrupted: bool = False

    @property
    def errors(self) -> List[str]:
        return self.stats.errors


@dataclass
class TreeMoveResult:
    """Outcome of TreeMoveEngine.move_tree."""
    stats: DirectoryMoveStats = field(default_factory=DirectoryMoveStats)
    copy_result: Optional[TreeCopyResult] = None  # None when the copy aborted
    interrupted: bool = False

    @property
    def errors(self) -> List[str]:
        return self.stats.errors
