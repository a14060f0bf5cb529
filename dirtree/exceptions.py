"""Exception hierarchy for dirtree.

Fatal conditions are raised as exceptions and abort the current tree walk.
Non-fatal conditions are never raised; they are recorded as messages in the
``errors`` list of the statistics object that owns the current pass.

- DirTreeError: Base class for all dirtree errors.
- PathValidationError: A path string could not be turned into a handle.
- CriteriaError / FileTypeMaskError: Invalid selection configuration.
- TreeDiscoveryError: The subdirectory scan could not complete.
- FatalOperationError: A single-directory operation could not continue.
- TreeOperationError: A tree operation aborted; carries the partial result.
- CollectionEmptyError / CollectionIndexError: Normal drain termination.
"""

from typing import Any, Optional


class DirTreeError(Exception):
    """Base class for all dirtree errors."""


class PathValidationError(DirTreeError, ValueError):
    """Raised when a path string is empty, malformed, or of the wrong kind."""


class CriteriaError(DirTreeError, ValueError):
    """Raised when file selection criteria are invalid."""


class FileTypeMaskError(CriteriaError):
    """Raised when a file-type mask would exclude every kind of file."""


class TreeDiscoveryError(DirTreeError):
    """Raised when the subdirectory tree of a root cannot be discovered."""


class FatalOperationError(DirTreeError):
    """Raised when a single-directory copy or delete cannot continue.

    Attributes:
        stats: Per-directory statistics accumulated before the failure.
    """

    def __init__(self, message: str, stats: Optional[Any] = None) -> None:
        super().__init__(message)
        self.stats = stats


class TreeOperationError(DirTreeError):
    """Raised when a tree copy, delete or prune aborts.

    Nothing completed before the failure is rolled back. The partial result
    is a valid snapshot of the work done up to the point of failure.

    Attributes:
        result: Partial result (TreeCopyResult, TreeDeleteResult, or the
            DirectoryCollection of pruned directories).
    """

    def __init__(self, message: str, result: Optional[Any] = None) -> None:
        super().__init__(message)
        self.result = result


class CollectionEmptyError(IndexError):
    """Raised when popping or peeking an empty work collection."""


class CollectionIndexError(IndexError):
    """Raised when an index lies outside a non-empty work collection."""
