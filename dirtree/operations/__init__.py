"""Operations package for dirtree.

This package contains the single-directory file operations used by the tree
engines.

Example:
    >>> from dirtree.operations import FileOperations
    >>> ops = FileOperations(dry_run=True)
    >>> stats, _ = ops.copy_files_in_directory(source, target, FileTypeMask())
"""

from .file_operations import FileOperations

__all__ = ["FileOperations"]
