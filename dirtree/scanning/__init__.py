"""Scanning package for dirtree.

This package contains path validation and directory listing utilities.

Modules:
    path_resolver: PathResolver for turning path strings into handles
    directory_scanner: DirectoryScanner for listing, discovery and profiles

Example:
    >>> from dirtree.scanning import DirectoryScanner, PathResolver
    >>> root = PathResolver().resolve_directory("/data")
    >>> profile = DirectoryScanner().profile_tree(root)
    >>> print(profile.total_files)
"""

from .path_resolver import PathResolver, classify_mode
from .directory_scanner import DirectoryScanner

__all__ = ["PathResolver", "DirectoryScanner", "classify_mode"]
