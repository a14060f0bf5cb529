"""
Enumerations used by file selection.

- SelectCriterionMode: How active selection criteria are combined.
- FileClass: The kind of a directory entry, classified without following symlinks.
"""

from enum import Enum


class SelectCriterionMode(Enum):
    """Combination mode for active file selection criteria."""
    NONE = "none"                # No mode given; evaluated like AND_SELECT
    AND_SELECT = "and_select"    # Every active criterion must match
    OR_SELECT = "or_select"      # Any active criterion must match


class FileClass(Enum):
    """Kind of a directory entry (lstat semantics)."""
    DIRECTORY = "directory"
    REGULAR = "regular"
    SYMLINK = "symlink"
    OTHER = "other"              # Pipes, sockets, devices
