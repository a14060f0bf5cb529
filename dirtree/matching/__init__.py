"""File selection package for dirtree.

This package contains the FileSelector implementation which decides whether
a file qualifies for a copy or delete, based on a SelectionCriteria value.

Example:
    >>> from dirtree.matching import FileSelector
    >>> from dirtree.models import SelectionCriteria, SelectCriterionMode
    >>> criteria = SelectionCriteria(
    ...     file_name_patterns=["*.log"],
    ...     regex=r"^error",
    ...     select_mode=SelectCriterionMode.OR_SELECT,
    ... )
    >>> FileSelector().matches(file_handle, criteria)
"""

from .file_selector import FileSelector, SelectionOutcome

__all__ = [
    "FileSelector",
    "SelectionOutcome",
]
