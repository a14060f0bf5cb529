"""File selection implementation for dirtree.

This module provides the FileSelector class which evaluates a file's
metadata against a SelectionCriteria.

Five criteria may be active, each evaluated independently:
    1. File name patterns (shell-style globs, case-sensitive)
    2. Regular expression searched in the file name
    3. Files older than a date time (modification time strictly before)
    4. Files newer than a date time (modification time strictly after)
    5. File mode (permission bits, or the full mode when type bits are given)

The active criteria are then combined with AND (every active criterion must
match) or OR (any active criterion must match). When no criterion is active,
every file is selected in both modes.

Example:
    >>> from dirtree.matching import FileSelector
    >>> from dirtree.models import SelectionCriteria
    >>> selector = FileSelector()
    >>> criteria = SelectionCriteria(file_name_patterns=["*.txt", "*.log"])
    >>> selector.matches(file_handle, criteria)
    True
"""

import fnmatch
import stat
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict

from dirtree.models import FileHandle, SelectCriterionMode, SelectionCriteria


@dataclass
class SelectionOutcome:
    """Per-criterion evaluation of one file."""
    active: Dict[str, bool] = field(default_factory=dict)   # Criterion name -> is active
    matched: Dict[str, bool] = field(default_factory=dict)  # Criterion name -> matched
    selected: bool = False

    @property
    def any_active(self) -> bool:
        return any(self.active.values())


class FileSelector:
    """Evaluates files against selection criteria.

    The selector is stateless; one instance may be shared by every
    directory of a tree operation.

    Example:
        >>> selector = FileSelector()
        >>> outcome = selector.evaluate(file_handle, criteria)
        >>> outcome.matched["patterns"]
        False
    """

    CRITERIA_NAMES = ("patterns", "regex", "older_than", "newer_than", "mode")

    def matches(self, file_handle: FileHandle, criteria: SelectionCriteria) -> bool:
        """Return True if the file satisfies the selection criteria.

        Args:
            file_handle: File to evaluate.
            criteria: Selection criteria. Inactive fields are ignored.

        Returns:
            True if the file is selected.
        """
        return self.evaluate(file_handle, criteria).selected

    def evaluate(self, file_handle: FileHandle, criteria: SelectionCriteria) -> SelectionOutcome:
        """Evaluate every criterion and combine the active ones.

        Args:
            file_handle: File to evaluate.
            criteria: Selection criteria.

        Returns:
            SelectionOutcome describing which criteria were active, which
            matched, and the combined decision.
        """
        outcome = SelectionOutcome()

        checks = {
            "patterns": self._check_patterns,
            "regex": self._check_regex,
            "older_than": self._check_older_than,
            "newer_than": self._check_newer_than,
            "mode": self._check_mode,
        }

        for name in self.CRITERIA_NAMES:
            is_active, is_match = checks[name](file_handle, criteria)
            outcome.active[name] = is_active
            outcome.matched[name] = is_active and is_match

        # If no file selection criterion is set, always select the file
        if not outcome.any_active:
            outcome.selected = True
            return outcome

        active_names = [n for n in self.CRITERIA_NAMES if outcome.active[n]]

        if criteria.select_mode == SelectCriterionMode.OR_SELECT:
            outcome.selected = any(outcome.matched[n] for n in active_names)
        else:
            # AND_SELECT and NONE
            outcome.selected = all(outcome.matched[n] for n in active_names)

        return outcome

    def _check_patterns(self, file_handle: FileHandle, criteria: SelectionCriteria):
        patterns = criteria.active_patterns
        if not patterns:
            return False, False
        return True, any(fnmatch.fnmatchcase(file_handle.name, p) for p in patterns)

    def _check_regex(self, file_handle: FileHandle, criteria: SelectionCriteria):
        if criteria.regex is None:
            return False, False
        return True, criteria.regex.search(file_handle.name) is not None

    def _check_older_than(self, file_handle: FileHandle, criteria: SelectionCriteria):
        if criteria.files_older_than is None:
            return False, False
        return True, self._timestamp(file_handle.modified) < self._timestamp(criteria.files_older_than)

    def _check_newer_than(self, file_handle: FileHandle, criteria: SelectionCriteria):
        if criteria.files_newer_than is None:
            return False, False
        return True, self._timestamp(file_handle.modified) > self._timestamp(criteria.files_newer_than)

    def _check_mode(self, file_handle: FileHandle, criteria: SelectionCriteria):
        wanted = criteria.select_by_file_mode
        if wanted is None:
            return False, False

        # Permission-only values (e.g. 0o644) ignore the file type bits
        if stat.S_IFMT(wanted) == 0:
            return True, stat.S_IMODE(file_handle.mode) == wanted
        return True, file_handle.mode == wanted

    def _timestamp(self, dt: datetime) -> float:
        # Naive datetimes are local time, as produced by datetime.fromtimestamp()
        return dt.timestamp()
