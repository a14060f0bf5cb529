"""Statistics merging for tree operations.

Per-directory operations return their own statistics object; the tree
engines fold those into running totals with StatsAggregator. Merging is by
field name, so a DirectoryCopyStats can be merged into a TreeCopyStats and a
DeleteDirFilesStats into a TreeDeleteStats without either type knowing about
the other.

Example:
    >>> from dirtree.models import StatsAggregator
    >>> total = TreeCopyStats()
    >>> total = StatsAggregator.merge(total, DirectoryCopyStats(files_copied=3))
    >>> total.files_copied
    3
"""

import dataclasses
from typing import Any, Dict, Iterable, TypeVar

T = TypeVar("T")


class StatsAggregator:
    """Merges statistics dataclasses field by field.

    Rules applied to every field of ``total`` that also exists on ``partial``:
        - int counters are added
        - the ``errors`` list is concatenated, total's messages first
        - anything else (paths, flags) keeps the value from ``total``

    Neither argument is modified; a new instance of total's type is returned.
    """

    ERRORS_FIELD = "errors"

    @classmethod
    def merge(cls, total: T, partial: Any) -> T:
        """Return a new total with the partial statistics added.

        Args:
            total: Running totals (a dataclass instance).
            partial: Statistics of one step (a dataclass instance).

        Returns:
            New instance of type(total).

        Raises:
            TypeError: If either argument is not a dataclass instance.
        """
        if not dataclasses.is_dataclass(total) or isinstance(total, type):
            raise TypeError(f"total must be a dataclass instance, got {type(total).__name__}")
        if not dataclasses.is_dataclass(partial) or isinstance(partial, type):
            raise TypeError(f"partial must be a dataclass instance, got {type(partial).__name__}")

        partial_fields = {f.name for f in dataclasses.fields(partial)}
        updates: Dict[str, Any] = {}

        for f in dataclasses.fields(total):
            if not f.init:
                continue

            current = getattr(total, f.name)

            if f.name not in partial_fields:
                if isinstance(current, list):
                    updates[f.name] = list(current)
                continue

            incoming = getattr(partial, f.name)

            if f.name == cls.ERRORS_FIELD:
                updates[f.name] = list(current) + list(incoming)
            elif cls._is_counter(current) and cls._is_counter(incoming):
                updates[f.name] = current + incoming
            elif isinstance(current, list):
                updates[f.name] = list(current)

        return dataclasses.replace(total, **updates)

    @classmethod
    def fold(cls, total: T, partials: Iterable[Any]) -> T:
        """Merge every element of partials into total, in order."""
        for partial in partials:
            total = cls.merge(total, partial)
        return total

    @staticmethod
    def _is_counter(value: Any) -> bool:
        # bool is an int subclass but flags are not counters
        return isinstance(value, int) and not isinstance(value, bool)
