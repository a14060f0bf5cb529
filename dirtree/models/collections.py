"""Ordered work collections used as traversal queues and result lists.

A WorkCollection is used in two ways: as a queue of directories awaiting
processing (drained with pop_first or an index cursor over peek_at) and as
an accumulator of file handles copied or deleted by a tree operation.

Running out of elements is reported with CollectionEmptyError (or
CollectionIndexError for an index past the end). Callers treat both as the
normal end of a drain, never as a processing failure.

Example:
    >>> queue = DirectoryCollection()
    >>> queue.add_path("/data/photos")
    >>> while True:
    ...     try:
    ...         directory = queue.pop_first()
    ...     except CollectionEmptyError:
    ...         break
"""

from typing import Generic, Iterable, Iterator, List, Optional, TypeVar

from dirtree.exceptions import CollectionEmptyError, CollectionIndexError

from .data_models import DirectoryHandle, FileHandle

T = TypeVar("T")


class WorkCollection(Generic[T]):
    """Ordered, mutable sequence with queue-style access.

    Insertion order is significant. Elements are immutable handles, so
    adding an element stores it by value.
    """

    def __init__(self, items: Optional[Iterable[T]] = None) -> None:
        self._items: List[T] = list(items) if items is not None else []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._items!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WorkCollection):
            return NotImplemented
        return type(self) is type(other) and self._items == other._items

    def is_empty(self) -> bool:
        return not self._items

    def add(self, item: T) -> None:
        """Append an element to the end of the collection."""
        self._items.append(item)

    def add_all(self, other: "WorkCollection[T]") -> None:
        """Append every element of another collection, preserving its order."""
        self._items.extend(other._items)

    def insert_at(self, index: int, item: T) -> None:
        """Insert an element before the given index.

        An index equal to the collection length appends.

        Raises:
            CollectionIndexError: If index is negative or past the end.
        """
        if index < 0 or index > len(self._items):
            raise CollectionIndexError(
                f"Insert index {index} is out of range for collection of length {len(self._items)}"
            )
        self._items.insert(index, item)

    def clear(self) -> None:
        self._items.clear()

    def copy(self) -> "WorkCollection[T]":
        return type(self)(self._items)

    def to_list(self) -> List[T]:
        return list(self._items)

    def peek_first(self) -> T:
        return self._get(0, remove=False)

    def peek_last(self) -> T:
        return self._get(len(self._items) - 1, remove=False)

    def peek_at(self, index: int) -> T:
        return self._get(index, remove=False)

    def pop_first(self) -> T:
        """Remove and return the first element (FIFO).

        Raises:
            CollectionEmptyError: If the collection is empty.
        """
        return self._get(0, remove=True)

    def pop_last(self) -> T:
        return self._get(len(self._items) - 1, remove=True)

    def pop_at(self, index: int) -> T:
        return self._get(index, remove=True)

    def _get(self, index: int, remove: bool) -> T:
        """Fetch the element at index, optionally removing it.

        Raises:
            CollectionEmptyError: If the collection is empty.
            CollectionIndexError: If index lies outside a non-empty collection.
        """
        if not self._items:
            raise CollectionEmptyError(f"{type(self).__name__} is empty")

        if index < 0 or index >= len(self._items):
            raise CollectionIndexError(
                f"Index {index} is out of range for {type(self).__name__} "
                f"of length {len(self._items)}"
            )

        if remove:
            return self._items.pop(index)
        return self._items[index]


class DirectoryCollection(WorkCollection[DirectoryHandle]):
    """Collection of directory handles; the traversal queue of a tree walk."""

    def add_path(self, path_str: str) -> DirectoryHandle:
        """Resolve a path string into a handle and append it.

        Returns:
            The appended DirectoryHandle.

        Raises:
            PathValidationError: If the path string is invalid.
        """
        from dirtree.scanning.path_resolver import PathResolver

        handle = PathResolver().resolve_directory(path_str)
        self.add(handle)
        return handle

    def absolute_paths(self) -> List[str]:
        return [d.path_str for d in self._items]


class FileCollection(WorkCollection[FileHandle]):
    """Collection of file handles; the result list of a copy or delete."""

    def total_bytes(self) -> int:
        return sum(f.size for f in self._items)

    def absolute_paths(self) -> List[str]:
        return [str(f.absolute_path) for f in self._items]
