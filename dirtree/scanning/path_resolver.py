"""Path validation and canonicalisation.

PathResolver turns user-supplied path strings into DirectoryHandle and
FileHandle instances. It is used once per root before any traversal and by
the tree engines when computing mirrored target paths.

Example:
    >>> from dirtree.scanning import PathResolver
    >>> resolver = PathResolver()
    >>> handle = resolver.resolve_directory("~/backups/2024")
    >>> handle.exists
    True
"""

import os
import stat
from datetime import datetime
from pathlib import Path
from typing import Optional

from dirtree.exceptions import PathValidationError
from dirtree.models.data_models import DirectoryHandle, FileHandle
from dirtree.models.select_mode import FileClass


def classify_mode(mode: int) -> FileClass:
    """Classify an lstat st_mode value."""
    if stat.S_ISDIR(mode):
        return FileClass.DIRECTORY
    if stat.S_ISLNK(mode):
        return FileClass.SYMLINK
    if stat.S_ISREG(mode):
        return FileClass.REGULAR
    return FileClass.OTHER


class PathResolver:
    """Validates path strings and builds handles.

    Paths are made absolute against the current working directory and
    normalised, but symlinks are not resolved: a handle describes the path
    the caller named, not its target.
    """

    def normalize(self, path_str: str) -> Path:
        """Validate a path string and return its absolute, normalised form.

        Args:
            path_str: Path string supplied by the caller.

        Returns:
            Absolute Path.

        Raises:
            PathValidationError: If the string is empty, blank or contains a NUL
                character.
        """
        if path_str is None:
            raise PathValidationError("Path string is None")

        path_str = os.fspath(path_str)

        if not path_str.strip():
            raise PathValidationError("Path string is empty or consists of blank spaces")

        if "\x00" in path_str:
            raise PathValidationError(f"Path string contains a NUL character: {path_str!r}")

        expanded = os.path.expanduser(path_str.strip())
        return Path(os.path.abspath(expanded))

    def resolve_directory(self, path_str: str) -> DirectoryHandle:
        """Build a DirectoryHandle for a path string.

        The directory does not need to exist; existence is recorded in the
        handle.

        Raises:
            PathValidationError: If the path string is invalid or names an
                existing entry which is not a directory.
        """
        absolute_path = self.normalize(path_str)

        try:
            st = absolute_path.stat()
        except FileNotFoundError:
            st = None
        except NotADirectoryError:
            st = None
        except OSError as e:
            raise PathValidationError(f"Cannot access directory path {absolute_path}: {e}")

        if st is not None and not stat.S_ISDIR(st.st_mode):
            raise PathValidationError(f"Path exists but is not a directory: {absolute_path}")

        return DirectoryHandle(
            absolute_path=absolute_path,
            original_path=os.fspath(path_str),
            parent_path=absolute_path.parent,
            name=absolute_path.name,
            volume=absolute_path.anchor,
            exists=st is not None,
            mode=st.st_mode if st is not None else None,
            modified=datetime.fromtimestamp(st.st_mtime) if st is not None else None,
        )

    def resolve_file(
        self,
        path_str: str,
        directory: Optional[DirectoryHandle] = None,
    ) -> FileHandle:
        """Build a FileHandle for a path string.

        Metadata is read with lstat. A missing file produces a handle with
        exists=False and zeroed metadata.

        Args:
            path_str: Path of the file.
            directory: Owning directory handle. Resolved from the parent path
                when not provided.

        Raises:
            PathValidationError: If the path string is invalid or names a
                directory.
        """
        absolute_path = self.normalize(path_str)

        if directory is None:
            directory = self.resolve_directory(str(absolute_path.parent))

        try:
            st = os.lstat(absolute_path)
        except FileNotFoundError:
            return FileHandle(
                absolute_path=absolute_path,
                name=absolute_path.name,
                directory=directory,
                size=0,
                mode=0,
                modified=datetime.fromtimestamp(0),
                file_class=FileClass.REGULAR,
                exists=False,
            )
        except OSError as e:
            raise PathValidationError(f"Cannot access file path {absolute_path}: {e}")

        file_class = classify_mode(st.st_mode)
        if file_class == FileClass.DIRECTORY:
            raise PathValidationError(f"Path is a directory, not a file: {absolute_path}")

        return self.file_handle_from_stat(absolute_path, directory, st)

    def file_handle_from_stat(
        self,
        absolute_path: Path,
        directory: DirectoryHandle,
        st: os.stat_result,
    ) -> FileHandle:
        """Build a FileHandle from an already collected lstat result."""
        return FileHandle(
            absolute_path=absolute_path,
            name=absolute_path.name,
            directory=directory,
            size=st.st_size,
            mode=st.st_mode,
            modified=datetime.fromtimestamp(st.st_mtime),
            file_class=classify_mode(st.st_mode),
            exists=True,
        )

    def child_directory(self, parent: DirectoryHandle, name: str) -> DirectoryHandle:
        """Resolve a subdirectory of an existing directory handle."""
        return self.resolve_directory(parent.joinpath(name))
