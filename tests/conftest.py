"""Pytest fixtures for dirtree tests."""

import os
import platform
import stat
import tempfile
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Generator, Iterator, Optional
from unittest.mock import patch

import pytest

from dirtree.matching import FileSelector
from dirtree.models import DirectoryHandle, FileClass, FileHandle
from dirtree.operations import FileOperations
from dirtree.scanning import DirectoryScanner, PathResolver


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without filesystem trees")
    config.addinivalue_line("markers", "integration: tests running against real directory trees")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for isolated test environments.

    Yields:
        Path to the temporary directory.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def resolver() -> PathResolver:
    return PathResolver()


@pytest.fixture
def selector() -> FileSelector:
    return FileSelector()


@pytest.fixture
def scanner() -> DirectoryScanner:
    return DirectoryScanner()


@pytest.fixture
def file_ops() -> FileOperations:
    """Return a live FileOperations instance."""
    return FileOperations(dry_run=False)


@pytest.fixture
def dry_run_file_ops() -> FileOperations:
    return FileOperations(dry_run=True)


@pytest.fixture
def sample_tree(temp_dir: Path) -> Dict[str, Path]:
    """Create the two-file source tree used by the pattern-copy scenario.

    Creates:
        temp_dir/
        ├── a/
        │   ├── f1.txt (100 bytes)
        │   └── sub/
        │       └── f2.log (50 bytes)
        └── b/ (not created; copy target)

    Returns:
        Dictionary with 'source' and 'target' paths.
    """
    source = temp_dir / "a"
    source.mkdir()
    (source / "f1.txt").write_bytes(b"x" * 100)
    (source / "sub").mkdir()
    (source / "sub" / "f2.log").write_bytes(b"y" * 50)

    return {"source": source, "target": temp_dir / "b"}


@pytest.fixture
def nested_tree(temp_dir: Path) -> Path:
    """Create a nested tree with known sizes.

    Creates:
        temp_dir/root/
        ├── a.txt (10 bytes)
        ├── b.log (20 bytes)
        ├── d1/
        │   ├── c.txt (30 bytes)
        │   └── d11/
        │       └── e.txt (40 bytes)
        └── d2/
            ├── f.dat (50 bytes)
            └── d21/ (empty)

    Returns:
        Path to temp_dir/root.
    """
    root = temp_dir / "root"
    root.mkdir()
    (root / "a.txt").write_bytes(b"a" * 10)
    (root / "b.log").write_bytes(b"b" * 20)

    (root / "d1").mkdir()
    (root / "d1" / "c.txt").write_bytes(b"c" * 30)
    (root / "d1" / "d11").mkdir()
    (root / "d1" / "d11" / "e.txt").write_bytes(b"e" * 40)

    (root / "d2").mkdir()
    (root / "d2" / "f.dat").write_bytes(b"f" * 50)
    (root / "d2" / "d21").mkdir()

    return root


@pytest.fixture
def split_tree(temp_dir: Path) -> Path:
    """Create a root holding two sibling subdirectories.

    Creates:
        temp_dir/split/
        ├── top.txt (5 bytes)
        ├── bad/
        │   └── b.txt (7 bytes)
        └── ok/
            └── a.txt (3 bytes)

    Returns:
        Path to temp_dir/split.
    """
    root = temp_dir / "split"
    (root / "ok").mkdir(parents=True)
    (root / "bad").mkdir()
    (root / "top.txt").write_bytes(b"t" * 5)
    (root / "ok" / "a.txt").write_bytes(b"a" * 3)
    (root / "bad" / "b.txt").write_bytes(b"b" * 7)
    return root


@pytest.fixture
def symlink_tree(temp_dir: Path) -> Generator[Optional[Path], None, None]:
    """Create a directory holding a regular file, a file symlink and a directory symlink.

    Creates:
        temp_dir/links/
        ├── real.txt (12 bytes)
        ├── link.txt -> real.txt
        ├── inner/
        │   └── deep.txt (5 bytes)
        └── inner_link -> inner

    Yields:
        Path to temp_dir/links, or None if symlinks are not supported.
    """
    root = temp_dir / "links"
    root.mkdir()
    (root / "real.txt").write_bytes(b"r" * 12)
    (root / "inner").mkdir()
    (root / "inner" / "deep.txt").write_bytes(b"d" * 5)

    try:
        (root / "link.txt").symlink_to(root / "real.txt")
        (root / "inner_link").symlink_to(root / "inner", target_is_directory=True)
    except OSError:
        # Symlinks not supported on this platform/configuration
        yield None
        return

    yield root


@pytest.fixture
def restricted_dir(temp_dir: Path) -> Generator[Optional[Path], None, None]:
    """Create a directory with no permissions, holding one file.

    Yields:
        Path to the restricted directory, or None where permissions are not
        enforced (Windows, root user).
    """
    if platform.system() == "Windows" or (hasattr(os, "geteuid") and os.geteuid() == 0):
        yield None
        return

    restricted = temp_dir / "locked"
    restricted.mkdir()
    (restricted / "hidden.txt").write_text("secret content")
    original_mode = restricted.stat().st_mode
    os.chmod(restricted, 0o000)

    try:
        yield restricted
    finally:
        # Restore permissions for cleanup
        os.chmod(restricted, original_mode)


@pytest.fixture
def make_file_handle() -> Callable[..., FileHandle]:
    """Factory building FileHandle instances without touching the filesystem."""
    directory = DirectoryHandle(
        absolute_path=Path("/data"),
        original_path="/data",
        parent_path=Path("/"),
        name="data",
        volume="/",
        exists=True,
    )

    def _make(
        name: str = "report.txt",
        size: int = 100,
        mode: int = stat.S_IFREG | 0o644,
        modified: datetime = datetime(2024, 6, 15, 12, 0, 0),
        file_class: FileClass = FileClass.REGULAR,
    ) -> FileHandle:
        return FileHandle(
            absolute_path=Path("/data") / name,
            name=name,
            directory=directory,
            size=size,
            mode=mode,
            modified=modified,
            file_class=file_class,
        )

    return _make


def set_mtime(path: Path, when: datetime) -> None:
    """Set the modification time of a path."""
    ts = when.timestamp()
    os.utime(path, (ts, ts))


def tree_snapshot(root: Path) -> Dict[str, bytes]:
    """Map every file beneath root (relative path) to its contents."""
    snapshot = {}
    for dirpath, _dirs, files in os.walk(root):
        for name in files:
            full = Path(dirpath) / name
            snapshot[str(full.relative_to(root))] = full.read_bytes()
    return snapshot



class _UnreadableEntry:
    """Wraps an os.DirEntry whose metadata cannot be read."""

    def __init__(self, entry: os.DirEntry) -> None:
        self._entry = entry

    def __getattr__(self, name: str):
        return getattr(self._entry, name)

    def stat(self, follow_symlinks: bool = True):
        raise PermissionError(13, "Permission denied", self._entry.path)


@contextmanager
def unreadable_entry(name: str) -> Iterator[None]:
    """Make stat() fail for every directory entry called name."""
    real_scandir = os.scandir

    @contextmanager
    def fake_scandir(path):
        with real_scandir(path) as it:
            yield [_UnreadableEntry(e) if e.name == name else e for e in it]

    with patch("dirtree.scanning.directory_scanner.os.scandir", side_effect=fake_scandir):
        yield
