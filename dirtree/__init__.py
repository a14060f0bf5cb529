"""dirtree - Directory tree copy and delete engine.

A Python library and command line tool for copying, deleting and profiling
directory trees, selecting files by name pattern, regular expression,
modification time and mode.
"""

__version__ = "1.0.0"

from .models import (
    DirectoryHandle,
    DirectoryProfile,
    FileHandle,
    FileTypeMask,
    SelectCriterionMode,
    SelectionCriteria,
    TreeCopyResult,
    TreeCopyStats,
    TreeDeleteResult,
    TreeDeleteStats,
)

__all__ = [
    "__version__",
    "DirectoryHandle",
    "DirectoryProfile",
    "FileHandle",
    "FileTypeMask",
    "SelectCriterionMode",
    "SelectionCriteria",
    "TreeCopyResult",
    "TreeCopyStats",
    "TreeDeleteResult",
    "TreeDeleteStats",
]


def main() -> None:
    """Entry point for the dirtree CLI application.

    This function is called when the `dirtree` command is invoked after
    package installation via pip. It imports and runs the Typer app
    from the dirtree.cli module.
    """
    from dirtree.cli import app
    app()
