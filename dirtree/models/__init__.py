"""
Models package for dirtree.

This package provides convenient imports for all data models:
- SelectCriterionMode, FileClass: Enumerations used by file selection
- DirectoryHandle, FileHandle: Validated path handles
- SelectionCriteria, FileTypeMask: File selection configuration
- DirectoryCopyStats, TreeCopyStats: Copy statistics
- DeleteDirFilesStats, TreeDeleteStats: Delete statistics
- DirectoryMoveStats: Move statistics
- DirectoryProfile: Directory or tree snapshot
- WorkCollection, DirectoryCollection, FileCollection: Queues and result lists
- DirectoryListing, DiscoveryResult, TreeCopyResult, TreeDeleteResult,
  TreeMoveResult: Results
- StatsAggregator: Field-wise merging of statistics
"""

from .select_mode import FileClass, SelectCriterionMode
from .data_models import (
    DeleteDirFilesStats,
    DirectoryCopyStats,
    DirectoryHandle,
    DirectoryMoveStats,
    DirectoryProfile,
    FileHandle,
    FileTypeMask,
    SelectionCriteria,
    TreeCopyStats,
    TreeDeleteStats,
)
from .collections import DirectoryCollection, FileCollection, WorkCollection
from .results import (
    DirectoryListing,
    DiscoveryResult,
    TreeCopyResult,
    TreeDeleteResult,
    TreeMoveResult,
)
from .stats_aggregator import StatsAggregator

__all__ = [
    "FileClass",
    "SelectCriterionMode",
    "DirectoryHandle",
    "FileHandle",
    "SelectionCriteria",
    "FileTypeMask",
    "DirectoryCopyStats",
    "TreeCopyStats",
    "DeleteDirFilesStats",
    "TreeDeleteStats",
    "DirectoryMoveStats",
    "DirectoryProfile",
    "WorkCollection",
    "DirectoryCollection",
    "FileCollection",
    "DirectoryListing",
    "DiscoveryResult",
    "TreeCopyResult",
    "TreeDeleteResult",
    "TreeMoveResult",
    "StatsAggregator",
]
