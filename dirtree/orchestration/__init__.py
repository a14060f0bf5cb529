"""Orchestration package for dirtree.

This package contains the tree-level engines and the operation log writer:
- TreeCopyEngine: copies selected files of a tree into a mirrored tree
- TreeDeleteEngine: deletes selected files across a tree
- TreeMoveEngine: copies a whole tree, then removes the source
- SubtreePruner: removes every subdirectory of a parent
- OperationLogger: structured log files for the runs above

Example:
    from dirtree.orchestration import TreeCopyEngine

    result = TreeCopyEngine(dry_run=True).copy_tree("/src", "/dst")
"""

from .operation_logger import OperationLogger
from .tree_copier import TreeCopyEngine
from .tree_deleter import TreeDeleteEngine
from .subtree_pruner import SubtreePruner
from .tree_mover import TreeMoveEngine

__all__ = [
    "OperationLogger",
    "SubtreePruner",
    "TreeCopyEngine",
    "TreeDeleteEngine",
    "TreeMoveEngine",
]
