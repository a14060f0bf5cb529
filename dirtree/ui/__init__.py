"""Terminal output package for dirtree.

Example:
    >>> from dirtree.ui import TreeTUI
    >>> TreeTUI().display_profile(profile)
"""

from .tree_tui import TreeTUI

__all__ = ["TreeTUI"]
