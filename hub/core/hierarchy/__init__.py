"""Hierarchical menu tree and visibility filtering."""

from .access import content_is_accessible, filter_accessible, menu_is_accessible
from .tree import MenuTree, TreeNode

__all__ = [
    "MenuTree",
    "TreeNode",
    "content_is_accessible",
    "filter_accessible",
    "menu_is_accessible",
]
