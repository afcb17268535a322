"""
Utility functions for language parsers.
"""

from tree_sitter import Node


def is_leaf(node: Node) -> bool:
    """True for tree-sitter nodes without children, including MISSING nodes."""
    return node.child_count == 0
