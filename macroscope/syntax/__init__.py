"""
Syntax trees, tokens and the tools to search and rebuild them.
"""

from .ast import MacroCall, MacroRules, significant_tokens
from .builder import build_expansion, build_token_tree
from .kinds import SyntaxKind
from .lexer import tokenize
from .tree import (
    GreenNode,
    GreenToken,
    SyntaxNode,
    SyntaxToken,
    find_node_at_offset,
    replace_descendants,
)

__all__ = [
    "GreenNode",
    "GreenToken",
    "MacroCall",
    "MacroRules",
    "SyntaxKind",
    "SyntaxNode",
    "SyntaxToken",
    "build_expansion",
    "build_token_tree",
    "find_node_at_offset",
    "replace_descendants",
    "significant_tokens",
    "tokenize",
]
