"""
Rust parser using tree-sitter, converted into macroscope syntax trees.
"""

import logging
from pathlib import Path
from typing import List

import tree_sitter_rust as tsrust
from tree_sitter import Language, Node, Parser

from ..syntax.kinds import SyntaxKind
from ..syntax.lexer import tokenize
from ..syntax.tree import GreenElement, GreenNode, SyntaxNode
from .utils import is_leaf

logger = logging.getLogger(__name__)

# tree-sitter node types with a dedicated kind; everything else is NODE
NODE_KINDS = {
    "source_file": SyntaxKind.SOURCE_FILE,
    "macro_invocation": SyntaxKind.MACRO_CALL,
    "macro_definition": SyntaxKind.MACRO_RULES,
    "token_tree": SyntaxKind.TOKEN_TREE,
    "scoped_identifier": SyntaxKind.PATH,
    "ERROR": SyntaxKind.ERROR,
}

# Nodes whose text is lexed as a whole instead of walking their children
ATOMIC_TYPES = frozenset({"line_comment", "block_comment", "lifetime"})

# Token trees are unparsed: identifiers inside them are not name references
_OPAQUE_KINDS = frozenset({SyntaxKind.TOKEN_TREE, SyntaxKind.MACRO_RULES})


class RustParser:
    """Parse Rust source into a lossless SOURCE_FILE tree."""

    def __init__(self):
        self.language = Language(tsrust.language())
        self.parser = Parser(self.language)

    def parse_file(self, file_path: Path) -> SyntaxNode:
        """Parse a file and return the root node."""
        return self.parse_text(Path(file_path).read_text(encoding="utf8"))

    def parse_text(self, text: str) -> SyntaxNode:
        """Parse source text and return the root node."""
        return self.parse_bytes(text.encode("utf8"))

    def parse_bytes(self, source: bytes) -> SyntaxNode:
        """Parse source bytes and return the root node."""
        tree = self.parser.parse(source)
        root = tree.root_node
        if root.has_error:
            logger.debug("Source contains syntax errors; continuing with recovered tree")
        green = self._convert(root, source, 0, len(source), opaque=False)
        if green.kind is not SyntaxKind.SOURCE_FILE:
            green = GreenNode(SyntaxKind.SOURCE_FILE, (green,))
        return SyntaxNode.new_root(green)

    # ==================== Conversion ====================

    def _convert(self, node: Node, source: bytes, start: int, end: int, opaque: bool) -> GreenNode:
        """Convert a tree-sitter node covering source[start:end]."""
        kind = NODE_KINDS.get(node.type, SyntaxKind.NODE)
        opaque = opaque or kind in _OPAQUE_KINDS

        children: List[GreenElement] = []
        cursor = start
        for child in node.children:
            if child.end_byte <= cursor and child.end_byte > child.start_byte:
                logger.debug(f"Skipping overlapping {child.type} at byte {child.start_byte}")
                continue
            if child.start_byte > cursor:
                children.extend(_lex(source[cursor : child.start_byte]))
            children.extend(self._convert_child(child, source, opaque))
            cursor = max(cursor, child.end_byte)
        if end > cursor:
            children.extend(_lex(source[cursor:end]))

        return GreenNode(kind, tuple(children))

    def _convert_child(self, node: Node, source: bytes, opaque: bool) -> List[GreenElement]:
        if is_leaf(node) or node.type in ATOMIC_TYPES or node.type.endswith("_literal"):
            tokens = _lex(source[node.start_byte : node.end_byte])
            if (
                node.type == "identifier"
                and not opaque
                and len(tokens) == 1
                and tokens[0].kind is SyntaxKind.IDENT
            ):
                return [GreenNode(SyntaxKind.NAME_REF, (tokens[0],))]
            return tokens
        return [self._convert(node, source, node.start_byte, node.end_byte, opaque)]


def _lex(chunk: bytes):
    return tokenize(chunk.decode("utf8"))
