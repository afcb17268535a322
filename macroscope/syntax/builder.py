"""
Build syntax trees from flat token sequences.

Macro substitution produces bare tokens with no layout and no structure.
The builder recovers just enough structure for recursive expansion: it
finds the macro calls in the sequence and wraps each in a MACRO_CALL node,
leaving every other token as a direct child of the root.
"""

import logging
from typing import List, Optional, Sequence

from .kinds import CLOSING_DELIMITERS, DELIMITERS, SyntaxKind
from .tree import GreenElement, GreenNode, GreenToken, SyntaxNode

logger = logging.getLogger(__name__)

PATH_KEYWORDS = frozenset({"crate", "self", "super", "Self"})

# Tokens after which a `;` ends a statement rather than an expression
_STATEMENT_BOUNDARIES = frozenset({SyntaxKind.SEMICOLON, SyntaxKind.L_CURLY, SyntaxKind.R_CURLY})


def build_expansion(tokens: Sequence[GreenToken]) -> SyntaxNode:
    """
    Turn substitution output into a syntax tree.

    If the whole sequence is exactly one macro call (with its statement
    `;`, if any) the MACRO_CALL node is the root. Otherwise the root is a
    MACRO_ITEMS node holding the tokens and MACRO_CALL nodes in order.
    """
    tokens = [token for token in tokens if not token.kind.is_trivia()]
    children: List[GreenElement] = []
    pos = 0
    while pos < len(tokens):
        call = _macro_call_at(tokens, pos)
        if call is None:
            children.append(tokens[pos])
            pos += 1
            continue
        node, pos = call
        children.append(node)

    if len(children) == 1 and isinstance(children[0], GreenNode):
        return SyntaxNode.new_root(children[0])
    return SyntaxNode.new_root(GreenNode(SyntaxKind.MACRO_ITEMS, tuple(children)))


def build_token_tree(tokens: Sequence[GreenToken]) -> GreenNode:
    """
    Group a balanced delimited sequence into nested TOKEN_TREE nodes.

    The first token must open the group and the last one close it.
    """
    stack: List[List[GreenElement]] = [[]]
    for token in tokens:
        if token.kind in DELIMITERS:
            stack.append([token])
        elif token.kind in CLOSING_DELIMITERS and len(stack) > 1:
            group = stack.pop()
            group.append(token)
            stack[-1].append(GreenNode(SyntaxKind.TOKEN_TREE, tuple(group)))
        else:
            stack[-1].append(token)
    # Unclosed groups are folded into their parents
    while len(stack) > 1:
        group = stack.pop()
        stack[-1].append(GreenNode(SyntaxKind.TOKEN_TREE, tuple(group)))
    outer = stack[0]
    if len(outer) == 1 and isinstance(outer[0], GreenNode):
        return outer[0]
    return GreenNode(SyntaxKind.TOKEN_TREE, tuple(outer))


def matching_delimiter(tokens: Sequence[GreenToken], open_index: int) -> Optional[int]:
    """Index of the token closing the group opened at open_index."""
    depth = 0
    for index in range(open_index, len(tokens)):
        kind = tokens[index].kind
        if kind in DELIMITERS:
            depth += 1
        elif kind in CLOSING_DELIMITERS:
            depth -= 1
            if depth == 0:
                return index
    return None


def is_path_segment(token: GreenToken) -> bool:
    return token.kind is SyntaxKind.IDENT or (token.kind is SyntaxKind.KEYWORD and token.text in PATH_KEYWORDS)


def _macro_call_at(tokens: List[GreenToken], start: int):
    """Match `path ! (...)` at start; returns (node, next_pos) or None."""
    if start > 0 and tokens[start - 1].kind is SyntaxKind.COLON2:
        return None

    pos = start
    if tokens[pos].kind is SyntaxKind.COLON2:
        pos += 1
    if pos >= len(tokens) or not is_path_segment(tokens[pos]):
        return None
    pos += 1
    while (
        pos + 1 < len(tokens)
        and tokens[pos].kind is SyntaxKind.COLON2
        and is_path_segment(tokens[pos + 1])
    ):
        pos += 2

    bang = pos
    if bang + 1 >= len(tokens) or tokens[bang].kind is not SyntaxKind.BANG:
        return None
    if tokens[bang + 1].kind not in DELIMITERS:
        return None
    close = matching_delimiter(tokens, bang + 1)
    if close is None:
        logger.debug(f"Unbalanced arguments for macro call at token {start}")
        return None

    path = list(tokens[start:bang])
    name = path.pop()
    if name.kind is SyntaxKind.IDENT:
        path.append(GreenNode(SyntaxKind.NAME_REF, (name,)))
    else:
        path.append(name)

    children: List[GreenElement] = [
        GreenNode(SyntaxKind.PATH, tuple(path)),
        tokens[bang],
        build_token_tree(tokens[bang + 1 : close + 1]),
    ]
    end = close + 1

    at_statement_start = start == 0 or tokens[start - 1].kind in _STATEMENT_BOUNDARIES
    if at_statement_start and end < len(tokens) and tokens[end].kind is SyntaxKind.SEMICOLON:
        children.append(tokens[end])
        end += 1

    return GreenNode(SyntaxKind.MACRO_CALL, tuple(children)), end
