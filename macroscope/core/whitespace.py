"""
Re-insert whitespace into macro expansion output.

Expansion output has no whitespace or comments left, so layout is guessed
from token adjacency alone: words get a trailing space unless punctuation
follows, non-empty braces open an indented block, `;` ends a line, and a
few operators get spaces around them. This is a heuristic, not a
pretty-printer.
"""

from typing import List, Optional

from ..syntax.kinds import SyntaxKind
from ..syntax.tree import SyntaxNode

INDENT = "  "

SPACED_OPERATORS = {
    SyntaxKind.THIN_ARROW: " -> ",
    SyntaxKind.EQ: " = ",
    SyntaxKind.FAT_ARROW: " => ",
}


def insert_whitespaces(syn: SyntaxNode) -> str:
    """Render the tokens of syn as indented text."""
    tokens = list(syn.tokens())
    res: List[str] = []
    indent = 0
    last: Optional[SyntaxKind] = None

    for index, token in enumerate(tokens):
        kind = token.kind
        next_kind = tokens[index + 1].kind if index + 1 < len(tokens) else None

        if kind.is_text() and (next_kind is None or not next_kind.is_punct()):
            res.append(token.text + " ")
        elif kind is SyntaxKind.L_CURLY and (next_kind is None or next_kind is not SyntaxKind.R_CURLY):
            indent += 1
            leading_space = " " if last is not None and last.is_text() else ""
            res.append(f"{leading_space}{{\n{INDENT * indent}")
        elif kind is SyntaxKind.R_CURLY and (last is None or last is not SyntaxKind.L_CURLY):
            indent = max(indent - 1, 0)
            res.append(f"\n{INDENT * indent}}}")
        elif kind is SyntaxKind.R_CURLY:
            res.append(f"}}\n{INDENT * indent}")
        elif kind is SyntaxKind.SEMICOLON:
            res.append(f";\n{INDENT * indent}")
        elif kind in SPACED_OPERATORS:
            res.append(SPACED_OPERATORS[kind])
        else:
            res.append(token.text)

        last = kind

    return "".join(res)
