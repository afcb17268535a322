"""
Token trees: tokens grouped by their delimiters.

Declarative macros match and substitute whole token trees, so both the
rule parser and the matcher work on these instead of flat tokens.
"""

from dataclasses import dataclass, field
from typing import List, Sequence, Union

from ..syntax.kinds import CLOSING_DELIMITERS, DELIMITERS
from ..syntax.tree import GreenToken


class ExpandError(ValueError):
    """
    Represents a failure to parse, match or transcribe a macro.
    """


@dataclass
class Subtree:
    """A delimited group with its open and close tokens."""

    open: GreenToken
    close: GreenToken
    children: List["TokenTree"] = field(default_factory=list)

    @property
    def delimiter(self) -> str:
        return self.open.text


TokenTree = Union[GreenToken, Subtree]


def parse_token_trees(tokens: Sequence[GreenToken]) -> List[TokenTree]:
    """
    Group trivia-free tokens into token trees.

    Raises:
        ExpandError: If the delimiters are unbalanced
    """
    stack: List[List[TokenTree]] = [[]]
    opens: List[GreenToken] = []
    for token in tokens:
        if token.kind in DELIMITERS:
            opens.append(token)
            stack.append([])
        elif token.kind in CLOSING_DELIMITERS:
            if not opens or DELIMITERS[opens[-1].kind] is not token.kind:
                raise ExpandError(f"Unbalanced delimiter {token.text!r}")
            children = stack.pop()
            stack[-1].append(Subtree(opens.pop(), token, children))
        else:
            stack[-1].append(token)
    if opens:
        raise ExpandError(f"Unclosed delimiter {opens[-1].text!r}")
    return stack[0]


def flatten(trees: Sequence[TokenTree]) -> List[GreenToken]:
    """Tokens of the given trees in order, delimiters included."""
    tokens: List[GreenToken] = []
    for tree in trees:
        if isinstance(tree, Subtree):
            tokens.append(tree.open)
            tokens.extend(flatten(tree.children))
            tokens.append(tree.close)
        else:
            tokens.append(tree)
    return tokens


def is_leaf(tree: TokenTree, text: str) -> bool:
    """True when tree is a single token spelled text."""
    return isinstance(tree, GreenToken) and tree.text == text
