"""
Typed views over syntax nodes.
"""

from typing import List, Optional

from .kinds import SyntaxKind
from .tree import GreenToken, SyntaxNode


def significant_tokens(node: SyntaxNode) -> List[GreenToken]:
    """Green tokens of a subtree in document order, trivia dropped."""
    return [token.green for token in node.tokens() if not token.kind.is_trivia()]


class MacroCall:
    """A `path!(...)` invocation."""

    __slots__ = ("syntax",)

    def __init__(self, syntax: SyntaxNode):
        self.syntax = syntax

    @classmethod
    def cast(cls, node: SyntaxNode) -> Optional["MacroCall"]:
        return cls(node) if node.kind is SyntaxKind.MACRO_CALL else None

    def name_ref(self) -> Optional[SyntaxNode]:
        """The last NAME_REF of the macro path, e.g. `bar` in `$crate::bar!()`."""
        for child in self.syntax.children():
            if child.kind is SyntaxKind.NAME_REF:
                return child
            if child.kind is SyntaxKind.PATH:
                refs = [node for node in child.descendants() if node.kind is SyntaxKind.NAME_REF]
                return refs[-1] if refs else None
        return None

    def name(self) -> Optional[str]:
        name_ref = self.name_ref()
        return name_ref.text.strip() if name_ref else None

    def token_tree(self) -> Optional[SyntaxNode]:
        for child in self.syntax.children():
            if child.kind is SyntaxKind.TOKEN_TREE:
                return child
        return None

    def arguments(self) -> List[GreenToken]:
        """Significant tokens between the call's outer delimiters."""
        token_tree = self.token_tree()
        if token_tree is None:
            return []
        return significant_tokens(token_tree)[1:-1]


class MacroRules:
    """A `macro_rules! name { ... }` definition."""

    __slots__ = ("syntax",)

    def __init__(self, syntax: SyntaxNode):
        self.syntax = syntax

    @classmethod
    def cast(cls, node: SyntaxNode) -> Optional["MacroRules"]:
        return cls(node) if node.kind is SyntaxKind.MACRO_RULES else None

    def name(self) -> Optional[str]:
        tokens = significant_tokens(self.syntax)
        # macro_rules ! NAME
        for index, token in enumerate(tokens[:-1]):
            if token.kind is SyntaxKind.BANG:
                return tokens[index + 1].text
        return None
