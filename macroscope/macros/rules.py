"""
Parsed form of `macro_rules!` definitions.

Patterns (the matcher side) and bodies (the transcriber side) share one
element vocabulary: literal tokens, delimited groups, `$name` variables,
`$(...)` repetitions and `$crate`.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Sequence, Tuple, Union

from ..syntax.kinds import SyntaxKind
from ..syntax.tree import GreenToken
from .token_tree import ExpandError, Subtree, TokenTree, is_leaf, parse_token_trees

FRAGMENTS = frozenset(
    {
        "tt", "ident", "lifetime", "literal", "block", "vis", "item",
        "expr", "stmt", "ty", "path", "pat", "pat_param", "meta",
    }
)

REPEAT_OPS = frozenset({"*", "+", "?"})


@dataclass(frozen=True)
class Literal:
    token: GreenToken


@dataclass(frozen=True)
class Group:
    open: GreenToken
    close: GreenToken
    elements: Tuple["Element", ...]


@dataclass(frozen=True)
class Var:
    name: str
    fragment: Optional[str] = None


@dataclass(frozen=True)
class CrateRef:
    pass


@dataclass(frozen=True)
class Repeat:
    elements: Tuple["Element", ...]
    separator: Optional[GreenToken]
    op: str


Element = Union[Literal, Group, Var, CrateRef, Repeat]


@dataclass(frozen=True)
class Rule:
    pattern: Tuple[Element, ...]
    body: Tuple[Element, ...]


@dataclass
class MacroDefinition:
    """A named list of rules, tried in order."""

    name: str
    rules: List[Rule] = field(default_factory=list)
    offset: int = 0

    @classmethod
    def parse(cls, tokens: Sequence[GreenToken], offset: int = 0) -> "MacroDefinition":
        """
        Parse `macro_rules! name { (pattern) => {body}; ... }`.

        Args:
            tokens: Significant tokens of the whole definition
            offset: Source offset of the definition, kept for reporting

        Raises:
            ExpandError: If the definition is malformed
        """
        trees = parse_token_trees(tokens)
        if len(trees) < 4 or not is_leaf(trees[0], "macro_rules") or not is_leaf(trees[1], "!"):
            raise ExpandError("Expected `macro_rules! name { ... }`")
        name_token = trees[2]
        if not isinstance(name_token, GreenToken) or name_token.kind is not SyntaxKind.IDENT:
            raise ExpandError("Expected macro name after `macro_rules!`")
        body = trees[3]
        if not isinstance(body, Subtree):
            raise ExpandError(f"Expected rules block for macro {name_token.text}")
        return cls(name_token.text, parse_rules(body.children), offset)


def parse_rules(trees: Sequence[TokenTree]) -> List[Rule]:
    """Parse `(pattern) => {body}` pairs separated by `;`."""
    rules = []
    pos = 0
    while pos < len(trees):
        if pos + 2 >= len(trees):
            raise ExpandError("Incomplete macro rule")
        pattern, arrow, body = trees[pos : pos + 3]
        if not isinstance(pattern, Subtree) or not is_leaf(arrow, "=>") or not isinstance(body, Subtree):
            raise ExpandError("Expected `(pattern) => {body}`")
        rules.append(
            Rule(
                pattern=parse_elements(pattern.children, is_pattern=True),
                body=parse_elements(body.children, is_pattern=False),
            )
        )
        pos += 3
        if pos < len(trees) and is_leaf(trees[pos], ";"):
            pos += 1
    if not rules:
        raise ExpandError("Macro has no rules")
    return rules


def parse_elements(trees: Sequence[TokenTree], is_pattern: bool) -> Tuple[Element, ...]:
    """
    Parse the inside of a pattern or body.

    In patterns a variable is `$name:fragment`; in bodies it is `$name`.
    """
    elements: List[Element] = []
    pos = 0
    while pos < len(trees):
        tree = trees[pos]

        if isinstance(tree, Subtree):
            elements.append(Group(tree.open, tree.close, parse_elements(tree.children, is_pattern)))
            pos += 1
            continue

        if tree.kind is SyntaxKind.DOLLAR and pos + 1 < len(trees):
            following = trees[pos + 1]

            if isinstance(following, Subtree) and following.open.kind is SyntaxKind.L_PAREN:
                inner = parse_elements(following.children, is_pattern)
                separator, op, pos = _repeat_suffix(trees, pos + 2)
                elements.append(Repeat(inner, separator, op))
                continue

            if isinstance(following, GreenToken) and following.kind in (SyntaxKind.IDENT, SyntaxKind.KEYWORD):
                if following.text == "crate":
                    elements.append(CrateRef())
                    pos += 2
                    continue
                if not is_pattern:
                    elements.append(Var(following.text))
                    pos += 2
                    continue
                fragment = trees[pos + 3] if pos + 3 < len(trees) else None
                if not (pos + 2 < len(trees) and is_leaf(trees[pos + 2], ":") and isinstance(fragment, GreenToken)):
                    raise ExpandError(f"Missing fragment specifier for ${following.text}")
                if fragment.text not in FRAGMENTS:
                    raise ExpandError(f"Unknown fragment specifier {fragment.text!r}")
                elements.append(Var(following.text, fragment.text))
                pos += 4
                continue

        elements.append(Literal(tree))
        pos += 1
    return tuple(elements)


def _repeat_suffix(trees: Sequence[TokenTree], pos: int):
    """Read the optional separator and the operator after `$(...)`."""
    if pos < len(trees) and isinstance(trees[pos], GreenToken) and trees[pos].text in REPEAT_OPS:
        return None, trees[pos].text, pos + 1
    if (
        pos + 1 < len(trees)
        and isinstance(trees[pos], GreenToken)
        and isinstance(trees[pos + 1], GreenToken)
        and trees[pos + 1].text in REPEAT_OPS
    ):
        return trees[pos], trees[pos + 1].text, pos + 2
    raise ExpandError("Expected repetition operator after `$(...)`")


def var_names(elements: Sequence[Element]) -> FrozenSet[str]:
    """Names of all variables used anywhere in elements."""
    names = set()
    for element in elements:
        if isinstance(element, Var):
            names.add(element.name)
        elif isinstance(element, (Group, Repeat)):
            names.update(var_names(element.elements))
    return frozenset(names)
