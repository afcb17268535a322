"""
Match macro arguments against rule patterns.

Matching is greedy and never backtracks: a repetition takes as many
iterations as it can, and a greedy fragment such as `expr` takes token
trees until it reaches one of its stop tokens or the literal the pattern
expects next.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

from ..syntax.kinds import SyntaxKind
from ..syntax.tree import GreenToken
from .rules import CrateRef, Element, Group, Literal, Repeat, Var, var_names
from .token_tree import ExpandError, Subtree, TokenTree, is_leaf


@dataclass
class Fragment:
    """Token trees captured by one variable."""

    trees: List[TokenTree]


@dataclass
class Nested:
    """One binding per iteration of the enclosing repetition."""

    items: List["Binding"]


Binding = Union[Fragment, Nested]
Bindings = Dict[str, Binding]

_EXPR_STOPS = frozenset({",", ";", "=>"})
_TYPE_STOPS = frozenset({",", ";", "=>", "=", "|", "{", "where"})
_PAT_STOPS = frozenset({"=>", ",", "=", "if", "in"})

STOP_TOKENS = {
    "expr": _EXPR_STOPS,
    "stmt": _EXPR_STOPS,
    "ty": _TYPE_STOPS,
    "path": _TYPE_STOPS,
    "pat": _PAT_STOPS,
    "pat_param": _PAT_STOPS | {"|"},
    "meta": frozenset({","}),
}


def match_rule(pattern: Sequence[Element], trees: Sequence[TokenTree]) -> Optional[Bindings]:
    """
    Match the whole input against a pattern.

    Returns:
        The variable bindings, or None if the pattern does not cover the
        input exactly.
    """
    result = _match_seq(pattern, trees, 0, None)
    if result is None:
        return None
    pos, bindings = result
    return bindings if pos == len(trees) else None


def _match_seq(
    elements: Sequence[Element], trees: Sequence[TokenTree], pos: int, follow: Optional[str]
) -> Optional[Tuple[int, Bindings]]:
    bindings: Bindings = {}
    for index, element in enumerate(elements):
        next_follow = _leading_text(elements[index + 1]) if index + 1 < len(elements) else follow
        result = _match_element(element, trees, pos, next_follow)
        if result is None:
            return None
        pos, found = result
        bindings.update(found)
    return pos, bindings


def _match_element(element: Element, trees: Sequence[TokenTree], pos: int, follow: Optional[str]):
    if isinstance(element, Literal):
        if pos < len(trees) and is_leaf(trees[pos], element.token.text):
            return pos + 1, {}
        return None

    if isinstance(element, CrateRef):
        if pos < len(trees) and is_leaf(trees[pos], "crate"):
            return pos + 1, {}
        return None

    if isinstance(element, Group):
        if pos >= len(trees):
            return None
        tree = trees[pos]
        if not isinstance(tree, Subtree) or tree.delimiter != element.open.text:
            return None
        result = _match_seq(element.elements, tree.children, 0, None)
        if result is None or result[0] != len(tree.children):
            return None
        return pos + 1, result[1]

    if isinstance(element, Var):
        end = match_fragment(element.fragment, trees, pos, follow)
        if end is None:
            return None
        return end, {element.name: Fragment(list(trees[pos:end]))}

    return _match_repeat(element, trees, pos, follow)


def _match_repeat(element: Repeat, trees: Sequence[TokenTree], pos: int, follow: Optional[str]):
    iterations: List[Bindings] = []
    inner_follow = element.separator.text if element.separator is not None else follow
    while True:
        if element.op == "?" and iterations:
            break
        start = pos
        if iterations and element.separator is not None:
            if pos < len(trees) and is_leaf(trees[pos], element.separator.text):
                pos += 1
            else:
                break
        result = _match_seq(element.elements, trees, pos, inner_follow)
        if result is None or result[0] == start:
            pos = start
            break
        pos, found = result
        iterations.append(found)

    if element.op == "+" and not iterations:
        return None
    bindings = {
        name: Nested([iteration[name] for iteration in iterations])
        for name in var_names(element.elements)
    }
    return pos, bindings


def match_fragment(fragment: Optional[str], trees: Sequence[TokenTree], pos: int, follow: Optional[str]) -> Optional[int]:
    """
    Match one fragment starting at pos.

    Returns:
        The position just past the fragment, or None if it does not match.

    Raises:
        ExpandError: If the fragment specifier is unknown
    """
    if fragment == "vis":
        if pos < len(trees) and is_leaf(trees[pos], "pub"):
            pos += 1
            if pos < len(trees) and isinstance(trees[pos], Subtree) and trees[pos].delimiter == "(":
                pos += 1
        return pos

    if pos >= len(trees):
        return None
    tree = trees[pos]

    if fragment == "tt":
        return pos + 1

    if fragment == "ident":
        return pos + 1 if isinstance(tree, GreenToken) and tree.kind is SyntaxKind.IDENT else None

    if fragment == "lifetime":
        return pos + 1 if isinstance(tree, GreenToken) and tree.kind is SyntaxKind.LIFETIME else None

    if fragment == "literal":
        if is_leaf(tree, "-") and pos + 1 < len(trees) and _is_literal(trees[pos + 1]):
            return pos + 2
        return pos + 1 if _is_literal(tree) else None

    if fragment == "block":
        return pos + 1 if isinstance(tree, Subtree) and tree.delimiter == "{" else None

    if fragment == "item":
        end = pos
        while end < len(trees):
            current = trees[end]
            end += 1
            if is_leaf(current, ";") or (isinstance(current, Subtree) and current.delimiter == "{"):
                break
        return end

    if fragment not in STOP_TOKENS:
        raise ExpandError(f"Unsupported fragment specifier {fragment!r}")

    stops = STOP_TOKENS[fragment] | ({follow} if follow else set())
    end = pos
    while end < len(trees) and not _is_stop(trees[end], stops):
        end += 1
    return end if end > pos else None


def _is_literal(tree: TokenTree) -> bool:
    return isinstance(tree, GreenToken) and (tree.kind.is_literal() or tree.text in ("true", "false"))


def _is_stop(tree: TokenTree, stops) -> bool:
    if isinstance(tree, Subtree):
        return tree.delimiter in stops
    return tree.text in stops


def _leading_text(element: Element) -> Optional[str]:
    """Spelling of the token an element must start with, if fixed."""
    if isinstance(element, Literal):
        return element.token.text
    if isinstance(element, Group):
        return element.open.text
    if isinstance(element, CrateRef):
        return "crate"
    return None
