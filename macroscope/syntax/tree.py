"""
Immutable syntax trees.

Two layers, in the usual green/red split:

- Green elements (GreenToken, GreenNode) hold the data: a kind plus either
  text or children. They carry no position and never change once built,
  so subtrees can be shared freely between trees.
- Red elements (SyntaxNode, SyntaxToken) are lightweight cursors over a
  green tree. They know their parent, their index in the parent and their
  absolute text offset, which is what navigation and identity need.

A red node's identity is its path of child indices from the root, scoped
to one root green tree (compared by object identity). Two cursors created
independently for the same position compare equal and hash equally, which
makes them usable as mapping keys.
"""

from dataclasses import dataclass
from functools import cached_property
from typing import Dict, Iterator, Mapping, Optional, Tuple, Union

from .kinds import SyntaxKind

TextRange = Tuple[int, int]


@dataclass(frozen=True)
class GreenToken:
    """A leaf: kind plus literal text."""

    kind: SyntaxKind
    text: str

    @property
    def text_len(self) -> int:
        return len(self.text)


@dataclass(frozen=True, eq=False)
class GreenNode:
    """An interior node: kind plus an ordered tuple of children."""

    kind: SyntaxKind
    children: Tuple[Union["GreenNode", GreenToken], ...] = ()

    @cached_property
    def text_len(self) -> int:
        return sum(child.text_len for child in self.children)

    def __repr__(self) -> str:
        return f"GreenNode({self.kind.name}, children={len(self.children)})"


GreenElement = Union[GreenNode, GreenToken]


class SyntaxToken:
    """Positioned view of a green token."""

    __slots__ = ("green", "parent", "index", "offset")

    def __init__(self, green: GreenToken, parent: "SyntaxNode", index: int, offset: int):
        self.green = green
        self.parent = parent
        self.index = index
        self.offset = offset

    @property
    def kind(self) -> SyntaxKind:
        return self.green.kind

    @property
    def text(self) -> str:
        return self.green.text

    @property
    def text_range(self) -> TextRange:
        return (self.offset, self.offset + self.green.text_len)

    @property
    def path(self) -> Tuple[int, ...]:
        return self.parent.path + (self.index,)

    def ancestors(self) -> Iterator["SyntaxNode"]:
        return self.parent.ancestors()

    def __eq__(self, other) -> bool:
        return isinstance(other, SyntaxToken) and self.parent == other.parent and self.index == other.index

    def __hash__(self) -> int:
        return hash((self.parent, self.index))

    def __repr__(self) -> str:
        return f"{self.kind.name}@{self.offset}..{self.offset + self.green.text_len} {self.text!r}"


class SyntaxNode:
    """Positioned view of a green node."""

    __slots__ = ("green", "parent", "index", "offset")

    def __init__(
        self,
        green: GreenNode,
        parent: Optional["SyntaxNode"] = None,
        index: int = 0,
        offset: int = 0,
    ):
        self.green = green
        self.parent = parent
        self.index = index
        self.offset = offset

    @classmethod
    def new_root(cls, green: GreenNode) -> "SyntaxNode":
        return cls(green)

    # ==================== Properties ====================

    @property
    def kind(self) -> SyntaxKind:
        return self.green.kind

    @property
    def text_range(self) -> TextRange:
        return (self.offset, self.offset + self.green.text_len)

    @property
    def text(self) -> str:
        return "".join(token.text for token in self.tokens())

    @property
    def root(self) -> "SyntaxNode":
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    @property
    def path(self) -> Tuple[int, ...]:
        indices = []
        node = self
        while node.parent is not None:
            indices.append(node.index)
            node = node.parent
        return tuple(reversed(indices))

    # ==================== Navigation ====================

    def children_with_tokens(self) -> Iterator[Union["SyntaxNode", SyntaxToken]]:
        offset = self.offset
        for index, child in enumerate(self.green.children):
            if isinstance(child, GreenNode):
                yield SyntaxNode(child, self, index, offset)
            else:
                yield SyntaxToken(child, self, index, offset)
            offset += child.text_len

    def children(self) -> Iterator["SyntaxNode"]:
        for child in self.children_with_tokens():
            if isinstance(child, SyntaxNode):
                yield child

    def descendants(self) -> Iterator["SyntaxNode"]:
        """All nodes of this subtree in pre-order, this node first."""
        yield self
        for child in self.children():
            yield from child.descendants()

    def tokens(self) -> Iterator[SyntaxToken]:
        """All tokens of this subtree in document order."""
        for child in self.children_with_tokens():
            if isinstance(child, SyntaxNode):
                yield from child.tokens()
            else:
                yield child

    def ancestors(self) -> Iterator["SyntaxNode"]:
        """This node, then each parent up to the root."""
        node = self
        while node is not None:
            yield node
            node = node.parent

    # ==================== Identity ====================

    def __eq__(self, other) -> bool:
        if not isinstance(other, SyntaxNode):
            return NotImplemented
        return self.root.green is other.root.green and self.path == other.path

    def __hash__(self) -> int:
        return hash((id(self.root.green), self.path))

    def __repr__(self) -> str:
        start, end = self.text_range
        return f"{self.kind.name}@{start}..{end}"


def find_node_at_offset(root: SyntaxNode, offset: int, kind: SyntaxKind) -> Optional[SyntaxNode]:
    """
    Find the smallest node of the given kind around the tokens at offset.

    A token touches the offset when start <= offset <= end, so an offset
    sitting between two tokens considers both of them.

    Returns:
        The innermost matching ancestor-or-self node, or None if no token
        at the offset has such an ancestor.
    """
    best = None
    for token in root.tokens():
        start, end = token.text_range
        if start > offset:
            break
        if offset > end:
            continue
        for node in token.ancestors():
            if node.kind is kind:
                if best is None or node.green.text_len < best.green.text_len:
                    best = node
                break
    return best


def replace_descendants(root: SyntaxNode, replacements: Mapping[SyntaxNode, SyntaxNode]) -> SyntaxNode:
    """
    Build a new tree with the given descendants swapped out.

    Every key that addresses a node strictly below root in root's tree is
    replaced by the green tree of its value. Keys from other trees, and a
    key equal to root itself, are ignored. Subtrees without replacements
    are reused as-is.

    Returns:
        A new root node, or root unchanged when nothing applies.
    """
    by_path: Dict[Tuple[int, ...], GreenNode] = {}
    base = root.path
    for target, replacement in replacements.items():
        if target.root.green is not root.root.green:
            continue
        path = target.path
        if len(path) <= len(base) or path[: len(base)] != base:
            continue
        by_path[path[len(base):]] = replacement.green

    if not by_path:
        return root

    def rebuild(green: GreenNode, path: Tuple[int, ...]) -> GreenNode:
        if not any(len(p) > len(path) and p[: len(path)] == path for p in by_path):
            return green
        children = []
        for index, child in enumerate(green.children):
            child_path = path + (index,)
            if child_path in by_path:
                children.append(by_path[child_path])
            elif isinstance(child, GreenNode):
                children.append(rebuild(child, child_path))
            else:
                children.append(child)
        return GreenNode(green.kind, tuple(children))

    return SyntaxNode.new_root(rebuild(root.green, ()))
