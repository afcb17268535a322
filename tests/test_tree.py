"""Tests for syntax tree navigation, identity and substitution."""

from macroscope.syntax.kinds import SyntaxKind
from macroscope.syntax.tree import (
    GreenNode,
    GreenToken,
    SyntaxNode,
    find_node_at_offset,
    replace_descendants,
)


def ident(text):
    return GreenToken(SyntaxKind.IDENT, text)


def space():
    return GreenToken(SyntaxKind.WHITESPACE, " ")


def sample_tree():
    """SOURCE_FILE(NAME_REF(alpha) ' ' NODE(NAME_REF(beta) ' ' NAME_REF(gamma)))"""
    inner = GreenNode(
        SyntaxKind.NODE,
        (
            GreenNode(SyntaxKind.NAME_REF, (ident("beta"),)),
            space(),
            GreenNode(SyntaxKind.NAME_REF, (ident("gamma"),)),
        ),
    )
    green = GreenNode(
        SyntaxKind.SOURCE_FILE,
        (GreenNode(SyntaxKind.NAME_REF, (ident("alpha"),)), space(), inner),
    )
    return SyntaxNode.new_root(green)


class TestNavigation:
    """Positions, text and traversal order."""

    def test_text_and_ranges(self):
        """Ranges follow from token lengths."""
        root = sample_tree()
        assert root.text == "alpha beta gamma"
        assert root.text_range == (0, 16)
        names = [node for node in root.descendants() if node.kind is SyntaxKind.NAME_REF]
        assert [node.text_range for node in names] == [(0, 5), (6, 10), (11, 16)]

    def test_descendants_are_preorder_and_include_self(self):
        """Descendants come parent first."""
        root = sample_tree()
        assert [node.kind for node in root.descendants()] == [
            SyntaxKind.SOURCE_FILE,
            SyntaxKind.NAME_REF,
            SyntaxKind.NODE,
            SyntaxKind.NAME_REF,
            SyntaxKind.NAME_REF,
        ]

    def test_tokens_in_document_order(self):
        """Tokens come in source order."""
        root = sample_tree()
        assert [token.text for token in root.tokens()] == ["alpha", " ", "beta", " ", "gamma"]

    def test_ancestors_start_with_self(self):
        """Ancestors walk up to the root."""
        root = sample_tree()
        gamma = [node for node in root.descendants() if node.text == "gamma"][0]
        assert [node.kind for node in gamma.ancestors()] == [
            SyntaxKind.NAME_REF,
            SyntaxKind.NODE,
            SyntaxKind.SOURCE_FILE,
        ]
        assert gamma.path == (2, 2)


class TestIdentity:
    """Nodes compare by position within one tree."""

    def test_independent_cursors_are_equal(self):
        """Two cursors to one node are equal and hash alike."""
        root = sample_tree()
        first = list(root.descendants())[3]
        second = list(root.descendants())[3]
        assert first is not second
        assert first == second
        assert hash(first) == hash(second)

    def test_equal_content_in_different_trees_is_not_equal(self):
        """Identity is per tree, not per text."""
        assert sample_tree() != sample_tree()

    def test_same_text_at_different_positions_is_not_equal(self):
        """Identity is per position, not per text."""
        green = GreenNode(
            SyntaxKind.SOURCE_FILE,
            (
                GreenNode(SyntaxKind.NAME_REF, (ident("x"),)),
                GreenNode(SyntaxKind.NAME_REF, (ident("x"),)),
            ),
        )
        first, second = SyntaxNode.new_root(green).children()
        assert first.text == second.text
        assert first != second


class TestFindNodeAtOffset:
    """Smallest node of a kind touching an offset."""

    def test_inside_token(self):
        """An offset inside a name finds it."""
        node = find_node_at_offset(sample_tree(), 8, SyntaxKind.NAME_REF)
        assert node.text == "beta"

    def test_token_boundary_considers_both_sides(self):
        """Offset 10 is the end of beta and the start of the space."""
        node = find_node_at_offset(sample_tree(), 10, SyntaxKind.NAME_REF)
        assert node.text == "beta"

    def test_smallest_enclosing_node_wins(self):
        """The innermost node of the kind is returned."""
        node = find_node_at_offset(sample_tree(), 12, SyntaxKind.NODE)
        assert node.text == "beta gamma"

    def test_no_match_returns_none(self):
        """No node of the kind gives None."""
        assert find_node_at_offset(sample_tree(), 5, SyntaxKind.MACRO_CALL) is None

    def test_whitespace_only_offset(self):
        """Between two spaces-only neighbours nothing matches."""
        green = GreenNode(
            SyntaxKind.SOURCE_FILE,
            (GreenNode(SyntaxKind.NAME_REF, (ident("a"),)), GreenToken(SyntaxKind.WHITESPACE, "    ")),
        )
        assert find_node_at_offset(SyntaxNode.new_root(green), 3, SyntaxKind.NAME_REF) is None


class TestReplaceDescendants:
    """Simultaneous, identity-keyed substitution."""

    def replacement(self, text):
        return SyntaxNode.new_root(GreenNode(SyntaxKind.NAME_REF, (ident(text),)))

    def test_replaces_mapped_nodes(self):
        """All mapped nodes are replaced at once."""
        root = sample_tree()
        beta, gamma = [node for node in root.descendants() if node.text in ("beta", "gamma")]
        result = replace_descendants(root, {beta: self.replacement("B"), gamma: self.replacement("G")})
        assert result.text == "alpha B G"
        # Original is untouched
        assert root.text == "alpha beta gamma"

    def test_untouched_subtrees_are_shared(self):
        """Unchanged subtrees are reused."""
        root = sample_tree()
        alpha = list(root.children())[0]
        result = replace_descendants(root, {alpha: self.replacement("A")})
        assert result.text == "A beta gamma"
        assert list(result.children())[1].green is list(root.children())[1].green

    def test_root_is_never_replaced(self):
        """A key for the root itself is ignored."""
        root = sample_tree()
        result = replace_descendants(root, {root: self.replacement("X")})
        assert result is root

    def test_keys_from_other_trees_are_ignored(self):
        """Keys from other trees are ignored."""
        root = sample_tree()
        other = sample_tree()
        foreign = list(other.children())[0]
        result = replace_descendants(root, {foreign: self.replacement("X")})
        assert result.text == "alpha beta gamma"

    def test_replacement_subtree_is_not_descended(self):
        """A mapped node's own children are not visited for further replacement."""
        root = sample_tree()
        inner = [node for node in root.descendants() if node.kind is SyntaxKind.NODE][0]
        beta = list(inner.children())[0]
        result = replace_descendants(root, {inner: self.replacement("I"), beta: self.replacement("B")})
        assert result.text == "alpha I"
