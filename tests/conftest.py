"""
Shared fixtures for macroscope tests.
"""

from pathlib import Path

import pytest

from macroscope.core.analysis import Analysis, FilePosition
from macroscope.languages.rust import RustParser
from macroscope.syntax.ast import MacroCall
from macroscope.syntax.builder import build_expansion
from macroscope.syntax.lexer import tokenize

CURSOR = "<|>"


def extract_cursor(fixture: str):
    """Strip the <|> marker, returning (text, offset)."""
    offset = fixture.index(CURSOR)
    return fixture[:offset] + fixture[offset + len(CURSOR):], offset


@pytest.fixture(scope="session")
def rust_parser():
    """One tree-sitter backed parser for the whole session."""
    return RustParser()


@pytest.fixture
def analysis_and_position():
    """Build an in-memory Analysis for a fixture containing <|>."""

    def build(fixture: str, file_name: str = "lib.rs"):
        text, offset = extract_cursor(fixture)
        path = Path(file_name)
        return Analysis(files={path: text}), FilePosition(path, offset)

    return build


@pytest.fixture
def check_expand_macro(analysis_and_position):
    """Expand the macro at <|> in a fixture; None when nothing expands."""

    def check(fixture: str):
        analysis, position = analysis_and_position(fixture)
        return analysis.expand_macro(position)

    return check


class ScriptedExpander:
    """
    One-level expander driven by a name -> expansion text table.

    A name mapped to None (or missing) fails to expand. Every call is
    recorded so tests can check what was visited.
    """

    def __init__(self, expansions):
        self.expansions = expansions
        self.calls = []

    def expand(self, macro_call):
        name = MacroCall(macro_call).name()
        self.calls.append(name)
        text = self.expansions.get(name)
        if text is None:
            return None
        return build_expansion(tokenize(text))


@pytest.fixture
def scripted_expander():
    """Factory for ScriptedExpander instances."""
    return ScriptedExpander


@pytest.fixture
def expansion_tree():
    """Build an expansion tree from source-like text."""

    def build(text: str):
        return build_expansion(tokenize(text))

    return build


@pytest.fixture
def parse_with_cursor(rust_parser):
    """Parse a fixture containing <|>, returning (root, offset)."""

    def parse(fixture: str):
        text, offset = extract_cursor(fixture)
        return rust_parser.parse_text(text), offset

    return parse
