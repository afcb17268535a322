"""
File-level entry points: parse a file, find its macros, expand at a position.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..config import ExpandConfig, load_config
from ..languages import get_parser
from ..macros import MacroDefinition, MacroRulesExpander
from ..syntax.ast import MacroCall
from ..syntax.tree import SyntaxNode
from .expand_macro import ExpandedMacro, expand_macro

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilePosition:
    """A text offset inside a file."""

    file_path: Path
    offset: int


def offset_from_line_column(text: str, line: int, column: int) -> int:
    """
    Convert a 1-based line and column into a text offset.

    Raises:
        ValueError: If the position is outside the text
    """
    lines = text.splitlines(keepends=True)
    if line < 1 or line > max(len(lines), 1):
        raise ValueError(f"Line {line} is outside the file ({len(lines)} lines)")
    current = lines[line - 1] if lines else ""
    if column < 1 or column > len(current.rstrip("\r\n")) + 1:
        raise ValueError(f"Column {column} is outside line {line}")
    return sum(len(previous) for previous in lines[: line - 1]) + column - 1


def line_of_offset(text: str, offset: int) -> int:
    """1-based line number containing offset."""
    return text.count("\n", 0, offset) + 1


class Analysis:
    """
    Parse and expand macros in source files.

    Args:
        files: In-memory file contents, consulted before the disk
        config: Expansion settings; when omitted, each file gets the
            settings of its nearest .macroscope.py
    """

    def __init__(self, files: Optional[Dict[Path, str]] = None, config: Optional[ExpandConfig] = None):
        self.files = {Path(path): text for path, text in (files or {}).items()}
        self.config = config

    def file_text(self, file_path: Path) -> str:
        file_path = Path(file_path)
        if file_path in self.files:
            return self.files[file_path]
        return file_path.read_text(encoding="utf8")

    def parse(self, file_path: Path) -> SyntaxNode:
        """Parse a file into a syntax tree."""
        parser = get_parser(file_path)
        return parser.parse_text(self.file_text(file_path))

    def config_for(self, file_path: Path) -> ExpandConfig:
        if self.config is not None:
            return self.config
        if Path(file_path) in self.files:
            return ExpandConfig()
        return load_config(file_path)

    def expand_macro(self, position: FilePosition) -> Optional[ExpandedMacro]:
        """
        Expand the macro call at a file position.

        Returns:
            ExpandedMacro, or None if there is nothing to expand there
        """
        root = self.parse(position.file_path)
        sema = MacroRulesExpander.from_tree(root, before=position.offset)
        return expand_macro(root, position.offset, sema, self.config_for(position.file_path))

    def macro_definitions(self, file_path: Path) -> List[MacroDefinition]:
        """The `macro_rules!` definitions of a file, in source order."""
        root = self.parse(file_path)
        return MacroRulesExpander().add_definitions(root)

    def find_macro_call(self, file_path: Path, name: str) -> Optional[FilePosition]:
        """Position of the first call to the named macro, if any."""
        root = self.parse(file_path)
        for node in root.descendants():
            call = MacroCall.cast(node)
            if call is None or call.name() != name:
                continue
            name_ref = call.name_ref()
            return FilePosition(Path(file_path), name_ref.text_range[0])
        return None

    def expansion_at(self, file_path: Path, line: int, column: int) -> Tuple[FilePosition, Optional[ExpandedMacro]]:
        """Expand at an editor-style position."""
        offset = offset_from_line_column(self.file_text(file_path), line, column)
        position = FilePosition(Path(file_path), offset)
        return position, self.expand_macro(position)
