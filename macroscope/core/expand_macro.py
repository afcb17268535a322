"""
The "expand macro" feature: name plus readable recursive expansion of the
macro call under the cursor.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..config import ExpandConfig
from ..syntax.tree import SyntaxNode
from .expander import MacroExpander, RecursiveExpander
from .locator import locate_macro_call
from .whitespace import insert_whitespaces

logger = logging.getLogger(__name__)


@dataclass
class ExpandedMacro:
    """Result of expanding the macro under the cursor."""

    name: str
    expansion: str

    def to_markdown(self) -> str:
        """Render as a titled rust code block."""
        return f"// Recursive expansion of {self.name}! macro\n```rust\n{self.expansion.rstrip()}\n```"


def expand_macro(
    root: SyntaxNode,
    offset: int,
    sema: MacroExpander,
    config: Optional[ExpandConfig] = None,
) -> Optional[ExpandedMacro]:
    """
    Expand the macro call at offset in a parsed file.

    Args:
        root: Root of the parsed file
        offset: Text offset of the cursor
        sema: One-level expansion service
        config: Expansion settings (default: ExpandConfig())

    Returns:
        ExpandedMacro, or None if there is no macro call at offset or the
        call itself cannot be expanded.
    """
    config = config or ExpandConfig()

    located = locate_macro_call(root, offset)
    if located is None:
        return None
    name, macro_call = located

    expanded = RecursiveExpander(sema, config.max_expansion_depth).expand(macro_call)
    if expanded is None:
        logger.info(f"Macro {name}! could not be expanded")
        return None

    # Expansion output carries no whitespace; rebuild a readable layout
    expansion = insert_whitespaces(expanded)
    logger.debug(f"Expanded {name}! to {len(expansion)} characters")
    return ExpandedMacro(name=name, expansion=expansion)
