"""
Recursive macro expansion.

Each level asks the substitution service for one round of expansion,
then expands every macro call found in the result and splices the results
back in with a single simultaneous substitution. Calls that cannot be
expanded stay in the tree verbatim; only a failure of the call being
expanded at the current level fails that level.
"""

import logging
from typing import Dict, Optional, Protocol

from ..config import DEFAULT_MAX_EXPANSION_DEPTH
from ..syntax.ast import MacroCall
from ..syntax.tree import SyntaxNode, replace_descendants

logger = logging.getLogger(__name__)


class MacroExpander(Protocol):
    """A service that expands one macro call by a single level."""

    def expand(self, macro_call: SyntaxNode) -> Optional[SyntaxNode]:
        """Return the one-level expansion of macro_call, or None on failure."""
        ...


class RecursiveExpander:
    """Expand a macro call and every call its expansion produces."""

    def __init__(self, sema: MacroExpander, max_depth: int = DEFAULT_MAX_EXPANSION_DEPTH):
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")
        self.sema = sema
        self.max_depth = max_depth

    def expand(self, macro_call: SyntaxNode) -> Optional[SyntaxNode]:
        """
        Fully expand macro_call.

        Returns:
            The expanded tree, or None if macro_call itself cannot be
            expanded.
        """
        return self._expand(macro_call, 0)

    def _expand(self, macro_call: SyntaxNode, depth: int) -> Optional[SyntaxNode]:
        if depth > self.max_depth:
            logger.warning(f"Expansion depth limit {self.max_depth} reached; leaving call unexpanded")
            return None

        expanded = self.sema.expand(macro_call)
        if expanded is None:
            return None

        # Collect first: substitution must see the tree exactly as expanded
        children = [node for node in expanded.descendants() if MacroCall.cast(node)]
        logger.debug(f"Depth {depth}: {len(children)} nested call(s) in expansion")

        replaces: Dict[SyntaxNode, SyntaxNode] = {}
        for child in children:
            new_node = self._expand(child, depth + 1)
            if new_node is None:
                logger.debug(f"Leaving {MacroCall(child).name()}! unexpanded")
                continue
            # The root is never replaced by replace_descendants, so a call
            # that makes up the whole expansion is swapped in here
            if child == expanded:
                expanded = new_node
            else:
                replaces[child] = new_node

        return replace_descendants(expanded, replaces)
