"""
Find the macro invocation under a cursor.
"""

import logging
from itertools import islice
from typing import Optional, Tuple

from ..syntax.ast import MacroCall
from ..syntax.kinds import SyntaxKind
from ..syntax.tree import SyntaxNode, find_node_at_offset

logger = logging.getLogger(__name__)


def locate_macro_call(root: SyntaxNode, offset: int) -> Optional[Tuple[str, SyntaxNode]]:
    """
    Find the macro call whose name reference sits at offset.

    Args:
        root: Root of the parsed file
        offset: Text offset of the cursor

    Returns:
        (name, MACRO_CALL node) for the nearest enclosing call, or None if
        there is no name reference at offset or it is not inside a call.
    """
    name_ref = find_node_at_offset(root, offset, SyntaxKind.NAME_REF)
    if name_ref is None:
        logger.debug(f"No name reference at offset {offset}")
        return None

    for node in islice(name_ref.ancestors(), 1, None):
        if MacroCall.cast(node):
            return name_ref.text, node

    logger.debug(f"Name {name_ref.text!r} at offset {offset} is not part of a macro call")
    return None
