"""
Locate, expand and format macro invocations.
"""

from .analysis import Analysis, FilePosition, offset_from_line_column
from .expand_macro import ExpandedMacro, expand_macro
from .expander import MacroExpander, RecursiveExpander
from .locator import locate_macro_call
from .whitespace import insert_whitespaces

__all__ = [
    "Analysis",
    "ExpandedMacro",
    "FilePosition",
    "MacroExpander",
    "RecursiveExpander",
    "expand_macro",
    "insert_whitespaces",
    "locate_macro_call",
    "offset_from_line_column",
]
