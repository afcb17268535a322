"""
Declarative macro (`macro_rules!`) substitution engine.
"""

from .engine import MacroRulesExpander
from .rules import MacroDefinition, Rule
from .token_tree import ExpandError

__all__ = ["ExpandError", "MacroDefinition", "MacroRulesExpander", "Rule"]
