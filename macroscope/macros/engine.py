"""
One-level expansion of declarative macros.

MacroRulesExpander is the substitution service the recursive expander
talks to: given one MACRO_CALL node it returns the syntax tree of a single
round of substitution, or None when it cannot expand the call.
"""

import logging
from typing import Dict, List, Optional, Sequence

from ..syntax.ast import MacroCall, MacroRules, significant_tokens
from ..syntax.builder import build_expansion
from ..syntax.tree import GreenToken, SyntaxNode
from .matcher import match_rule
from .rules import MacroDefinition
from .token_tree import ExpandError, parse_token_trees
from .transcriber import transcribe

logger = logging.getLogger(__name__)


class MacroRulesExpander:
    """Expand calls to the `macro_rules!` macros it knows about."""

    def __init__(self, definitions: Optional[Dict[str, MacroDefinition]] = None):
        self.definitions: Dict[str, MacroDefinition] = dict(definitions or {})

    @classmethod
    def from_tree(cls, root: SyntaxNode, before: Optional[int] = None) -> "MacroRulesExpander":
        """Collect the macro definitions of a parsed file, optionally only those before an offset."""
        expander = cls()
        expander.add_definitions(root, before)
        return expander

    def add_definitions(self, root: SyntaxNode, before: Optional[int] = None) -> List[MacroDefinition]:
        """
        Register the definitions found under root.

        Later definitions of the same name replace earlier ones. Malformed
        definitions are logged and skipped.

        Args:
            root: Tree to search
            before: If given, only definitions starting before this offset
                are registered, as `macro_rules!` is in scope only after
                its definition
        """
        added = []
        for node in root.descendants():
            rules = MacroRules.cast(node)
            if rules is None:
                continue
            if before is not None and node.text_range[0] >= before:
                continue
            try:
                definition = MacroDefinition.parse(significant_tokens(node), offset=node.text_range[0])
            except ExpandError as e:
                logger.warning(f"Skipping macro definition {rules.name() or '?'}: {e}")
                continue
            logger.debug(f"Found macro_rules! {definition.name} with {len(definition.rules)} rule(s)")
            self.definitions[definition.name] = definition
            added.append(definition)
        return added

    def expand(self, macro_call: SyntaxNode) -> Optional[SyntaxNode]:
        """
        Expand a call by exactly one level.

        Returns:
            The expansion tree, or None if the macro is unknown, no rule
            matches, or transcription fails.
        """
        call = MacroCall.cast(macro_call)
        if call is None:
            return None
        name = call.name()
        definition = self.definitions.get(name) if name else None
        if definition is None:
            logger.debug(f"Unresolved macro {name}!")
            return None

        try:
            tokens = self.expand_tokens(definition, call.arguments())
        except ExpandError as e:
            logger.debug(f"Cannot expand {name}!: {e}")
            return None
        return build_expansion(tokens)

    @staticmethod
    def expand_tokens(definition: MacroDefinition, arguments: Sequence[GreenToken]) -> List[GreenToken]:
        """
        Apply the first matching rule to the argument tokens.

        Raises:
            ExpandError: If no rule matches or transcription fails
        """
        trees = parse_token_trees(arguments)
        for index, rule in enumerate(definition.rules):
            bindings = match_rule(rule.pattern, trees)
            if bindings is not None:
                logger.debug(f"{definition.name}! matched rule {index}")
                return transcribe(rule.body, bindings)
        raise ExpandError(f"No rule of {definition.name}! matches the arguments")
