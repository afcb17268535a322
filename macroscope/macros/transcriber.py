"""
Substitute bindings into a rule body.
"""

from typing import List, Sequence, Tuple

from ..syntax.kinds import SyntaxKind
from ..syntax.tree import GreenToken
from .matcher import Binding, Bindings, Nested
from .rules import CrateRef, Element, Group, Literal, Repeat, Var, var_names
from .token_tree import ExpandError, flatten

CRATE_TOKEN = GreenToken(SyntaxKind.KEYWORD, "crate")
DOLLAR_TOKEN = GreenToken(SyntaxKind.DOLLAR, "$")


def transcribe(body: Sequence[Element], bindings: Bindings) -> List[GreenToken]:
    """
    Produce the token sequence of a rule body.

    Raises:
        ExpandError: If a repetition has no repeating variable, its
            variables repeat a different number of times, or a variable
            is used at a shallower depth than it was matched at
    """
    out: List[GreenToken] = []
    _transcribe_seq(body, bindings, (), out)
    return out


def _transcribe_seq(elements: Sequence[Element], bindings: Bindings, indices: Tuple[int, ...], out: List[GreenToken]):
    for element in elements:
        if isinstance(element, Literal):
            out.append(element.token)
        elif isinstance(element, CrateRef):
            out.append(CRATE_TOKEN)
        elif isinstance(element, Group):
            out.append(element.open)
            _transcribe_seq(element.elements, bindings, indices, out)
            out.append(element.close)
        elif isinstance(element, Var):
            if element.name not in bindings:
                # Unbound names pass through untouched
                out.extend([DOLLAR_TOKEN, GreenToken(SyntaxKind.IDENT, element.name)])
                continue
            binding = _resolve(bindings[element.name], indices)
            if isinstance(binding, Nested):
                raise ExpandError(f"Variable ${element.name} is still repeating at this depth")
            out.extend(flatten(binding.trees))
        elif isinstance(element, Repeat):
            count = _repeat_count(element, bindings, indices)
            for iteration in range(count):
                if iteration and element.separator is not None:
                    out.append(element.separator)
                _transcribe_seq(element.elements, bindings, indices + (iteration,), out)


def _resolve(binding: Binding, indices: Tuple[int, ...]) -> Binding:
    for index in indices:
        if not isinstance(binding, Nested):
            break
        if index >= len(binding.items):
            raise ExpandError("Repetition index out of range")
        binding = binding.items[index]
    return binding


def _repeat_count(element: Repeat, bindings: Bindings, indices: Tuple[int, ...]) -> int:
    counts = set()
    for name in var_names(element.elements):
        if name not in bindings:
            continue
        binding = _resolve(bindings[name], indices)
        if isinstance(binding, Nested):
            counts.add(len(binding.items))
    if not counts:
        raise ExpandError("Repetition contains no repeating variable")
    if len(counts) > 1:
        raise ExpandError(f"Variables repeat a different number of times: {sorted(counts)}")
    return counts.pop()
