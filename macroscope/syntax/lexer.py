"""
Lossless tokenizer for Rust source text.

Every character of the input ends up in exactly one token, so joining the
token texts reproduces the input. Characters that start no known token
become single-character ERROR_TOKEN tokens instead of raising.
"""

import re
from typing import List

from .kinds import KEYWORDS, PUNCTUATION, SyntaxKind
from .tree import GreenToken

_WHITESPACE = re.compile(r"\s+")
_LINE_COMMENT = re.compile(r"//[^\n]*")
_RAW_STRING = re.compile(r'(b?)r(#*)".*?"\2', re.DOTALL)
_STRING = re.compile(r'(b?)"(?:\\.|[^"\\])*"', re.DOTALL)
_CHAR = re.compile(r"(b?)'(?:\\(?:x[0-9a-fA-F]{2}|u\{[0-9a-fA-F_]{1,6}\}|.)|[^\\'\n])'")
_LIFETIME = re.compile(r"'[^\W\d]\w*")
_RAW_IDENT = re.compile(r"r#[^\W\d]\w*")
_IDENT = re.compile(r"[^\W\d]\w*")
_RADIX_NUMBER = re.compile(r"0[xob][0-9a-fA-F_]+(?:[iu](?:8|16|32|64|128|size))?")
_NUMBER = re.compile(r"\d[\d_]*(?P<fraction>\.\d[\d_]*)?(?P<exponent>[eE][+-]?[\d_]+)?(?P<suffix>[^\W\d]\w*)?")

# Longest spellings first so that "..=" wins over ".." and "."
_PUNCT_SPELLINGS = sorted(PUNCTUATION, key=len, reverse=True)


def tokenize(text: str) -> List[GreenToken]:
    """Split text into green tokens, trivia included."""
    tokens = []
    pos = 0
    while pos < len(text):
        kind, end = _next_token(text, pos)
        tokens.append(GreenToken(kind, text[pos:end]))
        pos = end
    return tokens


def _next_token(text: str, pos: int):
    ch = text[pos]

    if ch.isspace():
        return SyntaxKind.WHITESPACE, _WHITESPACE.match(text, pos).end()

    if text.startswith("//", pos):
        return SyntaxKind.COMMENT, _LINE_COMMENT.match(text, pos).end()

    if text.startswith("/*", pos):
        return SyntaxKind.COMMENT, _block_comment_end(text, pos)

    if ch in "br":
        match = _RAW_STRING.match(text, pos)
        if match:
            kind = SyntaxKind.BYTE_STRING if match.group(1) else SyntaxKind.STRING
            return kind, match.end()
        match = _RAW_IDENT.match(text, pos)
        if match:
            return SyntaxKind.IDENT, match.end()

    if ch == '"' or text.startswith('b"', pos):
        match = _STRING.match(text, pos)
        if match:
            kind = SyntaxKind.BYTE_STRING if match.group(1) else SyntaxKind.STRING
            return kind, match.end()
        # Unterminated string runs to the end of input
        return SyntaxKind.ERROR_TOKEN, len(text)

    if ch == "'" or text.startswith("b'", pos):
        match = _CHAR.match(text, pos)
        if match:
            kind = SyntaxKind.BYTE if match.group(1) else SyntaxKind.CHAR
            return kind, match.end()
        match = _LIFETIME.match(text, pos)
        if match:
            return SyntaxKind.LIFETIME, match.end()

    if ch.isdigit():
        match = _RADIX_NUMBER.match(text, pos)
        if match:
            return SyntaxKind.INT_NUMBER, match.end()
        match = _NUMBER.match(text, pos)
        is_float = match.group("fraction") or match.group("exponent")
        suffix = match.group("suffix") or ""
        if suffix.startswith("f"):
            is_float = True
        return (SyntaxKind.FLOAT_NUMBER if is_float else SyntaxKind.INT_NUMBER), match.end()

    match = _IDENT.match(text, pos)
    if match:
        word = match.group(0)
        if word == "_":
            return SyntaxKind.UNDERSCORE, match.end()
        if word in KEYWORDS:
            return SyntaxKind.KEYWORD, match.end()
        return SyntaxKind.IDENT, match.end()

    for spelling in _PUNCT_SPELLINGS:
        if text.startswith(spelling, pos):
            return PUNCTUATION[spelling], pos + len(spelling)

    return SyntaxKind.ERROR_TOKEN, pos + 1


def _block_comment_end(text: str, pos: int) -> int:
    """Block comments nest; an unterminated one runs to the end of input."""
    depth = 0
    while pos < len(text):
        if text.startswith("/*", pos):
            depth += 1
            pos += 2
        elif text.startswith("*/", pos):
            depth -= 1
            pos += 2
            if depth == 0:
                return pos
        else:
            pos += 1
    return len(text)
