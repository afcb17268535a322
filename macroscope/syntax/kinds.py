"""
Syntax kinds for tokens and nodes, plus the classification predicates
the formatter and the macro engine rely on.
"""

from enum import Enum


class SyntaxKind(Enum):
    """Kind tag shared by tokens and nodes."""

    # Trivia
    WHITESPACE = "whitespace"
    COMMENT = "comment"

    # Words
    IDENT = "ident"
    KEYWORD = "keyword"
    LIFETIME = "lifetime"

    # Literals
    INT_NUMBER = "int_number"
    FLOAT_NUMBER = "float_number"
    STRING = "string"
    BYTE_STRING = "byte_string"
    CHAR = "char"
    BYTE = "byte"

    # Delimiters
    L_PAREN = "("
    R_PAREN = ")"
    L_CURLY = "{"
    R_CURLY = "}"
    L_BRACK = "["
    R_BRACK = "]"

    # Punctuation
    SEMICOLON = ";"
    COMMA = ","
    DOT = "."
    DOT2 = ".."
    DOT3 = "..."
    DOT2EQ = "..="
    COLON = ":"
    COLON2 = "::"
    EQ = "="
    EQ2 = "=="
    FAT_ARROW = "=>"
    THIN_ARROW = "->"
    BANG = "!"
    NEQ = "!="
    L_ANGLE = "<"
    R_ANGLE = ">"
    LTEQ = "<="
    GTEQ = ">="
    SHL = "<<"
    SHR = ">>"
    SHLEQ = "<<="
    SHREQ = ">>="
    PLUS = "+"
    PLUSEQ = "+="
    MINUS = "-"
    MINUSEQ = "-="
    STAR = "*"
    STAREQ = "*="
    SLASH = "/"
    SLASHEQ = "/="
    PERCENT = "%"
    PERCENTEQ = "%="
    CARET = "^"
    CARETEQ = "^="
    AMP = "&"
    AMP2 = "&&"
    AMPEQ = "&="
    PIPE = "|"
    PIPE2 = "||"
    PIPEEQ = "|="
    AT = "@"
    POUND = "#"
    TILDE = "~"
    QUESTION = "?"
    DOLLAR = "$"
    UNDERSCORE = "_"

    ERROR_TOKEN = "error_token"

    # Nodes
    SOURCE_FILE = "SOURCE_FILE"
    MACRO_ITEMS = "MACRO_ITEMS"
    MACRO_CALL = "MACRO_CALL"
    MACRO_RULES = "MACRO_RULES"
    TOKEN_TREE = "TOKEN_TREE"
    PATH = "PATH"
    NAME_REF = "NAME_REF"
    ERROR = "ERROR"
    NODE = "NODE"

    def is_trivia(self) -> bool:
        return self in TRIVIA

    def is_keyword(self) -> bool:
        return self is SyntaxKind.KEYWORD

    def is_literal(self) -> bool:
        return self in LITERALS

    def is_punct(self) -> bool:
        return self in PUNCTUATION_KINDS

    def is_text(self) -> bool:
        """Identifier, keyword or literal: tokens that read as words."""
        return self is SyntaxKind.IDENT or self.is_keyword() or self.is_literal()


TRIVIA = frozenset({SyntaxKind.WHITESPACE, SyntaxKind.COMMENT})

LITERALS = frozenset(
    {
        SyntaxKind.INT_NUMBER,
        SyntaxKind.FLOAT_NUMBER,
        SyntaxKind.STRING,
        SyntaxKind.BYTE_STRING,
        SyntaxKind.CHAR,
        SyntaxKind.BYTE,
    }
)

# Every symbol the lexer produces, keyed by its spelling
PUNCTUATION = {kind.value: kind for kind in SyntaxKind if not kind.value[0].isalnum()}

PUNCTUATION_KINDS = frozenset(PUNCTUATION.values())

DELIMITERS = {
    SyntaxKind.L_PAREN: SyntaxKind.R_PAREN,
    SyntaxKind.L_CURLY: SyntaxKind.R_CURLY,
    SyntaxKind.L_BRACK: SyntaxKind.R_BRACK,
}

CLOSING_DELIMITERS = frozenset(DELIMITERS.values())

KEYWORDS = frozenset(
    {
        "as", "async", "await", "break", "const", "continue", "crate", "dyn",
        "else", "enum", "extern", "false", "fn", "for", "if", "impl", "in",
        "let", "loop", "match", "mod", "move", "mut", "pub", "ref", "return",
        "self", "Self", "static", "struct", "super", "trait", "true", "type",
        "unsafe", "use", "where", "while", "yield", "try", "box",
    }
)
