"""Token definitions for JSI lexical analysis."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any


class TokenType(Enum):
    """Finite token categories used by lexer and parser."""

    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    COMMA = auto()
    DOT = auto()
    SEMICOLON = auto()

    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    PERCENT = auto()

    BANG = auto()  # !
    BANG_EQUAL = auto()  # !=
    EQUAL = auto()  # =
    EQUAL_EQUAL = auto()  # ==
    LESS = auto()
    LESS_EQUAL = auto()
    GREATER = auto()
    GREATER_EQUAL = auto()
    AND = auto()  # &&
    OR = auto()  # ||

    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()

    CLASS = auto()
    IF = auto()
    ELSE = auto()
    WHILE = auto()
    FOR = auto()
    RETURN = auto()
    NEW = auto()
    THIS = auto()
    INT = auto()
    DOUBLE = auto()
    BOOLEAN = auto()
    VOID = auto()
    TRUE = auto()
    FALSE = auto()
    NULL = auto()

    EOF = auto()


KEYWORDS: dict[str, TokenType] = {
    "class": TokenType.CLASS,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "while": TokenType.WHILE,
    "for": TokenType.FOR,
    "return": TokenType.RETURN,
    "new": TokenType.NEW,
    "this": TokenType.THIS,
    "int": TokenType.INT,
    "double": TokenType.DOUBLE,
    "boolean": TokenType.BOOLEAN,
    "void": TokenType.VOID,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "null": TokenType.NULL,
}

# Token kinds that may open a declaration's type position.
PRIMITIVE_TYPES: frozenset[TokenType] = frozenset(
    {TokenType.INT, TokenType.DOUBLE, TokenType.BOOLEAN, TokenType.VOID}
)


@dataclass(frozen=True)
class SourceSpan:
    """A source position in 1-based coordinates."""

    file: str
    line: int
    column: int

    def to_dict(self) -> dict[str, Any]:
        return {"file": self.file, "line": self.line, "column": self.column}


@dataclass(frozen=True)
class Token:
    """A single lexical token with its literal payload and position."""

    token_type: TokenType
    lexeme: str
    literal: Any
    span: SourceSpan

    @property
    def line(self) -> int:
        return self.span.line

    def __str__(self) -> str:
        return f"{self.token_type.name}({self.lexeme!r})@{self.span.line}:{self.span.column}"
