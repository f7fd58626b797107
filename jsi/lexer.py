"""JSI lexical analyzer."""

from __future__ import annotations

import logging
from typing import Callable, Final

from jsi.errors import Diagnostic
from jsi.tokens import KEYWORDS, SourceSpan, Token, TokenType


logger = logging.getLogger(__name__)

INT64_MIN: Final[int] = -(2**63)
INT64_MAX: Final[int] = 2**63 - 1

_SINGLE_CHAR_TOKENS: Final[dict[str, TokenType]] = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    ";": TokenType.SEMICOLON,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "%": TokenType.PERCENT,
    "!": TokenType.BANG,
    "=": TokenType.EQUAL,
    "<": TokenType.LESS,
    ">": TokenType.GREATER,
}

_TWO_CHAR_TOKENS: Final[dict[str, TokenType]] = {
    "!=": TokenType.BANG_EQUAL,
    "==": TokenType.EQUAL_EQUAL,
    "<=": TokenType.LESS_EQUAL,
    ">=": TokenType.GREATER_EQUAL,
    "&&": TokenType.AND,
    "||": TokenType.OR,
}

_KEYWORD_LITERALS: Final[dict[TokenType, object]] = {
    TokenType.TRUE: True,
    TokenType.FALSE: False,
}


def _is_alpha(ch: str) -> bool:
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_"


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


class Lexer:
    """Converts JSI source text into a token stream.

    Malformed input never stops the scan: each problem is recorded in
    ``diagnostics`` and the offending character or span is skipped.
    """

    def __init__(self, source: str, filename: str = "<input>") -> None:
        self.source = source
        self.filename = filename
        self.index = 0
        self.line = 1
        self.column = 1
        self.diagnostics: list[Diagnostic] = []

    def tokenize(self) -> list[Token]:
        """Tokenize full source and return the token stream."""
        tokens: list[Token] = []

        while not self._is_eof():
            ch = self._peek()
            if ch in " \t\r\n":
                self._advance()
                continue

            if ch == "/" and self._peek(1) == "/":
                self._consume_line_comment()
                continue

            if ch == "/" and self._peek(1) == "*":
                self._consume_block_comment()
                continue

            if _is_alpha(ch):
                tokens.append(self._lex_identifier())
                continue

            if _is_digit(ch):
                number = self._lex_number()
                if number is not None:
                    tokens.append(number)
                continue

            if ch == '"':
                string = self._lex_string()
                if string is not None:
                    tokens.append(string)
                continue

            pair = self._lex_two_char_operator()
            if pair is not None:
                tokens.append(pair)
                continue

            token_type = _SINGLE_CHAR_TOKENS.get(ch)
            if token_type is not None:
                span = self._span()
                self._advance()
                tokens.append(Token(token_type=token_type, lexeme=ch, literal=None, span=span))
                continue

            self._report(
                "LEX001",
                f"Unexpected character {ch!r}.",
                self._span(),
                hint="Logical operators are written '&&' and '||'." if ch in "&|" else "Remove the character.",
            )
            self._advance()

        tokens.append(Token(token_type=TokenType.EOF, lexeme="", literal=None, span=self._span()))
        logger.debug("scanned %d tokens from %s (%d diagnostics)", len(tokens), self.filename, len(self.diagnostics))
        return tokens

    def _lex_two_char_operator(self) -> Token | None:
        pair = self._peek() + self._peek(1)
        token_type = _TWO_CHAR_TOKENS.get(pair)
        if token_type is None:
            return None
        span = self._span()
        self._advance()
        self._advance()
        return Token(token_type=token_type, lexeme=pair, literal=None, span=span)

    def _lex_identifier(self) -> Token:
        span = self._span()
        value_chars: list[str] = []
        while not self._is_eof() and (_is_alpha(self._peek()) or _is_digit(self._peek())):
            value_chars.append(self._advance())
        value = "".join(value_chars)
        token_type = KEYWORDS.get(value, TokenType.IDENTIFIER)
        return Token(token_type=token_type, lexeme=value, literal=_KEYWORD_LITERALS.get(token_type), span=span)

    def _lex_number(self) -> Token | None:
        span = self._span()
        value_chars: list[str] = []
        while _is_digit(self._peek()):
            value_chars.append(self._advance())

        if self._peek() == "." and _is_digit(self._peek(1)):
            value_chars.append(self._advance())
            while _is_digit(self._peek()):
                value_chars.append(self._advance())
            text = "".join(value_chars)
            return Token(token_type=TokenType.NUMBER, lexeme=text, literal=float(text), span=span)

        text = "".join(value_chars)
        value = int(text)
        if value > INT64_MAX:
            self._report(
                "LEX003",
                f"Integer literal {text} does not fit in 64 bits.",
                span,
                hint=f"Integer literals must be at most {INT64_MAX}.",
            )
            return None
        return Token(token_type=TokenType.NUMBER, lexeme=text, literal=value, span=span)

    def _lex_string(self) -> Token | None:
        span = self._span()
        self._advance()  # opening quote
        value_chars: list[str] = []

        while not self._is_eof():
            ch = self._advance()
            if ch == '"':
                value = "".join(value_chars)
                return Token(token_type=TokenType.STRING, lexeme=f'"{value}"', literal=value, span=span)
            value_chars.append(ch)

        self._report(
            "LEX002",
            "Unterminated string literal.",
            span,
            hint="Close the string with a double quote.",
        )
        return None

    def _consume_line_comment(self) -> None:
        while not self._is_eof() and self._peek() != "\n":
            self._advance()

    def _consume_block_comment(self) -> None:
        self._advance()
        self._advance()
        while not self._is_eof():
            if self._peek() == "*" and self._peek(1) == "/":
                self._advance()
                self._advance()
                return
            self._advance()

    def _report(self, code: str, message: str, span: SourceSpan, hint: str = "") -> None:
        self.diagnostics.append(Diagnostic(code=code, message=message, span=span, hint=hint))

    def _peek(self, offset: int = 0) -> str:
        idx = self.index + offset
        if idx >= len(self.source):
            return "\0"
        return self.source[idx]

    def _advance(self) -> str:
        ch = self.source[self.index]
        self.index += 1
        if ch == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def _is_eof(self) -> bool:
        return self.index >= len(self.source)

    def _span(self) -> SourceSpan:
        return SourceSpan(file=self.filename, line=self.line, column=self.column)


def scan(
    text: str,
    *,
    filename: str = "<input>",
    sink: Callable[[Diagnostic], None] | None = None,
) -> list[Token]:
    """Tokenize ``text``, forwarding each lexical diagnostic to ``sink``."""
    lexer = Lexer(text, filename=filename)
    tokens = lexer.tokenize()
    if sink is not None:
        for diag in lexer.diagnostics:
            sink(diag)
    return tokens
