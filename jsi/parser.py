"""JSI recursive-descent parser producing a typed AST."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from jsi.ast import (
    AssignExpr,
    BinaryExpr,
    Block,
    CallExpr,
    ClassDecl,
    Declaration,
    Expr,
    ExpressionStmt,
    ForStmt,
    GetExpr,
    IfStmt,
    LiteralExpr,
    MethodDecl,
    NewExpr,
    Param,
    ReturnStmt,
    SetExpr,
    StatementDecl,
    Stmt,
    ThisExpr,
    UnaryExpr,
    VarDecl,
    VariableExpr,
    VarStmt,
    WhileStmt,
)
from jsi.config import FRONTEND_RECURSION_LIMIT, recursion_headroom
from jsi.errors import Diagnostic, ParseError
from jsi.tokens import PRIMITIVE_TYPES, Token, TokenType


logger = logging.getLogger(__name__)

# Binary levels from lowest to highest binding; each is left-associative.
_BINARY_LEVELS: tuple[frozenset[TokenType], ...] = (
    frozenset({TokenType.OR}),
    frozenset({TokenType.AND}),
    frozenset({TokenType.EQUAL_EQUAL, TokenType.BANG_EQUAL}),
    frozenset({TokenType.LESS, TokenType.LESS_EQUAL, TokenType.GREATER, TokenType.GREATER_EQUAL}),
    frozenset({TokenType.PLUS, TokenType.MINUS}),
    frozenset({TokenType.STAR, TokenType.SLASH, TokenType.PERCENT}),
)

_SYNC_KEYWORDS = frozenset({TokenType.CLASS, TokenType.IF, TokenType.WHILE, TokenType.FOR, TokenType.RETURN})


@dataclass
class Parser:
    """Recursive-descent parser with panic-mode error recovery."""

    tokens: list[Token]
    errors: list[ParseError] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.pos = 0

    def parse(self) -> list[Declaration]:
        """Parse the full token stream; failed items are recorded and skipped."""
        declarations: list[Declaration] = []
        with recursion_headroom(FRONTEND_RECURSION_LIMIT):
            while not self._is_at_end():
                try:
                    declarations.append(self._parse_declaration())
                except ParseError as err:
                    self.errors.append(err)
                    logger.debug("recovering from %s", err)
                    self._synchronize()
                except RecursionError:
                    self.errors.append(
                        ParseError(
                            code="PAR005",
                            message="Expression nested too deeply.",
                            span=self._peek().span,
                            hint="Split the expression into smaller statements.",
                        )
                    )
                    self._synchronize()
        return declarations

    def _parse_declaration(self) -> Declaration:
        if self._match(TokenType.CLASS):
            return self._parse_class(self._previous())
        stmt = self._parse_statement()
        return StatementDecl(span=stmt.span, stmt=stmt)

    def _parse_class(self, class_token: Token) -> ClassDecl:
        name_tok = self._consume(TokenType.IDENTIFIER, "Expected class name after 'class'.")
        self._consume(TokenType.LBRACE, "Expected '{' before class body.")

        fields: list[VarDecl] = []
        methods: list[MethodDecl] = []
        while not self._check(TokenType.RBRACE) and not self._is_at_end():
            type_tok = self._consume_type("Expected member type.")
            member_tok = self._consume(TokenType.IDENTIFIER, "Expected member name.")
            if self._match(TokenType.LPAREN):
                methods.append(self._finish_method(type_tok, member_tok))
            else:
                fields.append(self._finish_var(type_tok, member_tok, "Expected ';' after field declaration."))

        self._consume(TokenType.RBRACE, "Expected '}' after class body.")
        return ClassDecl(span=class_token.span, name=name_tok.lexeme, fields=tuple(fields), methods=tuple(methods))

    def _finish_method(self, type_tok: Token, name_tok: Token) -> MethodDecl:
        params: list[Param] = []
        if not self._check(TokenType.RPAREN):
            while True:
                param_type = self._consume_type("Expected parameter type.")
                param_name = self._consume(TokenType.IDENTIFIER, "Expected parameter name.")
                params.append(Param(type_name=param_type.lexeme, name=param_name.lexeme))
                if not self._match(TokenType.COMMA):
                    break
        self._consume(TokenType.RPAREN, "Expected ')' after parameters.")
        lbrace = self._consume(TokenType.LBRACE, "Expected '{' before method body.")
        body = self._finish_block(lbrace)
        return MethodDecl(
            span=type_tok.span,
            return_type=type_tok.lexeme,
            name=name_tok.lexeme,
            params=tuple(params),
            body=body,
        )

    def _finish_var(self, type_tok: Token, name_tok: Token, terminator_message: str) -> VarDecl:
        initializer: Expr | None = None
        if self._match(TokenType.EQUAL):
            initializer = self._parse_expression()
        self._consume(TokenType.SEMICOLON, terminator_message)
        return VarDecl(span=type_tok.span, type_name=type_tok.lexeme, name=name_tok.lexeme, initializer=initializer)

    def _parse_statement(self) -> Stmt:
        if self._match(TokenType.IF):
            return self._parse_if(self._previous())
        if self._match(TokenType.WHILE):
            return self._parse_while(self._previous())
        if self._match(TokenType.FOR):
            return self._parse_for(self._previous())
        if self._match(TokenType.RETURN):
            return self._parse_return(self._previous())
        if self._match(TokenType.LBRACE):
            return self._finish_block(self._previous())
        if self._is_var_decl_start():
            return self._parse_var_stmt()
        return self._parse_expression_stmt()

    def _parse_var_stmt(self) -> VarStmt:
        type_tok = self._advance()
        name_tok = self._consume(TokenType.IDENTIFIER, "Expected variable name.")
        decl = self._finish_var(type_tok, name_tok, "Expected ';' after variable declaration.")
        return VarStmt(span=decl.span, decl=decl)

    def _parse_if(self, if_token: Token) -> IfStmt:
        self._consume(TokenType.LPAREN, "Expected '(' after 'if'.")
        condition = self._parse_expression()
        self._consume(TokenType.RPAREN, "Expected ')' after if condition.")
        then_branch = self._parse_statement()
        else_branch: Stmt | None = None
        if self._match(TokenType.ELSE):
            else_branch = self._parse_statement()
        return IfStmt(span=if_token.span, condition=condition, then_branch=then_branch, else_branch=else_branch)

    def _parse_while(self, while_token: Token) -> WhileStmt:
        self._consume(TokenType.LPAREN, "Expected '(' after 'while'.")
        condition = self._parse_expression()
        self._consume(TokenType.RPAREN, "Expected ')' after while condition.")
        body = self._parse_statement()
        return WhileStmt(span=while_token.span, condition=condition, body=body)

    def _parse_for(self, for_token: Token) -> ForStmt:
        self._consume(TokenType.LPAREN, "Expected '(' after 'for'.")

        initializer: Stmt | None = None
        if self._match(TokenType.SEMICOLON):
            initializer = None
        elif self._is_var_decl_start():
            initializer = self._parse_var_stmt()
        else:
            initializer = self._parse_expression_stmt()

        condition: Expr | None = None
        if not self._check(TokenType.SEMICOLON):
            condition = self._parse_expression()
        self._consume(TokenType.SEMICOLON, "Expected ';' after loop condition.")

        increment: Expr | None = None
        if not self._check(TokenType.RPAREN):
            increment = self._parse_expression()
        self._consume(TokenType.RPAREN, "Expected ')' after for clauses.")

        body = self._parse_statement()
        return ForStmt(
            span=for_token.span,
            initializer=initializer,
            condition=condition,
            increment=increment,
            body=body,
        )

    def _parse_return(self, return_token: Token) -> ReturnStmt:
        value: Expr | None = None
        if not self._check(TokenType.SEMICOLON):
            value = self._parse_expression()
        self._consume(TokenType.SEMICOLON, "Expected ';' after return value.")
        return ReturnStmt(span=return_token.span, value=value)

    def _finish_block(self, lbrace: Token) -> Block:
        statements: list[Stmt] = []
        while not self._check(TokenType.RBRACE) and not self._is_at_end():
            statements.append(self._parse_statement())
        self._consume(TokenType.RBRACE, "Expected '}' after block.")
        return Block(span=lbrace.span, statements=tuple(statements))

    def _parse_expression_stmt(self) -> ExpressionStmt:
        expr = self._parse_expression()
        self._consume(TokenType.SEMICOLON, "Expected ';' after expression.")
        return ExpressionStmt(span=expr.span, expr=expr)

    def _parse_expression(self) -> Expr:
        return self._parse_assignment()

    def _parse_assignment(self) -> Expr:
        expr = self._parse_binary(0)

        if self._match(TokenType.EQUAL):
            equals = self._previous()
            value = self._parse_assignment()
            if isinstance(expr, VariableExpr):
                return AssignExpr(span=expr.span, name=expr.name, value=value)
            if isinstance(expr, GetExpr):
                return SetExpr(span=expr.span, object=expr.object, name=expr.name, value=value)
            raise ParseError(
                code="PAR003",
                message="Invalid assignment target.",
                span=equals.span,
                hint="Only variables and fields can be assigned.",
            )

        return expr

    def _parse_binary(self, level: int) -> Expr:
        if level == len(_BINARY_LEVELS):
            return self._parse_unary()

        expr = self._parse_binary(level + 1)
        while self._peek().token_type in _BINARY_LEVELS[level]:
            op = self._advance()
            right = self._parse_binary(level + 1)
            expr = BinaryExpr(span=op.span, left=expr, operator=op.lexeme, right=right)
        return expr

    def _parse_unary(self) -> Expr:
        if self._match(TokenType.BANG, TokenType.MINUS):
            op = self._previous()
            operand = self._parse_unary()
            return UnaryExpr(span=op.span, operator=op.lexeme, operand=operand)
        return self._parse_call()

    def _parse_call(self) -> Expr:
        expr = self._parse_primary()
        while True:
            if self._match(TokenType.LPAREN):
                args = self._finish_arguments()
                expr = CallExpr(span=expr.span, callee=expr, args=args)
            elif self._match(TokenType.DOT):
                name_tok = self._consume(TokenType.IDENTIFIER, "Expected member name after '.'.")
                expr = GetExpr(span=name_tok.span, object=expr, name=name_tok.lexeme)
            else:
                break
        return expr

    def _finish_arguments(self) -> tuple[Expr, ...]:
        args: list[Expr] = []
        if not self._check(TokenType.RPAREN):
            while True:
                args.append(self._parse_expression())
                if not self._match(TokenType.COMMA):
                    break
        self._consume(TokenType.RPAREN, "Expected ')' after arguments.")
        return tuple(args)

    def _parse_primary(self) -> Expr:
        if self._match(TokenType.NUMBER, TokenType.STRING, TokenType.TRUE, TokenType.FALSE):
            tok = self._previous()
            return LiteralExpr(span=tok.span, value=tok.literal)

        if self._match(TokenType.NULL):
            return LiteralExpr(span=self._previous().span, value=None)

        if self._match(TokenType.THIS):
            return ThisExpr(span=self._previous().span)

        if self._match(TokenType.IDENTIFIER):
            tok = self._previous()
            return VariableExpr(span=tok.span, name=tok.lexeme)

        if self._match(TokenType.LPAREN):
            expr = self._parse_expression()
            self._consume(TokenType.RPAREN, "Expected ')' after expression.")
            return expr

        if self._match(TokenType.NEW):
            new_tok = self._previous()
            class_tok = self._consume(TokenType.IDENTIFIER, "Expected class name after 'new'.")
            self._consume(TokenType.LPAREN, "Expected '(' after class name.")
            args = self._finish_arguments()
            return NewExpr(span=new_tok.span, class_name=class_tok.lexeme, args=args)

        tok = self._peek()
        raise ParseError(
            code="PAR001",
            message=f"Unexpected token {tok.token_type.name} {tok.lexeme!r} in expression.",
            span=tok.span,
            hint="Expected a literal, name, 'this', 'new', or parenthesized expression.",
        )

    def _is_var_decl_start(self) -> bool:
        tok = self._peek()
        if tok.token_type in PRIMITIVE_TYPES:
            return True
        return tok.token_type == TokenType.IDENTIFIER and self._peek(1).token_type == TokenType.IDENTIFIER

    def _consume_type(self, message: str) -> Token:
        if self._peek().token_type in PRIMITIVE_TYPES or self._check(TokenType.IDENTIFIER):
            return self._advance()
        tok = self._peek()
        raise ParseError(
            code="PAR004",
            message=f"{message} Found {tok.lexeme!r}.",
            span=tok.span,
            hint="Types are int, double, boolean, void, or a class name.",
        )

    def _consume(self, token_type: TokenType, message: str) -> Token:
        if self._check(token_type):
            return self._advance()
        tok = self._peek()
        found = "end of input" if tok.token_type == TokenType.EOF else repr(tok.lexeme)
        raise ParseError(
            code="PAR002",
            message=f"{message} Found {found}.",
            span=tok.span,
            hint="Adjust token order to match grammar.",
        )

    def _match(self, *token_types: TokenType) -> bool:
        for token_type in token_types:
            if self._check(token_type):
                self._advance()
                return True
        return False

    def _check(self, token_type: TokenType) -> bool:
        return self._peek().token_type == token_type

    def _advance(self) -> Token:
        if not self._is_at_end():
            self.pos += 1
        return self._previous()

    def _peek(self, offset: int = 0) -> Token:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[idx]

    def _previous(self) -> Token:
        return self.tokens[self.pos - 1]

    def _is_at_end(self) -> bool:
        return self._peek().token_type == TokenType.EOF

    def _synchronize(self) -> None:
        self._advance()
        while not self._is_at_end():
            if self._previous().token_type == TokenType.SEMICOLON:
                return
            if self._peek().token_type in _SYNC_KEYWORDS:
                return
            self._advance()


def parse(
    tokens: list[Token],
    *,
    sink: Callable[[Diagnostic], None] | None = None,
) -> list[Declaration]:
    """Parse tokens into declarations; raise one ParseError if any item failed."""
    parser = Parser(tokens)
    declarations = parser.parse()
    errors = parser.errors

    if sink is not None:
        for err in errors:
            sink(err.to_diagnostic())

    if errors:
        if len(errors) == 1:
            raise errors[0]
        first = errors[0]
        raise ParseError(
            code=first.code,
            message=f"{first.message} (plus {len(errors) - 1} additional parse error(s)).",
            span=first.span,
            hint=first.hint,
        )
    return declarations
