"""AST model for JSI source programs.

Nodes are immutable. Each top-level item of a source file becomes one
``Declaration``; the evaluator dispatches on the concrete node class.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, is_dataclass
from typing import Any

from jsi.tokens import SourceSpan


@dataclass(frozen=True)
class AstNode:
    """Base class for AST nodes with provenance span."""

    span: SourceSpan


@dataclass(frozen=True)
class Declaration(AstNode):
    """Base class for top-level and class-member declarations."""


@dataclass(frozen=True)
class Stmt(AstNode):
    """Base class for statement nodes."""


@dataclass(frozen=True)
class Expr(AstNode):
    """Base class for expression nodes."""


@dataclass(frozen=True)
class Param:
    """Typed method parameter."""

    type_name: str
    name: str


# Declarations


@dataclass(frozen=True)
class VarDecl(Declaration):
    """Typed variable or field declaration with optional initializer."""

    type_name: str
    name: str
    initializer: Expr | None = None


@dataclass(frozen=True)
class MethodDecl(Declaration):
    """Method with return type, ordered parameters, and block body."""

    return_type: str
    name: str
    params: tuple[Param, ...]
    body: Block


@dataclass(frozen=True)
class ClassDecl(Declaration):
    """Class with ordered fields and methods."""

    name: str
    fields: tuple[VarDecl, ...]
    methods: tuple[MethodDecl, ...]


@dataclass(frozen=True)
class StatementDecl(Declaration):
    """Top-level statement wrapped so the parse result stays uniform."""

    stmt: Stmt


# Statements


@dataclass(frozen=True)
class ExpressionStmt(Stmt):
    """Expression evaluated for its side effects."""

    expr: Expr


@dataclass(frozen=True)
class VarStmt(Stmt):
    """Local variable declaration in statement position."""

    decl: VarDecl


@dataclass(frozen=True)
class Block(Stmt):
    """Braced statement list; opens one scope."""

    statements: tuple[Stmt, ...]


@dataclass(frozen=True)
class IfStmt(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Stmt | None = None


@dataclass(frozen=True)
class WhileStmt(Stmt):
    condition: Expr
    body: Stmt


@dataclass(frozen=True)
class ForStmt(Stmt):
    """C-style loop; every clause is optional."""

    initializer: Stmt | None
    condition: Expr | None
    increment: Expr | None
    body: Stmt


@dataclass(frozen=True)
class ReturnStmt(Stmt):
    value: Expr | None = None


# Expressions


@dataclass(frozen=True)
class BinaryExpr(Expr):
    left: Expr
    operator: str
    right: Expr


@dataclass(frozen=True)
class LiteralExpr(Expr):
    """Literal value (int, float, str, bool, or None for null)."""

    value: Any


@dataclass(frozen=True)
class VariableExpr(Expr):
    name: str


@dataclass(frozen=True)
class AssignExpr(Expr):
    name: str
    value: Expr


@dataclass(frozen=True)
class UnaryExpr(Expr):
    operator: str
    operand: Expr


@dataclass(frozen=True)
class CallExpr(Expr):
    callee: Expr
    args: tuple[Expr, ...]


@dataclass(frozen=True)
class GetExpr(Expr):
    """Member access ``object.name``."""

    object: Expr
    name: str


@dataclass(frozen=True)
class SetExpr(Expr):
    """Member assignment ``object.name = value``."""

    object: Expr
    name: str
    value: Expr


@dataclass(frozen=True)
class NewExpr(Expr):
    class_name: str
    args: tuple[Expr, ...]


@dataclass(frozen=True)
class ThisExpr(Expr):
    pass


def dotted_path(expr: Expr) -> list[str] | None:
    """Return ``["a", "b", "c"]`` for ``a.b.c``, or None for any other shape."""
    if isinstance(expr, VariableExpr):
        return [expr.name]
    if isinstance(expr, GetExpr):
        head = dotted_path(expr.object)
        if head is None:
            return None
        return head + [expr.name]
    return None


def ast_to_dict(node: Any) -> Any:
    """Serialize AST dataclasses recursively into JSON-compatible dicts."""
    if isinstance(node, (list, tuple)):
        return [ast_to_dict(item) for item in node]
    if isinstance(node, SourceSpan):
        return node.to_dict()
    if is_dataclass(node):
        payload: dict[str, Any] = {"node_type": type(node).__name__}
        for item in fields(node):
            payload[item.name] = ast_to_dict(getattr(node, item.name))
        return payload
    return node
