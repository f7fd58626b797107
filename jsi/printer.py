"""Canonical source printer for JSI declarations.

Output re-parses to an AST that evaluates the same way: binary operands
are fully parenthesized and nested assignments are wrapped.
"""

from __future__ import annotations

from decimal import Decimal

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


INDENT = "    "


def format_declarations(declarations: list[Declaration]) -> str:
    """Render declarations as source text, one blank line between items."""
    chunks = [_emit_declaration(decl, 0) for decl in declarations]
    return "\n\n".join(chunks) + "\n" if chunks else ""


def _emit_declaration(decl: Declaration, depth: int) -> str:
    pad = INDENT * depth
    if isinstance(decl, ClassDecl):
        members = [_emit_var(var, depth + 1) for var in decl.fields]
        members += [_emit_method(method, depth + 1) for method in decl.methods]
        body = "\n".join(members)
        if not body:
            return f"{pad}class {decl.name} {{\n{pad}}}"
        return f"{pad}class {decl.name} {{\n{body}\n{pad}}}"
    if isinstance(decl, MethodDecl):
        return _emit_method(decl, depth)
    if isinstance(decl, VarDecl):
        return _emit_var(decl, depth)
    if isinstance(decl, StatementDecl):
        return _emit_stmt(decl.stmt, depth)
    raise TypeError(f"unsupported declaration node {type(decl).__name__}")


def _emit_var(decl: VarDecl, depth: int) -> str:
    pad = INDENT * depth
    if decl.initializer is None:
        return f"{pad}{decl.type_name} {decl.name};"
    return f"{pad}{decl.type_name} {decl.name} = {_emit_expr(decl.initializer, top=True)};"


def _emit_method(decl: MethodDecl, depth: int) -> str:
    pad = INDENT * depth
    params = ", ".join(f"{param.type_name} {param.name}" for param in decl.params)
    return f"{pad}{decl.return_type} {decl.name}({params}) {_emit_block(decl.body, depth)}"


def _emit_block(block: Block, depth: int) -> str:
    if not block.statements:
        return "{\n" + INDENT * depth + "}"
    lines = [_emit_stmt(stmt, depth + 1) for stmt in block.statements]
    return "{\n" + "\n".join(lines) + "\n" + INDENT * depth + "}"


def _emit_branch(stmt: Stmt, depth: int) -> str:
    """Render an if/loop body; non-block bodies go on their own line."""
    if isinstance(stmt, Block):
        return " " + _emit_block(stmt, depth)
    return "\n" + _emit_stmt(stmt, depth + 1)


def _emit_stmt(stmt: Stmt, depth: int) -> str:
    pad = INDENT * depth

    if isinstance(stmt, ExpressionStmt):
        return f"{pad}{_emit_expr(stmt.expr, top=True)};"

    if isinstance(stmt, VarStmt):
        return _emit_var(stmt.decl, depth)

    if isinstance(stmt, Block):
        return pad + _emit_block(stmt, depth)

    if isinstance(stmt, ReturnStmt):
        if stmt.value is None:
            return f"{pad}return;"
        return f"{pad}return {_emit_expr(stmt.value, top=True)};"

    if isinstance(stmt, IfStmt):
        then_branch = stmt.then_branch
        if stmt.else_branch is not None and isinstance(then_branch, IfStmt):
            # Keep a trailing else attached to this if, not the nested one.
            then_branch = Block(span=then_branch.span, statements=(then_branch,))
        text = f"{pad}if ({_emit_expr(stmt.condition, top=True)}){_emit_branch(then_branch, depth)}"
        if stmt.else_branch is None:
            return text
        separator = " " if isinstance(then_branch, Block) else "\n" + pad
        return f"{text}{separator}else{_emit_branch(stmt.else_branch, depth)}"

    if isinstance(stmt, WhileStmt):
        return f"{pad}while ({_emit_expr(stmt.condition, top=True)}){_emit_branch(stmt.body, depth)}"

    if isinstance(stmt, ForStmt):
        if stmt.initializer is None:
            init = ";"
        else:
            init = _emit_stmt(stmt.initializer, 0)
        condition = "" if stmt.condition is None else " " + _emit_expr(stmt.condition, top=True)
        increment = "" if stmt.increment is None else " " + _emit_expr(stmt.increment, top=True)
        return f"{pad}for ({init}{condition};{increment}){_emit_branch(stmt.body, depth)}"

    raise TypeError(f"unsupported statement node {type(stmt).__name__}")


def _emit_literal(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        text = repr(value)
        if "e" in text:
            text = format(Decimal(text), "f")
        if "." not in text:
            text += ".0"
        return text
    if isinstance(value, str):
        return f'"{value}"'
    return str(value)


def _emit_operand(expr: Expr) -> str:
    """Render the target of a member access or call."""
    text = _emit_expr(expr)
    if isinstance(expr, UnaryExpr):
        return f"({text})"
    return text


def _emit_expr(expr: Expr, top: bool = False) -> str:
    if isinstance(expr, LiteralExpr):
        return _emit_literal(expr.value)

    if isinstance(expr, VariableExpr):
        return expr.name

    if isinstance(expr, ThisExpr):
        return "this"

    if isinstance(expr, AssignExpr):
        text = f"{expr.name} = {_emit_expr(expr.value, top=True)}"
        return text if top else f"({text})"

    if isinstance(expr, SetExpr):
        text = f"{_emit_operand(expr.object)}.{expr.name} = {_emit_expr(expr.value, top=True)}"
        return text if top else f"({text})"

    if isinstance(expr, UnaryExpr):
        return f"{expr.operator}{_emit_expr(expr.operand)}"

    if isinstance(expr, BinaryExpr):
        text = f"{_emit_expr(expr.left)} {expr.operator} {_emit_expr(expr.right)}"
        return text if top else f"({text})"

    if isinstance(expr, GetExpr):
        return f"{_emit_operand(expr.object)}.{expr.name}"

    if isinstance(expr, CallExpr):
        args = ", ".join(_emit_expr(arg, top=True) for arg in expr.args)
        return f"{_emit_operand(expr.callee)}({args})"

    if isinstance(expr, NewExpr):
        args = ", ".join(_emit_expr(arg, top=True) for arg in expr.args)
        return f"new {expr.class_name}({args})"

    raise TypeError(f"unsupported expression node {type(expr).__name__}")
