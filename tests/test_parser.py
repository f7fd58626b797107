from __future__ import annotations

import sys
import unittest

from jsi.ast import (
    AssignExpr,
    BinaryExpr,
    Block,
    CallExpr,
    ClassDecl,
    ExpressionStmt,
    ForStmt,
    GetExpr,
    IfStmt,
    NewExpr,
    SetExpr,
    StatementDecl,
    UnaryExpr,
    VariableExpr,
    VarStmt,
    WhileStmt,
)
from jsi.errors import ParseError
from jsi.lexer import Lexer
from jsi.parser import Parser, parse


def parse_source(source: str):
    return parse(Lexer(source).tokenize())


def parse_expr(source: str):
    decl = parse_source(source + ';')[0]
    return decl.stmt.expr


class ParserTests(unittest.TestCase):
    def test_class_with_fields_and_methods(self) -> None:
        decls = parse_source(
            'class Counter { int count; int step = 2; void inc() { count = count + step; } '
            'int get(int a, Counter other) { return count; } }'
        )
        self.assertEqual(len(decls), 1)
        klass = decls[0]
        self.assertIsInstance(klass, ClassDecl)
        self.assertEqual([f.name for f in klass.fields], ['count', 'step'])
        self.assertIsNone(klass.fields[0].initializer)
        self.assertEqual([m.name for m in klass.methods], ['inc', 'get'])
        self.assertEqual(klass.methods[1].return_type, 'int')
        self.assertEqual([(p.type_name, p.name) for p in klass.methods[1].params], [('int', 'a'), ('Counter', 'other')])

    def test_top_level_statements_are_wrapped(self) -> None:
        decls = parse_source('int x = 1; x = x + 1;')
        self.assertIsInstance(decls[0], StatementDecl)
        self.assertIsInstance(decls[0].stmt, VarStmt)
        self.assertIsInstance(decls[1].stmt, ExpressionStmt)

    def test_class_typed_local_versus_expression_statement(self) -> None:
        decls = parse_source('Calculator calc = new Calculator(); calc.add(1, 2);')
        self.assertIsInstance(decls[0].stmt, VarStmt)
        self.assertEqual(decls[0].stmt.decl.type_name, 'Calculator')
        self.assertIsInstance(decls[0].stmt.decl.initializer, NewExpr)
        call = decls[1].stmt.expr
        self.assertIsInstance(call, CallExpr)
        self.assertIsInstance(call.callee, GetExpr)
        self.assertEqual(len(call.args), 2)

    def test_precedence(self) -> None:
        expr = parse_expr('a || b && c == d < e + f * -g')
        self.assertEqual(expr.operator, '||')
        right = expr.right
        self.assertEqual(right.operator, '&&')
        self.assertEqual(right.right.operator, '==')
        self.assertEqual(right.right.right.operator, '<')
        additive = right.right.right.right
        self.assertEqual(additive.operator, '+')
        self.assertEqual(additive.right.operator, '*')
        self.assertIsInstance(additive.right.right, UnaryExpr)

    def test_binary_operators_are_left_associative(self) -> None:
        expr = parse_expr('a - b - c')
        self.assertIsInstance(expr.left, BinaryExpr)
        self.assertEqual(expr.left.operator, '-')
        self.assertIsInstance(expr.right, VariableExpr)

    def test_assignment_is_right_associative(self) -> None:
        expr = parse_expr('a = b = 3')
        self.assertIsInstance(expr, AssignExpr)
        self.assertEqual(expr.name, 'a')
        self.assertIsInstance(expr.value, AssignExpr)

    def test_member_assignment_becomes_set(self) -> None:
        expr = parse_expr('this.a.b = 1')
        self.assertIsInstance(expr, SetExpr)
        self.assertEqual(expr.name, 'b')
        self.assertIsInstance(expr.object, GetExpr)

    def test_chained_calls(self) -> None:
        expr = parse_expr('System.out.println(x)')
        self.assertIsInstance(expr, CallExpr)
        self.assertIsInstance(expr.callee, GetExpr)
        self.assertEqual(expr.callee.name, 'println')
        self.assertEqual(expr.callee.object.name, 'out')

    def test_control_flow_statements(self) -> None:
        decls = parse_source(
            'if (a) b = 1; else { b = 2; } '
            'while (b < 3) b = b + 1; '
            'for (int i = 0; i < 3; i = i + 1) { } '
            'for (;;) { }'
        )
        self.assertIsInstance(decls[0].stmt, IfStmt)
        self.assertIsInstance(decls[0].stmt.else_branch, Block)
        self.assertIsInstance(decls[1].stmt, WhileStmt)
        loop = decls[2].stmt
        self.assertIsInstance(loop, ForStmt)
        self.assertIsInstance(loop.initializer, VarStmt)
        self.assertIsNotNone(loop.condition)
        self.assertIsNotNone(loop.increment)
        bare = decls[3].stmt
        self.assertIsNone(bare.initializer)
        self.assertIsNone(bare.condition)
        self.assertIsNone(bare.increment)

    def test_invalid_assignment_target(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            parse_source('a + b = 3;')
        self.assertEqual(ctx.exception.code, 'PAR003')

    def test_missing_semicolon_reports_line(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            parse_source('int x = 1;\nint y = 2\nint z = 3;')
        self.assertEqual(ctx.exception.code, 'PAR002')
        self.assertEqual(ctx.exception.span.line, 3)

    def test_recovery_continues_after_error(self) -> None:
        parser = Parser(Lexer('int x = ; class A { } int y = 2;').tokenize())
        decls = parser.parse()
        self.assertEqual(len(parser.errors), 1)
        self.assertIsInstance(decls[0], ClassDecl)
        self.assertEqual(decls[1].stmt.decl.name, 'y')

    def test_multiple_errors_are_summarized(self) -> None:
        seen = []
        with self.assertRaises(ParseError) as ctx:
            parse(Lexer('int = 1; int = 2;').tokenize(), sink=seen.append)
        self.assertEqual(len(seen), 2)
        self.assertIn('1 additional', ctx.exception.message)

    def test_unexpected_token_in_expression(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            parse_source('x = );')
        self.assertEqual(ctx.exception.code, 'PAR001')

    def test_deeply_parenthesized_expression_parses(self) -> None:
        limit = sys.getrecursionlimit()
        expr = parse_expr('(' * 300 + '1' + ')' * 300)
        self.assertEqual(expr.value, 1)
        self.assertEqual(sys.getrecursionlimit(), limit)

    def test_nesting_too_deep_is_a_parse_error(self) -> None:
        source = 'x = ' + '(' * 5000 + '1' + ')' * 5000 + ';\nint y = 2;'
        parser = Parser(Lexer(source).tokenize())
        decls = parser.parse()
        self.assertEqual([err.code for err in parser.errors], ['PAR005'])
        self.assertEqual(decls[-1].stmt.decl.name, 'y')


if __name__ == '__main__':
    unittest.main()
