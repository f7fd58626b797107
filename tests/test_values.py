from __future__ import annotations

import unittest

from jsi.errors import DivisionByZeroError, TypeMismatchError
from jsi.runtime import ClassDescriptor, Instance
from jsi.values import (
    FALSE,
    NULL,
    TRUE,
    VOID,
    Value,
    ValueKind,
    binary_op,
    default_for_type,
    unary_op,
    values_equal,
)


INT64_MAX = 2**63 - 1
INT64_MIN = -(2**63)


def i(value: int) -> Value:
    return Value.int_(value)


def d(value: float) -> Value:
    return Value.double(value)


def s(value: str) -> Value:
    return Value.string(value)


class ArithmeticTests(unittest.TestCase):
    def test_integer_arithmetic_is_exact(self) -> None:
        for a, b in [(5, 3), (-7, 2), (123456789012, 987654321), (0, -4)]:
            with self.subTest(a=a, b=b):
                self.assertEqual(binary_op('+', i(a), i(b)), i(a + b))
                self.assertEqual(binary_op('-', i(a), i(b)), i(a - b))
                self.assertEqual(binary_op('*', i(a), i(b)), i(a * b))

    def test_integer_overflow_wraps_to_64_bits(self) -> None:
        self.assertEqual(binary_op('+', i(INT64_MAX), i(1)).payload, INT64_MIN)
        self.assertEqual(binary_op('-', i(INT64_MIN), i(1)).payload, INT64_MAX)

    def test_integer_division_truncates_toward_zero(self) -> None:
        self.assertEqual(binary_op('/', i(7), i(2)).payload, 3)
        self.assertEqual(binary_op('/', i(-7), i(2)).payload, -3)
        self.assertEqual(binary_op('%', i(-7), i(2)).payload, -1)
        self.assertEqual(binary_op('%', i(7), i(-2)).payload, 1)

    def test_division_and_modulo_by_zero(self) -> None:
        for op in ('/', '%'):
            for zero in (i(0), d(0.0)):
                with self.subTest(op=op, zero=zero):
                    with self.assertRaises(DivisionByZeroError) as ctx:
                        binary_op(op, i(5), zero)
                    self.assertEqual(ctx.exception.code, 'RUN004')

    def test_double_widening(self) -> None:
        result = binary_op('+', i(1), d(0.5))
        self.assertEqual(result.kind, ValueKind.DOUBLE)
        self.assertEqual(result.payload, 1.5)
        self.assertEqual(binary_op('/', d(7.0), i(2)).payload, 3.5)
        self.assertEqual(binary_op('%', d(7.5), i(2)).payload, 1.5)

    def test_string_concatenation_uses_display_forms(self) -> None:
        self.assertEqual(binary_op('+', s('x='), i(5)), s('x=5'))
        self.assertEqual(binary_op('+', d(2.0), s('!')), s('2.0!'))
        self.assertEqual(binary_op('+', s('v'), NULL), s('vnull'))
        self.assertEqual(binary_op('+', TRUE, s('')), s('true'))

    def test_non_numeric_operands_fail(self) -> None:
        with self.assertRaises(TypeMismatchError) as ctx:
            binary_op('-', s('a'), i(1))
        self.assertIn('STRING', ctx.exception.message)
        self.assertIn('INT', ctx.exception.message)
        with self.assertRaises(TypeMismatchError):
            binary_op('+', TRUE, i(1))
        with self.assertRaises(TypeMismatchError):
            binary_op('<', NULL, i(1))


class ComparisonTests(unittest.TestCase):
    def test_relational(self) -> None:
        self.assertIs(binary_op('<', i(1), i(2)), TRUE)
        self.assertIs(binary_op('>=', i(2), d(2.0)), TRUE)
        self.assertIs(binary_op('>', d(1.5), i(2)), FALSE)

    def test_equality(self) -> None:
        self.assertTrue(values_equal(NULL, NULL))
        self.assertFalse(values_equal(NULL, i(0)))
        self.assertTrue(values_equal(s('a'), s('a')))
        self.assertFalse(values_equal(i(1), d(1.0)))
        self.assertIs(binary_op('!=', i(1), i(2)), TRUE)

    def test_object_equality_is_identity(self) -> None:
        klass = ClassDescriptor(name='Point')
        first = Value.object(Instance(klass))
        alias = Value.object(first.payload)
        other = Value.object(Instance(klass))
        self.assertIs(binary_op('==', first, alias), TRUE)
        self.assertIs(binary_op('==', first, other), FALSE)


class LogicalTests(unittest.TestCase):
    def test_boolean_operators(self) -> None:
        self.assertIs(binary_op('&&', TRUE, FALSE), FALSE)
        self.assertIs(binary_op('||', TRUE, FALSE), TRUE)
        self.assertIs(unary_op('!', FALSE), TRUE)

    def test_non_boolean_operands_fail(self) -> None:
        with self.assertRaises(TypeMismatchError):
            binary_op('&&', TRUE, i(1))
        with self.assertRaises(TypeMismatchError):
            unary_op('!', i(0))

    def test_negation(self) -> None:
        self.assertEqual(unary_op('-', i(4)), i(-4))
        self.assertEqual(unary_op('-', d(1.5)), d(-1.5))
        with self.assertRaises(TypeMismatchError):
            unary_op('-', s('x'))


class DisplayTests(unittest.TestCase):
    def test_display_forms(self) -> None:
        self.assertEqual(NULL.display(), 'null')
        self.assertEqual(VOID.display(), 'void')
        self.assertEqual(TRUE.display(), 'true')
        self.assertEqual(i(-3).display(), '-3')
        self.assertEqual(d(5.0).display(), '5.0')
        self.assertEqual(d(0.1).display(), '0.1')
        self.assertEqual(d(float('inf')).display(), 'Infinity')
        self.assertEqual(s('verbatim').display(), 'verbatim')
        instance = Instance(ClassDescriptor(name='Counter'))
        self.assertEqual(Value.object(instance).display(), '<instance of Counter>')

    def test_double_display_switches_to_exponent_outside_plain_range(self) -> None:
        self.assertEqual(d(1e20).display(), '1.0E20')
        self.assertEqual(d(1e-5).display(), '1.0E-5')
        self.assertEqual(d(-1.5e-4).display(), '-1.5E-4')
        self.assertEqual(d(12345678.9).display(), '1.23456789E7')
        self.assertEqual(d(1e7).display(), '1.0E7')
        self.assertEqual(d(9999999.0).display(), '9999999.0')
        self.assertEqual(d(0.001).display(), '0.001')
        self.assertEqual(d(0.0).display(), '0.0')
        self.assertEqual(d(float('nan')).display(), 'NaN')
        self.assertEqual(d(float('-inf')).display(), '-Infinity')

    def test_default_return_values(self) -> None:
        self.assertIs(default_for_type('void'), VOID)
        self.assertEqual(default_for_type('int'), i(0))
        self.assertEqual(default_for_type('double'), d(0.0))
        self.assertIs(default_for_type('boolean'), FALSE)
        self.assertIs(default_for_type('Counter'), NULL)


if __name__ == '__main__':
    unittest.main()
