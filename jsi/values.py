"""Runtime value model and operator semantics."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum, auto
from typing import TYPE_CHECKING, Any

from jsi.errors import DivisionByZeroError, TypeMismatchError
from jsi.tokens import SourceSpan

if TYPE_CHECKING:
    from jsi.runtime import Instance


_INT_BITS = 64
_INT_MODULUS = 1 << _INT_BITS
_INT_MIN = -(1 << (_INT_BITS - 1))


class ValueKind(Enum):
    """Type tag carried by every runtime value."""

    INT = auto()
    DOUBLE = auto()
    BOOLEAN = auto()
    STRING = auto()
    OBJECT = auto()
    NULL = auto()
    VOID = auto()


_NUMERIC = frozenset({ValueKind.INT, ValueKind.DOUBLE})


def wrap_int(value: int) -> int:
    """Reduce an integer to signed 64-bit two's complement."""
    return (value - _INT_MIN) % _INT_MODULUS + _INT_MIN


@dataclass(frozen=True)
class Value:
    """Tagged runtime value.

    Everything except OBJECT compares by content. An OBJECT payload is a
    shared ``Instance``; copying the value copies the handle only.
    """

    kind: ValueKind
    payload: Any = None

    @staticmethod
    def int_(value: int) -> Value:
        return Value(ValueKind.INT, wrap_int(value))

    @staticmethod
    def double(value: float) -> Value:
        return Value(ValueKind.DOUBLE, float(value))

    @staticmethod
    def boolean(value: bool) -> Value:
        return TRUE if value else FALSE

    @staticmethod
    def string(value: str) -> Value:
        return Value(ValueKind.STRING, value)

    @staticmethod
    def object(instance: Instance) -> Value:
        return Value(ValueKind.OBJECT, instance)

    @staticmethod
    def from_literal(literal: Any) -> Value:
        """Build a value from a parsed literal payload."""
        if literal is None:
            return NULL
        if isinstance(literal, bool):
            return Value.boolean(literal)
        if isinstance(literal, int):
            return Value.int_(literal)
        if isinstance(literal, float):
            return Value.double(literal)
        if isinstance(literal, str):
            return Value.string(literal)
        raise ValueError(f"unsupported literal {literal!r}")

    @property
    def is_numeric(self) -> bool:
        return self.kind in _NUMERIC

    def as_double(self) -> float:
        return float(self.payload)

    def display(self) -> str:
        """Canonical text used by printing and string concatenation."""
        if self.kind == ValueKind.NULL:
            return "null"
        if self.kind == ValueKind.VOID:
            return "void"
        if self.kind == ValueKind.BOOLEAN:
            return "true" if self.payload else "false"
        if self.kind == ValueKind.INT:
            return str(self.payload)
        if self.kind == ValueKind.DOUBLE:
            return _display_double(self.payload)
        if self.kind == ValueKind.STRING:
            return self.payload
        return self.payload.display()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return values_equal(self, other)

    def __hash__(self) -> int:
        if self.kind == ValueKind.OBJECT:
            return id(self.payload)
        return hash((self.kind, self.payload))

    def __repr__(self) -> str:
        return f"Value({self.kind.name}, {self.display()!r})"


NULL = Value(ValueKind.NULL)
VOID = Value(ValueKind.VOID)
TRUE = Value(ValueKind.BOOLEAN, True)
FALSE = Value(ValueKind.BOOLEAN, False)


def _display_double(value: float) -> str:
    """Shortest round-trip digits, positional between 1e-3 and 1e7, else ``d.dddE<exp>``."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0 or 1e-3 <= abs(value) < 1e7:
        return repr(value)
    number = Decimal(repr(value))
    sign, digits, _ = number.as_tuple()
    text = "".join(str(digit) for digit in digits).rstrip("0") or "0"
    mantissa = f"{text[0]}.{text[1:] or '0'}"
    return f"{'-' if sign else ''}{mantissa}E{number.adjusted()}"


def values_equal(left: Value, right: Value) -> bool:
    """Equality used by ``==`` and ``!=``: same tag and same content."""
    if left.kind == ValueKind.NULL or right.kind == ValueKind.NULL:
        return left.kind == right.kind
    if left.kind != right.kind:
        return False
    if left.kind == ValueKind.OBJECT:
        return left.payload is right.payload
    return left.payload == right.payload


def default_for_type(type_name: str) -> Value:
    """Value produced by a method that finishes without ``return``."""
    if type_name == "void":
        return VOID
    if type_name == "int":
        return Value.int_(0)
    if type_name == "double":
        return Value.double(0.0)
    if type_name == "boolean":
        return FALSE
    return NULL


def _mismatch(op: str, left: Value, right: Value, span: SourceSpan | None) -> TypeMismatchError:
    return TypeMismatchError(
        code="RUN002",
        message=f"Cannot apply '{op}' to {left.kind.name} and {right.kind.name}.",
        span=span,
        hint="Operands must be numbers (or a string on either side of '+').",
    )


def _int_divide(left: int, right: int) -> int:
    quotient = abs(left) // abs(right)
    if (left < 0) != (right < 0):
        quotient = -quotient
    return quotient


def _arithmetic(op: str, left: Value, right: Value, span: SourceSpan | None) -> Value:
    if not (left.is_numeric and right.is_numeric):
        raise _mismatch(op, left, right, span)

    if op in ("/", "%") and right.payload == 0:
        raise DivisionByZeroError(
            code="RUN004",
            message="Division by zero." if op == "/" else "Modulo by zero.",
            span=span,
            hint="Guard the divisor with a comparison before dividing.",
        )

    if ValueKind.DOUBLE in (left.kind, right.kind):
        a, b = left.as_double(), right.as_double()
        if op == "+":
            return Value.double(a + b)
        if op == "-":
            return Value.double(a - b)
        if op == "*":
            return Value.double(a * b)
        if op == "/":
            return Value.double(a / b)
        return Value.double(math.fmod(a, b))

    a, b = left.payload, right.payload
    if op == "+":
        return Value.int_(a + b)
    if op == "-":
        return Value.int_(a - b)
    if op == "*":
        return Value.int_(a * b)
    quotient = _int_divide(a, b)
    if op == "/":
        return Value.int_(quotient)
    return Value.int_(a - b * quotient)


def _compare(op: str, left: Value, right: Value, span: SourceSpan | None) -> Value:
    if not (left.is_numeric and right.is_numeric):
        raise _mismatch(op, left, right, span)
    if ValueKind.DOUBLE in (left.kind, right.kind):
        a: float | int = left.as_double()
        b: float | int = right.as_double()
    else:
        a, b = left.payload, right.payload
    if op == "<":
        return Value.boolean(a < b)
    if op == "<=":
        return Value.boolean(a <= b)
    if op == ">":
        return Value.boolean(a > b)
    return Value.boolean(a >= b)


def binary_op(op: str, left: Value, right: Value, span: SourceSpan | None = None) -> Value:
    """Apply binary operator ``op`` to two evaluated operands."""
    if op == "+" and ValueKind.STRING in (left.kind, right.kind):
        return Value.string(left.display() + right.display())

    if op in ("+", "-", "*", "/", "%"):
        return _arithmetic(op, left, right, span)

    if op in ("<", "<=", ">", ">="):
        return _compare(op, left, right, span)

    if op == "==":
        return Value.boolean(values_equal(left, right))
    if op == "!=":
        return Value.boolean(not values_equal(left, right))

    if op in ("&&", "||"):
        if left.kind != ValueKind.BOOLEAN or right.kind != ValueKind.BOOLEAN:
            raise TypeMismatchError(
                code="RUN002",
                message=f"Operator '{op}' requires BOOLEAN operands, got {left.kind.name} and {right.kind.name}.",
                span=span,
            )
        if op == "&&":
            return Value.boolean(left.payload and right.payload)
        return Value.boolean(left.payload or right.payload)

    raise ValueError(f"unknown binary operator {op!r}")


def unary_op(op: str, operand: Value, span: SourceSpan | None = None) -> Value:
    """Apply unary ``-`` or ``!``."""
    if op == "-":
        if operand.kind == ValueKind.INT:
            return Value.int_(-operand.payload)
        if operand.kind == ValueKind.DOUBLE:
            return Value.double(-operand.payload)
        raise TypeMismatchError(
            code="RUN002",
            message=f"Cannot negate {operand.kind.name}.",
            span=span,
            hint="Unary '-' requires an int or double.",
        )
    if op == "!":
        if operand.kind != ValueKind.BOOLEAN:
            raise TypeMismatchError(
                code="RUN002",
                message=f"Operator '!' requires a BOOLEAN operand, got {operand.kind.name}.",
                span=span,
            )
        return Value.boolean(not operand.payload)
    raise ValueError(f"unknown unary operator {op!r}")
