"""Structured diagnostics and exception hierarchy for JSI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from jsi.tokens import SourceSpan


@dataclass(frozen=True)
class Diagnostic:
    """Machine-readable diagnostic emitted by any pipeline phase."""

    code: str
    message: str
    span: SourceSpan | None = None
    hint: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize the diagnostic for JSON output."""
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "hint": self.hint,
        }
        if self.span is not None:
            payload["span"] = self.span.to_dict()
        return payload


class JsiError(Exception):
    """Base error carrying a code and optional source span."""

    def __init__(self, code: str, message: str, span: SourceSpan | None = None, hint: str = "") -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.span = span
        self.hint = hint

    def to_diagnostic(self) -> Diagnostic:
        """Convert exception into serializable diagnostic."""
        return Diagnostic(code=self.code, message=self.message, span=self.span, hint=self.hint)

    def __str__(self) -> str:
        if self.span is None:
            return f"[{self.code}] {self.message}"
        return f"[{self.code}] {self.message} ({self.span.file}:{self.span.line}:{self.span.column})"


class LexError(JsiError):
    """Raised when lexical diagnostics prevent a source from running."""


class ParseError(JsiError):
    """Raised by parser failures."""


class RuntimeFault(JsiError):
    """Language-level evaluation failure; aborts the current run."""


class UndefinedNameError(RuntimeFault):
    """Unknown variable, field, method, or class."""


class TypeMismatchError(RuntimeFault):
    """Operator applied to operands of unsupported kinds."""


class ArityError(RuntimeFault):
    """Call argument count differs from the declared parameter count."""


class DivisionByZeroError(RuntimeFault):
    """Division or remainder with a zero right operand."""


class EntryPointError(JsiError):
    """Program has no usable entry class or entry method."""


class StackExhaustedError(JsiError):
    """Call depth exceeded; fatal and distinct from language-level faults."""


class CLIError(JsiError):
    """Raised by CLI usage or orchestration failures."""


def format_diagnostic(diag: Diagnostic) -> str:
    """Format diagnostic into a stable human-readable line."""
    if diag.span is None:
        suffix = ""
    else:
        suffix = f" {diag.span.file}:{diag.span.line}:{diag.span.column}"
    hint = f" Hint: {diag.hint}" if diag.hint else ""
    return f"{diag.code}{suffix}: {diag.message}{hint}"
