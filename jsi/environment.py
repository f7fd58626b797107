"""Lexical scope frames for the JSI interpreter."""

from __future__ import annotations

from jsi.errors import UndefinedNameError
from jsi.tokens import SourceSpan
from jsi.values import Value


class Environment:
    """Name bindings plus a link to the enclosing frame.

    ``define`` always writes the current frame, so an inner declaration
    shadows an outer one. ``assign`` updates the nearest frame that
    already binds the name and never creates a binding.
    """

    def __init__(self, parent: Environment | None = None) -> None:
        self.parent = parent
        self.values: dict[str, Value] = {}

    def define(self, name: str, value: Value) -> None:
        """Bind ``name`` in this frame, replacing any existing binding here."""
        self.values[name] = value

    def resolve(self, name: str) -> Environment | None:
        """Return the nearest frame binding ``name``, if any."""
        env: Environment | None = self
        while env is not None:
            if name in env.values:
                return env
            env = env.parent
        return None

    def get(self, name: str, span: SourceSpan | None = None) -> Value:
        env = self.resolve(name)
        if env is None:
            raise UndefinedNameError(
                code="RUN001",
                message=f"Undefined variable '{name}'.",
                span=span,
                hint="Declare the variable before using it.",
            )
        return env.values[name]

    def assign(self, name: str, value: Value, span: SourceSpan | None = None) -> None:
        env = self.resolve(name)
        if env is None:
            raise UndefinedNameError(
                code="RUN001",
                message=f"Cannot assign to undefined variable '{name}'.",
                span=span,
                hint="Declare the variable with a type before assigning to it.",
            )
        env.values[name] = value

    def child(self) -> Environment:
        return Environment(parent=self)
