"""Class descriptors and instances."""

from __future__ import annotations

from dataclasses import dataclass, field

from jsi.ast import ClassDecl, MethodDecl, VarDecl
from jsi.errors import UndefinedNameError
from jsi.tokens import SourceSpan
from jsi.values import NULL, Value


@dataclass
class ClassDescriptor:
    """Static shape shared by every instance of a class."""

    name: str
    fields: dict[str, VarDecl] = field(default_factory=dict)
    methods: dict[str, MethodDecl] = field(default_factory=dict)

    @classmethod
    def from_declaration(cls, decl: ClassDecl) -> ClassDescriptor:
        descriptor = cls(name=decl.name)
        for var in decl.fields:
            descriptor.fields[var.name] = var
        for method in decl.methods:
            descriptor.methods[method.name] = method
        return descriptor

    def find_method(self, name: str) -> MethodDecl | None:
        return self.methods.get(name)

    def __str__(self) -> str:
        return f"<class {self.name}>"


class Instance:
    """A runtime object: class reference plus mutable field values.

    Fields start out as null for every declared field. Writing an
    undeclared name adds it to this instance only.
    """

    def __init__(self, klass: ClassDescriptor) -> None:
        self.klass = klass
        self.fields: dict[str, Value] = {name: NULL for name in klass.fields}

    def has_field(self, name: str) -> bool:
        return name in self.fields

    def get_field(self, name: str, span: SourceSpan | None = None) -> Value:
        if name not in self.fields:
            raise UndefinedNameError(
                code="RUN001",
                message=f"Undefined field '{name}' on instance of {self.klass.name}.",
                span=span,
            )
        return self.fields[name]

    def set_field(self, name: str, value: Value) -> None:
        self.fields[name] = value

    def display(self) -> str:
        return f"<instance of {self.klass.name}>"

    def __repr__(self) -> str:
        return f"Instance({self.klass.name}, {self.fields!r})"
