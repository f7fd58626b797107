"""Tree-walking evaluator for JSI declarations."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import TextIO

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
    VariableExpr,
    VarDecl,
    VarStmt,
    WhileStmt,
    dotted_path,
)
from jsi.config import RunConfig, recursion_headroom
from jsi.environment import Environment
from jsi.errors import (
    ArityError,
    EntryPointError,
    JsiError,
    RuntimeFault,
    StackExhaustedError,
    TypeMismatchError,
    UndefinedNameError,
)
from jsi.runtime import ClassDescriptor, Instance
from jsi.tokens import SourceSpan
from jsi.values import NULL, VOID, Value, ValueKind, binary_op, default_for_type, unary_op


logger = logging.getLogger(__name__)

# Host frames budgeted per interpreted call (nested blocks, loops, operands).
_FRAMES_PER_CALL = 50


class ExecOutcome:
    """Result of executing one statement."""


class _Completed(ExecOutcome):
    def __repr__(self) -> str:
        return "COMPLETED"


COMPLETED = _Completed()


@dataclass(frozen=True)
class Returned(ExecOutcome):
    """A ``return`` is unwinding toward the nearest method call."""

    value: Value


@dataclass(frozen=True)
class RunResult:
    """Outcome of one program run."""

    exit_status: int
    error: JsiError | None = None

    @property
    def ok(self) -> bool:
        return self.exit_status == 0


class Interpreter:
    """Evaluates a declaration list against one private context.

    Each instance owns its global frame and class registry, so separate
    runs never share state.
    """

    def __init__(self, config: RunConfig | None = None, stdout: TextIO | None = None) -> None:
        self.config = config or RunConfig()
        self._stdout = stdout
        self.globals = Environment()
        self.environment = self.globals
        self.classes: dict[str, ClassDescriptor] = {}
        self.current_instance: Instance | None = None
        self.call_depth = 0

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    def interpret(self, declarations: list[Declaration]) -> RunResult:
        """Run a program, reporting failure through the returned result."""
        try:
            with recursion_headroom(self.config.max_call_depth * _FRAMES_PER_CALL):
                self.execute_program(declarations)
        except RecursionError:
            err = StackExhaustedError(
                code="RUN900",
                message="Stack exhausted: host recursion limit reached.",
                hint="Check recursive methods for a missing base case.",
            )
            logger.debug("run aborted: %s", err)
            return RunResult(exit_status=1, error=err)
        except (RuntimeFault, EntryPointError, StackExhaustedError) as err:
            logger.debug("run aborted: %s", err)
            return RunResult(exit_status=1, error=err)
        return RunResult(exit_status=0)

    def execute_program(self, declarations: list[Declaration]) -> None:
        """Register classes, check the entry point, run top-level statements, then enter."""
        for decl in declarations:
            if isinstance(decl, ClassDecl):
                self.register_class(decl)

        klass, method = self._resolve_entry()

        for decl in declarations:
            if isinstance(decl, StatementDecl):
                outcome = self.execute(decl.stmt)
                if isinstance(outcome, Returned):
                    raise RuntimeFault(
                        code="RUN005",
                        message="'return' outside of a method.",
                        span=decl.span,
                    )

        logger.debug("entering %s.%s", klass.name, method.name)
        self.invoke(self.instantiate(klass), method, [])

    def register_class(self, decl: ClassDecl) -> ClassDescriptor:
        if decl.name in self.classes:
            logger.debug("class %s redefined; later declaration replaces earlier", decl.name)
        descriptor = ClassDescriptor.from_declaration(decl)
        self.classes[decl.name] = descriptor
        return descriptor

    def _resolve_entry(self) -> tuple[ClassDescriptor, MethodDecl]:
        entry_class = self.config.entry_class
        entry_method = self.config.entry_method
        klass = self.classes.get(entry_class)
        if klass is None:
            raise EntryPointError(
                code="ENT001",
                message=f"No entry class '{entry_class}' found.",
                hint=f"Declare 'class {entry_class} {{ void {entry_method}() {{ ... }} }}'.",
            )
        method = klass.find_method(entry_method)
        if method is None or method.params:
            raise EntryPointError(
                code="ENT002",
                message=f"Class '{entry_class}' has no zero-argument method '{entry_method}'.",
                hint=f"Declare 'void {entry_method}()' inside class {entry_class}.",
            )
        return klass, method

    # Statements

    def execute(self, stmt: Stmt) -> ExecOutcome:
        if isinstance(stmt, ExpressionStmt):
            self.evaluate(stmt.expr)
            return COMPLETED

        if isinstance(stmt, VarStmt):
            self.declare(stmt.decl)
            return COMPLETED

        if isinstance(stmt, Block):
            return self.execute_block(stmt.statements, self.environment.child())

        if isinstance(stmt, IfStmt):
            if self._condition(stmt.condition, "if"):
                return self.execute(stmt.then_branch)
            if stmt.else_branch is not None:
                return self.execute(stmt.else_branch)
            return COMPLETED

        if isinstance(stmt, WhileStmt):
            while self._condition(stmt.condition, "while"):
                outcome = self.execute(stmt.body)
                if isinstance(outcome, Returned):
                    return outcome
            return COMPLETED

        if isinstance(stmt, ForStmt):
            return self._execute_for(stmt)

        if isinstance(stmt, ReturnStmt):
            value = VOID if stmt.value is None else self.evaluate(stmt.value)
            return Returned(value)

        raise TypeError(f"unsupported statement node {type(stmt).__name__}")

    def execute_block(self, statements: tuple[Stmt, ...], env: Environment) -> ExecOutcome:
        """Run ``statements`` in ``env``; the previous frame is always restored."""
        previous = self.environment
        self.environment = env
        try:
            for stmt in statements:
                outcome = self.execute(stmt)
                if isinstance(outcome, Returned):
                    return outcome
            return COMPLETED
        finally:
            self.environment = previous

    def _execute_for(self, stmt: ForStmt) -> ExecOutcome:
        previous = self.environment
        self.environment = previous.child()
        try:
            if stmt.initializer is not None:
                self.execute(stmt.initializer)
            while stmt.condition is None or self._condition(stmt.condition, "for"):
                outcome = self.execute(stmt.body)
                if isinstance(outcome, Returned):
                    return outcome
                if stmt.increment is not None:
                    self.evaluate(stmt.increment)
            return COMPLETED
        finally:
            self.environment = previous

    def declare(self, decl: VarDecl) -> None:
        value = NULL if decl.initializer is None else self.evaluate(decl.initializer)
        self.environment.define(decl.name, value)

    def _condition(self, expr: Expr, construct: str) -> bool:
        value = self.evaluate(expr)
        if value.kind != ValueKind.BOOLEAN:
            raise TypeMismatchError(
                code="RUN002",
                message=f"'{construct}' condition must be BOOLEAN, got {value.kind.name}.",
                span=expr.span,
            )
        return value.payload

    # Expressions

    def evaluate(self, expr: Expr) -> Value:
        if isinstance(expr, LiteralExpr):
            return Value.from_literal(expr.value)

        if isinstance(expr, VariableExpr):
            return self._lookup(expr.name, expr.span)

        if isinstance(expr, AssignExpr):
            value = self.evaluate(expr.value)
            self._assign(expr.name, value, expr.span)
            return value

        if isinstance(expr, UnaryExpr):
            return unary_op(expr.operator, self.evaluate(expr.operand), expr.span)

        if isinstance(expr, BinaryExpr):
            left = self.evaluate(expr.left)
            right = self.evaluate(expr.right)
            return binary_op(expr.operator, left, right, expr.span)

        if isinstance(expr, GetExpr):
            instance = self._receiver(expr.object, expr.name, expr.span)
            return instance.get_field(expr.name, expr.span)

        if isinstance(expr, SetExpr):
            instance = self._receiver(expr.object, expr.name, expr.span)
            value = self.evaluate(expr.value)
            instance.set_field(expr.name, value)
            return value

        if isinstance(expr, ThisExpr):
            if self.current_instance is None:
                raise UndefinedNameError(
                    code="RUN001",
                    message="'this' used outside of a method.",
                    span=expr.span,
                )
            return Value.object(self.current_instance)

        if isinstance(expr, NewExpr):
            return self._evaluate_new(expr)

        if isinstance(expr, CallExpr):
            return self._evaluate_call(expr)

        raise TypeError(f"unsupported expression node {type(expr).__name__}")

    def _lookup(self, name: str, span: SourceSpan) -> Value:
        """Resolve ``name`` through method locals, then fields, then globals."""
        env = self.environment.resolve(name)
        if env is not None and env is not self.globals:
            return env.values[name]
        if self.current_instance is not None and self.current_instance.has_field(name):
            return self.current_instance.fields[name]
        return self.globals.get(name, span)

    def _assign(self, name: str, value: Value, span: SourceSpan) -> None:
        env = self.environment.resolve(name)
        if env is not None and env is not self.globals:
            env.values[name] = value
            return
        if self.current_instance is not None and self.current_instance.has_field(name):
            self.current_instance.set_field(name, value)
            return
        self.globals.assign(name, value, span)

    def _receiver(self, expr: Expr, member: str, span: SourceSpan) -> Instance:
        target = self.evaluate(expr)
        if target.kind != ValueKind.OBJECT:
            raise TypeMismatchError(
                code="RUN002",
                message=f"Cannot access member '{member}' on {target.kind.name}.",
                span=span,
                hint="Only object references have members.",
            )
        return target.payload

    def _evaluate_new(self, expr: NewExpr) -> Value:
        klass = self.classes.get(expr.class_name)
        if klass is None:
            raise UndefinedNameError(
                code="RUN001",
                message=f"Undefined class '{expr.class_name}'.",
                span=expr.span,
            )
        for arg in expr.args:
            self.evaluate(arg)
        if expr.args:
            raise ArityError(
                code="RUN003",
                message=f"Class '{expr.class_name}' takes 0 constructor arguments but {len(expr.args)} were given.",
                span=expr.span,
                hint="Classes only have the implicit no-argument constructor.",
            )
        return Value.object(self.instantiate(klass))

    def instantiate(self, klass: ClassDescriptor) -> Instance:
        """Create an instance and replay field initializers in declared order."""
        instance = Instance(klass)
        previous_env = self.environment
        previous_instance = self.current_instance
        self.environment = self.globals.child()
        self.current_instance = instance
        try:
            for name, decl in klass.fields.items():
                if decl.initializer is not None:
                    instance.set_field(name, self.evaluate(decl.initializer))
        finally:
            self.environment = previous_env
            self.current_instance = previous_instance
        return instance

    def _evaluate_call(self, expr: CallExpr) -> Value:
        if dotted_path(expr.callee) == list(self.config.print_path):
            return self._print(expr)

        callee = expr.callee
        if isinstance(callee, GetExpr):
            instance = self._receiver(callee.object, callee.name, callee.span)
            name = callee.name
        elif isinstance(callee, VariableExpr):
            if self.current_instance is None:
                raise UndefinedNameError(
                    code="RUN001",
                    message=f"Undefined method '{callee.name}'.",
                    span=callee.span,
                )
            instance = self.current_instance
            name = callee.name
        else:
            raise TypeMismatchError(
                code="RUN002",
                message="Expression is not callable.",
                span=expr.span,
                hint="Call a method by name or through an object reference.",
            )

        method = instance.klass.find_method(name)
        if method is None:
            raise UndefinedNameError(
                code="RUN001",
                message=f"Undefined method '{name}' on class {instance.klass.name}.",
                span=expr.span,
            )
        if len(expr.args) != len(method.params):
            raise ArityError(
                code="RUN003",
                message=(
                    f"Method '{instance.klass.name}.{name}' expects {len(method.params)} "
                    f"argument(s) but got {len(expr.args)}."
                ),
                span=expr.span,
            )
        args = [self.evaluate(arg) for arg in expr.args]
        return self.invoke(instance, method, args)

    def _print(self, expr: CallExpr) -> Value:
        if len(expr.args) != 1:
            raise ArityError(
                code="RUN003",
                message=f"'{'.'.join(self.config.print_path)}' expects 1 argument but got {len(expr.args)}.",
                span=expr.span,
            )
        value = self.evaluate(expr.args[0])
        self.stdout.write(value.display() + "\n")
        return VOID

    def invoke(self, instance: Instance, method: MethodDecl, args: list[Value]) -> Value:
        """Run ``method`` on ``instance`` in a fresh frame under the globals."""
        if self.call_depth >= self.config.max_call_depth:
            raise StackExhaustedError(
                code="RUN900",
                message=f"Stack exhausted: call depth exceeded {self.config.max_call_depth}.",
                span=method.span,
                hint="Check recursive methods for a missing base case.",
            )

        env = self.globals.child()
        for param, arg in zip(method.params, args):
            env.define(param.name, arg)

        previous_instance = self.current_instance
        self.current_instance = instance
        self.call_depth += 1
        try:
            outcome = self.execute_block(method.body.statements, env)
        finally:
            self.call_depth -= 1
            self.current_instance = previous_instance

        if isinstance(outcome, Returned):
            return outcome.value
        return default_for_type(method.return_type)


def run(
    declarations: list[Declaration],
    *,
    config: RunConfig | None = None,
    stdout: TextIO | None = None,
) -> RunResult:
    """Evaluate a parsed program in a fresh interpreter context."""
    return Interpreter(config=config, stdout=stdout).interpret(declarations)
