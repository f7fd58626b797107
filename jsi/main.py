"""Top-level pipeline orchestration for JSI."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterator, TextIO

from jsi.ast import Declaration, ast_to_dict
from jsi.config import FRONTEND_RECURSION_LIMIT, RunConfig, recursion_headroom
from jsi.errors import Diagnostic, LexError, ParseError
from jsi.interpreter import RunResult, run
from jsi.lexer import Lexer
from jsi.parser import Parser
from jsi.printer import format_declarations
from jsi.tokens import Token


logger = logging.getLogger(__name__)

DiagnosticSink = Callable[[Diagnostic], None]


@dataclass
class FrontendArtifacts:
    """Pipeline output from source text through parsing."""

    tokens: list[Token]
    declarations: list[Declaration]


@dataclass
class PipelineResult:
    """Full artifacts of one source run."""

    tokens: list[Token]
    declarations: list[Declaration]
    result: RunResult

    @property
    def ok(self) -> bool:
        return self.result.ok


def build_frontend(
    source: str,
    *,
    filename: str = "<input>",
    sink: DiagnosticSink | None = None,
) -> FrontendArtifacts:
    """Scan and parse ``source``.

    Every lexical and syntax diagnostic is forwarded to ``sink``. If any
    were produced, a single summarizing ``LexError`` or ``ParseError`` is
    raised so a damaged program is never interpreted.
    """
    lexer = Lexer(source, filename=filename)
    tokens = lexer.tokenize()
    parser = Parser(tokens)
    declarations = parser.parse()

    diagnostics = list(lexer.diagnostics) + [err.to_diagnostic() for err in parser.errors]
    if sink is not None:
        for diag in diagnostics:
            sink(diag)

    if lexer.diagnostics:
        raise _summarize(LexError, lexer.diagnostics, len(diagnostics))
    if parser.errors:
        raise _summarize(ParseError, [err.to_diagnostic() for err in parser.errors], len(diagnostics))

    logger.debug("%s: %d tokens, %d declarations", filename, len(tokens), len(declarations))
    return FrontendArtifacts(tokens=tokens, declarations=declarations)


def _summarize(
    error_type: type[LexError] | type[ParseError],
    diagnostics: list[Diagnostic],
    total: int,
) -> LexError | ParseError:
    first = diagnostics[0]
    message = first.message
    if total > 1:
        message = f"{message} (plus {total - 1} additional diagnostic(s))."
    return error_type(code=first.code, message=message, span=first.span, hint=first.hint)


def run_source(
    source: str,
    *,
    filename: str = "<input>",
    config: RunConfig | None = None,
    stdout: TextIO | None = None,
    sink: DiagnosticSink | None = None,
) -> PipelineResult:
    """Scan, parse, and run ``source``.

    Front-end problems raise; runtime failures come back in
    ``PipelineResult.result`` after any output already produced.
    """
    frontend = build_frontend(source, filename=filename, sink=sink)
    result = run(frontend.declarations, config=config, stdout=stdout)
    return PipelineResult(tokens=frontend.tokens, declarations=frontend.declarations, result=result)


def run_file(
    input_path: str | Path,
    *,
    config: RunConfig | None = None,
    stdout: TextIO | None = None,
    sink: DiagnosticSink | None = None,
) -> PipelineResult:
    """Run a source file."""
    path = Path(input_path)
    source = path.read_text(encoding="utf-8")
    return run_source(source, filename=str(path), config=config, stdout=stdout, sink=sink)


def check_source(
    source: str,
    *,
    filename: str = "<input>",
    sink: DiagnosticSink | None = None,
) -> list[Declaration]:
    """Validate that ``source`` scans and parses cleanly."""
    return build_frontend(source, filename=filename, sink=sink).declarations


def explain_source(source: str, *, filename: str = "<input>") -> dict[str, Any]:
    """Return a JSON-compatible payload with tokens and AST."""
    frontend = build_frontend(source, filename=filename)
    with _nesting_guard():
        tree = ast_to_dict(frontend.declarations)
    return {
        "tokens": [
            {
                "type": token.token_type.name,
                "lexeme": token.lexeme,
                "literal": token.literal,
                "line": token.line,
            }
            for token in frontend.tokens
        ],
        "ast": tree,
    }


def format_source(source: str, *, filename: str = "<input>") -> str:
    """Canonical pretty-printer for a source text."""
    declarations = build_frontend(source, filename=filename).declarations
    with _nesting_guard():
        return format_declarations(declarations)


@contextmanager
def _nesting_guard() -> Iterator[None]:
    """Walk a parsed tree with headroom; report trees too deep to walk."""
    try:
        with recursion_headroom(FRONTEND_RECURSION_LIMIT):
            yield
    except RecursionError:
        raise ParseError(
            code="PAR005",
            message="Expression nested too deeply.",
            hint="Split the expression into smaller statements.",
        ) from None


if __name__ == "__main__":
    from jsi.cli import main

    raise SystemExit(main())
