"""Command-line interface for the JSI interpreter."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from jsi.config import DEFAULT_ENTRY_CLASS, DEFAULT_ENTRY_METHOD, DEFAULT_MAX_CALL_DEPTH, RunConfig
from jsi.errors import CLIError, Diagnostic, JsiError, LexError, ParseError, format_diagnostic
from jsi.interpreter import run
from jsi.main import build_frontend, explain_source, format_source


def build_parser() -> argparse.ArgumentParser:
    """Build argparse command tree for JSI CLI."""
    parser = argparse.ArgumentParser(prog="jsi", description="Java Source Interpreter")
    parser.add_argument("--debug", action="store_true", help="Log pipeline details to stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Interpret a source file")
    _add_source_arguments(run_parser)
    run_parser.add_argument("-q", "--quiet", action="store_true", help="Print program output only")
    run_parser.add_argument("--entry-class", default=DEFAULT_ENTRY_CLASS, help="Class holding the entry method")
    run_parser.add_argument("--entry-method", default=DEFAULT_ENTRY_METHOD, help="Zero-argument entry method")
    run_parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_CALL_DEPTH,
        help="Maximum method call depth before the run is aborted",
    )

    check_parser = subparsers.add_parser("check", help="Scan and parse without running")
    _add_source_arguments(check_parser)

    explain_parser = subparsers.add_parser("explain", help="Print tokens + AST JSON")
    _add_source_arguments(explain_parser)

    format_parser = subparsers.add_parser("format", help="Print canonical source")
    _add_source_arguments(format_parser)

    tokens_parser = subparsers.add_parser("tokens", help="Print the token stream")
    _add_source_arguments(tokens_parser)

    return parser


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input", nargs="?", help="Input source file")
    parser.add_argument("--code", help="Inline source string")


def main(argv: list[str] | None = None) -> int:
    """Run CLI and return shell exit code."""
    args = build_parser().parse_args(argv)
    if args.debug:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")

    try:
        source, filename = _resolve_source(args.input, args.code)

        if args.command == "run":
            config = RunConfig(
                entry_class=args.entry_class,
                entry_method=args.entry_method,
                max_call_depth=args.max_depth,
            )
            return _run_program(source, filename, config, quiet=args.quiet)

        if args.command == "check":
            declarations = build_frontend(source, filename=filename, sink=_report).declarations
            print(f"OK ({len(declarations)} declarations)")
            return 0

        if args.command == "explain":
            payload = explain_source(source, filename=filename)
            print(json.dumps(payload, indent=2, sort_keys=True))
            return 0

        if args.command == "format":
            sys.stdout.write(format_source(source, filename=filename))
            return 0

        if args.command == "tokens":
            for token in build_frontend(source, filename=filename, sink=_report).tokens:
                print(token)
            return 0

        raise argparse.ArgumentTypeError(f"Unsupported command '{args.command}'.")

    except (LexError, ParseError) as err:
        if args.command in ("explain", "format"):
            print(format_diagnostic(err.to_diagnostic()), file=sys.stderr)
        return 1
    except CLIError as err:
        print(format_diagnostic(err.to_diagnostic()), file=sys.stderr)
        return 2
    except JsiError as err:
        print(format_diagnostic(err.to_diagnostic()), file=sys.stderr)
        return 1
    except FileNotFoundError as err:
        diag = Diagnostic(code="CLI002", message=f"Error reading file: {err.filename}", hint="Check the path.")
        print(format_diagnostic(diag), file=sys.stderr)
        return 2
    except (argparse.ArgumentTypeError, ValueError) as err:
        diag = Diagnostic(code="CLI001", message=str(err), span=None, hint="Run jsi --help for usage.")
        print(format_diagnostic(diag), file=sys.stderr)
        return 2
    except Exception as err:  # pragma: no cover
        diag = Diagnostic(code="CLI999", message=f"Internal error: {err}", span=None, hint="Run with --debug")
        print(format_diagnostic(diag), file=sys.stderr)
        return 3


def _run_program(source: str, filename: str, config: RunConfig, *, quiet: bool) -> int:
    if not quiet:
        print("=== Java Source Interpreter ===")
        print(f"Interpreting: {filename}")
        print("===============================\n")

    frontend = build_frontend(source, filename=filename, sink=_report)
    if not quiet:
        print(f"[Lexer] Generated {len(frontend.tokens)} tokens")
        print(f"[Parser] Parsed {len(frontend.declarations)} declarations")
        print("[Interpreter] Starting execution...\n")
        print("--- Output ---")
    sys.stdout.flush()

    result = run(frontend.declarations, config=config)
    sys.stdout.flush()
    if result.error is not None:
        print(f"Execution failed: {format_diagnostic(result.error.to_diagnostic())}", file=sys.stderr)
        return result.exit_status

    if not quiet:
        print("\n--- End of Output ---")
        print("\n[Complete] Program executed successfully")
    return 0


def _report(diag: Diagnostic) -> None:
    print(format_diagnostic(diag), file=sys.stderr)


def _resolve_source(input_path: str | None, inline_code: str | None) -> tuple[str, str]:
    if input_path and inline_code:
        raise CLIError(
            code="CLI001",
            message="Use either input file path or --code, not both.",
            hint="Run jsi --help for usage.",
        )
    if input_path:
        path = Path(input_path)
        return path.read_text(encoding="utf-8"), str(path)
    if inline_code is not None:
        return inline_code, "<inline>"
    raise CLIError(
        code="CLI001",
        message="No source provided. Pass input file path or --code.",
        hint="Run jsi --help for usage.",
    )


if __name__ == "__main__":
    raise SystemExit(main())
