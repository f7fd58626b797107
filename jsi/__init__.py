"""JSI: scanner, parser, and tree-walking interpreter for a small Java-like language."""

from __future__ import annotations

from typing import Any


__all__ = [
    "PipelineResult",
    "RunConfig",
    "RunResult",
    "check_source",
    "explain_source",
    "format_source",
    "parse",
    "run",
    "run_file",
    "run_source",
    "scan",
]


def scan(*args: Any, **kwargs: Any):
    from jsi.lexer import scan as _scan

    return _scan(*args, **kwargs)


def parse(*args: Any, **kwargs: Any):
    from jsi.parser import parse as _parse

    return _parse(*args, **kwargs)


def run(*args: Any, **kwargs: Any):
    from jsi.interpreter import run as _run

    return _run(*args, **kwargs)


def run_source(*args: Any, **kwargs: Any):
    from jsi.main import run_source as _run_source

    return _run_source(*args, **kwargs)


def run_file(*args: Any, **kwargs: Any):
    from jsi.main import run_file as _run_file

    return _run_file(*args, **kwargs)


def check_source(*args: Any, **kwargs: Any):
    from jsi.main import check_source as _check_source

    return _check_source(*args, **kwargs)


def explain_source(*args: Any, **kwargs: Any):
    from jsi.main import explain_source as _explain_source

    return _explain_source(*args, **kwargs)


def format_source(*args: Any, **kwargs: Any):
    from jsi.main import format_source as _format_source

    return _format_source(*args, **kwargs)


def __getattr__(name: str):
    if name == "PipelineResult":
        from jsi.main import PipelineResult

        return PipelineResult
    if name == "RunResult":
        from jsi.interpreter import RunResult

        return RunResult
    if name == "RunConfig":
        from jsi.config import RunConfig

        return RunConfig
    raise AttributeError(name)
