"""Run configuration for the JSI interpreter."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator


DEFAULT_ENTRY_CLASS = "Main"
DEFAULT_ENTRY_METHOD = "main"
DEFAULT_PRINT_PATH: tuple[str, ...] = ("System", "out", "println")
DEFAULT_MAX_CALL_DEPTH = 1000

# Host recursion limit while parsing or printing one source text.
FRONTEND_RECURSION_LIMIT = 20000


@dataclass(frozen=True)
class RunConfig:
    """Names the interpreter recognizes and the limits it enforces."""

    entry_class: str = DEFAULT_ENTRY_CLASS
    entry_method: str = DEFAULT_ENTRY_METHOD
    print_path: tuple[str, ...] = DEFAULT_PRINT_PATH
    max_call_depth: int = DEFAULT_MAX_CALL_DEPTH

    def __post_init__(self) -> None:
        if self.max_call_depth < 1:
            raise ValueError("max_call_depth must be positive")
        if not self.print_path:
            raise ValueError("print_path must name at least one identifier")


@contextmanager
def recursion_headroom(limit: int) -> Iterator[None]:
    """Raise the host recursion limit to at least ``limit`` inside the block."""
    previous = sys.getrecursionlimit()
    if limit > previous:
        sys.setrecursionlimit(limit)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)
