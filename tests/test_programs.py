from __future__ import annotations

import io
import unittest
from pathlib import Path

from jsi.main import format_source, run_file, run_source


EXAMPLES_DIR = Path(__file__).resolve().parents[1] / 'examples'

EXPECTED_OUTPUT: dict[str, list[str]] = {
    'calculator.java': ['8', '16', '11'],
    'counter.java': ['0', '3', '2', '7'],
    'fibonacci.java': ['0', '1', '5', '55'],
}

GOLDEN_PROGRAMS: list[tuple[str, str, list[str]]] = [
    (
        'factorial_loop',
        'class Main { void main() { int f = 1; for (int i = 2; i <= 10; i = i + 1) { f = f * i; } '
        'System.out.println(f); } }',
        ['3628800'],
    ),
    (
        'linked_nodes',
        'class Node { int value; Node next; }\n'
        'class Main { void main() { Node a = new Node(); a.value = 1; a.next = new Node(); '
        'a.next.value = 2; int sum = 0; Node cur = a; '
        'while (cur != null) { sum = sum + cur.value; cur = cur.next; } System.out.println(sum); } }',
        ['3'],
    ),
    (
        'mixed_numbers',
        'class Main { void main() { double half = 1 / 2.0; System.out.println(half); '
        'System.out.println(7 / 2); System.out.println(7 % 3); System.out.println(-2.5 * 2); } }',
        ['0.5', '3', '1', '-5.0'],
    ),
    (
        'logic_gate',
        'class Main { void main() { boolean ok = true && !false; '
        'if (ok || false) { System.out.println("open"); } else { System.out.println("shut"); } } }',
        ['open'],
    ),
    (
        'global_counter',
        'int calls = 0;\n'
        'class Tick { void tick() { calls = calls + 1; } }\n'
        'class Main { void main() { Tick t = new Tick(); t.tick(); t.tick(); '
        'System.out.println("calls: " + calls); } }',
        ['calls: 2'],
    ),
]


def run_lines(source: str) -> list[str]:
    out = io.StringIO()
    pipeline = run_source(source, stdout=out)
    if not pipeline.ok:
        raise AssertionError(str(pipeline.result.error))
    return out.getvalue().splitlines()


class ExampleProgramTests(unittest.TestCase):
    def test_examples_produce_expected_output(self) -> None:
        for name, expected in EXPECTED_OUTPUT.items():
            with self.subTest(program=name):
                out = io.StringIO()
                pipeline = run_file(EXAMPLES_DIR / name, stdout=out)
                self.assertTrue(pipeline.ok, msg=str(pipeline.result.error))
                self.assertEqual(out.getvalue().splitlines(), expected)

    def test_fibonacci_recursion(self) -> None:
        source = (
            'class Fib { int f(int n) { if (n <= 1) { return n; } return f(n - 1) + f(n - 2); } }\n'
            'class Main { void main() { Fib fib = new Fib(); '
            'System.out.println(fib.f(0)); System.out.println(fib.f(1)); '
            'System.out.println(fib.f(5)); System.out.println(fib.f(10)); System.out.println(fib.f(15)); } }'
        )
        self.assertEqual(run_lines(source), ['0', '1', '5', '55', '610'])


class GoldenProgramTests(unittest.TestCase):
    def test_golden_programs(self) -> None:
        for name, source, expected in GOLDEN_PROGRAMS:
            with self.subTest(program=name):
                self.assertEqual(run_lines(source), expected)

    def test_formatted_source_evaluates_identically(self) -> None:
        programs = [(name, source) for name, source, _ in GOLDEN_PROGRAMS]
        programs += [(name, (EXAMPLES_DIR / name).read_text(encoding='utf-8')) for name in EXPECTED_OUTPUT]
        for name, source in programs:
            with self.subTest(program=name):
                formatted = format_source(source)
                self.assertEqual(run_lines(formatted), run_lines(source))
                self.assertEqual(format_source(formatted), formatted)


if __name__ == '__main__':
    unittest.main()
