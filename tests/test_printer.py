from __future__ import annotations

import unittest

from jsi.errors import ParseError
from jsi.lexer import Lexer
from jsi.main import format_source
from jsi.parser import parse
from jsi.printer import format_declarations


def reformat(source: str) -> str:
    return format_declarations(parse(Lexer(source).tokenize()))


class PrinterTests(unittest.TestCase):
    def test_class_layout(self) -> None:
        text = reformat('class A{int x=1;int get(int d){return x+d;}}')
        self.assertEqual(
            text,
            'class A {\n'
            '    int x = 1;\n'
            '    int get(int d) {\n'
            '        return x + d;\n'
            '    }\n'
            '}\n',
        )

    def test_nested_operands_are_parenthesized(self) -> None:
        self.assertEqual(reformat('x = (a + b) * c;'), 'x = (a + b) * c;\n')
        self.assertEqual(reformat('x = a + b * c;'), 'x = a + (b * c);\n')
        self.assertEqual(reformat('y = -(a - b);'), 'y = -(a - b);\n')

    def test_nested_assignment_is_wrapped(self) -> None:
        self.assertEqual(reformat('a = b = 1;'), 'a = b = 1;\n')
        self.assertEqual(reformat('x = (y = 2) + 1;'), 'x = (y = 2) + 1;\n')

    def test_literals(self) -> None:
        self.assertEqual(
            reformat('v = f(1, 2.5, "s", true, null, this);'),
            'v = f(1, 2.5, "s", true, null, this);\n',
        )

    def test_loops_and_dangling_else(self) -> None:
        text = reformat('for(int i=0;i<3;i=i+1)if(a)if(b)x=1;else x=2;')
        self.assertEqual(
            text,
            'for (int i = 0; i < 3; i = i + 1)\n'
            '    if (a)\n'
            '        if (b)\n'
            '            x = 1;\n'
            '        else\n'
            '            x = 2;\n',
        )
        wrapped = reformat('if (a) { if (b) x = 1; } else x = 2;')
        self.assertEqual(
            wrapped,
            'if (a) {\n'
            '    if (b)\n'
            '        x = 1;\n'
            '} else\n'
            '    x = 2;\n',
        )

    def test_output_is_stable(self) -> None:
        source = 'class P { P next; void run() { while (next != null) { next = next.next; } for (;;) { return; } } }'
        once = reformat(source)
        self.assertEqual(reformat(once), once)

    def test_long_operator_chain_formats(self) -> None:
        text = format_source('int n = ' + ' + '.join(['1'] * 3000) + ';')
        self.assertTrue(text.startswith('int n = ' + '(' * 2998 + '1 + 1)'))

    def test_chain_too_deep_to_format_is_reported(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            format_source('int n = ' + ' + '.join(['1'] * 30000) + ';')
        self.assertEqual(ctx.exception.code, 'PAR005')


if __name__ == '__main__':
    unittest.main()
