import unittest

from sim.lang.error import SyntacticError
from sim.pure.grammar import (Assignment, BinaryOp, Block, FunctionCall, FunctionDef, IfExpr, Literal, Operator,
                              Return, Variable, WhileLoop)
from sim.pure.lexical import tokenize
from sim.pure.parser import Parser, parse


def num(value):
    return Literal(value)


def op(left, operator, right):
    return BinaryOp(left, operator, right)


ADD, SUB, MUL, DIV = Operator.ADD, Operator.SUBTRACT, Operator.MULTIPLY, Operator.DIVIDE


class ParserTestCase(unittest.TestCase):

    def test_statements(self):
        cases = {
            "x = 1 + 2;": Assignment("x", op(num(1), ADD, num(2))),
            "s = \"hi\";": Assignment("s", Literal("hi")),
            "add(1, x);": FunctionCall("add", (num(1), Variable("x"))),
            "f();": FunctionCall("f"),
            "return x;": Return(Variable("x")),
            "function add(a, b) { return a + b; }":
                FunctionDef("add", ("a", "b"), Block((Return(op(Variable("a"), ADD, Variable("b"))),))),
            "function f() {}": FunctionDef("f", (), Block()),
            "if (x) { y = 1; }": IfExpr(Variable("x"), Block((Assignment("y", num(1)),))),
            "if (x) {} else { y = 2; }": IfExpr(Variable("x"), Block(), Block((Assignment("y", num(2)),))),
            "while (x < 3) { x = x + 1; }":
                WhileLoop(op(Variable("x"), Operator.LESS_THAN, num(3)),
                          Block((Assignment("x", op(Variable("x"), ADD, num(1))),))),
            "x;": Variable("x"),
            "x": Variable("x"),
            "1 == 2;": op(num(1), Operator.EQUAL, num(2)),
        }
        for case, expected in cases.items():
            self.assertEqual(Block((expected,)), parse(case), case)

    def test_program(self):
        source = """
            function add(a, b) {
                return a + b;
            };
            x = 1;
            add(x, 2);
        """
        program = parse(source)
        self.assertEqual(3, len(program.statements))
        self.assertIsInstance(program.statements[0], FunctionDef)
        self.assertEqual(FunctionCall("add", (Variable("x"), num(2))), program.statements[2])

    def test_empty_statements(self):
        cases = {
            "": Block(),
            ";;": Block(),
            "function f(){};": Block((FunctionDef("f", (), Block()),)),
            "while (1) { ; }": Block((WhileLoop(num(1), Block()),)),
        }
        for case, expected in cases.items():
            self.assertEqual(expected, parse(case), case)

    def test_tiered_precedence(self):
        cases = {
            "2 + 3 * 4": op(num(2), ADD, op(num(3), MUL, num(4))),
            "2 * 3 + 4": op(op(num(2), MUL, num(3)), ADD, num(4)),
            "8 - 4 - 2": op(op(num(8), SUB, num(4)), SUB, num(2)),
            "8 / 4 / 2": op(op(num(8), DIV, num(4)), DIV, num(2)),
            "(2 + 3) * 4": op(op(num(2), ADD, num(3)), MUL, num(4)),
            "1 + 2 < 4": op(op(num(1), ADD, num(2)), Operator.LESS_THAN, num(4)),
            "7 % 3 + 1": op(op(num(7), Operator.MODULO, num(3)), ADD, num(1)),
        }
        for case, expected in cases.items():
            self.assertEqual(Block((expected,)), parse(case), case)

    def test_flat_operators(self):
        cases = {
            "2 + 3 * 4": op(num(2), ADD, op(num(3), MUL, num(4))),
            "2 * 3 + 4": op(num(2), MUL, op(num(3), ADD, num(4))),
            "8 - 4 - 2": op(num(8), SUB, op(num(4), SUB, num(2))),
            "(8 - 4) - 2": op(op(num(8), SUB, num(4)), SUB, num(2)),
            "1 + 2 < 4": op(num(1), ADD, op(num(2), Operator.LESS_THAN, num(4))),
        }
        for case, expected in cases.items():
            self.assertEqual(Block((expected,)), parse(case, flat_operators=True), case)

    def test_errors(self):
        should_raise = [
            "x = 1",
            "x = ;",
            "1 2",
            "function (a) {}",
            "function f(a b) {}",
            "function f(a,) {}",
            "function f(1) {}",
            "function f()",
            "if x { }",
            "if (x) y = 1;",
            "while (x) y = 1;",
            "return 1",
            "f(1, 2",
            "f(1, 2)",
            "{",
            "}",
            "if (1) { x = 1;",
            "else { }",
            "(1 + 2",
            "x = 1 +;",
        ]
        for case in should_raise:
            self.assertRaises(SyntacticError, parse, case)

    def test_error_messages(self):
        cases = {
            "x = 1": "expected ';', found end of input",
            "function f(a b) {}": "expected ')', found identifier 'b'",
            "if (1) { x = 1;": "expected '}', found end of input",
            "x = ;": "expected expression, found ';'",
            "function 1() {}": "expected identifier, found integer '1'",
        }
        for case, expected in cases.items():
            with self.assertRaises(SyntacticError) as context:
                parse(case)
            self.assertEqual(expected, str(context.exception), case)

    def test_error_position(self):
        with self.assertRaises(SyntacticError) as context:
            parse("x = 1;\nif (x) { y = 2 }")

        error = context.exception
        self.assertEqual("if (x) { y = 2 }", error.expr)
        self.assertEqual(2, error.lineno)
        self.assertEqual(15, error.start)

        with self.assertRaises(SyntacticError) as context:
            parse("x = 1\n")

        error = context.exception
        self.assertEqual("x = 1", error.expr)
        self.assertEqual(1, error.lineno)
        self.assertEqual(5, error.start)

    def test_cursor(self):
        parser = Parser(tokenize("x = 1;"))
        self.assertEqual("x", parser.advance().value)
        self.assertEqual("=", parser.current_token.value)
        self.assertEqual(";", parser.peek(2).value)
        self.assertEqual(None, parser.peek(10).value)  # EOF

        parser.position = len(parser.tokens) - 1
        parser.advance()
        self.assertEqual(len(parser.tokens) - 1, parser.position)  # never past EOF

    def test_requires_eof(self):
        self.assertRaises(ValueError, Parser, [])
        self.assertRaises(ValueError, Parser, tokenize("x;")[:-1])

    def test_str(self):
        source = "function f(a, b) { if (a < b) { return a; } else { return b; } } f(1, \"x\");"
        self.assertEqual(
            "{ function f(a, b) { if ((a < b)) { return a; } else { return b; } } f(1, \"x\"); }",
            str(parse(source))
        )


if __name__ == '__main__':
    unittest.main()
