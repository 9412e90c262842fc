import contextlib
import io
import unittest

from sim.lang.error import ErrorHandler, EvaluationError, GenericException, LexicalError, SyntacticError
from sim.pure.lexical import Location


def captured(function, *args, **kwargs):
    """Calls function, returning everything it printed."""
    output = io.StringIO()
    with contextlib.redirect_stdout(output):
        function(*args, **kwargs)
    return output.getvalue()


class GenericExceptionTestCase(unittest.TestCase):

    def test_message(self):
        error = GenericException("variable '{}' not found", "x")
        self.assertEqual("variable 'x' not found", str(error))
        self.assertIn("x", error.msg)

        error = GenericException("'{}' expects {} argument(s), got {}", ("f", 1, 2))
        self.assertEqual("'f' expects 1 argument(s), got 2", str(error))

        error = GenericException("{} statement(s) not evaluated", 3)
        self.assertEqual("3 statement(s) not evaluated", str(error))

        self.assertEqual("keyboard interrupt", str(GenericException("keyboard interrupt")))

    def test_braces_in_exprs(self):
        error = GenericException("unknown error: '{}'", "{0}")
        self.assertEqual("unknown error: '{0}'", str(error))

    def test_at(self):
        source = "x = 1;\ny = 2 $ 3;\nz = 4;"
        error = SyntacticError.at("bad {}", "$", source, Location(2, 7, 13), 1)

        self.assertEqual("y = 2 $ 3;", error.expr)
        self.assertEqual(2, error.lineno)
        self.assertEqual((6, 7), (error.start, error.end))
        self.assertTrue(error.diagnosis)

        error = LexicalError.at("bad {}", "y = 2", source, Location(2, 1, 7), 5)
        self.assertEqual((0, 5), (error.start, error.end))

    def test_at_past_end(self):
        error = SyntacticError.at("expected {}, found {}", ("';'", "end of input"), "x = 1", Location(1, 6, 5), 0)
        self.assertEqual("x = 1", error.expr)
        self.assertEqual((5, 6), (error.start, error.end))

    def test_at_after_trailing_newline(self):
        error = SyntacticError.at("expected {}, found {}", ("';'", "end of input"), "x = 1\n", Location(2, 1, 6), 0)
        self.assertEqual("x = 1", error.expr)
        self.assertEqual(1, error.lineno)
        self.assertEqual((5, 6), (error.start, error.end))

    def test_evaluation_error_has_no_diagnosis(self):
        self.assertFalse(EvaluationError("division by zero").diagnosis)
        self.assertTrue(EvaluationError("x", diagnosis=True).diagnosis)


class ErrorHandlerTestCase(unittest.TestCase):

    def raise_in_handler(self, error, fatal=False):
        with ErrorHandler(fatal=fatal):
            raise error

    def test_non_fatal(self):
        output = captured(self.raise_in_handler, LexicalError("unrecognized character '{}'", "$"))
        self.assertIn("error: ", output)
        self.assertIn("$", output)

    def test_fatal(self):
        with self.assertRaises(SystemExit) as context:
            captured(self.raise_in_handler, EvaluationError("variable '{}' not found", "x"), fatal=True)
        self.assertEqual(1, context.exception.code)

    def test_unknown_error(self):
        output = io.StringIO()
        with contextlib.redirect_stdout(output):
            self.assertRaises(ValueError, self.raise_in_handler, ValueError("boom"))
        self.assertIn("[internal]", output.getvalue())
        self.assertIn("ValueError", output.getvalue())
        self.assertIn("boom", output.getvalue())

    def test_recursion_error(self):
        output = captured(self.raise_in_handler, RecursionError())
        self.assertIn("maximum recursion depth exceeded", output)

    def test_system_exit_passes(self):
        with self.assertRaises(SystemExit):
            self.raise_in_handler(SystemExit(0))

    def test_location(self):
        handler = ErrorHandler(fatal=False)
        error = SyntacticError("expected {}", "';'", start=4)
        self.assertEqual("", handler._location(error))

        handler.register_file("a.sim")
        self.assertEqual("", handler._location(error))

        handler.register_line("a.sim", "x", 3)
        error.lineno = 2
        self.assertEqual("a.sim:4:5: ", handler._location(error))
        self.assertEqual("a.sim: ", handler._location(EvaluationError("division by zero")))

        handler.remove_line("a.sim")
        self.assertEqual("", handler._location(error))

    def test_throw_forgets_lines(self):
        handler = ErrorHandler(fatal=False)
        handler.register_line("a.sim", "x", 1)
        captured(handler.throw, EvaluationError("variable '{}' not found", "x"))
        self.assertEqual({"a.sim": (None, None)}, handler.traceback)

    def test_diagnose(self):
        error = GenericException("bad", line="x = $;", start=4, end=5)
        lines = ErrorHandler.diagnose(error).splitlines()
        self.assertEqual(2, len(lines))
        self.assertIn("$", lines[0])
        self.assertIn("^", lines[1])
        self.assertNotIn("~", lines[1])

        error = GenericException("bad", line="x = abc;", start=4, end=7)
        self.assertIn("^", ErrorHandler.diagnose(error))
        self.assertIn("~~", ErrorHandler.diagnose(error))

    def test_warn(self):
        output = captured(ErrorHandler().warn, "top-level return: {} statement(s) not evaluated", 2, diagnosis=False)
        self.assertIn("warning: ", output)
        self.assertIn("2", output)

    def test_register_step(self):
        handler = ErrorHandler()
        self.assertEqual("", captured(handler.register_step, "ast", "{ x = 1; }"))

        handler.trace = True
        output = captured(handler.register_step, "ast", "{ x = 1; }")
        self.assertIn("[ast]", output)
        self.assertIn("{ x = 1; }", output)


if __name__ == '__main__':
    unittest.main()
