from contextlib import redirect_stdout
import io
import unittest

from scopecalc.lang.error import (ApplicationError, ErrorHandler, GenericException, OperandError, ParseError,
                                  UnboundVariableError)
from scopecalc.pure.environment import IntegerValue
from scopecalc.pure.syntax import parse_text


def capture(func, *args, **kwargs):
    """Runs func and returns what it printed."""
    out = io.StringIO()
    with redirect_stdout(out):
        func(*args, **kwargs)
    return out.getvalue()


class GenericExceptionTestCase(unittest.TestCase):

    def test_fields(self):
        error = GenericException("'{}' is bad because of '{}'", ("(f x)", "x"), start=3, end=4)
        self.assertEqual("(f x)", error.expr)
        self.assertEqual((3, 4), (error.start, error.end))
        self.assertIn("is bad because of", str(error))
        self.assertFalse(error.internal)

        error = GenericException("no snippets")
        self.assertEqual("", error.expr)
        self.assertEqual(0, error.end)

    def test_hierarchy(self):
        for error in (ParseError, UnboundVariableError, ApplicationError, OperandError):
            self.assertTrue(issubclass(error, GenericException), error)

        error = UnboundVariableError("y")
        self.assertEqual(("y", "y"), (error.identifier, error.expr))

        term = parse_text("(3 4)")
        error = ApplicationError(term.fn, IntegerValue(3))
        self.assertEqual("3", error.expr)
        self.assertIs(term.fn, error.term)
        self.assertIn("cannot be applied", error.msg)


class ErrorHandlerTestCase(unittest.TestCase):

    def raise_in(self, handler, error):
        def _raise():
            with handler:
                raise error
        return _raise

    def test_non_fatal(self):
        handler = ErrorHandler(fatal=False)
        handler.register_file("test.sc")
        handler.register_line("test.sc", "(+ 1 z)", 3)

        output = capture(self.raise_in(handler, UnboundVariableError("z")))
        self.assertIn("File 'test.sc', line 3", output)
        self.assertNotIn("Traceback", output)
        self.assertIn("error: ", output)
        self.assertIn("is not bound in the current environment", output)
        self.assertIn("^", output)
        self.assertEqual({"test.sc": (None, None)}, handler.traceback)

    def test_fatal(self):
        handler = ErrorHandler()
        with redirect_stdout(io.StringIO()):
            self.assertRaises(SystemExit, self.raise_in(handler, ParseError("bad '{}'", "(")))

    def test_fatal_error(self):
        handler = ErrorHandler(fatal=False)
        error = GenericException("'{}' could not be opened", "missing.sc", diagnosis=False, fatal=True)
        with redirect_stdout(io.StringIO()), self.assertRaises(SystemExit) as context:
            self.raise_in(handler, error)()
        self.assertEqual(1, context.exception.code)
        self.assertFalse(GenericException("x").fatal)

    def test_strategy(self):
        handler = ErrorHandler(fatal=False)
        handler.register_strategy("lazy")
        output = capture(self.raise_in(handler, UnboundVariableError("z")))
        self.assertIn("error (lazy): ", output)
        self.assertIsNone(handler.strategy)

        output = capture(self.raise_in(handler, UnboundVariableError("z")))
        self.assertNotIn("(lazy)", output)

    def test_traceback(self):
        handler = ErrorHandler(fatal=False)
        handler.register_line("main.sc", '#import "lib.sc"', 1)
        handler.register_line("lib.sc", "f := (", 2)

        output = capture(self.raise_in(handler, ParseError("bad '{}'", "f := (")))
        self.assertIn("Traceback:", output)
        self.assertIn("File 'main.sc', line 1", output)
        self.assertIn("File 'lib.sc', line 2", output)

    def test_recursion_and_interrupt(self):
        handler = ErrorHandler(fatal=False)
        output = capture(self.raise_in(handler, RecursionError()))
        self.assertIn("maximum recursion depth exceeded", output)

        output = capture(self.raise_in(handler, KeyboardInterrupt()))
        self.assertIn("keyboard interrupt", output)

    def test_internal(self):
        handler = ErrorHandler(fatal=False)
        out = io.StringIO()
        with redirect_stdout(out):
            self.assertRaises(ValueError, self.raise_in(handler, ValueError("oops")))
        self.assertIn("[internal] ", out.getvalue())
        self.assertIn("ValueError: oops", out.getvalue())

    def test_system_exit_passes(self):
        self.assertRaises(SystemExit, self.raise_in(ErrorHandler(fatal=False), SystemExit(0)))

    def test_warn(self):
        handler = ErrorHandler(fatal=False)
        handler.register_line("test.sc", "(let ([x 1] [x 2]) x)", 7)

        output = capture(handler.warn, "'{}' is bound more than once", "x")
        self.assertIn("test.sc:7:8: ", output)
        self.assertIn("warning: ", output)
        self.assertIn("is bound more than once", output)

    def test_diagnose(self):
        error = GenericException("'{}' is bad", "(f x y)", start=3, end=4)
        first, second = ErrorHandler.diagnose(error).split("\n")
        self.assertTrue(first.startswith("  (f "))
        self.assertTrue(second.startswith("     "))
        self.assertIn("^", second)


if __name__ == '__main__':
    unittest.main()
