import unittest

from scopecalc.lang.error import GenericException, ParseError
from scopecalc.lang.statement import Definition, ExecStmt, Grammar, ImportStmt, StrategyStmt
from scopecalc.pure.environment import Closure, Environment, IntegerValue, Thunk
from scopecalc.pure.evaluator import LazyDynamicEvaluator, LexicalEvaluator, StrictDynamicEvaluator
from scopecalc.pure.syntax import Lambda, parse_text


class GrammarTestCase(unittest.TestCase):

    def test_infer(self):
        cases = {
            '#import "common.sc"': ImportStmt,
            "#strategy lazy": StrategyStmt,
            "f := (lambda (x) x)": Definition,
            "answer:=42": Definition,
            "(f 1)": ExecStmt,
            "x": ExecStmt,
        }
        for case, expected in cases.items():
            self.assertIsInstance(Grammar.infer(case), expected, case)

    def test_infer_fail(self):
        should_fail = ["#import common.sc", "#import", "#strategy", "#strategy eager", "#strategy lazy strict",
                       "3 := 4", "(f x) := 4", "f :=", "   "]
        for case in should_fail:
            self.assertRaises(GenericException, Grammar.infer, case)

        self.assertRaises(ParseError, Grammar.infer, "(f x")
        self.assertRaises(ParseError, Grammar.infer, "f := (lambda (x y) x)")

        for case in ["#strategy", "#strategy lazy strict"]:
            with self.assertRaises(GenericException) as context:
                Grammar.infer(case)
            self.assertIn("strict, lazy, lexical", context.exception.msg)
            self.assertEqual(case, context.exception.expr)

    def test_fields(self):
        self.assertEqual("lib/common.sc", Grammar.infer('#import  "lib/common.sc" ').path)
        self.assertEqual("strict", Grammar.infer("#strategy   strict").strategy)

        definition = Grammar.infer("inc := (lambda (x) (+ x 1))")
        self.assertEqual("inc", definition.name)
        self.assertEqual(parse_text("(lambda (x) (+ x 1))"), definition.term)

        self.assertEqual(ExecStmt("(f 1)"), Grammar.infer("  (f 1)  "))
        self.assertEqual("(f 1)", str(ExecStmt("(f 1) ")))

    def test_duplicate_bindings(self):
        stmt = ExecStmt("(let ([x 1] [x 2]) (let ([y 1] [y 2] [x 3] [x 4]) x))")
        self.assertEqual(["x", "y"], stmt.duplicate_bindings())
        self.assertEqual([], ExecStmt("(let ([x 1] [y 2]) x)").duplicate_bindings())


class DefinitionTestCase(unittest.TestCase):

    def test_bind(self):
        definition = Definition("add := (let ([x 10]) (lambda (y) (+ x y)))")

        env = definition.bind(StrictDynamicEvaluator(), Environment())
        self.assertIsInstance(env.lookup("add"), Lambda)

        env = definition.bind(LazyDynamicEvaluator(), Environment())
        self.assertIsInstance(env.lookup("add"), Thunk)

        env = definition.bind(LexicalEvaluator(), Environment())
        self.assertIsInstance(env.lookup("add"), Closure)

    def test_execute(self):
        env = Definition("a := 5").bind(StrictDynamicEvaluator(), Environment())
        self.assertEqual(IntegerValue(10), ExecStmt("(+ a a)").execute(LexicalEvaluator(), env))


if __name__ == '__main__':
    unittest.main()
