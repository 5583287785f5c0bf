"""Statements of the scopecalc language, a thin layer on top of the expression language in scopecalc.pure. Note that
this module does not read input files (see session.py), it only classifies and parses single statements.

All grammar can be loosely defined as follows:

```
<import_stmt>   ::= "#import " '"' <filepath> '"'  ; loads the definitions of another file (relative to this one)
<strategy_stmt> ::= "#strategy " <strategy>        ; strict | lazy | lexical, applies to the following statements
<definition>    ::= <symbol> ":=" <expr>           ; binds <symbol> in the environment of later statements
<exec_stmt>     ::= <expr>                         ; evaluated and printed when the session runs

<comment>       ::= ";" <char>*
```

Comments are handled in session.py: there is no dedicated Grammar class for comments.
"""

from abc import abstractmethod, ABC

from scopecalc.lang.error import GenericException
from scopecalc.lang.reader import is_symbol, read
from scopecalc.pure.evaluator import EVALUATORS
from scopecalc.pure.syntax import Let, parse


class Grammar(ABC):
    """Superclass representing any statement in the scopecalc language."""

    def __init__(self, expr):
        """Assumes check_grammar has been run."""
        self.expr = Grammar.preprocess(expr)
        self._cls = type(self).__name__

    @staticmethod
    @abstractmethod
    def check_grammar(expr):
        """This method should check expr's top-level grammar and return whether or not it is valid. It should also
        raise a GenericException if expr's top-level grammar is similar to the accepted grammar but invalid.
        """

    @staticmethod
    def preprocess(expr):
        """Removes surrounding whitespace."""
        return expr.strip()

    @classmethod
    def infer(cls, expr):
        """Infers the type of expr and returns an object of the correct Grammar subclass. Subclasses are tried in
        definition order, so ExecStmt, which accepts anything, comes last.
        """

        def _infer(cls, expr):
            for subclass in cls.__subclasses__():
                if subclass.__subclasses__():
                    stmt = _infer(subclass, expr)
                    if stmt is not None:
                        return stmt
                elif subclass.check_grammar(expr):
                    return subclass(expr)

        stmt = _infer(cls, expr)
        if stmt is None:
            raise GenericException("'{}' is not a valid scopecalc statement", expr)
        return stmt

    def __repr__(self):
        return f"{self._cls}('{self.expr}')"

    def __str__(self):
        return self.expr

    def __eq__(self, other):
        return isinstance(other, type(self)) and other.expr == self.expr

    def __hash__(self):
        return hash(self.expr)


class ImportStmt(Grammar):
    """Import statement. See docstrings for grammar."""

    def __init__(self, expr):
        super().__init__(expr)

        __, path = self.expr.split(" ", 1)
        self.path = path.strip()[1:-1]  # get rid of surrounding " "

    @staticmethod
    def check_grammar(expr):
        expr = Grammar.preprocess(expr)

        if not expr.startswith("#import"):
            return False

        try:
            hash_import, path = expr.split(" ", 1)
            path = path.strip()

            assert hash_import == "#import"
            assert len(path) > 2 and path.startswith("\"") and path.endswith("\"")

        except (AssertionError, ValueError):
            raise GenericException("#import expects \"FILENAME\"", expr)

        return True


class StrategyStmt(Grammar):
    """Strategy statement: selects the evaluator for the statements that follow it."""

    def __init__(self, expr):
        super().__init__(expr)
        __, self.strategy = self.expr.split()

    @staticmethod
    def check_grammar(expr):
        expr = Grammar.preprocess(expr)

        if not expr.startswith("#strategy"):
            return False

        parts = expr.split()
        if parts[0] != "#strategy" or len(parts) != 2:
            msg = "'{}' should be #strategy NAME, with NAME one of: {}"
            raise GenericException(msg, (expr, ", ".join(EVALUATORS)))
        elif parts[1] not in EVALUATORS:
            start = expr.rindex(parts[1])
            msg = "unknown evaluation strategy '{}', expected one of: {}"
            raise GenericException(msg, (expr, ", ".join(EVALUATORS)), start=start, end=start + len(parts[1]))

        return True


class FuncStmt(Grammar):
    """Superclass for statements holding an expression (definition or executable)."""
    term_expr: str

    def __init__(self, expr):
        super().__init__(expr)
        self.term = parse(read(self.term_expr))

    def duplicate_bindings(self):
        """Identifiers bound more than once by any let in self.term."""
        duplicates = []
        for node in self.term.walk():
            if isinstance(node, Let):
                duplicates.extend(id for id in node.duplicates if id not in duplicates)
        return duplicates


class Definition(FuncStmt):
    """Definitions bind a name for the statements after them: <NAME> := <expr>."""

    def __init__(self, expr):
        name, self.term_expr = Grammar.preprocess(expr).split(":=", 1)
        self.name = name.strip()
        super().__init__(expr)

    @staticmethod
    def check_grammar(expr):
        expr = Grammar.preprocess(expr)

        # check 1: is ":=" in expr?
        eq = expr.find(":=")
        if eq == -1:
            return False

        lval, rval = expr.split(":=", 1)

        # check 2: is l-value a symbol?
        if not is_symbol(lval.strip()):
            raise GenericException("l-value of '{}' is not a valid identifier", expr, end=eq)

        # check 3: is there an r-value?
        if not rval.strip():
            raise GenericException("'{}' is missing an r-value", expr, start=eq)

        return True

    def bind(self, evaluator, env):
        """Returns env extended with this definition, bound the way evaluator binds let values."""
        return env.bind(self.name, evaluator.bind(self.term, env))

    def __repr__(self):
        return f"{self._cls}(name='{self.name}', term={repr(self.term)})"


class ExecStmt(FuncStmt):
    """Expression to evaluate and print."""

    def __init__(self, expr):
        self.term_expr = expr
        super().__init__(expr)

    @staticmethod
    def check_grammar(expr):
        return bool(Grammar.preprocess(expr))

    def execute(self, evaluator, env):
        """Running an ExecStmt is equivalent to evaluating its term."""
        return evaluator.evaluate(self.term, env)
