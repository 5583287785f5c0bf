"""Abstract syntax tree and parser for the scopecalc expression language.

The `pure` directory holds the language core (syntax, environments, evaluators); the `lang` directory holds what is
needed to run it from files or the command line.

The parser consumes nested literal data (see scopecalc.lang.reader), not text. Formally, the grammar is

```
<expr> ::= <integer>                             ; "int literal"
         | "(" ("+" | "*") <expr> <expr> ")"     ; "arithmetic"
         | <symbol>                              ; "variable"
         | "(" "let" "(" <binding>* ")" <expr> ")"  ; "let"
                                                 ; - <binding> ::= "(" <symbol> <expr> ")"
                                                 ; - bindings are simultaneous: they cannot see each other
         | "(" "lambda" "(" <symbol> ")" <expr> ")"  ; "lambda"
                                                 ; - exactly one formal parameter
         | "(" <expr> <expr> ")"                 ; "application"
```

Productions are tried in the order above and the first match wins, which is why `(+ 1 2)` is arithmetic and not an
application of `+`. A list headed by `let` or `lambda` always commits to that special form: if its shape is wrong, a
ParseError is raised instead of falling through to application.

Expressions are immutable once constructed. Each one carries its canonical printed form in `expr`, which reads back
to an equal tree.
"""

from abc import abstractmethod, ABC
from enum import Enum
import operator

from scopecalc.lang.error import ParseError
from scopecalc.lang.reader import is_symbol, read, write


class Op(Enum):
    """Arithmetic operators, keyed by their symbol."""
    ADD = "+"
    MUL = "*"

    def apply(self, lhs, rhs):
        return _OPERATORS[self](lhs, rhs)


_OPERATORS = {Op.ADD: operator.add, Op.MUL: operator.mul}


class Expression(ABC):
    """Superclass representing any expression. Also defines the functionality needed to build a syntax tree from a
    datum: subclasses are tried in definition order, which is the precedence order of the grammar.
    """
    _frozen = False

    def __init__(self, nodes):
        """Subclasses set their own fields before calling this; afterwards the expression cannot be modified."""
        self.nodes = tuple(nodes)
        self.expr = self.unparse()
        self._cls = type(self).__name__
        self._frozen = True

    def __setattr__(self, name, value):
        if self._frozen:
            raise AttributeError(f"{type(self).__name__} is immutable")
        super().__setattr__(name, value)

    @staticmethod
    @abstractmethod
    def check_grammar(datum):
        """This method should check datum's top-level shape and return whether or not it is this kind of expression.
        It should raise a ParseError if datum is clearly meant to be this kind of expression but is malformed.
        """

    @classmethod
    @abstractmethod
    def from_datum(cls, datum):
        """Builds the expression from datum, recursively parsing sub-expressions. Assumes check_grammar passed."""

    @abstractmethod
    def unparse(self):
        """Canonical text of this expression. Reading and parsing it gives back an equal expression."""

    @abstractmethod
    def accept(self, visitor, env):
        """Dispatches to the visit method of visitor that handles this kind of expression."""

    @abstractmethod
    def fields(self):
        """Tuple of non-expression fields, used for equality."""

    @classmethod
    def generate_tree(cls, datum):
        """Converts datum to the proper Expression type, raises ParseError if datum is not a valid expression."""
        for subclass in Expression.__subclasses__():
            if subclass.check_grammar(datum):
                return subclass.from_datum(datum)
        raise ParseError("'{}' is not valid scopecalc grammar", write(datum))

    def walk(self):
        """Yields self and every sub-expression, depth-first, left to right."""
        yield self
        for node in self.nodes:
            yield from node.walk()

    def display(self, indents=0):
        """Recursively displays the tree with readable format.

        Format:
        <Expression>(expr='<expr>', nodes=[
            <Expression>(expr='<expr>', nodes=[
                ...
                <Expression>(expr='<expr>')  # <-- if nodes is empty
            ])
        ])
        """
        result = f"{'    ' * indents}{self._cls}(expr='{self.expr}'"
        if self.nodes:
            result += ", nodes=["
            for node in self.nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    def __repr__(self):
        return f"{self._cls}('{self.expr}')"

    def __str__(self):
        return self.expr

    def __eq__(self, other):
        return type(other) is type(self) and self.fields() == other.fields() and self.nodes == other.nodes

    def __hash__(self):
        return hash(self.expr)


def _is_form(datum, keyword):
    """Whether or not datum is a list headed by the symbol keyword."""
    return isinstance(datum, list) and len(datum) > 0 and isinstance(datum[0], str) and datum[0] == keyword


class IntLiteral(Expression):
    """Integer literal."""

    def __init__(self, value):
        self.value = value
        super().__init__([])

    @staticmethod
    def check_grammar(datum):
        return isinstance(datum, int) and not isinstance(datum, bool)

    @classmethod
    def from_datum(cls, datum):
        return cls(datum)

    def unparse(self):
        return str(self.value)

    def accept(self, visitor, env):
        return visitor.visit_int_literal(self, env)

    def fields(self):
        return (self.value,)


class Arithmetic(Expression):
    """Binary addition or multiplication."""

    def __init__(self, op, lhs, rhs):
        self.op = op
        self.lhs = lhs
        self.rhs = rhs
        super().__init__([lhs, rhs])

    @staticmethod
    def check_grammar(datum):
        return isinstance(datum, list) and len(datum) == 3 and any(_is_form(datum, op.value) for op in Op)

    @classmethod
    def from_datum(cls, datum):
        op, lhs, rhs = datum
        return cls(Op(op), Expression.generate_tree(lhs), Expression.generate_tree(rhs))

    def unparse(self):
        return f"({self.op.value} {self.lhs.expr} {self.rhs.expr})"

    def accept(self, visitor, env):
        return visitor.visit_arithmetic(self, env)

    def fields(self):
        return (self.op,)


class Variable(Expression):
    """Reference to a bound identifier."""

    def __init__(self, id):
        self.id = str(id)
        super().__init__([])

    @staticmethod
    def check_grammar(datum):
        if not isinstance(datum, str):
            return False
        elif not is_symbol(datum):
            raise ParseError("'{}' is not a valid identifier", repr(datum))
        return True

    @classmethod
    def from_datum(cls, datum):
        return cls(datum)

    def unparse(self):
        return self.id

    def accept(self, visitor, env):
        return visitor.visit_variable(self, env)

    def fields(self):
        return (self.id,)


class Let(Expression):
    """Simultaneous, non-recursive let. bindings is an ordered sequence of (id, Expression) pairs."""

    def __init__(self, bindings, body):
        self.bindings = tuple((str(id), value) for id, value in bindings)
        self.body = body
        super().__init__([value for __, value in self.bindings] + [body])

    @staticmethod
    def check_grammar(datum):
        if not _is_form(datum, "let"):
            return False

        if len(datum) != 3 or not isinstance(datum[1], list):
            raise ParseError("'{}' should have the form (let ((NAME EXPR) ...) BODY)", write(datum))

        for binding in datum[1]:
            if not isinstance(binding, list) or len(binding) != 2:
                raise ParseError("let binding '{}' should have the form (NAME EXPR)", write(binding))
            elif not is_symbol(binding[0]):
                raise ParseError("let binding '{}' does not bind a symbol", write(binding))

        return True

    @classmethod
    def from_datum(cls, datum):
        __, bindings, body = datum
        bindings = [(id, Expression.generate_tree(value)) for id, value in bindings]
        return cls(bindings, Expression.generate_tree(body))

    @property
    def duplicates(self):
        """Identifiers bound more than once by this let, in order of first appearance."""
        ids = [id for id, __ in self.bindings]
        return [id for idx, id in enumerate(ids) if id in ids[idx + 1:] and id not in ids[:idx]]

    def unparse(self):
        bindings = " ".join(f"[{id} {value.expr}]" for id, value in self.bindings)
        return f"(let ({bindings}) {self.body.expr})"

    def accept(self, visitor, env):
        return visitor.visit_let(self, env)

    def fields(self):
        return tuple(id for id, __ in self.bindings)


class Lambda(Expression):
    """Single-parameter function. In the dynamically scoped evaluators this node is also the function value."""

    def __init__(self, param, body):
        self.param = str(param)
        self.body = body
        super().__init__([body])

    @staticmethod
    def check_grammar(datum):
        if not _is_form(datum, "lambda"):
            return False

        if len(datum) != 3 or not isinstance(datum[1], list):
            raise ParseError("'{}' should have the form (lambda (PARAM) BODY)", write(datum))
        elif len(datum[1]) != 1:
            msg = "'{}' has {} parameters, but lambda takes exactly one"
            raise ParseError(msg, (write(datum), len(datum[1])))
        elif not is_symbol(datum[1][0]):
            raise ParseError("lambda parameter '{}' is not a symbol", write(datum[1][0]))

        return True

    @classmethod
    def from_datum(cls, datum):
        __, (param,), body = datum
        return cls(param, Expression.generate_tree(body))

    def unparse(self):
        return f"(lambda ({self.param}) {self.body.expr})"

    def accept(self, visitor, env):
        return visitor.visit_lambda(self, env)

    def fields(self):
        return (self.param,)


class Application(Expression):
    """Application of a function to its single argument."""

    def __init__(self, fn, arg):
        self.fn = fn
        self.arg = arg
        super().__init__([fn, arg])

    @staticmethod
    def check_grammar(datum):
        return isinstance(datum, list) and len(datum) == 2

    @classmethod
    def from_datum(cls, datum):
        fn, arg = datum
        return cls(Expression.generate_tree(fn), Expression.generate_tree(arg))

    def unparse(self):
        return f"({self.fn.expr} {self.arg.expr})"

    def accept(self, visitor, env):
        return visitor.visit_application(self, env)

    def fields(self):
        return ()


def parse(datum):
    """Parses a datum (int, symbol or nested list of those) into an Expression."""
    return Expression.generate_tree(datum)


def parse_text(text):
    """Reads text into a datum and parses it."""
    return parse(read(text))
