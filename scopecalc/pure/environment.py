"""Persistent environments and the values that can be bound in them.

An Environment is a linked chain of frames, each holding one (identifier, binding) pair and a reference to its parent.
Lookup scans innermost-first. Extending never touches the existing chain: it returns a new frame whose parent is the
old environment, so any environment captured by a Closure or Thunk stays valid no matter what is bound later.

Which bindings show up depends on the evaluator:

- IntegerValue: every evaluator
- Lambda (the AST node itself): the dynamically scoped evaluators, which attach no environment to functions
- Thunk: the lazy evaluator only, forced again on every lookup
- Closure: the lexical evaluator only
"""

from dataclasses import dataclass

from scopecalc.lang.error import UnboundVariableError
from scopecalc.pure.syntax import Expression


@dataclass(frozen=True)
class IntegerValue:
    value: int

    def __str__(self):
        return str(self.value)


@dataclass(frozen=True, eq=False)
class Thunk:
    """Unevaluated expression paired with the environment it was recorded in. Not a value: evaluators force it
    whenever it is looked up, and never cache the result.
    """
    expr: Expression
    env: "Environment"

    def __repr__(self):
        return f"Thunk('{self.expr.expr}')"

    def __str__(self):
        return f"#<thunk {self.expr.expr}>"


@dataclass(frozen=True, eq=False)
class Closure:
    """Function value of the lexical evaluator: parameter, body and the environment the lambda was evaluated in."""
    param: str
    body: Expression
    env: "Environment"

    @property
    def expr(self):
        return f"(lambda ({self.param}) {self.body.expr})"

    def __repr__(self):
        return f"Closure('{self.expr}')"

    def __str__(self):
        return f"#<closure {self.expr}>"


class Environment:
    """Immutable, innermost-first mapping from identifier to binding. Environment() is the empty environment."""
    __slots__ = ("identifier", "binding", "parent", "_len")

    def __init__(self, identifier=None, binding=None, parent=None):
        """Creates a single frame on top of parent. Use extend rather than calling this with arguments."""
        object.__setattr__(self, "identifier", identifier)
        object.__setattr__(self, "binding", binding)
        object.__setattr__(self, "parent", parent)
        object.__setattr__(self, "_len", 0 if parent is None else len(parent) + 1)

    def __setattr__(self, name, value):
        raise AttributeError("Environment is immutable")

    @classmethod
    def from_mapping(cls, mapping):
        """Builds an environment from an (ordered) mapping. Later items are innermost."""
        return cls().extend(mapping.items())

    @property
    def is_empty(self):
        return self.parent is None

    def bind(self, identifier, binding):
        """Returns a new environment with identifier bound to binding on top of self."""
        return Environment(identifier, binding, self)

    def extend(self, bindings):
        """Returns a new environment with every (identifier, binding) pair of bindings on top of self, in order: the
        last pair is innermost.
        """
        env = self
        for identifier, binding in bindings:
            env = env.bind(identifier, binding)
        return env

    def lookup(self, identifier):
        """Returns the innermost binding of identifier. Raises UnboundVariableError if there is none."""
        env = self
        while not env.is_empty:
            if env.identifier == identifier:
                return env.binding
            env = env.parent
        raise UnboundVariableError(identifier)

    def __contains__(self, identifier):
        return any(identifier == bound for bound, __ in self)

    def __iter__(self):
        """Yields (identifier, binding) pairs innermost-first, including shadowed ones."""
        env = self
        while not env.is_empty:
            yield env.identifier, env.binding
            env = env.parent

    def __len__(self):
        return self._len

    def __repr__(self):
        frames = ", ".join(f"{identifier}={binding}" for identifier, binding in self)
        return f"Environment({frames})"
