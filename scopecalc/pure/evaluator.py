"""The three evaluation strategies of scopecalc.

All three are the same recursive visitor over the syntax tree. They differ only in four hooks and in
what counts as a function value (function_type), which is checked before the argument is bound:

```
                bind (let, args)   resolve (lookup)         close (lambda) / function_type   apply (call)
StrictDynamic   evaluate now       binding as is            Lambda node                      body in caller's env
LazyDynamic     Thunk(expr, env)   force Thunk every time   Lambda node                      body in caller's env
Lexical         evaluate now       binding as is            Closure                          body in closure's env
```

LazyDynamicEvaluator overrides bind and resolve; LexicalEvaluator overrides close, apply and function_type.

Evaluation is plain (non-tail) recursion, so very deep input can raise RecursionError. The driver reports it; it is
not handled here.
"""

from scopecalc.lang.error import ApplicationError, OperandError
from scopecalc.pure.environment import Closure, Environment, IntegerValue, Thunk
from scopecalc.pure.syntax import Lambda


class StrictDynamicEvaluator:
    """Eager evaluation with dynamic scoping: a function body's free identifiers resolve against the environment of
    the call site. Also the base of the other two evaluators.
    """
    name = "strict"
    function_type = Lambda  # what a function value is under this strategy

    def evaluate(self, term, env=None):
        """Evaluates term in env (default: empty environment) and returns its value."""
        if env is None:
            env = Environment()
        return term.accept(self, env)

    # hooks

    def bind(self, term, env):
        """What gets bound for a let value or an argument: strict evaluators evaluate it right away."""
        return self.evaluate(term, env)

    def resolve(self, binding):
        """Converts a looked-up binding to a value."""
        return binding

    def close(self, term, env):
        """Function value of a lambda: under dynamic scoping, the Lambda node itself."""
        return term

    def apply(self, fn, arg, env):
        """Applies fn to the bound arg. Under dynamic scoping, the body runs in the caller's environment env."""
        return self.evaluate(fn.body, env.bind(fn.param, arg))

    # visitor

    def visit_int_literal(self, term, env):
        return IntegerValue(term.value)

    def visit_arithmetic(self, term, env):
        lhs = self._operand(term.lhs, env)
        rhs = self._operand(term.rhs, env)
        return IntegerValue(term.op.apply(lhs, rhs))

    def visit_variable(self, term, env):
        return self.resolve(env.lookup(term.id))

    def visit_let(self, term, env):
        bindings = [(id, self.bind(value, env)) for id, value in term.bindings]  # all in the pre-extension env
        return self.evaluate(term.body, env.extend(bindings))

    def visit_lambda(self, term, env):
        return self.close(term, env)

    def visit_application(self, term, env):
        fn = self.evaluate(term.fn, env)
        if not isinstance(fn, self.function_type):  # checked before the argument is touched
            raise ApplicationError(term.fn, fn)

        arg = self.bind(term.arg, env)
        return self.apply(fn, arg, env)

    def _operand(self, term, env):
        value = self.evaluate(term, env)
        if not isinstance(value, IntegerValue):
            raise OperandError(term, value)
        return value.value

    def __repr__(self):
        return f"{type(self).__name__}()"


class LazyDynamicEvaluator(StrictDynamicEvaluator):
    """Call-by-name evaluation with dynamic scoping. Let values and arguments are recorded as Thunks and evaluated
    each time they are referenced; an unreferenced one is never evaluated, so it cannot fail.
    """
    name = "lazy"

    def bind(self, term, env):
        return Thunk(term, env)

    def resolve(self, binding):
        if isinstance(binding, Thunk):
            return self.evaluate(binding.expr, binding.env)  # no caching: forced again at every reference
        return binding


class LexicalEvaluator(StrictDynamicEvaluator):
    """Eager evaluation with lexical scoping: lambdas evaluate to Closures over their defining environment, and
    applying one extends that environment instead of the caller's.
    """
    name = "lexical"
    function_type = Closure

    def close(self, term, env):
        return Closure(term.param, term.body, env)

    def apply(self, fn, arg, env):
        return self.evaluate(fn.body, fn.env.bind(fn.param, arg))


EVALUATORS = {evaluator.name: evaluator for evaluator in (StrictDynamicEvaluator, LazyDynamicEvaluator,
                                                          LexicalEvaluator)}
DEFAULT_STRATEGY = LexicalEvaluator.name


def evaluate_strict(term, env=None):
    return StrictDynamicEvaluator().evaluate(term, env)


def evaluate_lazy(term, env=None):
    return LazyDynamicEvaluator().evaluate(term, env)


def evaluate_lexical(term, env=None):
    return LexicalEvaluator().evaluate(term, env)
