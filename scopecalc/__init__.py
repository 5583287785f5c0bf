"""scopecalc: a minimal expression language with strict/dynamic, lazy/dynamic and lexical evaluators.

Basic program flow:
    1. Reader: turns text into nested literal data (see lang/reader.py)
    2. Parser: turns nested literal data into an immutable syntax tree (see pure/syntax.py)
    3. Evaluation: one of the three evaluators walks the tree in an Environment (see pure/evaluator.py)
"""

from scopecalc.pure.environment import Closure, Environment, IntegerValue, Thunk
from scopecalc.pure.evaluator import EVALUATORS, evaluate_lazy, evaluate_lexical, evaluate_strict
from scopecalc.pure.syntax import parse, parse_text

__version__ = "0.1.0"
