"""Session control for the scopecalc language. Reads statements either from a file or from the command line, keeps
track of definitions and evaluation strategy, and runs executable statements.
"""

import os

from scopecalc.lang.error import GenericException
from scopecalc.lang.reader import bracket_balance
from scopecalc.lang.statement import Definition, ExecStmt, Grammar, ImportStmt, StrategyStmt
from scopecalc.pure.environment import Environment
from scopecalc.pure.evaluator import DEFAULT_STRATEGY, EVALUATORS


class Session:
    """Governs a scopecalc session, with control over definitions in scope and the evaluation strategy."""
    SH_FILE = "<in>"  # command-line interpreter filename
    COMMENT = ";"

    def __init__(self, error_handler, path, strategy=DEFAULT_STRATEGY, cmd_line=False, importing=()):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.strategy = strategy  # strategy for statements added from now on
        self.cmd_line = cmd_line  # whether or not in command-line mode

        self.definitions = []  # Definitions, in order
        self.to_exec = {}      # dict of line num: (ExecStmt, strategy, number of definitions in scope)
        self.results = []      # values of executed statements, in order

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            self.importing = importing + (os.path.abspath(path),)
            exprs = []
            add_to_prev = False

            try:
                with open(path, "r") as file:
                    for line_num, line in enumerate(file):
                        __, add_to_prev = self.preprocess_line(line, line_num + 1, add_to_prev, exprs)
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False,
                                       fatal=not importing and not cmd_line)  # a missing main file always exits

            for expr in exprs:
                with self.error_handler:  # exits if fatal, otherwise reports and skips the statement
                    self.add(*expr)

        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename")

        else:
            self.importing = importing

    @staticmethod
    def preprocess_line(line, line_num, add_to_prev, exprs=None):
        """Preprocesses a line from a file or command-line: strips comments and trailing whitespace. exprs keeps track
        of a file's (expr, line_num) pairs; a line continuing the previous one (add_to_prev) is joined to it. Returns
        the (joined) line and whether or not the statement continues on the next line.
        """
        if Session.COMMENT in line:
            line = line[:line.index(Session.COMMENT)]  # get rid of comments

        line = line.rstrip()
        if exprs is not None:
            if add_to_prev and exprs:
                prev, prev_num = exprs.pop()
                line = f"{prev} {line.strip()}"
                line_num = prev_num
            if line.strip():
                exprs.append((line, line_num))

        return line, bracket_balance(line) > 0

    def add(self, expr, line_num):
        """Adds a statement to the current session. Evaluation is delayed until run is called."""
        self.error_handler.register_line(self.path, expr, line_num)  # in case error is raised

        stmt = Grammar.infer(expr)

        if isinstance(stmt, ImportStmt):
            path = self._get_path(stmt.path)
            loaded_module = Session(self.error_handler, path, self.strategy, self.cmd_line, self.importing)
            self.definitions.extend(loaded_module.definitions)  # ExecStmts from the loaded module are not run

        elif isinstance(stmt, StrategyStmt):
            self.strategy = stmt.strategy

        elif isinstance(stmt, Definition):
            self._check_bindings(stmt)
            stmt.origin = (self.path, line_num)
            self.definitions.append(stmt)

        elif isinstance(stmt, ExecStmt):
            self._check_bindings(stmt)
            self.to_exec[line_num] = (stmt, self.strategy, len(self.definitions))

        self.error_handler.remove_line(self.path)  # error was not raised

    def run(self):
        """Runs this session's pending executable statements in order, printing and recording their values. Will raise
        any errors that are encountered; the failing statement is dropped, later ones stay pending.
        """
        for line_num, (exec_stmt, strategy, scope) in list(self.to_exec.items()):
            try:
                evaluator = EVALUATORS[strategy]()
                self.error_handler.register_strategy(strategy)
                env = self.environment(evaluator, scope)

                self.error_handler.register_line(self.path, str(exec_stmt), line_num)
                value = exec_stmt.execute(evaluator, env)
            finally:
                del self.to_exec[line_num]

            print(value)
            self.results.append(value)
            self.error_handler.remove_line(self.path)
            self.error_handler.register_strategy(None)

    def environment(self, evaluator, scope=None):
        """Environment holding the first scope definitions (default: all of them), each bound by evaluator in the
        environment of the definitions before it.
        """
        env = Environment()
        for definition in self.definitions[:scope]:
            path, line_num = definition.origin
            self.error_handler.register_line(path, str(definition), line_num)
            env = definition.bind(evaluator, env)
            self.error_handler.remove_line(path)
        return env

    def _check_bindings(self, stmt):
        """Warns about lets in stmt that bind the same identifier more than once."""
        for id in stmt.duplicate_bindings():
            self.error_handler.warn("'{}' is bound more than once in the same let; the last binding wins", id,
                                    diagnosis=False)

    def _get_path(self, path):
        """Returns the absolute path for path, relative to this session's file (or the working directory in
        command-line mode). Raises an error on circular imports.
        """
        if self.path != Session.SH_FILE and not os.path.isabs(path):
            path = os.path.join(os.path.dirname(os.path.abspath(self.path)), path)
        path = os.path.abspath(path)

        if path in self.importing:
            raise GenericException("circular import of '{}'", path, diagnosis=False)
        return path
