"""Handles interactive/command-line mode for the scopecalc interpreter. Uses cmd as backend."""

import cmd

from scopecalc.pure.evaluator import EVALUATORS


class Shell(cmd.Cmd):
    """scopecalc interpreter shell."""
    intro = "scopecalc interpreter :: strict, lazy and lexical evaluation\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self.line_num = 0

    def parseline(self, line):
        """Definitions, expressions and continuation lines always go to default, even when they start with a command
        name.
        """
        stripped = line.strip()
        if self._tmp_line or ":=" in stripped or stripped.startswith(("(", "[")):
            return None, None, stripped
        return super().parseline(line)

    def default(self, line):
        """Executes arbitrary scopecalc statement."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            line, add_to_prev = self.sess.preprocess_line(f"{self._tmp_line} {line}", self.line_num, False)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            if line.strip():
                self.sess.add(line.strip(), self.line_num)
                self.sess.run()

    def do_strategy(self, arg):
        """Shows the current evaluation strategy, or switches to another one: strategy [strict|lazy|lexical]"""
        if arg:
            self.default(f"#strategy {arg}")
        else:
            print(f"{self.sess.strategy} (available: {', '.join(EVALUATORS)})")

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the scopecalc interpreter!\n\n"
              "scopecalc is a tiny expression language with integers, + and *, let, one-parameter\n"
              "lambdas and application. The same program can be run under three strategies:\n"
              "  strict   eager evaluation, dynamic scoping\n"
              "  lazy     call-by-name evaluation, dynamic scoping\n"
              "  lexical  eager evaluation, lexical scoping (closures)\n\n"
              "Try '(let ([f (let ([x 10]) (lambda (y) (+ x y)))]) (f 20))' under 'strategy lexical'\n"
              "and then under 'strategy strict'. Names can be defined with 'NAME := EXPR'.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
