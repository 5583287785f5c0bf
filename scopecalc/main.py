"""Uses the scopecalc core and language layer to interpret files or run in command-line mode. Also uses the error
handling context manager. Called from the scopecalc console script.
"""

import argparse

from scopecalc.lang.error import ErrorHandler
from scopecalc.lang.session import Session
from scopecalc.lang.shell import Shell
from scopecalc.pure.evaluator import DEFAULT_STRATEGY, EVALUATORS


def parse_args(argv=None):
    """Parses command-line arguments."""
    parser = argparse.ArgumentParser(prog="scopecalc",
                                     description="Evaluate scopecalc expressions strictly, lazily or lexically.")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("-s", "--strategy", choices=list(EVALUATORS), default=DEFAULT_STRATEGY,
                        help=f"evaluation strategy to start with (default: {DEFAULT_STRATEGY})")
    parser.add_argument("-k", "--keep-going", action="store_true",
                        help="in file mode, report errors and continue instead of exiting")
    return parser.parse_args(argv)


def main(argv=None):
    """Runs scopecalc interpreter. Called from the scopecalc console script."""
    args = parse_args(argv)

    with ErrorHandler(fatal=not args.keep_going) as error_handler:
        if args.file is not None:
            sess = Session(error_handler, args.file, args.strategy, cmd_line=False)
            while sess.to_exec:
                with error_handler:
                    sess.run()

        else:
            Shell(Session(error_handler, Session.SH_FILE, args.strategy, cmd_line=True)).cmdloop()
