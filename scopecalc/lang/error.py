"""Error handling for the scopecalc language. Only GenericExceptions should be encountered while running: if another
type of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw a scopecalc error/warning. exprs are the
    snippets formatted (bolded) into msg; exprs[0] should be the offending expr.
    """

    def __init__(self, msg, exprs=None, start=0, end=-1, diagnosis=True, internal=False, fatal=False):
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]

        self.msg = msg.format(*(colored(str(expr), attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.expr = str(exprs[0])  # offending expr, used for diagnosis
        self.end = end if end != -1 else len(self.expr)

        self.start = start
        self.diagnosis = diagnosis
        self.internal = internal
        self.fatal = fatal  # exits even if the handler is not fatal

        super().__init__(self.msg)


class ParseError(GenericException):
    """Raised when text cannot be read or a datum does not match any grammar production."""


class UnboundVariableError(GenericException):
    """Raised when an identifier is absent from every frame of the environment it is looked up in."""

    def __init__(self, identifier):
        super().__init__("'{}' is not bound in the current environment", identifier)
        self.identifier = identifier


class ApplicationError(GenericException):
    """Raised when the function position of an application does not evaluate to a function."""

    def __init__(self, term, value):
        super().__init__("'{}' evaluates to '{}', which cannot be applied", (term.expr, value))
        self.term = term
        self.value = value


class OperandError(GenericException):
    """Raised when an arithmetic operand does not evaluate to an integer."""

    def __init__(self, term, value):
        super().__init__("operand '{}' evaluates to '{}', which is not an integer", (term.expr, value))
        self.term = term
        self.value = value


class ErrorHandler:
    """Context manager that will silently suppress Python errors and raise custom scopecalc errors/warnings."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True):
        self.fatal = fatal
        self.strategy = None  # strategy of the statement being evaluated, if any
        self.traceback = {}

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to Session add/run."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after successful Session add/run."""
        self.traceback[path] = (None, None)

    def register_strategy(self, strategy):
        """Registers the evaluation strategy errors are raised under. None clears it."""
        self.strategy = strategy

    @staticmethod
    def diagnose(error, warning=False):
        """Returns offending part of error.expr highlighted and bolded."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        diagnosis = "  " + error.expr[:error.start]

        end = max(error.end, 1)
        diagnosis += colored(error.expr[error.start:end], color, attrs=["bold"])
        diagnosis += error.expr[end:] + "\n"

        diagnosis += "  " + " " * error.start
        diagnosis += colored("^" + "~" * (end - error.start - 1), color, attrs=["bold"])

        return diagnosis

    def warn(self, *args, **kwargs):
        """Generates and prints a warning message based on args. The innermost registered line is used as location."""
        error = GenericException(*args, **kwargs)

        location = ""
        for file, (line, line_num) in reversed(list(self.traceback.items())):
            if line:
                col = line.find(error.expr) + 1
                location = f"{file}:{line_num}:{col}: " if col else f"{file}:{line_num}: "
                break

        error_msg = colored(location, attrs=["bold"])
        error_msg += colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + error.msg
        print(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error, warning=True))

    def throw(self, error):
        """Throws error using error and self.traceback. error must be a GenericException, and self.traceback must be a
        dict of file: (line, line_num) representing origination of error.
        """
        error_msg = ""
        lines = 0
        for file, (line, line_num) in self.traceback.items():  # dicts are insertion-ordered
            if line:
                error_msg += f"  File '{file}', line {line_num}:\n"
                error_msg += f"    {line}\n"
                lines += 1

        if lines > 1:
            error_msg = "Traceback:\n" + error_msg

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        label = f"error ({self.strategy}): " if self.strategy else "error: "
        error_msg += colored(label, ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        print(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error))

        if self.fatal or error.fatal:
            sys.exit(1)
        self.strategy = None
        self.traceback = {path: (None, None) for path in self.traceback}  # keep registered files, drop lines

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum recursion depth exceeded during evaluation"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
