"""Error handling for the kotoba language. Only GenericExceptions should be encountered during running: if another type
of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

There are two tiers of errors:
    1. ParseErrors: raised by the lexer/parser, always caught by Parser.parse and reported without stopping the host.
    2. EvalErrors: raised by the evaluator, surfaced to whoever called Evaluator.eval. Each kind has its own exit code,
       which the file-mode front end uses when the ErrorHandler is fatal.
"""

import sys
from enum import Enum

from termcolor import colored


class ParseErrorKind(Enum):
    """Closed set of parse diagnostics."""
    UNEXPECTED_TOKEN = "unexpected token"
    UNEXPECTED_END_OF_INPUT = "unexpected end of input"
    UNCLOSED_GROUPING = "unclosed grouping"
    MISSING_COLON = "missing colon"
    MISSING_SEMICOLON = "missing semicolon"
    MISSING_IDENTIFIER = "missing identifier"
    MISSING_PAREN = "missing parenthesis"
    FN_CALL_MISSING_CLOSE_PAREN = "function call missing closing parenthesis"
    ASSIGNMENT_MISSING_EQUAL = "assignment missing '='"
    ASSIGNMENT_MISSING_IDENTIFIER = "assignment missing identifier"
    UNTERMINATED_STRING = "unterminated string"
    NESTING_TOO_DEEP = "nesting too deep"


class EvalErrorKind(Enum):
    """Evaluation failures, each with the exit code used when the error is fatal."""
    UNARY_TYPE_ERROR = ("unary type error", 2)
    BINARY_TYPE_ERROR = ("binary type error", 3)
    UNDEFINED_VARIABLE = ("undefined variable", 4)
    CONDITION_TYPE_ERROR = ("condition type error", 5)
    UNDEFINED_FUNCTION = ("undefined function", 6)
    ARITY_ERROR = ("arity error", 7)
    RECURSION_LIMIT = ("recursion limit", 8)

    def __init__(self, label, exit_code):
        self.label = label
        self.exit_code = exit_code


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw a kotoba error/warning. position is the
    Position of the offending construct, if known.
    """
    exit_code = 1

    def __init__(self, msg, exprs=None, position=None, diagnosis=True, internal=False):
        """Parses args for GenericException or warning."""
        if exprs is None:
            exprs = []
        if isinstance(exprs, str):
            exprs = [exprs]

        self.plain_msg = msg.format(*exprs)
        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.exprs = exprs

        self.position = position
        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.plain_msg)


class ParseError(GenericException):
    """Raised by the lexer/parser. token is the offending Token, or None if input ended."""

    def __init__(self, kind, token=None, position=None, msg=None, exprs=None):
        if position is None and token is not None:
            position = token.position
        if msg is None:
            msg = kind.value if token is None else kind.value + " at '{}'"
            exprs = None if token is None else [token.lexeme]

        super().__init__(msg, exprs, position=position)
        self.kind = kind
        self.token = token


class EvalError(GenericException):
    """Raised by the evaluator. The kind is kept so that callers (and tests) can tell failures apart."""

    def __init__(self, kind, msg, exprs=None, position=None):
        super().__init__(msg, exprs, position=position)
        self.kind = kind

    @property
    def exit_code(self):
        return self.kind.exit_code


class ErrorHandler:
    """Context manager that will silently suppress Python errors and raise custom kotoba errors/warnings."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True, stream=None):
        self.fatal = fatal
        self.stream = stream
        self.traceback = {}

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers source text in traceback given path. Should be called prior to Session add/run."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes source text from traceback given path. Should be called after successful Session add/run."""
        self.traceback[path] = (None, None)

    def _print(self, msg):
        print(msg, file=self.stream if self.stream is not None else sys.stdout)

    def _location(self, error):
        """Returns (path, source line, 'path:line:col: ') for error, using the most recently registered source."""
        if not self.traceback:
            return None, None, ""

        path, (source, line_num) = list(self.traceback.items())[-1]
        if error.position is None or source is None:
            return path, None, f"{path}: "

        lines = source.split("\n")
        idx = error.position.line - 1
        line = lines[idx] if 0 <= idx < len(lines) else None

        real_line = error.position.line + (line_num - 1 if line_num else 0)
        return path, line, f"{path}:{real_line}:{error.position.column}: "

    @staticmethod
    def diagnose(line, error, warning=False):
        """Returns line with the offending part of error highlighted and bolded."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        start = min(error.position.column - 1, len(line))
        end = start + 1
        if getattr(error, "token", None) is not None:
            end = start + max(len(error.token.lexeme), 1)

        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], color, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), color, attrs=["bold"])

        return diagnosis

    def warn(self, *args, **kwargs):
        """Generates and prints runtime warning message based on args. Never stops execution."""
        error = GenericException(*args, **kwargs)
        __, line, location = self._location(error)

        error_msg = colored(location, attrs=["bold"])
        error_msg += colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + error.msg
        self._print(error_msg)

        if not error.internal and line is not None and error.diagnosis:
            self._print(ErrorHandler.diagnose(line, error, warning=True))

    def report(self, error):
        """Prints error and its diagnosis without stopping execution."""
        __, line, location = self._location(error)
        error_msg = colored(location, attrs=["bold"])

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        self._print(error_msg)

        if not error.internal and line is not None and error.diagnosis and error.position is not None:
            self._print(ErrorHandler.diagnose(line, error))

    def throw(self, error):
        """Reports error using self.traceback. If self.fatal, exits with the error's exit code."""
        self.report(error)

        if self.fatal:
            sys.exit(error.exit_code)
        self.traceback = {path: (None, None) for path in self.traceback}  # no need to reset if error is fatal

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
