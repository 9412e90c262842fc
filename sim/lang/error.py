"""Error handling for the sim language. Only GenericExceptions should be encountered during running: if another type
of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

The three pipeline stages each raise their own subclass:
    - LexicalError: unrecognized character or malformed literal (tokenizer)
    - SyntacticError: expected token not found (parser)
    - EvaluationError: undefined name, wrong arity, bad operand, division by zero (evaluator)
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw a sim error/warning."""

    def __init__(self, msg, exprs=None, start=0, end=-1, diagnosis=True, internal=False, line=None):
        """Parses args for GenericException or warning. exprs fill the {} slots of msg. line is the offending source
        line (defaults to exprs[0]); start and end are the column span of the problem within it.
        """
        if exprs is None:
            exprs = ""
        if not isinstance(exprs, (list, tuple)):
            exprs = [exprs]
        exprs = [str(expr) for expr in exprs]

        super().__init__(msg.format(*exprs))  # str(error) stays uncolored
        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.expr = line if line is not None else (exprs[0] if exprs else "")
        self.end = end if end != -1 else len(self.expr)  # needed for error display

        self.start = start
        self.diagnosis = diagnosis
        self.internal = internal
        self.lineno = 1

    @classmethod
    def at(cls, msg, exprs, source, location, length=1):
        """Builds an error pointing at location (anything with line and column attributes) in source."""
        lines = source.splitlines() or [""]
        if location.line > len(lines):  # past a trailing newline: point just after the last line
            lineno, start = len(lines), len(lines[-1])
        else:
            lineno, start = location.line, location.column - 1

        error = cls(msg, exprs, start=start, end=start + max(length, 1), line=lines[lineno - 1])
        error.lineno = lineno
        return error


class LexicalError(GenericException):
    """Raised by the tokenizer."""


class SyntacticError(GenericException):
    """Raised by the parser."""


class EvaluationError(GenericException):
    """Raised by the evaluator. Runtime errors carry no source position, so no diagnosis is printed."""

    def __init__(self, msg, exprs=None, **kwargs):
        kwargs.setdefault("diagnosis", False)
        super().__init__(msg, exprs, **kwargs)


class ErrorHandler:
    """Context manager that will silently suppress Python errors and raise custom sim errors/warnings."""
    ERROR = "red"
    WARNING = "magenta"
    STEP = "blue"

    def __init__(self, fatal=True, trace=False):
        self.fatal = fatal
        self.trace = trace  # print each pipeline stage as it completes
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

    def register_step(self, stage, text):
        """Prints an intermediate pipeline result when tracing is on."""
        if self.trace:
            print(colored(f"[{stage}] ", ErrorHandler.STEP, attrs=["bold"]) + colored(str(text), attrs=["dark"]))

    @staticmethod
    def diagnose(error, warning=False):
        """Returns offending part of error.expr highlighted and bolded."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        diagnosis = "  " + error.expr[:error.start]

        end = max(error.end, error.start + 1)
        diagnosis += colored(error.expr[error.start:end], color, attrs=["bold"])
        diagnosis += error.expr[end:] + "\n"

        diagnosis += "  " + " " * error.start
        diagnosis += colored("^" + "~" * (end - error.start - 1), color, attrs=["bold"])

        return diagnosis

    def _location(self, error):
        """Returns 'file:line:column: ' for errors that point into the most recently registered source, else 'file: '.
        """
        for file, (line, line_num) in reversed(list(self.traceback.items())):
            if line is not None:
                if error.diagnosis and not error.internal:
                    return f"{file}:{line_num + error.lineno - 1}:{error.start + 1}: "  # lineno counts from the chunk
                return f"{file}: "
        return ""

    def warn(self, *args, **kwargs):
        """Generates and prints runtime warning message based on args."""
        error = GenericException(*args, **kwargs)

        error_msg = colored(self._location(error), attrs=["bold"])
        error_msg += colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + error.msg
        print(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error, warning=True))

    def throw(self, error):
        """Throws error using error and self.traceback. error must be a GenericException, and self.traceback must be a
        dict of file: (line, line_num) representing origination of error.
        """
        error_msg = colored(self._location(error), attrs=["bold"])

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        print(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error))

        if self.fatal:
            sys.exit(1)
        self.traceback = {file: (None, None) for file in self.traceback}  # if error occurred, forget registered lines

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum recursion depth exceeded", diagnosis=False))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException("unknown error: '{}: {}'", (exc_type.__name__, exc_val), internal=True))
            do_exit = True

        return not do_exit
