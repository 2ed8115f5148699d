"""Error handling for lcbot. Only GenericExceptions should be encountered while evaluating: if another type of error is
raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw a lcbot error/warning."""

    def __init__(self, msg, exprs=None, start=0, end=-1, diagnosis=True, internal=False):
        """Parses args for GenericException or warning."""
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]

        self.plain_msg = msg.format(*exprs)
        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.expr = exprs[0]  # exprs[0] should be the offending expr that caused the error
        self.end = end if end != -1 else len(self.expr)  # needed for error display

        self.start = start
        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.plain_msg)


class LexError(GenericException):
    """Raised by the tokenizer. remaining is the number of characters of expr not yet consumed when lexing failed."""

    def __init__(self, msg, expr, remaining):
        self.remaining = remaining
        start = len(expr) - remaining
        # msg may quote the offending char, which can be a brace
        super().__init__(msg.replace("{", "{{").replace("}", "}}"), expr, start=start, end=start + 1)

    @property
    def pos(self):
        return len(self.expr) - self.remaining


class ParseError(GenericException):
    """Structural error: the tokens don't form a statement."""


def error_message(expr, error):
    """Returns a LexError as text: position header, the line itself, then a caret under the offending character."""
    pos = len(expr) - error.remaining
    return f"error:{pos}\n{expr}\n{'_' * pos}^ {error.plain_msg}"


class ErrorHandler:
    """Context manager that will silently suppress Python errors and print custom lcbot errors/warnings."""
    ERROR = "red"
    WARNING = "magenta"
    STEP = "cyan"

    def __init__(self, fatal=True, stream=None, verbose=False, plain=False):
        """fatal errors exit the process. stream is where errors, warnings and steps are printed (default stdout).
        plain drops colors and prints LexErrors in the single-line error_message format, for logs and chat bots.
        """
        self.fatal = fatal
        self.plain = plain
        self.verbose = verbose
        self.stream = stream
        self.traceback = {}

    def _print(self, *args):
        print(*args, file=self.stream if self.stream is not None else sys.stdout)

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to Session add."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after successful Session add."""
        self.traceback[path] = (None, None)

    def _colored(self, text, color=None):
        if self.plain:
            return text
        return colored(text, color, attrs=["bold"])

    def register_step(self, rule, expr):
        """Prints a reduction step if verbose."""
        if self.verbose:
            self._print(self._colored(f"{rule} ", ErrorHandler.STEP) + str(expr))

    @staticmethod
    def diagnose(error, warning=False, plain=False):
        """Returns offending part of error.expr highlighted and bolded."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        def highlight(text):
            return text if plain else colored(text, color, attrs=["bold"])

        diagnosis = "  " + error.expr[:error.start]

        end = max(error.end, error.start + 1)
        diagnosis += highlight(error.expr[error.start:end])
        diagnosis += error.expr[end:] + "\n"

        diagnosis += "  " + " " * error.start
        diagnosis += highlight("^" + "~" * (min(end, len(error.expr)) - error.start - 1))

        return diagnosis

    def warn(self, *args, **kwargs):
        """Generates and prints runtime warning message based on args."""
        error = GenericException(*args, **kwargs)

        msg = error.plain_msg if self.plain else error.msg
        self._print(self._colored("warning: ", ErrorHandler.WARNING) + msg)

        if not error.internal and error.expr and error.diagnosis:
            self._print(ErrorHandler.diagnose(error, warning=True, plain=self.plain))

    def throw(self, error):
        """Throws error using error and self.traceback. error must be a GenericException, and self.traceback must be a
        dict of file: (line, line_num) representing origination of error.
        """
        error_msg = ""
        lines = 0
        for file, (line, line_num) in self.traceback.items():  # assumes dict is insertion-ordered
            if line:
                error_msg += f"  File '{file}', line {line_num}:\n"
                error_msg += f"    {line}\n"
                lines += 1

        if lines > 1:
            error_msg = "Traceback:\n" + error_msg

        if error.internal:
            error_msg += self._colored("[internal] ", ErrorHandler.ERROR)

        if self.plain and isinstance(error, LexError):
            error_msg += error_message(error.expr, error)
            self._print(error_msg)
        else:
            msg = error.plain_msg if self.plain else error.msg
            error_msg += self._colored("error: ", ErrorHandler.ERROR) + msg
            self._print(error_msg)

            if not error.internal and error.expr and error.diagnosis:
                self._print(ErrorHandler.diagnose(error, plain=self.plain))

        if self.fatal:
            sys.exit(1)
        for path in self.traceback:  # if error occurred, reset traceback (no need if error is fatal)
            self.traceback[path] = (None, None)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("beta normal form might exist, but maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
