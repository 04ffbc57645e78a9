"""Error handling for the Lox language. Only LoxErrors should be encountered while running a program: if another type
of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Control flow (return/break/continue) never travels as an exception, see core/interpreter.py.
"""

import sys

from termcolor import colored


SYNTAX = "syntax"
RUNTIME = "runtime"


class LoxError(Exception):
    """Base class for diagnostics raised by the scanner, parser, interpreter or session. token is the offending token,
    if there is one, and is used to locate the error in the source.
    """
    kind = None

    def __init__(self, message, token=None, line=None):
        super().__init__(message)
        self.message = message
        self.token = token
        self.line = token.line if line is None and token is not None else line

    def __str__(self):
        return self.message


class LoxSyntaxError(LoxError):
    """Any error found before the program runs. A single syntax error stops the whole batch from executing."""
    kind = SYNTAX

    @property
    def where(self):
        return ""

    def __str__(self):
        return f"[line: {self.line} Error {self.where}: {self.message}]"


class ScanError(LoxSyntaxError):
    """Lexical error: the scanner has no token to blame, only a line."""


class ParseError(LoxSyntaxError):
    """Grammar error located at token."""

    @property
    def where(self):
        if not self.token.lexeme:  # only EOF has an empty lexeme
            return "at end"
        return f"at '{self.token.lexeme}'"


class LoxRuntimeError(LoxError):
    """Error raised while evaluating a well-formed program, e.g. a type error or an undefined variable."""
    kind = RUNTIME

    def __str__(self):
        return f"{self.message} [line:{self.line}]"


class UnsupportedFeature(LoxRuntimeError):
    """Raised when a program uses syntax that parses but that this interpreter does not evaluate (classes, this, super,
    properties).
    """


class ErrorHandler:
    """Collects and prints diagnostics. Also a context manager that will suppress Python errors and print them as Lox
    errors instead.
    """
    ERROR = "red"
    RECURSION_STATUS = 70

    def __init__(self, fatal=True, stream=None):
        self.fatal = fatal
        self.stream = stream
        self.errors = []      # diagnostics reported since the last reset
        self.traceback = {}   # path: source lines, used to show the offending line

    def register_source(self, path, source):
        """Registers source so that reported errors can show the line they occurred on."""
        self.traceback = {path: source.splitlines()}

    def reset(self):
        """Forgets reported errors. Called between REPL lines."""
        self.errors = []

    @property
    def had_syntax_error(self):
        return any(error.kind == SYNTAX for error in self.errors)

    @property
    def had_runtime_error(self):
        return any(error.kind == RUNTIME for error in self.errors)

    @staticmethod
    def diagnose(error, line):
        """Returns line with error.token highlighted and underlined, or None if the token can't be placed in
        line. Without a column, the token is only placed when its lexeme occurs once in line.
        """
        token = error.token
        if token is None or not token.lexeme:
            return None

        lexeme = token.lexeme
        if token.column is not None and line.startswith(lexeme, token.column):
            start = token.column
        elif line.count(lexeme) == 1:
            start = line.find(lexeme)
        else:
            return None

        end = start + len(lexeme)
        diagnosis = "    " + line[:start]
        diagnosis += colored(line[start:end], ErrorHandler.ERROR, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "    " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), ErrorHandler.ERROR, attrs=["bold"])
        return diagnosis

    def report(self, error):
        """Records and prints error. This is the reporting hook handed to the scanner, parser and interpreter; it never
        exits, so the caller decides what an error means for the rest of the run.
        """
        self.errors.append(error)

        error_msg = ""
        diagnosis = None
        for path, lines in self.traceback.items():
            if error.line is not None and 0 < error.line <= len(lines):
                line = lines[error.line - 1]
                error_msg += f"  File '{path}', line {error.line}:\n"
                diagnosis = ErrorHandler.diagnose(error, line)
                if diagnosis is None:
                    error_msg += f"    {line.strip()}\n"

        if diagnosis:
            error_msg += diagnosis + "\n"
        error_msg += colored(f"{error.kind} error: ", ErrorHandler.ERROR, attrs=["bold"]) + str(error)
        print(error_msg, file=self.stream)

    def throw(self, msg, internal=False, status=1, fatal=None):
        """Prints msg as an error that is not tied to the program being run and exits with status if fatal."""
        error_msg = ""
        if internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])
        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + msg
        print(error_msg, file=self.stream)

        if self.fatal if fatal is None else fatal:
            sys.exit(status)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw("keyboard interrupt")
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            # fatal even in command-line mode
            self.throw("stack overflow: maximum recursion depth exceeded", status=ErrorHandler.RECURSION_STATUS,
                       fatal=True)
        elif exc_type is not None and issubclass(exc_type, LoxError):
            self.throw(str(exc_val))
        elif exc_type is not None:
            self.throw(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True)
            do_exit = True

        return not do_exit
