"""Session control for the Lox language: scan, parse and run source, either from a file or line by line from the
command-line shell. A session keeps one Interpreter, so globals defined by one run are visible to the next.
"""

from collections import Counter
from dataclasses import dataclass

from plox.core.interpreter import Interpreter
from plox.core.parser import Parser
from plox.core.scanner import Scanner
from plox.core.tokens import TokenType
from plox.lang.error import LoxError


@dataclass(frozen=True)
class Outcome:
    """What happened during one run. The driver picks the process exit status from this."""
    SYNTAX_STATUS = 65
    RUNTIME_STATUS = 70

    had_syntax_error: bool = False
    had_runtime_error: bool = False

    @property
    def ok(self):
        return not (self.had_syntax_error or self.had_runtime_error)

    @property
    def exit_code(self):
        if self.had_syntax_error:
            return Outcome.SYNTAX_STATUS
        if self.had_runtime_error:
            return Outcome.RUNTIME_STATUS
        return 0


class Session:
    """Governs a Lox session. path is used for error messages; unless it is SH_FILE, the file at path is loaded and
    can be executed with run().
    """
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path=SH_FILE, cmd_line=False, out=None, show_tokens=False, show_ast=False):
        self.error_handler = error_handler
        self.path = path
        self.cmd_line = cmd_line  # whether or not in command-line mode
        self.show_tokens = show_tokens
        self.show_ast = show_ast

        self.interpreter = Interpreter(out=out, on_error=self.error_handler.report)
        self.source = None

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r", encoding="utf-8") as file:
                    self.source = file.read()
            except (OSError, UnicodeDecodeError):
                raise LoxError(f"'{path}' could not be opened")

        elif not cmd_line:
            raise LoxError(f"'{Session.SH_FILE}' is a reserved filename")

    @staticmethod
    def preprocess_line(line, add_to_prev=""):
        """Joins line to the pending input add_to_prev. Returns the joined source and whether it is still incomplete,
        i.e. has unclosed braces or parentheses. Brackets inside strings and comments are not counted.
        """
        source = f"{add_to_prev}\n{line}" if add_to_prev else line
        counts = Counter(token.kind for token in Scanner(source).scan_tokens())
        incomplete = (counts[TokenType.LEFT_BRACE] > counts[TokenType.RIGHT_BRACE]
                      or counts[TokenType.LEFT_PAREN] > counts[TokenType.RIGHT_PAREN])
        return source, incomplete

    def run(self, source=None):
        """Scans, parses and runs source (the loaded file if None). Returns an Outcome. Diagnostics are reported to
        this session's error handler; nothing is executed if any syntax error was found.
        """
        if source is None:
            source = self.source if self.source is not None else ""

        self.error_handler.reset()
        self.error_handler.register_source(self.path, source)

        tokens = Scanner(source, self.error_handler.report).scan_tokens()
        if self.show_tokens:
            for token in tokens:
                self.interpreter.print(str(token))

        statements = Parser(tokens, self.error_handler.report).parse()
        if self.show_ast:
            for statement in statements:
                self.interpreter.print(statement.display())

        if not self.error_handler.had_syntax_error:
            self.interpreter.interpret(statements, echo=self.cmd_line)

        return Outcome(self.error_handler.had_syntax_error, self.error_handler.had_runtime_error)
