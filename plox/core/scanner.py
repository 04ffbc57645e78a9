"""Scanner: turns source text into a list of Tokens terminated by EOF.

Errors are reported through on_error and scanning carries on, so that a single stray character produces a single
diagnostic instead of hiding the rest of the file.
"""

from plox.core.tokens import KEYWORDS, Token, TokenType
from plox.lang.error import ScanError


class Scanner:
    """Single pass over source. Use scan_tokens to get the tokens."""
    SINGLE = {
        "(": TokenType.LEFT_PAREN,
        ")": TokenType.RIGHT_PAREN,
        "{": TokenType.LEFT_BRACE,
        "}": TokenType.RIGHT_BRACE,
        ",": TokenType.COMMA,
        ".": TokenType.DOT,
        "-": TokenType.MINUS,
        "+": TokenType.PLUS,
        ";": TokenType.SEMICOLON,
        "*": TokenType.STAR,
        "?": TokenType.QUESTION,
        ":": TokenType.COLON,
    }
    # char: (type if followed by "=", type otherwise)
    DOUBLE = {
        "!": (TokenType.BANG_EQUAL, TokenType.BANG),
        "=": (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
        "<": (TokenType.LESS_EQUAL, TokenType.LESS),
        ">": (TokenType.GREATER_EQUAL, TokenType.GREATER),
    }

    def __init__(self, source, on_error=None):
        self.source = source
        self.on_error = on_error
        self.tokens = []
        self.errors = []

        self.start = 0
        self.current = 0
        self.line = 1

    def scan_tokens(self):
        while not self.is_at_end:
            self.start = self.current
            self.scan_token()

        self.tokens.append(Token(TokenType.EOF, "", None, self.line))
        return self.tokens

    @property
    def is_at_end(self):
        return self.current >= len(self.source)

    def scan_token(self):
        char = self.advance()

        if char in Scanner.SINGLE:
            self.add_token(Scanner.SINGLE[char])
        elif char in Scanner.DOUBLE:
            matched, unmatched = Scanner.DOUBLE[char]
            self.add_token(matched if self.match("=") else unmatched)
        elif char == "/":
            if self.match("/"):
                while self.peek() != "\n" and not self.is_at_end:
                    self.advance()
            elif self.match("*"):
                self.block_comment()
            else:
                self.add_token(TokenType.SLASH)
        elif char in " \r\t":
            pass
        elif char == "\n":
            self.line += 1
        elif char == '"':
            self.string()
        elif self.is_digit(char):
            self.number()
        elif self.is_alpha(char):
            self.identifier()
        else:
            self.error("Unexpected character.")

    def block_comment(self):
        """Skips a /* */ comment. Comments nest."""
        depth = 1
        while depth > 0:
            if self.is_at_end:
                self.error("Unterminated block comment.")
                return

            if self.peek() == "/" and self.peek_next() == "*":
                depth += 1
                self.advance()
            elif self.peek() == "*" and self.peek_next() == "/":
                depth -= 1
                self.advance()
            elif self.peek() == "\n":
                self.line += 1
            self.advance()

    def string(self):
        while self.peek() != '"' and not self.is_at_end:
            if self.peek() == "\n":
                self.line += 1
            self.advance()

        if self.is_at_end:
            self.error("Unterminated string.")
            return

        self.advance()  # closing "
        self.add_token(TokenType.STRING, self.source[self.start + 1:self.current - 1])

    def number(self):
        while self.is_digit(self.peek()):
            self.advance()

        if self.peek() == "." and self.is_digit(self.peek_next()):
            self.advance()
            while self.is_digit(self.peek()):
                self.advance()

        self.add_token(TokenType.NUMBER, float(self.source[self.start:self.current]))

    def identifier(self):
        while self.is_alpha(self.peek()) or self.is_digit(self.peek()):
            self.advance()

        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    def advance(self):
        char = self.source[self.current]
        self.current += 1
        return char

    def match(self, expected):
        if self.is_at_end or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def peek(self):
        return "\0" if self.is_at_end else self.source[self.current]

    def peek_next(self):
        if self.current + 1 >= len(self.source):
            return "\0"
        return self.source[self.current + 1]

    @staticmethod
    def is_digit(char):
        return "0" <= char <= "9"

    @staticmethod
    def is_alpha(char):
        return "a" <= char <= "z" or "A" <= char <= "Z" or char == "_"

    def add_token(self, kind, literal=None):
        column = self.start - (self.source.rfind("\n", 0, self.start) + 1)
        self.tokens.append(Token(kind, self.source[self.start:self.current], literal, self.line, column))

    def error(self, message):
        error = ScanError(message, line=self.line)
        self.errors.append(error)
        if self.on_error is not None:
            self.on_error(error)


def scan(source, on_error=None):
    """Returns (tokens, had_error) for source."""
    scanner = Scanner(source, on_error)
    tokens = scanner.scan_tokens()
    return tokens, bool(scanner.errors)
