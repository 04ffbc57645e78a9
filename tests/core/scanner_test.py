import unittest

from plox.core.scanner import Scanner, scan
from plox.core.tokens import Token, TokenType
from plox.lang.error import ScanError


def kinds(source):
    return [token.kind for token in Scanner(source).scan_tokens()]


class ScannerTestCase(unittest.TestCase):

    def test_punctuation(self):
        cases = {
            "(){},.-+; / *?:": [
                TokenType.LEFT_PAREN, TokenType.RIGHT_PAREN, TokenType.LEFT_BRACE, TokenType.RIGHT_BRACE,
                TokenType.COMMA, TokenType.DOT, TokenType.MINUS, TokenType.PLUS, TokenType.SEMICOLON,
                TokenType.SLASH, TokenType.STAR, TokenType.QUESTION, TokenType.COLON, TokenType.EOF
            ],
            "! != = == > >= < <=": [
                TokenType.BANG, TokenType.BANG_EQUAL, TokenType.EQUAL, TokenType.EQUAL_EQUAL, TokenType.GREATER,
                TokenType.GREATER_EQUAL, TokenType.LESS, TokenType.LESS_EQUAL, TokenType.EOF
            ],
            "": [TokenType.EOF],
        }
        for case, expected in cases.items():
            self.assertEqual(expected, kinds(case), case)

    def test_keywords_and_identifiers(self):
        cases = {
            "let": TokenType.LET,
            "fun": TokenType.FUN,
            "break": TokenType.BREAK,
            "continue": TokenType.CONTINUE,
            "nil": TokenType.NIL,
            "lettuce": TokenType.IDENTIFIER,
            "_private": TokenType.IDENTIFIER,
            "var": TokenType.IDENTIFIER,
            "x2": TokenType.IDENTIFIER,
        }
        for case, expected in cases.items():
            self.assertEqual([expected, TokenType.EOF], kinds(case), case)

    def test_literals(self):
        cases = {
            "12": (TokenType.NUMBER, 12.0),
            "3.5": (TokenType.NUMBER, 3.5),
            '"hi there"': (TokenType.STRING, "hi there"),
            '""': (TokenType.STRING, ""),
        }
        for case, (kind, literal) in cases.items():
            token = Scanner(case).scan_tokens()[0]
            self.assertEqual(kind, token.kind, case)
            self.assertEqual(literal, token.literal, case)
            self.assertEqual(case, token.lexeme, case)

    def test_columns(self):
        tokens = Scanner("let ab = 1;\n  x /* c */ y").scan_tokens()
        self.assertEqual([0, 4, 7, 9, 10, 2, 12], [token.column for token in tokens[:-1]])
        self.assertEqual([1, 1, 1, 1, 1, 2, 2], [token.line for token in tokens[:-1]])

    def test_trailing_dot_is_not_part_of_number(self):
        self.assertEqual([TokenType.NUMBER, TokenType.DOT, TokenType.EOF], kinds("1."))

    def test_comments_and_lines(self):
        tokens = Scanner("// line comment\n1 /* a /* nested\n */ b */ 2\n\"multi\nline\" 3").scan_tokens()

        self.assertEqual([TokenType.NUMBER, TokenType.NUMBER, TokenType.STRING, TokenType.NUMBER, TokenType.EOF],
                         [token.kind for token in tokens])
        self.assertEqual([2, 3, 5, 5, 5], [token.line for token in tokens])

    def test_errors(self):
        cases = {
            "1 @ 2": "Unexpected character.",
            '"open': "Unterminated string.",
            "/* open /* nested */": "Unterminated block comment.",
        }
        for case, message in cases.items():
            errors = []
            Scanner(case, errors.append).scan_tokens()
            self.assertEqual([message], [error.message for error in errors], case)
            self.assertIsInstance(errors[0], ScanError)

    def test_scanning_continues_after_error(self):
        tokens, had_error = scan("1 @ 2")

        self.assertTrue(had_error)
        self.assertEqual([TokenType.NUMBER, TokenType.NUMBER, TokenType.EOF], [token.kind for token in tokens])

    def test_error_format(self):
        errors = []
        Scanner("\n#", errors.append).scan_tokens()
        self.assertEqual("[line: 2 Error : Unexpected character.]", str(errors[0]))

    def test_token_str(self):
        self.assertEqual("NUMBER 1 1.0", str(Token(TokenType.NUMBER, "1", 1.0, 1)))
        self.assertEqual("EOF  nil", str(Token(TokenType.EOF, "", None, 1)))


if __name__ == '__main__':
    unittest.main()
