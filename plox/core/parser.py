"""Recursive-descent parser: turns a token list into a list of statements.

Grammar, lowest to highest precedence (each binary level folds left-associatively):

```
program     ::= declaration* EOF
declaration ::= class_decl | fun_decl | let_decl | statement
statement   ::= for_stmt | if_stmt | print_stmt | return_stmt | while_stmt | break_stmt | continue_stmt | block
              | expr_stmt

expression  ::= comma
comma       ::= assignment ( "," assignment )*
assignment  ::= ( call "." )? IDENTIFIER "=" assignment | conditional
conditional ::= logic_or ( "?" expression ":" conditional )?     ; right-associative
logic_or    ::= logic_and ( "or" logic_and )*
logic_and   ::= equality ( "and" equality )*
equality    ::= comparison ( ( "!=" | "==" ) comparison )*
comparison  ::= term ( ( ">" | ">=" | "<" | "<=" ) term )*
term        ::= factor ( ( "-" | "+" ) factor )*
factor      ::= unary ( ( "/" | "*" ) unary )*
unary       ::= ( "!" | "-" ) unary | call
call        ::= primary ( "(" arguments? ")" | "." IDENTIFIER )*
primary     ::= NUMBER | STRING | "true" | "false" | "nil" | "this" | "super" "." IDENTIFIER | IDENTIFIER
              | "(" expression ")" | "fun" "(" parameters? ")" block
```

Errors are handled in panic mode: the failing declaration is abandoned, tokens are discarded up to the next statement
boundary and parsing resumes there. Some errors (bad assignment target, too many arguments, break outside a loop, ...)
are only reported and parsing carries on without unwinding. Either way a declaration that produced an error is dropped
from the result, so no statement built from broken input ever reaches the interpreter.
"""

from plox.core.syntax import (
    AnonymousFunction, Assign, Binary, Block, Break, Call, Class, Comma, Conditional, Continue, Expression, Function,
    Get, Grouping, If, Let, Literal, Logical, Print, Return, Set, Super, This, Unary, Variable, While
)
from plox.core.tokens import TokenType
from plox.lang.error import ParseError


T = TokenType


class Parser:
    """Parses a list of tokens ending in EOF. Use parse to get the statements."""
    MAX_ARGS = 255
    SYNC = {T.CLASS, T.FUN, T.LET, T.FOR, T.IF, T.WHILE, T.PRINT, T.RETURN}
    # binary operator: method that parses its right operand
    RIGHT_OPERAND = {
        T.COMMA: "assignment",
        T.OR: "logic_and",
        T.AND: "equality",
        T.BANG_EQUAL: "comparison",
        T.EQUAL_EQUAL: "comparison",
        T.GREATER: "term",
        T.GREATER_EQUAL: "term",
        T.LESS: "term",
        T.LESS_EQUAL: "term",
        T.PLUS: "factor",
        T.SLASH: "unary",
        T.STAR: "unary",
    }

    def __init__(self, tokens, on_error=None):
        self.tokens = tokens
        self.on_error = on_error
        self.errors = []

        self.current = 0
        self.loop_depth = 0      # loops enclosing the current statement, reset inside function bodies
        self.function_depth = 0

    def parse(self):
        statements = []
        while not self.is_at_end:
            statement = self.declaration()
            if statement is not None:
                statements.append(statement)
        return statements

    # -----------------------------------------------------------------------------------------------------------------
    # declarations and statements

    def declaration(self):
        """Returns the next declaration, or None if it had errors."""
        reported = len(self.errors)
        try:
            if self.match(T.CLASS):
                statement = self.class_declaration()
            elif self.check(T.FUN) and self.check_next(T.IDENTIFIER):
                self.advance()
                statement = self.function("function")
            elif self.match(T.LET):
                statement = self.let_declaration()
            else:
                statement = self.statement()
        except ParseError:
            self.synchronize()
            return None

        return statement if len(self.errors) == reported else None

    def class_declaration(self):
        name = self.consume(T.IDENTIFIER, "Expect class name.")

        superclass = None
        if self.match(T.LESS):
            superclass = Variable(self.consume(T.IDENTIFIER, "Expect superclass name."))

        self.consume(T.LEFT_BRACE, "Expect '{' before class body.")
        methods = []
        while not self.check(T.RIGHT_BRACE) and not self.is_at_end:
            methods.append(self.function("method"))
        self.consume(T.RIGHT_BRACE, "Expect '}' after class body.")

        return Class(name, superclass, tuple(methods))

    def function(self, kind):
        name = self.consume(T.IDENTIFIER, f"Expect {kind} name.")
        self.consume(T.LEFT_PAREN, f"Expect '(' after {kind} name.")
        params, body = self.function_body(kind)
        return Function(name, params, body)

    def function_body(self, kind):
        """Parses parameters and body, starting just after the opening paren. Returns (params, body)."""
        params = []
        if not self.check(T.RIGHT_PAREN):
            while True:
                if len(params) >= Parser.MAX_ARGS:
                    self.error(self.peek(), f"Can't have more than {Parser.MAX_ARGS} parameters.")
                params.append(self.consume(T.IDENTIFIER, "Expect parameter name."))
                if not self.match(T.COMMA):
                    break
        self.consume(T.RIGHT_PAREN, "Expect ')' after parameters.")
        self.consume(T.LEFT_BRACE, f"Expect '{{' before {kind} body.")

        loop_depth = self.loop_depth
        self.loop_depth = 0
        self.function_depth += 1
        try:
            body = self.block()
        finally:
            self.loop_depth = loop_depth
            self.function_depth -= 1

        return tuple(params), tuple(body)

    def let_declaration(self):
        name = self.consume(T.IDENTIFIER, "Expect variable name.")

        initializer = None
        if self.match(T.EQUAL):
            initializer = self.expression()

        self.consume(T.SEMICOLON, "Expect ';' after variable declaration.")
        return Let(name, initializer)

    def statement(self):
        if self.match(T.FOR):
            return self.for_statement()
        if self.match(T.IF):
            return self.if_statement()
        if self.match(T.PRINT):
            return self.print_statement()
        if self.match(T.RETURN):
            return self.return_statement()
        if self.match(T.WHILE):
            return self.while_statement()
        if self.match(T.BREAK):
            return Break(self.loop_control("break"))
        if self.match(T.CONTINUE):
            return Continue(self.loop_control("continue"))
        if self.match(T.LEFT_BRACE):
            return Block(tuple(self.block()))
        return self.expression_statement()

    def for_statement(self):
        """`for` has no node of its own: it becomes a While, inside a Block when there is an initializer."""
        self.consume(T.LEFT_PAREN, "Expect '(' after 'for'.")

        if self.match(T.SEMICOLON):
            initializer = None
        elif self.match(T.LET):
            initializer = self.let_declaration()
        else:
            initializer = self.expression_statement()

        condition = None if self.check(T.SEMICOLON) else self.expression()
        self.consume(T.SEMICOLON, "Expect ';' after loop condition.")

        increment = None if self.check(T.RIGHT_PAREN) else self.expression()
        self.consume(T.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.loop_body()

        if condition is None:
            condition = Literal(True)
        loop = While(condition, body, increment)

        if initializer is not None:
            return Block((initializer, loop))
        return loop

    def if_statement(self):
        self.consume(T.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.expression()
        self.consume(T.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self.statement()
        else_branch = self.statement() if self.match(T.ELSE) else None
        return If(condition, then_branch, else_branch)

    def print_statement(self):
        value = self.expression()
        self.consume(T.SEMICOLON, "Expect ';' after value.")
        return Print(value)

    def return_statement(self):
        keyword = self.previous()
        if not self.function_depth:
            self.error(keyword, "Can't return from top-level code.")

        value = None if self.check(T.SEMICOLON) else self.expression()
        self.consume(T.SEMICOLON, "Expect ';' after return value.")
        return Return(keyword, value)

    def while_statement(self):
        self.consume(T.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.expression()
        self.consume(T.RIGHT_PAREN, "Expect ')' after condition.")
        return While(condition, self.loop_body())

    def loop_body(self):
        self.loop_depth += 1
        try:
            return self.statement()
        finally:
            self.loop_depth -= 1

    def loop_control(self, word):
        """Parses the rest of a break/continue statement and returns its keyword."""
        keyword = self.previous()
        self.consume(T.SEMICOLON, f"Expect ';' after '{word}'.")
        if not self.loop_depth:
            self.error(keyword, f"Can't use '{word}' outside of a loop.")
        return keyword

    def block(self):
        statements = []
        while not self.check(T.RIGHT_BRACE) and not self.is_at_end:
            statement = self.declaration()
            if statement is not None:
                statements.append(statement)

        self.consume(T.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def expression_statement(self):
        expr = self.expression()
        self.consume(T.SEMICOLON, "Expect ';' after expression.")
        return Expression(expr)

    # -----------------------------------------------------------------------------------------------------------------
    # expressions

    def expression(self):
        return self.comma()

    def comma(self):
        return self._left_assoc(Comma, self.assignment, T.COMMA)

    def assignment(self):
        expr = self.conditional()

        if self.match(T.EQUAL):
            equals = self.previous()
            value = self.assignment()

            if isinstance(expr, Variable):
                return Assign(expr.name, value)
            if isinstance(expr, Get):
                return Set(expr.obj, expr.name, value)

            self.error(equals, "Invalid assignment target.")  # reported, not thrown: the parser isn't confused

        return expr

    def conditional(self):
        expr = self.logic_or()

        if self.match(T.QUESTION):
            then_branch = self.expression()
            self.consume(T.COLON, "Expect ':' after then branch of conditional expression.")
            else_branch = self.conditional()
            expr = Conditional(expr, then_branch, else_branch)

        return expr

    def logic_or(self):
        return self._left_assoc(Logical, self.logic_and, T.OR)

    def logic_and(self):
        return self._left_assoc(Logical, self.equality, T.AND)

    def equality(self):
        return self._left_assoc(Binary, self.comparison, T.BANG_EQUAL, T.EQUAL_EQUAL)

    def comparison(self):
        return self._left_assoc(Binary, self.term, T.GREATER, T.GREATER_EQUAL, T.LESS, T.LESS_EQUAL)

    def term(self):
        return self._left_assoc(Binary, self.factor, T.MINUS, T.PLUS)

    def factor(self):
        return self._left_assoc(Binary, self.unary, T.SLASH, T.STAR)

    def unary(self):
        if self.match(T.BANG, T.MINUS):
            operator = self.previous()
            return Unary(operator, self.unary())
        return self.call()

    def call(self):
        expr = self.primary()

        while True:
            if self.match(T.LEFT_PAREN):
                expr = self.finish_call(expr)
            elif self.match(T.DOT):
                name = self.consume(T.IDENTIFIER, "Expect property name after '.'.")
                expr = Get(expr, name)
            else:
                break

        return expr

    def finish_call(self, callee):
        arguments = []
        if not self.check(T.RIGHT_PAREN):
            while True:
                if len(arguments) >= Parser.MAX_ARGS:
                    self.error(self.peek(), f"Can't have more than {Parser.MAX_ARGS} arguments.")
                arguments.append(self.assignment())
                if not self.match(T.COMMA):
                    break

        paren = self.consume(T.RIGHT_PAREN, "Expect ')' after arguments.")
        return Call(callee, paren, tuple(arguments))

    def primary(self):
        if self.match(T.FALSE):
            return Literal(False)
        if self.match(T.TRUE):
            return Literal(True)
        if self.match(T.NIL):
            return Literal(None)
        if self.match(T.NUMBER, T.STRING):
            return Literal(self.previous().literal)

        if self.match(T.THIS):
            return This(self.previous())
        if self.match(T.SUPER):
            keyword = self.previous()
            self.consume(T.DOT, "Expect '.' after 'super'.")
            return Super(keyword, self.consume(T.IDENTIFIER, "Expect superclass method name."))
        if self.match(T.IDENTIFIER):
            return Variable(self.previous())

        if self.match(T.FUN):
            keyword = self.previous()
            self.consume(T.LEFT_PAREN, "Expect '(' after 'fun'.")
            params, body = self.function_body("function")
            return AnonymousFunction(keyword, params, body)

        if self.match(T.LEFT_PAREN):
            expr = self.expression()
            self.consume(T.RIGHT_PAREN, "Expect ')' after expression.")
            return Grouping(expr)

        if self.peek().kind in Parser.RIGHT_OPERAND or self.check(T.QUESTION):
            return self.missing_left_operand()

        raise self.error(self.peek(), "Expect expression.")

    def missing_left_operand(self):
        """Reports a binary operator with nothing on its left, then parses and discards what would have been its right
        operand so that the rest of the statement parses as usual. The returned placeholder never reaches the
        interpreter because the enclosing declaration is dropped.
        """
        operator = self.advance()
        self.error(operator, f"Binary operator '{operator.lexeme}' appears without a left-hand operand.")

        if operator.kind is T.QUESTION:
            self.expression()
            self.consume(T.COLON, "Expect ':' after then branch of conditional expression.")
            self.conditional()
        else:
            getattr(self, Parser.RIGHT_OPERAND[operator.kind])()

        return Literal(None)

    def _left_assoc(self, node, operand, *kinds):
        """Parses operand ( kinds operand )*, folding to the left into node."""
        expr = operand()
        while self.match(*kinds):
            operator = self.previous()
            right = operand()
            expr = node(expr, operator, right)
        return expr

    # -----------------------------------------------------------------------------------------------------------------
    # token stream

    def synchronize(self):
        """Discards tokens until just after a ';' or just before a keyword that starts a statement."""
        while not self.is_at_end:
            if self.peek().kind in Parser.SYNC:
                return
            if self.advance().kind is T.SEMICOLON:
                return

    def match(self, *kinds):
        for kind in kinds:
            if self.check(kind):
                self.advance()
                return True
        return False

    def check(self, kind):
        if self.is_at_end:
            return False
        return self.peek().kind is kind

    def check_next(self, kind):
        if self.current + 1 >= len(self.tokens):
            return False
        return self.tokens[self.current + 1].kind is kind

    def consume(self, kind, message):
        if self.check(kind):
            return self.advance()
        raise self.error(self.peek(), message)

    def advance(self):
        if not self.is_at_end:
            self.current += 1
        return self.previous()

    @property
    def is_at_end(self):
        return self.peek().kind is T.EOF

    def peek(self):
        return self.tokens[self.current]

    def previous(self):
        return self.tokens[self.current - 1]

    def error(self, token, message):
        """Records and reports a syntax error at token. Returns the error so callers can raise it to unwind."""
        error = ParseError(message, token)
        self.errors.append(error)
        if self.on_error is not None:
            self.on_error(error)
        return error


def parse(tokens, on_error=None):
    """Returns (statements, had_error) for tokens."""
    parser = Parser(tokens, on_error)
    statements = parser.parse()
    return statements, bool(parser.errors)
