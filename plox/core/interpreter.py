"""Tree-walking interpreter.

Expressions evaluate to Lox values, which are plain Python objects:

```
nil      -> None
boolean  -> bool
number   -> float
string   -> str
function -> LoxCallable
```

Statements execute to a Completion. Completions are how return/break/continue travel: a Block stops at the first
abrupt completion and hands it to its parent, a loop absorbs BREAK and CONTINUE, and a function call absorbs RETURN.
Parsing guarantees break/continue only appear inside loops and return only inside functions, so none of them can get
past the construct that absorbs them.

Runtime errors are exceptions (LoxRuntimeError), raised where they are detected and caught once, in interpret.
"""

import sys
from dataclasses import dataclass
from enum import Enum, auto

from plox.core.callable import NATIVES, LoxCallable, LoxFunction
from plox.core.environment import Environment
from plox.core.syntax import Assign, Expression
from plox.core.tokens import TokenType
from plox.lang.error import LoxRuntimeError, UnsupportedFeature


T = TokenType


class CompletionKind(Enum):
    NORMAL = auto()
    RETURN = auto()
    BREAK = auto()
    CONTINUE = auto()


@dataclass(frozen=True)
class Completion:
    """How a statement finished. value is only meaningful for RETURN."""
    kind: CompletionKind
    value: object = None

    @property
    def abrupt(self):
        return self.kind is not CompletionKind.NORMAL

    @property
    def returned(self):
        return self.kind is CompletionKind.RETURN


NORMAL = Completion(CompletionKind.NORMAL)
BREAK = Completion(CompletionKind.BREAK)
CONTINUE = Completion(CompletionKind.CONTINUE)


def is_truthy(value):
    """nil and false are falsy, everything else (0 and "" included) is truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def type_name(value):
    """Lox name of value's runtime type."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, LoxCallable):
        return "function"
    return "object"


def is_equal(left, right):
    """No coercion: values of different types are never equal, and nil only equals nil."""
    if left is None:
        return right is None
    return type_name(left) == type_name(right) and left == right


def char_sum(string):
    """Strings are ordered by the sum of their character codes, not lexicographically."""
    return sum(ord(char) for char in string)


def stringify(value):
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        if float(value).is_integer():
            return str(int(value))
        return repr(float(value))
    return str(value)


class Interpreter:
    """Executes statements against a persistent global environment, so that state survives between calls to interpret
    (e.g. REPL lines). out is the print sink, on_error receives runtime errors.
    """
    COMPARISONS = {
        T.GREATER: lambda left, right: left > right,
        T.GREATER_EQUAL: lambda left, right: left >= right,
        T.LESS: lambda left, right: left < right,
        T.LESS_EQUAL: lambda left, right: left <= right,
    }

    RECURSION_LIMIT = 10000  # host frames; one Lox call takes about eight

    def __init__(self, out=None, on_error=None):
        self.out = out
        self.on_error = on_error

        self.globals = Environment()
        for native in NATIVES:
            self.globals.define(native.name, native)
        self.environment = self.globals

    def interpret(self, statements, echo=False):
        """Executes statements in order. Stops at the first runtime error, which is passed to on_error. If echo, the
        value of every top-level expression statement (assignments aside) is printed.
        """
        if sys.getrecursionlimit() < Interpreter.RECURSION_LIMIT:
            sys.setrecursionlimit(Interpreter.RECURSION_LIMIT)

        try:
            for statement in statements:
                if echo and isinstance(statement, Expression) and not isinstance(statement.expression, Assign):
                    self.print(stringify(self.evaluate(statement.expression)))
                else:
                    self.execute(statement)
        except LoxRuntimeError as error:
            if self.on_error is None:
                raise
            self.on_error(error)

    def print(self, text):
        out = self.out if self.out is not None else sys.stdout
        out.write(text + "\n")

    # -----------------------------------------------------------------------------------------------------------------
    # statements

    def execute(self, statement):
        return getattr(self, f"_exec_{statement.kind}")(statement)

    def execute_block(self, statements, environment):
        """Executes statements in environment and restores the current environment afterwards, however the block
        completes.
        """
        previous = self.environment
        self.environment = environment
        try:
            for statement in statements:
                completion = self.execute(statement)
                if completion.abrupt:
                    return completion
            return NORMAL
        finally:
            self.environment = previous

    def _exec_expression(self, stmt):
        self.evaluate(stmt.expression)
        return NORMAL

    def _exec_print(self, stmt):
        self.print(stringify(self.evaluate(stmt.expression)))
        return NORMAL

    def _exec_let(self, stmt):
        value = None
        if stmt.initializer is not None:
            value = self.evaluate(stmt.initializer)
        self.environment.define(stmt.name.lexeme, value)
        return NORMAL

    def _exec_block(self, stmt):
        return self.execute_block(stmt.statements, Environment(self.environment))

    def _exec_if(self, stmt):
        if is_truthy(self.evaluate(stmt.condition)):
            return self.execute(stmt.then_branch)
        if stmt.else_branch is not None:
            return self.execute(stmt.else_branch)
        return NORMAL

    def _exec_while(self, stmt):
        while is_truthy(self.evaluate(stmt.condition)):
            completion = self.execute(stmt.body)
            if completion.kind is CompletionKind.BREAK:
                break
            if completion.returned:
                return completion
            # NORMAL or CONTINUE
            if stmt.increment is not None:
                self.evaluate(stmt.increment)
        return NORMAL

    def _exec_break(self, stmt):
        return BREAK

    def _exec_continue(self, stmt):
        return CONTINUE

    def _exec_function(self, stmt):
        self.environment.define(stmt.name.lexeme, LoxFunction(stmt, self.environment))
        return NORMAL

    def _exec_return(self, stmt):
        value = None
        if stmt.value is not None:
            value = self.evaluate(stmt.value)
        return Completion(CompletionKind.RETURN, value)

    def _exec_class(self, stmt):
        raise UnsupportedFeature("Classes are not implemented.", stmt.name)

    # -----------------------------------------------------------------------------------------------------------------
    # expressions

    def evaluate(self, expr):
        return getattr(self, f"_eval_{expr.kind}")(expr)

    def _eval_literal(self, expr):
        return expr.value

    def _eval_grouping(self, expr):
        return self.evaluate(expr.expression)

    def _eval_variable(self, expr):
        return self.environment.get(expr.name)

    def _eval_assign(self, expr):
        value = self.evaluate(expr.value)
        self.environment.assign(expr.name, value)
        return value

    def _eval_unary(self, expr):
        right = self.evaluate(expr.right)

        if expr.operator.kind is T.BANG:
            return not is_truthy(right)

        Interpreter.check_number_operands(expr.operator, right, message="Operand must be a number.")
        return -right

    def _eval_binary(self, expr):
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        operator = expr.operator

        if operator.kind is T.EQUAL_EQUAL:
            return is_equal(left, right)
        if operator.kind is T.BANG_EQUAL:
            return not is_equal(left, right)

        if operator.kind in Interpreter.COMPARISONS:
            return Interpreter.compare(operator, left, right)

        if operator.kind is T.PLUS:
            if is_number(left) and is_number(right):
                return left + right
            if isinstance(left, str) or isinstance(right, str):
                return stringify(left) + stringify(right)
            raise LoxRuntimeError("Operands must be two numbers or two strings.", operator)

        Interpreter.check_number_operands(operator, left, right)
        if operator.kind is T.MINUS:
            return left - right
        if operator.kind is T.STAR:
            return left * right
        if right == 0:
            raise LoxRuntimeError("Division by zero is not allowed.", operator)
        return left / right

    def _eval_logical(self, expr):
        left = self.evaluate(expr.left)

        if expr.operator.kind is T.OR:
            if is_truthy(left):
                return left
        elif not is_truthy(left):
            return left

        return self.evaluate(expr.right)

    def _eval_conditional(self, expr):
        if is_truthy(self.evaluate(expr.condition)):
            return self.evaluate(expr.then_branch)
        return self.evaluate(expr.else_branch)

    def _eval_comma(self, expr):
        self.evaluate(expr.left)
        return self.evaluate(expr.right)

    def _eval_call(self, expr):
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError("Can only call functions and classes.", expr.paren)
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(f"Expected {callee.arity()} arguments but got {len(arguments)}.", expr.paren)

        return callee.call(self, arguments)

    def _eval_anonymous_function(self, expr):
        return LoxFunction(expr, self.environment)

    def _eval_get(self, expr):
        raise UnsupportedFeature("Property access is not implemented.", expr.name)

    def _eval_set(self, expr):
        raise UnsupportedFeature("Property assignment is not implemented.", expr.name)

    def _eval_this(self, expr):
        raise UnsupportedFeature("'this' is not implemented.", expr.keyword)

    def _eval_super(self, expr):
        raise UnsupportedFeature("'super' is not implemented.", expr.keyword)

    # -----------------------------------------------------------------------------------------------------------------
    # operand checks

    @staticmethod
    def check_number_operands(operator, *operands, message="Operands must be numbers."):
        if not all(is_number(operand) for operand in operands):
            raise LoxRuntimeError(message, operator)

    @staticmethod
    def compare(operator, left, right):
        """Ordering: both operands must have the same type. Numbers compare numerically, strings by char_sum."""
        if type_name(left) != type_name(right):
            raise LoxRuntimeError("Operands must be of the same type for comparison.", operator)

        if is_number(left):
            return Interpreter.COMPARISONS[operator.kind](left, right)
        if isinstance(left, str):
            return Interpreter.COMPARISONS[operator.kind](char_sum(left), char_sum(right))

        raise LoxRuntimeError("Comparison operators are only supported for numbers and strings.", operator)
