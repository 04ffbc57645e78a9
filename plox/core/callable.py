"""Values that a call expression can be applied to."""

import time
from abc import ABC, abstractmethod

from plox.core.environment import Environment


class LoxCallable(ABC):
    """Anything the interpreter can call. Arguments have already been evaluated and counted against arity."""

    @abstractmethod
    def arity(self):
        """Number of arguments this callable expects."""

    @abstractmethod
    def call(self, interpreter, arguments):
        """Calls this callable with arguments and returns the result."""


class LoxFunction(LoxCallable):
    """User-defined function: a declaration (Function statement or AnonymousFunction expression) paired with the
    environment that was active when it was evaluated.
    """

    def __init__(self, declaration, closure):
        self.declaration = declaration
        self.closure = closure

    @property
    def name(self):
        name = getattr(self.declaration, "name", None)
        return name.lexeme if name is not None else None

    def arity(self):
        return len(self.declaration.params)

    def call(self, interpreter, arguments):
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        completion = interpreter.execute_block(self.declaration.body, environment)
        return completion.value if completion.returned else None

    def __str__(self):
        return f"<fn {self.name or 'anonymous'}>"

    def __repr__(self):
        return f"LoxFunction({self.name or 'anonymous'}, arity={self.arity()})"


class NativeFunction(LoxCallable):
    """Function implemented in Python. impl receives the arguments positionally."""

    def __init__(self, name, arity, impl):
        self.name = name
        self._arity = arity
        self.impl = impl

    def arity(self):
        return self._arity

    def call(self, interpreter, arguments):
        return self.impl(*arguments)

    def __str__(self):
        return f"<native fn {self.name}>"

    def __repr__(self):
        return f"NativeFunction({self.name}, arity={self._arity})"


def clock():
    """Seconds since the epoch, as a Lox number."""
    return float(time.time())


NATIVES = [
    NativeFunction("clock", 0, clock),
]
