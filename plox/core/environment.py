"""Variable scopes. Environments form a chain from the innermost active scope out to the globals."""

from plox.lang.error import LoxRuntimeError


class Environment:
    """A single scope. A closure keeps a reference to the environment it was created in, so an environment lives as
    long as the longest-lived block, call or function value that refers to it.
    """

    def __init__(self, enclosing=None):
        self.enclosing = enclosing
        self.values = {}

    def define(self, name, value):
        """Binds name in this scope only, overwriting any existing binding here."""
        self.values[name] = value

    def get(self, name):
        """Returns the value bound to token name in the nearest scope that defines it."""
        environment = self
        while environment is not None:
            if name.lexeme in environment.values:
                return environment.values[name.lexeme]
            environment = environment.enclosing

        raise LoxRuntimeError(f"Undefined variable '{name.lexeme}'.", name)

    def assign(self, name, value):
        """Rebinds token name in the nearest scope that defines it. Never creates a binding."""
        environment = self
        while environment is not None:
            if name.lexeme in environment.values:
                environment.values[name.lexeme] = value
                return
            environment = environment.enclosing

        raise LoxRuntimeError(f"Undefined variable '{name.lexeme}'.", name)

    def __contains__(self, name):
        return name in self.values

    def __repr__(self):
        depth = 0
        environment = self.enclosing
        while environment is not None:
            depth += 1
            environment = environment.enclosing
        return f"Environment(depth={depth}, names={sorted(self.values)})"
