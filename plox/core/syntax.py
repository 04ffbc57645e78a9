"""Syntax tree produced by the parser and walked by the interpreter.

There are two categories of node, Expr and Stmt, each a closed set of variants. Nodes are frozen dataclasses holding
tuples, so nothing downstream of the parser can change a tree. Nodes carry no scope information: variables are
resolved at run time by walking the environment chain.

Every variant gets a snake_case `kind` (Binary -> "binary", AnonymousFunction -> "anonymous_function"), which the
interpreter uses to pick a handler for it.

The Get, Set, This, Super and Class variants are produced by the parser but are not evaluated.
"""

import re
from dataclasses import dataclass, fields

from plox.core.tokens import Token


class Node:
    """Superclass of all syntax tree nodes."""
    kind = "node"

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls.kind = re.sub(r"(?<!^)(?=[A-Z])", "_", cls.__name__).lower()

    @staticmethod
    def _children(value):
        if isinstance(value, Node):
            return [value]
        if isinstance(value, tuple):
            return [item for item in value if isinstance(item, Node)]
        return []

    def display(self, indents=0):
        """Recursively displays the tree in a readable format.

        Format:
        <Node>(<attr>=<value>, nodes=[
            <Node>(<attr>=<value>, nodes=[
                ...
                <Node>(<attr>=<value>)  # <-- if there are no child nodes
            ])
        ])
        """
        attrs = []
        nodes = []
        for field in fields(self):
            value = getattr(self, field.name)
            children = Node._children(value)
            if children:
                nodes.extend(children)
            elif isinstance(value, Token):
                attrs.append(f"{field.name}='{value.lexeme}'")
            elif isinstance(value, tuple) and value and all(isinstance(item, Token) for item in value):
                attrs.append(f"{field.name}=[{', '.join(item.lexeme for item in value)}]")
            elif field.name == "value" or value not in (None, ()):
                attrs.append(f"{field.name}={value!r}")

        result = f"{'    ' * indents}{type(self).__name__}({', '.join(attrs)}"
        if nodes:
            result += ", nodes=[" if attrs else "nodes=["
            for node in nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    def __str__(self):
        return self.display()


class Expr(Node):
    """Superclass of expression variants. Evaluating an expression produces a value."""


class Stmt(Node):
    """Superclass of statement variants. Executing a statement produces a Completion."""


# ---------------------------------------------------------------------------------------------------------------------
# expressions

@dataclass(frozen=True)
class Literal(Expr):
    value: object


@dataclass(frozen=True)
class Variable(Expr):
    name: Token


@dataclass(frozen=True)
class Assign(Expr):
    name: Token
    value: Expr


@dataclass(frozen=True)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True)
class Logical(Expr):
    """Short-circuiting `and` / `or`."""
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True)
class Unary(Expr):
    operator: Token
    right: Expr


@dataclass(frozen=True)
class Grouping(Expr):
    expression: Expr


@dataclass(frozen=True)
class Conditional(Expr):
    """`condition ? then_branch : else_branch`"""
    condition: Expr
    then_branch: Expr
    else_branch: Expr


@dataclass(frozen=True)
class Comma(Expr):
    """`left, right`: evaluates both, yields right."""
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True)
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, used to locate runtime errors
    arguments: tuple


@dataclass(frozen=True)
class AnonymousFunction(Expr):
    keyword: Token
    params: tuple
    body: tuple


@dataclass(frozen=True)
class Get(Expr):
    obj: Expr
    name: Token


@dataclass(frozen=True)
class Set(Expr):
    obj: Expr
    name: Token
    value: Expr


@dataclass(frozen=True)
class This(Expr):
    keyword: Token


@dataclass(frozen=True)
class Super(Expr):
    keyword: Token
    method: Token


# ---------------------------------------------------------------------------------------------------------------------
# statements

@dataclass(frozen=True)
class Expression(Stmt):
    expression: Expr


@dataclass(frozen=True)
class Print(Stmt):
    expression: Expr


@dataclass(frozen=True)
class Let(Stmt):
    name: Token
    initializer: Expr = None


@dataclass(frozen=True)
class Block(Stmt):
    statements: tuple


@dataclass(frozen=True)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Stmt = None


@dataclass(frozen=True)
class While(Stmt):
    """increment is only set by the `for` desugaring. It runs after every iteration that completes normally or with
    `continue`.
    """
    condition: Expr
    body: Stmt
    increment: Expr = None


@dataclass(frozen=True)
class Break(Stmt):
    keyword: Token


@dataclass(frozen=True)
class Continue(Stmt):
    keyword: Token


@dataclass(frozen=True)
class Function(Stmt):
    name: Token
    params: tuple
    body: tuple


@dataclass(frozen=True)
class Return(Stmt):
    keyword: Token
    value: Expr = None


@dataclass(frozen=True)
class Class(Stmt):
    name: Token
    superclass: Variable = None
    methods: tuple = ()
