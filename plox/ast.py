"""Abstract Syntax Tree (AST) definitions for the Lox language.

The AST classes defined in this module represent the syntactic structure
of parsed Lox programs. There are two closed families of nodes: `Expr`
variants, which evaluate to a value, and `Stmt` variants, which are
executed for their effect. Each node owns its children; the tree has no
sharing and no cycles.

The interpreter dispatches over the node classes directly. Other consumers
(tree printers, linters) use `accept`, which calls the visitor method named
after the node, e.g. `visit_binary` for `Binary` or `visit_while_stmt` for
`WhileStmt`. Visitors must not mutate the tree.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, List, Optional

from .tokens import Token


@dataclass
class Node:
    """Base class for all AST nodes."""
    visit_name: ClassVar[str] = 'node'

    def accept(self, visitor: Any) -> Any:
        return getattr(visitor, 'visit_' + self.visit_name)(self)


@dataclass
class Expr(Node):
    pass


@dataclass
class Stmt(Node):
    pass


# Expressions

@dataclass
class Literal(Expr):
    visit_name: ClassVar[str] = 'literal'
    value: Any


@dataclass
class Grouping(Expr):
    visit_name: ClassVar[str] = 'grouping'
    expression: Expr


@dataclass
class Unary(Expr):
    visit_name: ClassVar[str] = 'unary'
    operator: Token
    right: Expr


@dataclass
class Binary(Expr):
    visit_name: ClassVar[str] = 'binary'
    left: Expr
    operator: Token
    right: Expr


@dataclass
class Logical(Expr):
    """Short-circuiting `and` / `or`."""
    visit_name: ClassVar[str] = 'logical'
    left: Expr
    operator: Token
    right: Expr


@dataclass
class Variable(Expr):
    visit_name: ClassVar[str] = 'variable'
    name: Token


@dataclass
class Assign(Expr):
    visit_name: ClassVar[str] = 'assign'
    name: Token
    value: Expr


@dataclass
class Call(Expr):
    visit_name: ClassVar[str] = 'call'
    callee: Expr
    paren: Token  # closing ')' used to locate call errors
    arguments: List[Expr]


# Statements

@dataclass
class ExpressionStmt(Stmt):
    visit_name: ClassVar[str] = 'expression_stmt'
    expression: Expr


@dataclass
class PrintStmt(Stmt):
    visit_name: ClassVar[str] = 'print_stmt'
    expression: Expr


@dataclass
class VarStmt(Stmt):
    visit_name: ClassVar[str] = 'var_stmt'
    name: Token
    initializer: Optional[Expr]


@dataclass
class BlockStmt(Stmt):
    visit_name: ClassVar[str] = 'block_stmt'
    statements: List[Stmt]


@dataclass
class IfStmt(Stmt):
    visit_name: ClassVar[str] = 'if_stmt'
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]


@dataclass
class WhileStmt(Stmt):
    visit_name: ClassVar[str] = 'while_stmt'
    condition: Expr
    body: Stmt
    # `while` or `for` keyword the loop came from; locates step-limit faults
    keyword: Optional[Token] = None


@dataclass
class FunctionStmt(Stmt):
    visit_name: ClassVar[str] = 'function_stmt'
    name: Token
    params: List[Token]
    body: List[Stmt]


@dataclass
class ReturnStmt(Stmt):
    visit_name: ClassVar[str] = 'return_stmt'
    value: Optional[Expr]
