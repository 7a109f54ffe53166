"""Declarative Lox parser built on Lark.

This module states the Lox grammar in Lark's EBNF and transforms the parse
tree into the same AST dataclasses the recursive-descent parser produces,
including the desugaring of `for` loops. It is a strict checker: there is
no error recovery, and the first syntax error is raised as a `ParseError`.

Keywords and operators that must survive into the AST (`and`, `or`,
`for`, `while`, literals, operators) are named terminals whose names match
`TokenType` members, so `__default_token__` can turn every kept Lark token
into a `Token`. Pure punctuation and statement keywords stay anonymous and are
filtered out of the tree.

Lark's contextual lexer will read a reserved word as an identifier where
only an identifier can follow, and the grammar cannot tell whether a
`return` sits inside a function, so both are checked on the parse tree
before it is transformed.
"""

from __future__ import annotations

from typing import List

from lark import Lark, Token as LarkToken, Transformer, Tree, v_args
from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken, VisitError
from lark.visitors import Interpreter as TreeWalker

from .ast import (
    Assign, Binary, BlockStmt, Call, ExpressionStmt, FunctionStmt, Grouping,
    IfStmt, Literal, Logical, PrintStmt, ReturnStmt, Stmt, Unary, Variable,
    VarStmt, WhileStmt,
)
from .errors import ParseError
from .parser import desugar_for
from .tokens import KEYWORDS, Token, TokenType


LOX_GRAMMAR = r"""
    start: declaration*

    ?declaration: fun_decl
                | var_decl
                | statement

    fun_decl: "fun" IDENTIFIER "(" [parameters] ")" block
    parameters: IDENTIFIER ("," IDENTIFIER)*
    var_decl: "var" IDENTIFIER ["=" expression] ";"

    ?statement: expr_stmt
              | for_stmt
              | if_stmt
              | print_stmt
              | return_stmt
              | while_stmt
              | block

    expr_stmt: expression ";"
    for_stmt: FOR "(" for_init [expression] ";" [expression] ")" statement
    for_init: var_decl | expr_stmt | ";"
    if_stmt: "if" "(" expression ")" statement ["else" statement]
    print_stmt: "print" expression ";"
    return_stmt: "return" [expression] ";"
    while_stmt: WHILE "(" expression ")" statement
    block: "{" declaration* "}"

    ?expression: assignment
    ?assignment: IDENTIFIER "=" assignment -> assign
               | logic_or
    ?logic_or: logic_and (OR logic_and)*
    ?logic_and: equality (AND equality)*
    ?equality: comparison ((BANG_EQUAL | EQUAL_EQUAL) comparison)*
    ?comparison: term ((GREATER | GREATER_EQUAL | LESS | LESS_EQUAL) term)*
    ?term: factor ((MINUS | PLUS) factor)*
    ?factor: unary ((SLASH | STAR) unary)*
    ?unary: (BANG | MINUS) unary -> unary_expr
          | call
    ?call: primary
         | call "(" [arguments] ")" -> call_expr
    arguments: expression ("," expression)*
    ?primary: NUMBER -> literal
            | STRING -> literal
            | TRUE -> literal
            | FALSE -> literal
            | NIL -> literal
            | IDENTIFIER -> variable
            | "(" expression ")" -> grouping

    FOR: "for"
    WHILE: "while"
    OR: "or"
    AND: "and"
    TRUE: "true"
    FALSE: "false"
    NIL: "nil"

    BANG_EQUAL: "!="
    EQUAL_EQUAL: "=="
    GREATER_EQUAL: ">="
    LESS_EQUAL: "<="
    GREATER: ">"
    LESS: "<"
    BANG: "!"
    MINUS: "-"
    PLUS: "+"
    SLASH: "/"
    STAR: "*"

    NUMBER: /[0-9]+(\.[0-9]+)?/
    STRING: /"[^"]*"/
    IDENTIFIER: /[A-Za-z_][A-Za-z0-9_]*/

    COMMENT: /\/\/[^\n]*/
    %ignore COMMENT
    %ignore /[ \t\r\n]+/
"""


LOX_PARSER = Lark(
    LOX_GRAMMAR,
    parser='lalr',
    propagate_positions=True,
    maybe_placeholders=True,
)


class ASTTransformer(Transformer):
    """Transforms the Lark parse tree into Lox AST nodes."""

    def __default_token__(self, token):
        if token.type == 'NUMBER':
            return Token(TokenType.NUMBER, str(token), float(token), token.line)
        if token.type == 'STRING':
            return Token(TokenType.STRING, str(token), str(token)[1:-1], token.line)
        return Token(TokenType[token.type], str(token), None, token.line)

    def start(self, items) -> List[Stmt]:
        return list(items)

    # Declarations and statements

    def fun_decl(self, items):
        name, params, body = items
        return FunctionStmt(name, params or [], body.statements)

    def parameters(self, items):
        return list(items)

    def var_decl(self, items):
        name, initializer = items
        return VarStmt(name, initializer)

    def expr_stmt(self, items):
        return ExpressionStmt(items[0])

    def for_init(self, items):
        return items[0] if items else None

    def for_stmt(self, items):
        keyword, initializer, condition, increment, body = items
        return desugar_for(initializer, condition, increment, body, keyword)

    def if_stmt(self, items):
        condition, then_branch, else_branch = items
        return IfStmt(condition, then_branch, else_branch)

    def print_stmt(self, items):
        return PrintStmt(items[0])

    def return_stmt(self, items):
        return ReturnStmt(items[0])

    def while_stmt(self, items):
        keyword, condition, body = items
        return WhileStmt(condition, body, keyword)

    def block(self, items):
        return BlockStmt(list(items))

    # Expressions

    def assign(self, items):
        name, value = items
        return Assign(name, value)

    def _binary_chain(self, items, node_type):
        left = items[0]
        for i in range(1, len(items), 2):
            left = node_type(left, items[i], items[i + 1])
        return left

    def logic_or(self, items):
        return self._binary_chain(items, Logical)

    def logic_and(self, items):
        return self._binary_chain(items, Logical)

    def equality(self, items):
        return self._binary_chain(items, Binary)

    def comparison(self, items):
        return self._binary_chain(items, Binary)

    def term(self, items):
        return self._binary_chain(items, Binary)

    def factor(self, items):
        return self._binary_chain(items, Binary)

    def unary_expr(self, items):
        operator, right = items
        return Unary(operator, right)

    @v_args(meta=True)
    def call_expr(self, meta, items):
        callee, arguments = items
        # The closing parenthesis is the last character of the call.
        paren = Token(TokenType.RIGHT_PAREN, ')', None, meta.end_line)
        return Call(callee, paren, arguments or [])

    def arguments(self, items):
        return list(items)

    def literal(self, items):
        token = items[0]
        if token.type == TokenType.TRUE:
            return Literal(True)
        if token.type == TokenType.FALSE:
            return Literal(False)
        if token.type == TokenType.NIL:
            return Literal(None)
        return Literal(token.literal)

    def variable(self, items):
        return Variable(items[0])

    def grouping(self, items):
        return Grouping(items[0])


class TopLevelReturnCheck(TreeWalker):
    """Rejects a `return` that is not inside any function body."""

    def fun_decl(self, tree):
        return None

    def return_stmt(self, tree):
        keyword = Token(TokenType.RETURN, 'return', None, tree.meta.line)
        raise ParseError("Can't return from top-level code.", keyword)


def check_reserved_words(tree: Tree):
    """Raise for the first reserved word the lexer let through as an identifier."""
    reserved = [
        child
        for subtree in tree.iter_subtrees()
        for child in subtree.children
        if isinstance(child, LarkToken) and child.type == 'IDENTIFIER' and str(child) in KEYWORDS
    ]
    if reserved:
        first = min(reserved, key=lambda token: token.start_pos)
        word = str(first)
        raise ParseError('Reserved word used as a name.', Token(KEYWORDS[word], word, None, first.line))


def parse_with_grammar(source: str) -> List[Stmt]:
    """Parse Lox source with the Lark grammar.

    Raises `ParseError` for the first syntax error; there is no recovery.
    Nesting too deep for the host stack is reported as a syntax error, as
    the recursive-descent parser does.
    """
    last_line = source.count('\n') + 1
    try:
        tree = LOX_PARSER.parse(source)
    except UnexpectedToken as e:
        expected = ', '.join(sorted(str(name) for name in e.expected))
        if e.token.type == '$END':
            raise ParseError(f"Unexpected end of input, expected one of {expected}.", line=last_line)
        raise ParseError(f"Unexpected {str(e.token)!r}, expected one of {expected}.", line=e.line)
    except UnexpectedCharacters as e:
        raise ParseError(f"Unexpected character {e.char!r}.", line=e.line)
    except UnexpectedInput as e:
        raise ParseError(str(e), line=last_line)
    check_reserved_words(tree)
    try:
        TopLevelReturnCheck().visit(tree)
        return ASTTransformer().transform(tree)
    except RecursionError:
        raise ParseError('Too much nesting.', line=last_line) from None
    except VisitError as e:
        # Transformer callbacks that fail are wrapped by Lark.
        if isinstance(e.orig_exc, RecursionError):
            raise ParseError('Too much nesting.', line=last_line) from None
        raise
