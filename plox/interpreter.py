"""Tree-walking interpreter for the Lox language.

The interpreter executes statements directly from the AST. It keeps one
active `Environment`; blocks and function calls swap in a child scope and
restore the previous one on every exit path. Statement execution returns
a completion: None for normal completion, or a `Returning` carrying the
value of a `return` statement, which callers pass outward until the
enclosing function call consumes it.

A runtime fault raises `LoxRuntimeError`; `interpret` stops the whole run
at the first one and hands it back to the caller.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

from .ast import (
    Assign, Binary, BlockStmt, Call, Expr, ExpressionStmt, FunctionStmt,
    Grouping, IfStmt, Literal, Logical, PrintStmt, ReturnStmt, Stmt, Unary,
    Variable, VarStmt, WhileStmt,
)
from .callables import LoxCallable, UserFunction
from .environment import Environment
from .errors import LoxError, LoxRuntimeError
from .parser import parse_program
from .std import populate_std_environment
from .tokens import Token, TokenType
from .types import is_equal, is_number, is_truthy, to_number, to_string, type_name

# Each Lox call takes about five Python frames.
RECURSION_LIMIT = 10000


@dataclass(frozen=True)
class Returning:
    """Completion of a statement that executed `return`."""
    value: Any


class Interpreter:
    """Core interpreter that executes Lox statements."""
    def __init__(self, debug_level: int = 0, debug_file: Optional[str] = 'debug.txt',
                 max_steps: Optional[int] = None):
        self.globals = populate_std_environment(Environment())
        self.environment = self.globals
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w') if debug_level > 0 and debug_file else None
        self.max_steps = max_steps
        self.steps = 0
        # Line of the most recent token reached; step-limit faults report it.
        self.line = 0
        sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg, file=sys.stderr)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    def interpret(self, statements: List[Stmt]) -> Optional[LoxRuntimeError]:
        """Execute top-level statements in order.

        Returns None when the program ran to completion, or the runtime error
        that stopped it.
        """
        try:
            for stmt in statements:
                if self.execute(stmt) is not None:
                    break
        except LoxRuntimeError as err:
            if self.debug_level >= 1:
                self.debug(f"runtime error at line {err.line}: {err.message}")
            return err
        return None

    def tick(self):
        """Count one executed statement or loop check against `max_steps`."""
        self.steps += 1
        if self.max_steps is not None and self.steps > self.max_steps:
            raise LoxRuntimeError(Token(TokenType.EOF, '', None, self.line),
                                  f"Step limit of {self.max_steps} exceeded.")

    # Statements

    def execute(self, stmt: Stmt) -> Optional[Returning]:
        self.tick()
        if isinstance(stmt, ExpressionStmt):
            self.evaluate(stmt.expression)
            return None
        if isinstance(stmt, PrintStmt):
            value = self.evaluate(stmt.expression)
            print(to_string(value))
            return None
        if isinstance(stmt, VarStmt):
            self.line = stmt.name.line
            value = self.evaluate(stmt.initializer) if stmt.initializer is not None else None
            self.environment.define(stmt.name.lexeme, value)
            if self.debug_level >= 2:
                self.debug(f"declare {stmt.name.lexeme}: {type_name(value)} = {to_string(value)}")
            return None
        if isinstance(stmt, BlockStmt):
            return self.execute_block(stmt.statements, Environment(self.environment))
        if isinstance(stmt, IfStmt):
            cond = self.evaluate(stmt.condition)
            truthy = is_truthy(cond)
            if self.debug_level >= 3:
                self.debug(f"if condition {to_string(cond)} -> {to_string(truthy)}")
            if truthy:
                return self.execute(stmt.then_branch)
            if stmt.else_branch is not None:
                return self.execute(stmt.else_branch)
            return None
        if isinstance(stmt, WhileStmt):
            while True:
                if stmt.keyword is not None:
                    self.line = stmt.keyword.line
                cond = self.evaluate(stmt.condition)
                if self.debug_level >= 3:
                    self.debug(f"while condition {to_string(cond)} -> {to_string(is_truthy(cond))}")
                if not is_truthy(cond):
                    break
                result = self.execute(stmt.body)
                if result is not None:
                    return result
                self.tick()
            return None
        if isinstance(stmt, FunctionStmt):
            self.line = stmt.name.line
            function = UserFunction(stmt, self.environment)
            self.environment.define(stmt.name.lexeme, function)
            if self.debug_level >= 2:
                self.debug(f"define function {stmt.name.lexeme}/{function.arity()}")
            return None
        if isinstance(stmt, ReturnStmt):
            value = self.evaluate(stmt.value) if stmt.value is not None else None
            return Returning(value)
        raise NotImplementedError(f"execute: unexpected node type {type(stmt).__name__}")

    def execute_block(self, statements: List[Stmt], environment: Environment) -> Optional[Returning]:
        previous = self.environment
        if self.debug_level >= 3:
            self.debug(f"enter scope depth {environment.depth()}")
        try:
            self.environment = environment
            for stmt in statements:
                result = self.execute(stmt)
                if result is not None:
                    return result
            return None
        finally:
            self.environment = previous
            if self.debug_level >= 3:
                self.debug(f"leave scope depth {environment.depth()}")

    # Expressions

    def evaluate(self, expr: Expr) -> Any:
        if isinstance(expr, Literal):
            return expr.value
        if isinstance(expr, Grouping):
            return self.evaluate(expr.expression)
        if isinstance(expr, Variable):
            self.line = expr.name.line
            return self.environment.get(expr.name)
        if isinstance(expr, Assign):
            value = self.evaluate(expr.value)
            self.line = expr.name.line
            self.environment.assign(expr.name, value)
            return value
        if isinstance(expr, Logical):
            left = self.evaluate(expr.left)
            if expr.operator.type == TokenType.OR:
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.evaluate(expr.right)
        if isinstance(expr, Unary):
            right = self.evaluate(expr.right)
            if expr.operator.type == TokenType.MINUS:
                self.check_number_operand(expr.operator, right)
                return -right
            if expr.operator.type == TokenType.BANG:
                return not is_truthy(right)
            raise NotImplementedError(f"unary operator {expr.operator.lexeme}")
        if isinstance(expr, Binary):
            left = self.evaluate(expr.left)
            right = self.evaluate(expr.right)
            self.line = expr.operator.line
            return self.apply_binary_op(expr.operator, left, right)
        if isinstance(expr, Call):
            callee = self.evaluate(expr.callee)
            arguments = [self.evaluate(arg) for arg in expr.arguments]
            self.line = expr.paren.line
            return self.call_function(callee, arguments, expr.paren)
        raise NotImplementedError(f"evaluate: unexpected node type {type(expr).__name__}")

    def call_function(self, callee: Any, arguments: List[Any], paren: Token) -> Any:
        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(paren, 'Can only call functions and classes.')
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(
                paren, f"Expected {callee.arity()} arguments but got {len(arguments)}.")
        if self.debug_level >= 1:
            self.debug(f"call {callee} with {len(arguments)} argument(s) at line {paren.line}")
        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(paren, 'Stack overflow.') from None

    def apply_binary_op(self, operator: Token, left: Any, right: Any) -> Any:
        op = operator.type
        if op == TokenType.PLUS:
            # Numeric whenever either side is a number.
            if is_number(left) or is_number(right):
                return to_number(left) + to_number(right)
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise LoxRuntimeError(operator, 'Operands must be two numbers or two strings.')
        if op == TokenType.EQUAL_EQUAL:
            return is_equal(left, right)
        if op == TokenType.BANG_EQUAL:
            return not is_equal(left, right)

        self.check_number_operands(operator, left, right)
        if op == TokenType.MINUS:
            return left - right
        if op == TokenType.STAR:
            return left * right
        if op == TokenType.SLASH:
            if right == 0:
                raise LoxRuntimeError(operator, 'Unable to divide by zero.')
            return left / right
        if op == TokenType.GREATER:
            return left > right
        if op == TokenType.GREATER_EQUAL:
            return left >= right
        if op == TokenType.LESS:
            return left < right
        if op == TokenType.LESS_EQUAL:
            return left <= right
        raise NotImplementedError(f"binary operator {operator.lexeme}")

    def check_number_operand(self, operator: Token, operand: Any):
        if is_number(operand):
            return
        raise LoxRuntimeError(operator, 'Operand must be a number.')

    def check_number_operands(self, operator: Token, left: Any, right: Any):
        if is_number(left) and is_number(right):
            return
        raise LoxRuntimeError(operator, 'Operands must be numbers.')


@dataclass
class RunResult:
    """Outcome of running a program: lexical/syntax errors or the runtime fault."""
    errors: List[LoxError] = field(default_factory=list)
    runtime_error: Optional[LoxRuntimeError] = None

    @property
    def had_error(self) -> bool:
        return bool(self.errors)

    @property
    def had_runtime_error(self) -> bool:
        return self.runtime_error is not None


def run_program(source: str, debug_level: int = 0, debug_file: Optional[str] = 'debug.txt',
                max_steps: Optional[int] = None) -> RunResult:
    """Scan, parse and run a Lox program from a source string.

    Nothing is executed when the source has lexical or syntax errors.
    """
    statements, errors = parse_program(source)
    if errors:
        return RunResult(errors=errors)
    interpreter = Interpreter(debug_level=debug_level, debug_file=debug_file, max_steps=max_steps)
    try:
        runtime_error = interpreter.interpret(statements)
    finally:
        interpreter.close()
    return RunResult(runtime_error=runtime_error)


def run_file(file_path: str, debug_level: int = 0, debug_file: Optional[str] = 'debug.txt',
             max_steps: Optional[int] = None) -> RunResult:
    """Read a Lox file and run it."""
    source = Path(file_path).read_text(encoding='utf-8')
    return run_program(source, debug_level=debug_level, debug_file=debug_file, max_steps=max_steps)
