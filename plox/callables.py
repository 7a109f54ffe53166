from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, List

from plox.ast import FunctionStmt
from plox.environment import Environment

if TYPE_CHECKING:
    from plox.interpreter import Interpreter


class LoxCallable:
    """Anything that can appear as the callee of a call expression."""
    def arity(self) -> int:
        raise NotImplementedError

    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        raise NotImplementedError


@dataclass(eq=False)
class NativeFunction(LoxCallable):
    name: str
    n_args: int
    fn: Callable[..., Any]

    def arity(self) -> int:
        return self.n_args

    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        return self.fn(*arguments)

    def __str__(self) -> str:
        return '<native fn>'


class UserFunction(LoxCallable):
    """A function declared in Lox source, closing over its defining scope."""
    def __init__(self, declaration: FunctionStmt, closure: Environment):
        self.declaration = declaration
        self.closure = closure

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)
        result = interpreter.execute_block(self.declaration.body, environment)
        if result is not None:
            return result.value
        return None

    def __str__(self) -> str:
        return f"<fn {self.declaration.name.lexeme}>"

    def __repr__(self) -> str:
        return f"<function {self.declaration.name.lexeme}>"
