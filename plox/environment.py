from typing import Any, Dict, Optional

from plox.errors import LoxRuntimeError
from plox.tokens import Token


class Environment:
    """One lexical scope: a mapping of names to values plus a link to the enclosing scope.

    Lookups and assignments walk outward through `enclosing` at run time.
    A child never owns its enclosing scope; the link is only used for lookup.
    """
    def __init__(self, enclosing: Optional['Environment'] = None):
        self.enclosing = enclosing
        self.values: Dict[str, Any] = {}

    def define(self, name: str, value: Any):
        # Redefinition in the same scope is allowed and simply rebinds.
        self.values[name] = value

    def get(self, name: Token) -> Any:
        if name.lexeme in self.values:
            return self.values[name.lexeme]
        if self.enclosing is not None:
            return self.enclosing.get(name)
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name: Token, value: Any):
        if name.lexeme in self.values:
            self.values[name.lexeme] = value
            return
        if self.enclosing is not None:
            self.enclosing.assign(name, value)
            return
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def depth(self) -> int:
        """Number of scopes between this one and the global scope."""
        if self.enclosing is None:
            return 0
        return self.enclosing.depth() + 1
