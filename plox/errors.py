from typing import Optional

from plox.tokens import Token, TokenType


class LoxError(Exception):
    """Base class for every error reported by the Lox toolchain."""
    def __init__(self, message: str, line: int, text: Optional[str] = None):
        super().__init__(text if text is not None else message)
        self.message = message
        self.line = line


class LexError(LoxError):
    """An unscannable character or an unterminated string."""
    def __init__(self, message: str, line: int):
        super().__init__(message, line, f"[line {line}] Error: {message}")


class ParseError(LoxError):
    """A syntax error, located at the offending token when one is known."""
    def __init__(self, message: str, token: Optional[Token] = None, line: Optional[int] = None):
        if token is not None:
            line = token.line
            where = ' at end' if token.type == TokenType.EOF else f" at '{token.lexeme}'"
        else:
            where = ''
        super().__init__(message, line or 0, f"[line {line}] Error{where}: {message}")
        self.token = token


class LoxRuntimeError(LoxError):
    """A fault raised while evaluating a program; stops the whole run."""
    def __init__(self, token: Token, message: str):
        super().__init__(message, token.line, f"{message}\n[line {token.line}]")
        self.token = token
