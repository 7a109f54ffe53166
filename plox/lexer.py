"""Lexical scanner for Lox source text.

The scanner makes a single left-to-right pass over the source, keeping a
`start` offset for the lexeme being scanned, a `current` offset for the next
unread character and a `line` counter. Errors do not stop the scan: they are
collected in `Lexer.errors` so that one bad character does not hide the rest
of the file's problems.
"""

from __future__ import annotations

from typing import Any, List, Tuple

from .errors import LexError
from .tokens import KEYWORDS, Token, TokenType


SINGLE_CHAR_TOKENS = {
    '(': TokenType.LEFT_PAREN,
    ')': TokenType.RIGHT_PAREN,
    '{': TokenType.LEFT_BRACE,
    '}': TokenType.RIGHT_BRACE,
    ',': TokenType.COMMA,
    '.': TokenType.DOT,
    '-': TokenType.MINUS,
    '+': TokenType.PLUS,
    ';': TokenType.SEMICOLON,
    '*': TokenType.STAR,
}

# operator char -> (type when followed by '=', type otherwise)
TWO_CHAR_TOKENS = {
    '!': (TokenType.BANG_EQUAL, TokenType.BANG),
    '=': (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
    '<': (TokenType.LESS_EQUAL, TokenType.LESS),
    '>': (TokenType.GREATER_EQUAL, TokenType.GREATER),
}


def is_digit(c: str) -> bool:
    return '0' <= c <= '9'


def is_alpha(c: str) -> bool:
    return ('a' <= c <= 'z') or ('A' <= c <= 'Z') or c == '_'


def is_alphanumeric(c: str) -> bool:
    return is_alpha(c) or is_digit(c)


class Lexer:
    def __init__(self, source: str):
        self.source = source
        self.tokens: List[Token] = []
        self.errors: List[LexError] = []
        self.start = 0
        self.current = 0
        self.line = 1

    def scan_tokens(self) -> List[Token]:
        while not self.is_at_end():
            self.start = self.current
            self.scan_token()
        self.tokens.append(Token(TokenType.EOF, '', None, self.line))
        return self.tokens

    def is_at_end(self) -> bool:
        return self.current >= len(self.source)

    def advance(self) -> str:
        c = self.source[self.current]
        self.current += 1
        return c

    def match(self, expected: str) -> bool:
        if self.is_at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def peek(self) -> str:
        if self.is_at_end():
            return '\0'
        return self.source[self.current]

    def peek_next(self) -> str:
        if self.current + 1 >= len(self.source):
            return '\0'
        return self.source[self.current + 1]

    def add_token(self, type_: TokenType, literal: Any = None, line: int = None):
        text = self.source[self.start:self.current]
        self.tokens.append(Token(type_, text, literal, self.line if line is None else line))

    def error(self, message: str, line: int = None):
        self.errors.append(LexError(message, self.line if line is None else line))

    def scan_token(self):
        c = self.advance()
        if c in SINGLE_CHAR_TOKENS:
            self.add_token(SINGLE_CHAR_TOKENS[c])
        elif c in TWO_CHAR_TOKENS:
            with_equal, alone = TWO_CHAR_TOKENS[c]
            self.add_token(with_equal if self.match('=') else alone)
        elif c == '/':
            if self.match('/'):
                # A comment goes until the end of the line.
                while self.peek() != '\n' and not self.is_at_end():
                    self.advance()
            else:
                self.add_token(TokenType.SLASH)
        elif c in (' ', '\r', '\t'):
            pass
        elif c == '\n':
            self.line += 1
        elif c == '"':
            self.scan_string()
        elif is_digit(c):
            self.scan_number()
        elif is_alpha(c):
            self.scan_identifier()
        else:
            self.error(f"Unexpected character {c!r}.")

    def scan_string(self):
        start_line = self.line
        while self.peek() != '"' and not self.is_at_end():
            if self.peek() == '\n':
                self.line += 1
            self.advance()

        if self.is_at_end():
            self.error('Unterminated string.', start_line)
            return

        # The closing quote.
        self.advance()
        value = self.source[self.start + 1:self.current - 1]
        self.add_token(TokenType.STRING, value, start_line)

    def scan_number(self):
        while is_digit(self.peek()):
            self.advance()

        # The '.' only belongs to the number when a digit follows it.
        if self.peek() == '.' and is_digit(self.peek_next()):
            self.advance()
            while is_digit(self.peek()):
                self.advance()

        self.add_token(TokenType.NUMBER, float(self.source[self.start:self.current]))

    def scan_identifier(self):
        while is_alphanumeric(self.peek()):
            self.advance()
        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))


def tokenize(source: str) -> Tuple[List[Token], List[LexError]]:
    """Scan `source` into tokens ending with EOF, plus any lexical errors."""
    lexer = Lexer(source)
    tokens = lexer.scan_tokens()
    return tokens, lexer.errors
