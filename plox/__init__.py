# Lox language package
# This package provides a scanner, parser and tree-walking interpreter for Lox.
from .errors import LoxError, LexError, ParseError, LoxRuntimeError
from .lexer import Lexer, tokenize
from .parser import Parser, parse_program
from .interpreter import Interpreter, RunResult, run_program, run_file

__all__ = [
    'LoxError',
    'LexError',
    'ParseError',
    'LoxRuntimeError',
    'Lexer',
    'tokenize',
    'Parser',
    'parse_program',
    'Interpreter',
    'RunResult',
    'run_program',
    'run_file',
]
