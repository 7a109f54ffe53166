"""CLI entry point for the Lox interpreter.

Usage:
    python -m plox [-v|-vv|-vvv] [--max-steps N] [--parser {descent,grammar}] <script>
    python -m plox --tokens <script>

Options:
  -v            Increase debug verbosity (can be repeated)
  --max-steps   Stop the run with a runtime error after N executed steps
  --parser      Parse with the recursive-descent parser (default, reports
                every syntax error) or the Lark grammar (stops at the first)
  --tokens      Print the token stream of the script and exit

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. Lexical and syntax errors exit with status
65, runtime errors with status 70.
"""

import argparse
import sys
from pathlib import Path
from typing import List

from .errors import LoxError, ParseError
from .grammar import parse_with_grammar
from .interpreter import Interpreter
from .lexer import tokenize
from .parser import parse_program

EXIT_DATA_ERROR = 65
EXIT_SOFTWARE_ERROR = 70


def report(errors: List[LoxError]):
    for err in errors:
        print(err, file=sys.stderr)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog='plox', description="Lox language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--max-steps', type=int, default=None, metavar='N',
                        help='abort the run after N executed statements and loop checks')
    parser.add_argument('--parser', choices=('descent', 'grammar'), default='descent',
                        help='parser used to build the syntax tree')
    parser.add_argument('--tokens', action='store_true', help='print the token stream and exit')
    parser.add_argument('script', help='Lox script (.lox) to execute')
    args = parser.parse_args(argv)

    script = Path(args.script)
    if not script.exists():
        print(f"Error: file {script} not found", file=sys.stderr)
        sys.exit(1)
    source = script.read_text(encoding='utf-8')

    if args.tokens:
        tokens, errors = tokenize(source)
        for token in tokens:
            print(token)
        if errors:
            report(errors)
            sys.exit(EXIT_DATA_ERROR)
        return

    if args.parser == 'grammar':
        try:
            statements = parse_with_grammar(source)
        except ParseError as e:
            report([e])
            sys.exit(EXIT_DATA_ERROR)
    else:
        statements, errors = parse_program(source)
        if errors:
            report(errors)
            sys.exit(EXIT_DATA_ERROR)

    interpreter = Interpreter(debug_level=args.v, max_steps=args.max_steps)
    try:
        runtime_error = interpreter.interpret(statements)
    finally:
        interpreter.close()
    if runtime_error is not None:
        print(runtime_error, file=sys.stderr)
        sys.exit(EXIT_SOFTWARE_ERROR)


if __name__ == '__main__':
    main()
