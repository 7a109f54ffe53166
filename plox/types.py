"""Runtime value helpers for Lox.

Lox values map onto Python objects: `nil` is None, booleans are `bool`,
numbers are `float`, strings are `str` and functions are `LoxCallable`
instances. This module holds the rules that are shared by the interpreter
and the native functions: truthiness, equality, numeric coercion for the
mixed `+` operator and conversion to printable text.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Any

# Text accepted as a number by the mixed `+` rule. Underscores, `inf` and
# `nan` are not numbers; `Infinity` and the 0x/0o/0b integer forms are.
DECIMAL_TEXT = re.compile(r'[+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)')
PREFIXED_INTEGER_TEXT = re.compile(r'0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+')


def is_number(value: Any) -> bool:
    # bool is a subclass of int; Lox booleans are not numbers
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_truthy(value: Any) -> bool:
    """Only nil and false are falsy; 0 and "" are truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(a: Any, b: Any) -> bool:
    """Lox equality: no coercion between types, nil only equals nil."""
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    if is_number(a) and is_number(b):
        return a == b
    if type(a) is not type(b):
        return False
    return a == b


def to_number(value: Any) -> float:
    """Coerce a value to a number for the mixed-operand `+` rule.

    nil is 0, booleans are 1 and 0, numeric text is its value, blank text is
    0 and anything else (other text, functions) is NaN.
    """
    if is_number(value):
        return float(value)
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if DECIMAL_TEXT.fullmatch(text):
            return float(text)
        if PREFIXED_INTEGER_TEXT.fullmatch(text):
            return float(int(text, 0))
        return math.nan
    return math.nan


def format_number(value: float) -> str:
    """Shortest round-tripping decimal text for a number.

    Integral values below 1e21 print without a fraction or exponent, small
    and huge magnitudes use `1e-7` / `1.5e+21` notation, and -0 prints as 0.
    """
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'Infinity' if value > 0 else '-Infinity'
    if value == 0:
        return '0'
    sign = '-' if value < 0 else ''
    _, digit_tuple, exponent = Decimal(repr(abs(float(value)))).as_tuple()
    digits = ''.join(str(d) for d in digit_tuple).rstrip('0')
    exponent += len(digit_tuple) - len(digits)
    # point is where the decimal point falls relative to the first digit
    k = len(digits)
    point = exponent + k
    if k <= point <= 21:
        return sign + digits + '0' * (point - k)
    if 0 < point <= 21:
        return sign + digits[:point] + '.' + digits[point:]
    if -6 < point <= 0:
        return sign + '0.' + '0' * -point + digits
    e = point - 1
    mantissa = digits if k == 1 else digits[0] + '.' + digits[1:]
    return f"{sign}{mantissa}e{'+' if e > 0 else '-'}{abs(e)}"


def to_string(value: Any) -> str:
    """Convert a Lox value to the text `print` writes."""
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if is_number(value):
        return format_number(value)
    if isinstance(value, str):
        return value
    return str(value)


def type_name(value: Any) -> str:
    """Return the Lox type name of a runtime value."""
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'boolean'
    if is_number(value):
        return 'number'
    if isinstance(value, str):
        return 'string'
    return 'function'
