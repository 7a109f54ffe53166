import pytest

from plox.environment import Environment
from plox.errors import LoxRuntimeError
from plox.tokens import Token, TokenType


def name(text, line=1):
    return Token(TokenType.IDENTIFIER, text, None, line)


def test_define_and_get():
    env = Environment()
    env.define('a', 1.0)
    assert env.get(name('a')) == 1.0


def test_lookup_walks_enclosing_scopes():
    outer = Environment()
    outer.define('a', 'outer')
    inner = Environment(Environment(outer))
    assert inner.get(name('a')) == 'outer'
    assert inner.depth() == 2


def test_shadowing_does_not_touch_enclosing_scope():
    outer = Environment()
    outer.define('a', 1.0)
    inner = Environment(outer)
    inner.define('a', 2.0)
    assert inner.get(name('a')) == 2.0
    assert outer.get(name('a')) == 1.0


def test_assign_updates_nearest_binding():
    outer = Environment()
    outer.define('a', 1.0)
    inner = Environment(outer)
    inner.assign(name('a'), 5.0)
    assert outer.values == {'a': 5.0}
    assert inner.values == {}


def test_undefined_get_raises_with_line():
    with pytest.raises(LoxRuntimeError) as excinfo:
        Environment(Environment()).get(name('missing', line=7))
    assert excinfo.value.message == "Undefined variable 'missing'."
    assert excinfo.value.line == 7


def test_assign_to_undefined_never_creates_a_global():
    globals_ = Environment()
    inner = Environment(globals_)
    with pytest.raises(LoxRuntimeError):
        inner.assign(name('x'), 5.0)
    assert globals_.values == {}
    assert inner.values == {}
