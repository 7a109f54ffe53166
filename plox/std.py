"""Native functions installed in every global environment."""

import time
from typing import Any

from plox.callables import NativeFunction
from plox.environment import Environment


def std_clock() -> Any:
    return time.time()


NATIVES = [
    NativeFunction('clock', 0, std_clock),
]


def populate_std_environment(env: Environment) -> Environment:
    for native in NATIVES:
        env.define(native.name, native)
    return env
