"""Reference target laws used by the command-line tool and the tests."""

from __future__ import annotations

import math
from typing import Callable


def law_quadratic(x: float) -> float:
    return x * x


def law_research(x: float) -> float:
    return math.sin(1.2 * x) + 0.4 * x * x + 0.8 * x + 0.5


def law_wave(x: float) -> float:
    return 2.0 * math.sin(1.3 * x) + 1.0


def law_exp(x: float) -> float:
    return math.exp(0.3 * x) - 1.0


def law_power(x: float) -> float:
    return 0.5 * abs(x) ** 2.5


def law_mixed(x: float) -> float:
    return 3.0 * math.sin(1.5 * x) + 0.5 * x * x + 2.0


def law_logistic(x: float) -> float:
    if x >= 0.0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


LAWS: dict[str, Callable[[float], float]] = {
    "quadratic": law_quadratic,
    "research": law_research,
    "wave": law_wave,
    "exp": law_exp,
    "power": law_power,
    "mixed": law_mixed,
    "logistic": law_logistic,
}
