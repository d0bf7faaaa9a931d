"""Numba kernels shared by the tree evaluator and the population scorer.

Every primitive here is total: overflow produces ``inf``, invalid operations
produce ``nan`` and nothing raises. The tree evaluator in ``expr`` calls the
same ``safe_*`` helpers as the postfix VM, so both paths agree bit for bit.
Set ``NUMBA_DISABLE_JIT=1`` to run them as plain Python.
"""

from __future__ import annotations

import math

import numpy as np
from numba import njit

# Largest argument for which exp() stays finite, with a little headroom.
EXP_OVERFLOW = 709.0

# ---------------------------------------------------------------------------
# Postfix VM opcodes
# ---------------------------------------------------------------------------
OP_CONST = np.int64(0)
OP_X = np.int64(1)
OP_ADD = np.int64(2)
OP_MUL = np.int64(3)
OP_SIN = np.int64(4)
OP_COS = np.int64(5)
OP_EXP = np.int64(6)
OP_POW = np.int64(7)
OP_SCALE = np.int64(8)

_WARMED_UP = False


@njit(cache=True, nogil=True)
def safe_exp(value: float) -> float:
    if value > EXP_OVERFLOW:
        return math.inf
    return math.exp(value)


@njit(cache=True, nogil=True)
def safe_sin(value: float) -> float:
    if math.isinf(value):
        return math.nan
    return math.sin(value)


@njit(cache=True, nogil=True)
def safe_cos(value: float) -> float:
    if math.isinf(value):
        return math.nan
    return math.cos(value)


@njit(cache=True, nogil=True)
def safe_pow(base: float, exponent: float) -> float:
    if not math.isfinite(base):
        return math.nan
    # Negative bases with fractional exponents would be complex.
    if base < 0.0 and exponent % 1.0 != 0.0:
        base = -base
    if base == 0.0:
        if exponent < 0.0:
            return math.inf
        if exponent == 0.0:
            return 1.0
        return 0.0

    magnitude = exponent * math.log(abs(base))
    if magnitude > EXP_OVERFLOW:
        if base < 0.0 and exponent % 2.0 == 1.0:
            return -math.inf
        return math.inf
    return base ** exponent


@njit(cache=True, nogil=True)
def eval_program_point(
    opcodes: np.ndarray,
    operands: np.ndarray,
    x_val: float,
    stack: np.ndarray,
) -> float:
    sp = 0
    for i in range(opcodes.shape[0]):
        op = opcodes[i]
        arg = operands[i]

        if op == OP_CONST:
            stack[sp] = arg
            sp += 1
            continue

        if op == OP_X:
            stack[sp] = x_val
            sp += 1
            continue

        if sp < 1:
            return math.nan

        if op == OP_SIN:
            stack[sp - 1] = safe_sin(stack[sp - 1])
            continue
        if op == OP_COS:
            stack[sp - 1] = safe_cos(stack[sp - 1])
            continue
        if op == OP_EXP:
            stack[sp - 1] = safe_exp(stack[sp - 1])
            continue
        if op == OP_POW:
            stack[sp - 1] = safe_pow(stack[sp - 1], arg)
            continue
        if op == OP_SCALE:
            stack[sp - 1] = stack[sp - 1] * arg
            continue

        if sp < 2:
            return math.nan

        right = stack[sp - 1]
        left = stack[sp - 2]

        if op == OP_ADD:
            stack[sp - 2] = left + right
        elif op == OP_MUL:
            stack[sp - 2] = left * right
        else:
            return math.nan

        sp -= 1

    if sp != 1:
        return math.nan
    return stack[0]


@njit(cache=True, nogil=True)
def score_program(
    opcodes: np.ndarray,
    operands: np.ndarray,
    xs: np.ndarray,
    ys: np.ndarray,
    penalty: float,
    parsimony: float,
) -> float:
    """Mean squared error over ``xs`` plus ``parsimony`` per node.

    A sample whose error is non-finite or larger than ``penalty`` contributes
    ``penalty ** 2``, so the result is always finite.
    """
    n = xs.shape[0]
    stack = np.empty(opcodes.shape[0] + 2, dtype=np.float64)

    total = 0.0
    for i in range(n):
        out = eval_program_point(opcodes, operands, xs[i], stack)
        diff = out - ys[i]
        if not math.isfinite(diff) or abs(diff) > penalty:
            diff = penalty
        total += diff * diff

    return total / n + parsimony * opcodes.shape[0]


def warmup() -> None:
    """Force JIT compilation up front so failures happen early and clearly."""
    global _WARMED_UP
    if _WARMED_UP:
        return

    xs = np.array([0.0, 1.0, 2.0], dtype=np.float64)
    ys = np.array([0.0, 1.0, 4.0], dtype=np.float64)

    # Program: sin(cos(0.5 * pow(exp(x), 2))) * x + 1
    opcodes = np.array(
        [OP_X, OP_EXP, OP_POW, OP_SCALE, OP_COS, OP_SIN, OP_X, OP_MUL, OP_CONST, OP_ADD],
        dtype=np.int64,
    )
    operands = np.array([0.0, 0.0, 2.0, 0.5, 0.0, 0.0, 0.0, 0.0, 1.0, 0.0], dtype=np.float64)

    try:
        score_program(opcodes, operands, xs, ys, 1e6, 0.0)
        safe_exp(1.0)
        safe_sin(1.0)
        safe_cos(1.0)
        safe_pow(2.0, 0.5)
    except Exception as exc:  # pragma: no cover - startup guard
        raise RuntimeError(f"Numba JIT failed during warmup: {exc}") from exc

    _WARMED_UP = True
