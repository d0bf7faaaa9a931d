import math

import numpy as np
import pytest

from funcfind.expr import Exp, Mul, Scale, Var, compile_postfix
from funcfind.kernels import safe_cos, safe_exp, safe_pow, safe_sin, score_program, warmup


def test_warmup_is_idempotent():
    warmup()
    warmup()


def test_safe_primitives():
    assert safe_exp(1000.0) == math.inf
    assert safe_exp(0.0) == 1.0
    assert math.isnan(safe_sin(math.inf))
    assert math.isnan(safe_cos(-math.inf))
    assert safe_pow(-2.0, 2.5) == pytest.approx(2.0 ** 2.5)
    assert safe_pow(4.0, 0.5) == pytest.approx(2.0)
    assert math.isnan(safe_pow(math.nan, 2.0))


def test_score_exact_program_is_parsimony_only():
    xs = np.linspace(-5.0, 5.0, 101)
    ys = xs * xs
    opcodes, operands = compile_postfix(Mul(Var(), Var()))
    assert score_program(opcodes, operands, xs, ys, 1e6, 0.0) == 0.0
    assert score_program(opcodes, operands, xs, ys, 1e6, 0.01) == pytest.approx(0.03)


def test_score_substitutes_penalty_for_non_finite_samples():
    xs = np.array([0.0, 1.0, 10.0], dtype=np.float64)
    ys = np.zeros(3, dtype=np.float64)
    # exp(100 * x) overflows only at x = 10.
    opcodes, operands = compile_postfix(Exp(Scale(Var(), 100.0)))
    score = score_program(opcodes, operands, xs, ys, 1e6, 0.0)
    assert math.isfinite(score)
    assert score == pytest.approx((1.0 + 1e12 + 1e12) / 3.0)
