import math

import numpy as np
import pytest

from funcfind.budget import EvaluationBudget
from funcfind.config import default_grid
from funcfind.expr import Add, Const, Exp, Mul, Scale, Var
from funcfind.fitness import FitnessEvaluator, Individual


def square(x: float) -> float:
    return x * x


def make_evaluator(ceiling: int = 100, target=square, **kwargs) -> FitnessEvaluator:
    return FitnessEvaluator(target, default_grid(), EvaluationBudget(ceiling), **kwargs)


def test_exact_match_scores_parsimony_only():
    evaluator = make_evaluator(parsimony=0.01)
    assert evaluator.fitness(Mul(Var(), Var())) == pytest.approx(0.03)


def test_constant_offset_scores_its_square():
    evaluator = make_evaluator(parsimony=0.0)
    assert evaluator.fitness(Add(Mul(Var(), Var()), Const(2.0))) == pytest.approx(4.0)


def test_every_score_claims_one_unit():
    evaluator = make_evaluator(ceiling=5)
    for _ in range(3):
        evaluator.fitness(Var())
    assert evaluator.budget.used() == 3


def test_exhausted_budget_returns_none_without_work():
    evaluator = make_evaluator(ceiling=1)
    individual = Individual(expr=Var())
    assert evaluator.score(individual) is not None

    fresh = Individual(expr=Mul(Var(), Var()))
    assert evaluator.score(fresh) is None
    assert fresh.opcodes is None
    assert evaluator.budget.used() == 1


def test_overflowing_candidate_gets_finite_penalized_score():
    evaluator = make_evaluator()
    score = evaluator.fitness(Exp(Scale(Var(), 500.0)))
    assert math.isfinite(score)
    assert score > 1e9


def test_non_finite_target_values_are_penalized_not_propagated():
    evaluator = make_evaluator(target=lambda x: math.inf if x > 4.0 else x)
    assert math.isfinite(evaluator.fitness(Var()))


def test_program_is_cached_on_individual():
    evaluator = make_evaluator()
    individual = Individual(expr=Add(Var(), Const(1.0)))
    evaluator.score(individual)
    opcodes = individual.opcodes
    evaluator.score(individual)
    assert individual.opcodes is opcodes


def test_mse_is_unpenalized_and_free():
    evaluator = make_evaluator(ceiling=1)
    xs = np.linspace(-5.0, 5.0, 2001)
    assert evaluator.mse(Mul(Var(), Var()), xs) == 0.0
    assert evaluator.mse(Mul(Var(), Var())) == 0.0
    assert evaluator.budget.used() == 0
