"""Penalized mean-squared-error fitness, gated by the evaluation budget."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import numpy as np

from funcfind.budget import EvaluationBudget
from funcfind.expr import Node, compile_postfix
from funcfind.kernels import score_program

TargetFn = Callable[[float], float]


@dataclass(slots=True)
class Individual:
    expr: Node
    fitness: float | None = None
    opcodes: np.ndarray | None = None
    operands: np.ndarray | None = None

    def program(self) -> tuple[np.ndarray, np.ndarray]:
        if self.opcodes is None or self.operands is None:
            self.opcodes, self.operands = compile_postfix(self.expr)
        return self.opcodes, self.operands


def target_values(target: TargetFn, xs: np.ndarray) -> np.ndarray:
    return np.fromiter((target(float(x)) for x in xs), dtype=np.float64, count=xs.shape[0])


class FitnessEvaluator:
    """Scores candidates against a target sampled once on a fixed grid.

    Every call to :meth:`score` claims one unit of the shared budget before
    doing any arithmetic; once the budget is spent it returns ``None`` and
    does nothing else. ``score`` is safe to call from several threads at once
    as long as each thread works on its own ``Individual``.
    """

    def __init__(
        self,
        target: TargetFn,
        grid: np.ndarray,
        budget: EvaluationBudget,
        *,
        penalty: float = 1e6,
        parsimony: float = 0.01,
    ) -> None:
        self.target = target
        self.xs = np.ascontiguousarray(grid, dtype=np.float64)
        self.ys = target_values(target, self.xs)
        self.budget = budget
        self.penalty = float(penalty)
        self.parsimony = float(parsimony)

    def score(self, individual: Individual) -> float | None:
        if not self.budget.try_claim():
            return None

        opcodes, operands = individual.program()
        return float(
            score_program(opcodes, operands, self.xs, self.ys, self.penalty, self.parsimony)
        )

    def fitness(self, expr: Node) -> float | None:
        return self.score(Individual(expr=expr))

    def mse(self, expr: Node, xs: np.ndarray | None = None) -> float:
        """Unpenalized error on ``xs`` (default: the search grid).

        Does not touch the budget; used for the final re-scoring of the best
        individual.
        """
        if xs is None:
            xs, ys = self.xs, self.ys
        else:
            xs = np.ascontiguousarray(xs, dtype=np.float64)
            ys = target_values(self.target, xs)

        opcodes, operands = compile_postfix(expr)
        return float(score_program(opcodes, operands, xs, ys, self.penalty, 0.0))
