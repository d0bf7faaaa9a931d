"""Generational driver for the symbolic regression search."""

from __future__ import annotations

import logging
import math
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Sequence

import numpy as np

from funcfind.budget import EvaluationBudget
from funcfind.config import DEEPEN, RESEARCH, ConfigError, SearchConfig, coerce_grid, default_grid
from funcfind.discovery import DiscoveryRecord, curiosity_from_mse, rank_discoveries, to_record
from funcfind.expr import Node
from funcfind.fitness import FitnessEvaluator, Individual, TargetFn
from funcfind.kernels import warmup
from funcfind.operators import PATTERN_TYPES, pattern_tree, random_tree
from funcfind.rng import SeededRandom, derive_seed
from funcfind.selection import next_generation

logger = logging.getLogger(__name__)


class Phase(Enum):
    INITIALIZING = "initializing"
    EVALUATING = "evaluating"
    REPRODUCING = "reproducing"
    TERMINATED = "terminated"


@dataclass(frozen=True, slots=True)
class SearchResult:
    expr: Node
    fitness: float
    estimate: float
    generations: int
    evaluations: int
    budget: int
    seed: int
    elapsed: float
    history: list[float] = field(default_factory=list)

    @property
    def formula(self) -> str:
        return self.expr.to_string()

    @property
    def curiosity(self) -> float:
        return curiosity_from_mse(self.fitness)

    def to_record(self, name: str | None = None) -> DiscoveryRecord:
        return to_record(self.expr, self.fitness, self.seed if name is None else name)

    def as_dict(self) -> dict[str, object]:
        return {
            "formula": self.formula,
            "fitness": self.fitness,
            "estimate": self.estimate,
            "curiosity": self.curiosity,
            "size": self.expr.size(),
            "generations": self.generations,
            "evaluations": self.evaluations,
            "budget": self.budget,
            "seed": self.seed,
            "elapsed_seconds": self.elapsed,
        }


class GeneticSearch:
    """One evolutionary search over expression trees.

    Initializing fills the population, then the driver alternates Evaluating
    and Reproducing until the evaluation budget is exhausted or the
    generation limit is reached. The returned fitness is a fresh, unpenalized
    error of the best individual on ``config.final_samples`` points.
    """

    def __init__(
        self,
        target: TargetFn,
        *,
        seed: int = 0,
        config: SearchConfig = RESEARCH,
        grid: Sequence[float] | np.ndarray | None = None,
    ) -> None:
        if not callable(target):
            raise ConfigError("target must be callable")
        if isinstance(seed, bool) or not isinstance(seed, int):
            raise ConfigError(f"seed must be an integer, got {seed!r}")
        config.validate()

        self.phase = Phase.INITIALIZING
        self.config = config
        self.seed = seed
        self.grid = default_grid() if grid is None else coerce_grid(grid)
        self.rng = SeededRandom(seed)
        self.budget = EvaluationBudget(config.ceiling())
        self.evaluator = FitnessEvaluator(
            target,
            self.grid,
            self.budget,
            penalty=config.penalty,
            parsimony=config.parsimony,
        )
        self.workers = config.resolved_workers()

        self.best: Individual | None = None
        self.history: list[float] = []
        self.generations_completed = 0
        self.population = self._initial_population()

    def _initial_population(self) -> list[Individual]:
        size = self.config.population_size
        pattern_count = int(size * self.config.pattern_fraction)

        population: list[Individual] = []
        for i in range(pattern_count):
            kind = PATTERN_TYPES[i % len(PATTERN_TYPES)]
            population.append(Individual(expr=pattern_tree(self.rng, kind)))
        while len(population) < size:
            population.append(Individual(expr=random_tree(self.rng, self.config.init_depth)))
        return population

    def evaluate_population(self, executor: Executor | None = None) -> None:
        self.phase = Phase.EVALUATING
        if executor is None:
            scores = [self.evaluator.score(individual) for individual in self.population]
        else:
            scores = list(executor.map(self.evaluator.score, self.population))

        for individual, fitness in zip(self.population, scores):
            individual.fitness = fitness
            if fitness is None:
                continue
            if self.best is None or fitness < self.best.fitness:
                self.best = individual

    def reproduce(self) -> None:
        self.phase = Phase.REPRODUCING
        elite = self.best if self.best is not None else self.population[0]
        self.population = next_generation(
            self.population, elite, self.rng, self.config, self.budget
        )

    def _log_progress(self, gen: int, started: float) -> None:
        if not logger.isEnabledFor(logging.INFO):
            return
        # Free re-score on the search grid, without the parsimony term.
        check = self.evaluator.mse(self.best.expr)
        elapsed = time.perf_counter() - started
        rate = gen / elapsed if elapsed > 0 else 0.0
        logger.info(
            "gen=%6d fit=%10.4f check=%10.4f size=%4d evals=%d/%d rate=%7.2f g/s",
            gen,
            self.best.fitness,
            check,
            self.best.expr.size(),
            self.budget.used(),
            self.budget.ceiling,
            rate,
        )

    def _loop(self, executor: Executor | None, started: float) -> None:
        limit = self.config.generations
        while limit is None or self.generations_completed < limit:
            self.evaluate_population(executor)
            self.generations_completed += 1
            if self.best is not None:
                self.history.append(self.best.fitness)

            gen = self.generations_completed
            if self.best is not None and (gen == 1 or gen % self.config.progress_every == 0):
                self._log_progress(gen, started)

            if self.budget.exhausted:
                break
            if limit is not None and self.generations_completed >= limit:
                break
            self.reproduce()

    def run(self) -> SearchResult:
        warmup()
        started = time.perf_counter()

        if self.workers > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                self._loop(executor, started)
        else:
            self._loop(None, started)

        self.phase = Phase.TERMINATED

        if self.best is None:
            logger.warning(
                "Evaluation budget exhausted before any candidate was scored; "
                "returning the first individual."
            )
            best_expr = self.population[0].expr
            estimate = math.inf
        else:
            best_expr = self.best.expr
            estimate = self.best.fitness

        final_xs = np.linspace(
            float(self.grid.min()), float(self.grid.max()), self.config.final_samples
        )
        final_fit = self.evaluator.mse(best_expr, final_xs)
        elapsed = time.perf_counter() - started

        logger.info(
            "search finished: %s mse=%.6f generations=%d evals=%d/%d in %.2fs",
            best_expr.to_string(),
            final_fit,
            self.generations_completed,
            self.budget.used(),
            self.budget.ceiling,
            elapsed,
        )

        return SearchResult(
            expr=best_expr,
            fitness=final_fit,
            estimate=estimate,
            generations=self.generations_completed,
            evaluations=self.budget.used(),
            budget=self.budget.ceiling,
            seed=self.seed,
            elapsed=elapsed,
            history=list(self.history),
        )


def run_search(
    seed: int,
    target: TargetFn,
    generations: int | None,
    population_size: int,
    *,
    eval_budget: int | None = None,
    grid: Sequence[float] | np.ndarray | None = None,
    workers: int | None = None,
    config: SearchConfig | None = None,
) -> SearchResult:
    """Run one search and return the best expression with its final fitness."""
    base = config if config is not None else RESEARCH
    base = replace(base, generations=generations, population_size=population_size)
    base = base.with_overrides(eval_budget=eval_budget, workers=workers)
    return GeneticSearch(target, seed=seed, config=base, grid=grid).run()


def deepen(
    records: Iterable[DiscoveryRecord],
    target: TargetFn,
    *,
    top_n: int = 2,
    config: SearchConfig = DEEPEN,
    grid: Sequence[float] | np.ndarray | None = None,
) -> list[SearchResult]:
    """Follow up the most curious discoveries with fresh searches.

    Each follow-up is seeded from the formula text, so repeating it on the
    same records reproduces the same searches.
    """
    results: list[SearchResult] = []
    for record in rank_discoveries(records)[:top_n]:
        seed = derive_seed(record.formula)
        logger.info(
            "deepening from %r (curiosity=%.4f) with seed %d",
            record.formula,
            record.curiosity,
            seed,
        )
        results.append(GeneticSearch(target, seed=seed, config=config, grid=grid).run())
    return results
