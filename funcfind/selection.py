"""Tournament selection, elitism and offspring construction."""

from __future__ import annotations

import math

from funcfind.budget import EvaluationBudget
from funcfind.config import SearchConfig
from funcfind.expr import Node
from funcfind.fitness import Individual
from funcfind.operators import crossover, local_optimize, mutate, random_tree
from funcfind.rng import SeededRandom

SANITY_POINTS = (0.0, 1.0)


def _rank(individual: Individual) -> float:
    return math.inf if individual.fitness is None else individual.fitness


def tournament(population: list[Individual], rng: SeededRandom, k: int) -> Individual:
    """Best of ``k`` uniform draws with replacement; ties keep the earlier draw."""
    best = population[rng.integer(0, len(population))]
    for _ in range(k - 1):
        challenger = population[rng.integer(0, len(population))]
        if _rank(challenger) < _rank(best):
            best = challenger
    return best


def is_viable(expr: Node, max_depth: int) -> bool:
    """Cheap sanity check run on every child before it joins a generation."""
    if expr.depth() > max_depth:
        return False
    return all(math.isfinite(expr.evaluate(x)) for x in SANITY_POINTS)


def clone_elite(parent: Individual) -> Individual:
    elite = Individual(expr=parent.expr.clone())
    if parent.opcodes is not None and parent.operands is not None:
        elite.opcodes = parent.opcodes.copy()
        elite.operands = parent.operands.copy()
    return elite


def breed(population: list[Individual], rng: SeededRandom, config: SearchConfig) -> Node:
    parent = local_optimize(tournament(population, rng, config.tournament_size).expr, rng, config)
    donor = tournament(population, rng, config.tournament_size).expr

    child = mutate(crossover(parent, donor, rng, config), rng, config)
    if not is_viable(child, config.max_depth):
        # Reanimate: a degenerate child is swapped for a small fresh tree.
        child = random_tree(rng, config.reanimate_depth)
    return child


def next_generation(
    population: list[Individual],
    elite: Individual,
    rng: SeededRandom,
    config: SearchConfig,
    budget: EvaluationBudget,
) -> list[Individual]:
    """Elite in slot 0, then offspring until full or the budget runs out."""
    offspring = [clone_elite(elite)]
    while len(offspring) < config.population_size and not budget.exhausted:
        offspring.append(Individual(expr=breed(population, rng, config)))
    return offspring
