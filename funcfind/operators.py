"""Genetic operators: random generation, mutation, crossover and local search.

Operators never modify their inputs; every call returns a freshly built tree,
so a parent used by several operations in one generation stays valid.
"""

from __future__ import annotations

from funcfind.config import CONST_RANGE, EXPONENT_HIGH, EXPONENT_LOW, SearchConfig
from funcfind.expr import Add, Const, Cos, Exp, Mul, Node, Pow, Scale, Sin, Var
from funcfind.rng import SeededRandom

PATTERN_TYPES = (
    "x_squared",
    "identity",
    "affine",
    "quadratic",
    "power",
    "sine",
    "cosine",
    "growth",
    "wave",
)

# Add, Mul, Sin, Cos, Exp, Pow, Scale and a leaf.
_NODE_CHOICES = 8


def random_constant(rng: SeededRandom) -> float:
    return rng.uniform(-CONST_RANGE, CONST_RANGE)


def random_leaf(rng: SeededRandom) -> Node:
    if rng.chance(0.5):
        return Var()
    return Const(random_constant(rng))


def random_tree(rng: SeededRandom, depth: int) -> Node:
    """Grow a random tree no deeper than ``depth``."""
    if depth <= 0:
        return random_leaf(rng)

    match rng.integer(0, _NODE_CHOICES):
        case 0:
            return Add(random_tree(rng, depth - 1), random_tree(rng, depth - 1))
        case 1:
            return Mul(random_tree(rng, depth - 1), random_tree(rng, depth - 1))
        case 2:
            return Sin(random_tree(rng, depth - 1))
        case 3:
            return Cos(random_tree(rng, depth - 1))
        case 4:
            return Exp(random_tree(rng, depth - 1))
        case 5:
            return Pow(random_tree(rng, depth - 1), rng.uniform(EXPONENT_LOW, EXPONENT_HIGH))
        case 6:
            return Scale(random_tree(rng, depth - 1), random_constant(rng))
        case _:
            return random_leaf(rng)


def pattern_tree(rng: SeededRandom, pattern_type: str) -> Node:
    """Build one of the template starting shapes with random coefficients."""
    match pattern_type:
        case "x_squared":
            return Mul(Var(), Var())
        case "identity":
            return Var()
        case "affine":
            return Add(Scale(Var(), random_constant(rng)), Const(random_constant(rng)))
        case "quadratic":
            return Add(Mul(Var(), Var()), Scale(Var(), random_constant(rng)))
        case "power":
            return Pow(Var(), rng.uniform(EXPONENT_LOW, EXPONENT_HIGH))
        case "sine":
            return Sin(Scale(Var(), random_constant(rng)))
        case "cosine":
            return Cos(Scale(Var(), random_constant(rng)))
        case "growth":
            return Exp(Scale(Var(), random_constant(rng)))
        case "wave":
            inner = Sin(Scale(Var(), random_constant(rng)))
            return Add(Scale(inner, random_constant(rng)), Const(random_constant(rng)))
        case _:
            raise ValueError(f"Unknown pattern type: {pattern_type!r}")


def mutate(expr: Node, rng: SeededRandom, config: SearchConfig) -> Node:
    """Point mutation with occasional subtree replacement."""
    if rng.chance(config.subtree_rate):
        return random_tree(rng, rng.integer(0, config.fresh_depth + 1))

    match expr:
        case Const(value=value):
            return Const(value + rng.uniform(-config.const_delta, config.const_delta))
        case Var():
            return Var()
        case Add(left=left, right=right):
            return Add(mutate(left, rng, config), mutate(right, rng, config))
        case Mul(left=left, right=right):
            return Mul(mutate(left, rng, config), mutate(right, rng, config))
        case Sin(child=child):
            if rng.chance(config.flip_rate):
                return Cos(child.clone())
            return Sin(mutate(child, rng, config))
        case Cos(child=child):
            if rng.chance(config.flip_rate):
                return Sin(child.clone())
            return Cos(mutate(child, rng, config))
        case Exp(child=child):
            return Exp(mutate(child, rng, config))
        case Pow(child=child, exponent=exponent):
            delta = rng.uniform(-config.exponent_delta, config.exponent_delta)
            return Pow(mutate(child, rng, config), exponent + delta)
        case Scale(child=child, factor=factor):
            delta = rng.uniform(-config.factor_delta, config.factor_delta)
            return Scale(mutate(child, rng, config), factor + delta)
        case _:
            raise TypeError(f"Unsupported node type: {type(expr).__name__}")


def crossover(expr: Node, donor: Node, rng: SeededRandom, config: SearchConfig) -> Node:
    """Transplant a clone of ``donor`` somewhere along one root-to-leaf path."""
    if rng.chance(config.donor_rate):
        return donor.clone()

    match expr:
        case Add(left=left, right=right):
            if rng.chance(0.5):
                return Add(crossover(left, donor, rng, config), right.clone())
            return Add(left.clone(), crossover(right, donor, rng, config))
        case Mul(left=left, right=right):
            if rng.chance(0.5):
                return Mul(crossover(left, donor, rng, config), right.clone())
            return Mul(left.clone(), crossover(right, donor, rng, config))
        case Sin(child=child):
            return Sin(crossover(child, donor, rng, config))
        case Cos(child=child):
            return Cos(crossover(child, donor, rng, config))
        case Exp(child=child):
            return Exp(crossover(child, donor, rng, config))
        case _:
            # Leaves, Pow and Scale are left structurally untouched.
            return expr.clone()


def local_optimize(expr: Node, rng: SeededRandom, config: SearchConfig) -> Node:
    current = expr
    for _ in range(config.local_steps):
        if rng.chance(config.local_rate):
            current = mutate(current, rng, config)
    return current
