from dataclasses import replace

import pytest

from funcfind.config import RESEARCH
from funcfind.expr import Add, Const, Cos, Mul, Pow, Scale, Sin, Var
from funcfind.operators import (
    PATTERN_TYPES,
    crossover,
    local_optimize,
    mutate,
    pattern_tree,
    random_tree,
)
from funcfind.rng import SeededRandom


def test_random_tree_respects_depth():
    rng = SeededRandom(11)
    for depth in range(6):
        for _ in range(50):
            assert random_tree(rng, depth).depth() <= depth


def test_random_tree_constants_stay_in_range():
    rng = SeededRandom(3)

    def walk(node):
        if isinstance(node, Const):
            assert -3.0 <= node.value <= 3.0
        if isinstance(node, Pow):
            assert 0.5 <= node.exponent <= 3.0
        for child in node.children():
            walk(child)

    for _ in range(200):
        walk(random_tree(rng, 4))


def test_random_tree_is_deterministic_for_seed():
    first = [random_tree(SeededRandom(99), 4).to_string() for _ in range(3)]
    second = [random_tree(SeededRandom(99), 4).to_string() for _ in range(3)]
    assert first == second


def test_pattern_trees_render():
    rng = SeededRandom(5)
    for kind in PATTERN_TYPES:
        assert "x" in pattern_tree(rng, kind).to_string()
    assert pattern_tree(rng, "x_squared").to_string() == "(x*x)"
    with pytest.raises(ValueError):
        pattern_tree(rng, "nope")


def test_mutate_never_touches_the_original():
    rng = SeededRandom(21)
    tree = Add(Scale(Sin(Var()), 1.5), Pow(Mul(Var(), Const(2.0)), 2.0))
    before = tree.to_string()
    for _ in range(100):
        mutate(tree, rng, RESEARCH)
    assert tree.to_string() == before


def test_mutate_perturbs_constants_by_small_delta():
    config = replace(RESEARCH, subtree_rate=0.0)
    rng = SeededRandom(8)
    for _ in range(100):
        child = mutate(Const(1.0), rng, config)
        assert isinstance(child, Const)
        assert abs(child.value - 1.0) <= config.const_delta


def test_mutate_flips_sine_and_cosine():
    config = replace(RESEARCH, subtree_rate=0.0, flip_rate=1.0)
    rng = SeededRandom(8)
    assert isinstance(mutate(Sin(Var()), rng, config), Cos)
    assert isinstance(mutate(Cos(Var()), rng, config), Sin)


def test_mutate_always_replaces_with_full_subtree_rate():
    config = replace(RESEARCH, subtree_rate=1.0, fresh_depth=2)
    rng = SeededRandom(8)
    for _ in range(50):
        assert mutate(Pow(Var(), 2.0), rng, config).depth() <= 2


def test_crossover_with_certain_donor_returns_donor_copy():
    config = replace(RESEARCH, donor_rate=1.0)
    donor = Sin(Var())
    child = crossover(Add(Var(), Const(1.0)), donor, SeededRandom(1), config)
    assert child is not donor
    assert child.to_string() == donor.to_string()


def test_crossover_leaves_parameterized_nodes_alone():
    config = replace(RESEARCH, donor_rate=0.0)
    parent = Pow(Var(), 2.0)
    child = crossover(parent, Sin(Var()), SeededRandom(1), config)
    assert child is not parent
    assert child.to_string() == parent.to_string()


def test_crossover_inserts_donor_below_binary_node():
    rng = SeededRandom(4)
    config = replace(RESEARCH, donor_rate=0.5)
    parent = Add(Var(), Const(1.0))
    donor = Cos(Var())
    seen = {crossover(parent, donor, rng, config).to_string() for _ in range(200)}
    assert "(cos(x)+1.000)" in seen
    assert "(x+cos(x))" in seen
    assert parent.to_string() == "(x+1.000)"


def test_local_optimize_without_steps_is_identity():
    config = replace(RESEARCH, local_steps=0)
    tree = Add(Var(), Const(1.0))
    assert local_optimize(tree, SeededRandom(2), config) is tree
