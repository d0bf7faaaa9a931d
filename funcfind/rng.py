"""Seeded randomness threaded explicitly through every stochastic decision."""

from __future__ import annotations

import hashlib
import random

SEED_MASK = (1 << 64) - 1


class SeededRandom:
    """Deterministic random source derived from a 64-bit integer seed.

    The same seed fed through the same sequence of calls yields the same
    draws, which is what makes a single-threaded search reproducible.
    """

    __slots__ = ("seed", "_rng")

    def __init__(self, seed: int) -> None:
        self.seed = int(seed) & SEED_MASK
        self._rng = random.Random(self.seed)

    def uniform(self, low: float, high: float) -> float:
        return self._rng.uniform(low, high)

    def integer(self, low: int, high: int) -> int:
        """Uniform integer in the half-open range ``[low, high)``."""
        return self._rng.randrange(low, high)

    def chance(self, probability: float) -> bool:
        return self._rng.random() < probability


def derive_seed(text: str) -> int:
    """Hash text (e.g. a rendered formula) into a reproducible 64-bit seed."""
    digest = hashlib.blake2b(text.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big")
