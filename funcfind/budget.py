"""Shared evaluation budget with a hard ceiling."""

from __future__ import annotations

import threading


class EvaluationBudget:
    """Thread-safe counter of fitness evaluations against a fixed ceiling.

    ``try_claim`` is the only mutating call. It increments the counter only
    when a unit is still available, so the number of successful claims is
    exactly ``min(ceiling, attempts)`` regardless of how many threads race.
    """

    __slots__ = ("ceiling", "_used", "_lock")

    def __init__(self, ceiling: int) -> None:
        if ceiling < 1:
            raise ValueError(f"budget ceiling must be >= 1, got {ceiling}")
        self.ceiling = int(ceiling)
        self._used = 0
        self._lock = threading.Lock()

    def try_claim(self) -> bool:
        with self._lock:
            if self._used >= self.ceiling:
                return False
            self._used += 1
            return True

    def used(self) -> int:
        return self._used

    def remaining(self) -> int:
        return self.ceiling - self._used

    @property
    def exhausted(self) -> bool:
        return self._used >= self.ceiling

    def __repr__(self) -> str:
        return f"EvaluationBudget(used={self._used}, ceiling={self.ceiling})"
