"""Search configuration, presets and eager validation."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, replace
from typing import Iterable

import numpy as np

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_POPULATION = 50
DEFAULT_GENERATIONS = 300
BENCHMARK_POPULATION = 120
BENCHMARK_BUDGET = 600_000

GRID_LOW = -5.0
GRID_HIGH = 5.0
GRID_STEP = 0.1

CONST_RANGE = 3.0
EXPONENT_LOW = 0.5
EXPONENT_HIGH = 3.0


class ConfigError(ValueError):
    """Raised before any search work when the configuration is unusable."""


@dataclass(frozen=True, slots=True)
class SearchConfig:
    population_size: int = DEFAULT_POPULATION
    generations: int | None = DEFAULT_GENERATIONS
    eval_budget: int | None = None
    workers: int = 1

    tournament_size: int = 3
    init_depth: int = 3
    fresh_depth: int = 3
    reanimate_depth: int = 2
    max_depth: int = 10

    subtree_rate: float = 0.12
    donor_rate: float = 0.10
    flip_rate: float = 0.10
    const_delta: float = 0.2
    exponent_delta: float = 0.1
    factor_delta: float = 0.2
    local_steps: int = 1
    local_rate: float = 0.5
    pattern_fraction: float = 0.5

    parsimony: float = 0.01
    penalty: float = 1e6
    final_samples: int = 2001
    progress_every: int = 50

    def ceiling(self) -> int:
        """Total evaluations allowed for one run."""
        if self.eval_budget is not None:
            return self.eval_budget
        if self.generations is None:
            raise ConfigError("either generations or eval_budget must be set")
        return self.generations * self.population_size

    def resolved_workers(self) -> int:
        if self.workers == 0:
            return os.cpu_count() or 1
        return self.workers

    def with_overrides(self, **changes: object) -> SearchConfig:
        """Copy with the given fields replaced; ``None`` values are ignored."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def validate(self) -> None:
        _require_int(self.population_size, "population_size", minimum=1)
        if self.generations is None and self.eval_budget is None:
            raise ConfigError("either generations or eval_budget must be set")
        if self.generations is not None:
            _require_int(self.generations, "generations", minimum=1)
        if self.eval_budget is not None:
            _require_int(self.eval_budget, "eval_budget", minimum=1)
        _require_int(self.workers, "workers", minimum=0)
        _require_int(self.tournament_size, "tournament_size", minimum=1)
        _require_int(self.init_depth, "init_depth", minimum=0)
        _require_int(self.fresh_depth, "fresh_depth", minimum=0)
        _require_int(self.reanimate_depth, "reanimate_depth", minimum=0)
        _require_int(self.max_depth, "max_depth", minimum=1)
        _require_int(self.local_steps, "local_steps", minimum=0)
        _require_int(self.final_samples, "final_samples", minimum=2)
        _require_int(self.progress_every, "progress_every", minimum=1)

        for name in ("subtree_rate", "donor_rate", "flip_rate", "local_rate", "pattern_fraction"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigError(f"{name} must be within [0, 1], got {value}")

        for name in ("const_delta", "exponent_delta", "factor_delta", "parsimony"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0.0:
                raise ConfigError(f"{name} must be a finite value >= 0, got {value}")

        if not math.isfinite(self.penalty) or self.penalty <= 0.0:
            raise ConfigError(f"penalty must be a finite value > 0, got {self.penalty}")


def _require_int(value: object, name: str, *, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")


# Interactive "research" runs and heavy benchmark runs share one algorithm and
# differ only in sizes and fan-out.
RESEARCH = SearchConfig()
DEEPEN = SearchConfig(population_size=60, generations=200)
BENCHMARK = SearchConfig(
    population_size=BENCHMARK_POPULATION,
    generations=None,
    eval_budget=BENCHMARK_BUDGET,
    workers=0,
)

PRESETS: dict[str, SearchConfig] = {
    "research": RESEARCH,
    "benchmark": BENCHMARK,
}


def default_grid() -> np.ndarray:
    """Symmetric grid over [-5, 5] with step 0.1."""
    count = int(round((GRID_HIGH - GRID_LOW) / GRID_STEP))
    return GRID_LOW + np.arange(count + 1, dtype=np.float64) * GRID_STEP


def make_grid(low: float, high: float, step: float) -> np.ndarray:
    if not (math.isfinite(low) and math.isfinite(high) and math.isfinite(step)):
        raise ConfigError("grid bounds and step must be finite")
    if step <= 0.0:
        raise ConfigError(f"grid step must be > 0, got {step}")
    if high < low:
        raise ConfigError(f"grid upper bound {high} is below lower bound {low}")
    count = int(math.floor((high - low) / step + 1e-9))
    return low + np.arange(count + 1, dtype=np.float64) * step


def coerce_grid(grid: Iterable[float] | np.ndarray) -> np.ndarray:
    """Validate a caller-supplied sample grid and return it as float64."""
    try:
        values = np.asarray(grid, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"grid must be a sequence of real numbers: {exc}") from exc

    if values.ndim != 1:
        raise ConfigError(f"grid must be one-dimensional, got shape {values.shape}")
    if values.shape[0] == 0:
        raise ConfigError("grid must contain at least one sample point")
    if not np.all(np.isfinite(values)):
        raise ConfigError("grid must contain only finite values")
    return np.ascontiguousarray(values)
