"""Evolutionary symbolic regression of one-variable laws under a shared evaluation budget."""

from .budget import EvaluationBudget
from .config import BENCHMARK, DEEPEN, PRESETS, RESEARCH, ConfigError, SearchConfig, default_grid
from .discovery import DiscoveryRecord, DiscoverySink, curiosity_from_mse, rank_discoveries, to_record
from .engine import GeneticSearch, Phase, SearchResult, deepen, run_search
from .expr import Add, Const, Cos, Exp, Mul, Node, Pow, Scale, Sin, Var
from .fitness import FitnessEvaluator, Individual
from .rng import SeededRandom, derive_seed

__version__ = "0.1.0"

__all__ = [
    "EvaluationBudget",
    "BENCHMARK", "DEEPEN", "PRESETS", "RESEARCH", "ConfigError", "SearchConfig", "default_grid",
    "DiscoveryRecord", "DiscoverySink", "curiosity_from_mse", "rank_discoveries", "to_record",
    "GeneticSearch", "Phase", "SearchResult", "deepen", "run_search",
    "Add", "Const", "Cos", "Exp", "Mul", "Node", "Pow", "Scale", "Sin", "Var",
    "FitnessEvaluator", "Individual",
    "SeededRandom", "derive_seed",
]
