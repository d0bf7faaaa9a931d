#!/usr/bin/env python3
"""Command-line front end: run one search against a reference law."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from funcfind.config import PRESETS, ConfigError, make_grid
from funcfind.engine import GeneticSearch, SearchResult
from funcfind.laws import LAWS

DEFAULT_SEED = 42


def _is_free_threaded() -> bool:
    checker = getattr(sys, "_is_gil_enabled", None)
    if checker is None:
        return False
    return not bool(checker())


def _print_human_report(
    *,
    result: SearchResult,
    law: str,
    preset: str,
    workers: int,
    curiosity: float,
) -> None:
    print("=" * 72)
    print("FuncFind Results")
    print("=" * 72)
    print(f"Law: {law} | Preset: {preset}")
    print(f"Expression: {result.formula}")
    print(f"MSE (final): {result.fitness:.6f}")
    print(f"Fitness (search estimate): {result.estimate:.6f}")
    print(f"Curiosity: {curiosity:.4f}")
    print(f"Size: {result.expr.size()}")
    print(f"Generations executed: {result.generations}")
    print(f"Evaluations: {result.evaluations}/{result.budget}")
    print(f"Elapsed: {result.elapsed:.2f}s")
    print(f"Workers: {workers}")
    print(f"Free-threaded runtime: {_is_free_threaded()}")
    print(f"Seed: {result.seed}")
    print("=" * 72)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Evolutionary symbolic regression of a one-variable law."
    )

    parser.add_argument(
        "--law",
        choices=sorted(LAWS),
        default="research",
        help="Target law to rediscover (default: research)",
    )
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        default="research",
        help="Size preset; explicit options below override it (default: research)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=DEFAULT_SEED,
        help=f"Random seed (default: {DEFAULT_SEED})",
    )
    parser.add_argument("--generations", type=int, default=None, help="Maximum generations")
    parser.add_argument("--population", type=int, default=None, help="Population size")
    parser.add_argument("--budget", type=int, default=None, help="Evaluation budget ceiling")
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads for population scoring. 0 uses all cores.",
    )
    parser.add_argument(
        "--grid",
        type=float,
        nargs=3,
        metavar=("LOW", "HIGH", "STEP"),
        default=None,
        help="Sample grid (default: -5 5 0.1)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log progress at each generation checkpoint.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit final result as JSON.",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    if args.verbose and not args.json:
        logging.basicConfig(level=logging.INFO, format="%(message)s")

    config = PRESETS[args.preset].with_overrides(
        generations=args.generations,
        population_size=args.population,
        eval_budget=args.budget,
        workers=args.workers,
    )

    try:
        grid = make_grid(*args.grid) if args.grid is not None else None
        search = GeneticSearch(LAWS[args.law], seed=args.seed, config=config, grid=grid)
    except ConfigError as exc:
        raise SystemExit(f"invalid configuration: {exc}") from exc

    if not args.json:
        print("=" * 72)
        print("FuncFind")
        print("=" * 72)
        print(f"Python: {sys.version.split()[0]}")
        print(f"Law: {args.law} | Preset: {args.preset}")
        print(f"Population: {config.population_size} | Generations: {config.generations}")
        print(f"Budget: {search.budget.ceiling} | Workers: {search.workers}")
        print(f"Seed: {args.seed}")
        print()

    result = search.run()
    record = result.to_record()

    if args.json:
        report = result.as_dict()
        report.update(
            {
                "law": args.law,
                "preset": args.preset,
                "workers": search.workers,
                "free_threaded_runtime": _is_free_threaded(),
                "record": record.as_dict(),
            }
        )
        print(json.dumps(report, indent=2))
    else:
        _print_human_report(
            result=result,
            law=args.law,
            preset=args.preset,
            workers=search.workers,
            curiosity=record.curiosity,
        )

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
