"""Discovery records handed to external persistence."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Iterable, Protocol

from funcfind.expr import Node


@dataclass(frozen=True, slots=True)
class DiscoveryRecord:
    name: str
    formula: str
    mse: float
    curiosity: float
    timestamp: str

    def as_dict(self) -> dict[str, object]:
        return asdict(self)


class DiscoverySink(Protocol):
    """Anything that can persist discovery records (a log, a file, a queue)."""

    def append(self, record: DiscoveryRecord) -> None: ...


def curiosity_from_mse(mse: float) -> float:
    """Map an error to an interest score in [0, 1]; zero error gives 1."""
    if math.isnan(mse):
        return 0.0
    return 1.0 / (1.0 + mse)


def discovery_name(seed: int, now: datetime) -> str:
    return f"evolve_{seed}_{int(now.timestamp()):x}"


def to_record(expr: Node | str, mse: float, seed_or_name: int | str) -> DiscoveryRecord:
    now = datetime.now(timezone.utc)
    if isinstance(seed_or_name, str):
        name = seed_or_name
    else:
        name = discovery_name(seed_or_name, now)

    formula = expr if isinstance(expr, str) else expr.to_string()
    return DiscoveryRecord(
        name=name,
        formula=formula,
        mse=float(mse),
        curiosity=curiosity_from_mse(mse),
        timestamp=now.isoformat(),
    )


def rank_discoveries(records: Iterable[DiscoveryRecord]) -> list[DiscoveryRecord]:
    """Most curious first."""
    return sorted(records, key=lambda record: record.curiosity, reverse=True)
