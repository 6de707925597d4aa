"""Display-ready records produced from accumulated count distributions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

Chance = Optional[float]


@dataclass(frozen=True)
class CellStats:
    """Observed count for one cell plus its two-tailed significance."""

    count: float
    chance: Chance = None


@dataclass(frozen=True)
class SequenceStats:
    """One scored count vector, e.g. land counts in the top N cards."""

    counts: Tuple[CellStats, ...]
    chance: Chance = None

    @property
    def num_games(self) -> int:
        return round_half_up(sum(cell.count for cell in self.counts))


@dataclass(frozen=True)
class DistributionStats:
    """Transformed record for a single bucket key.

    ``known`` holds counts from fully revealed games only. ``extrapolated`` is
    present for library and card-copy distributions and folds partially revealed
    games in with hypergeometric weights.
    """

    num_games: int
    chance: Chance
    known: Tuple[SequenceStats, ...]
    extrapolated: Optional[Tuple[SequenceStats, ...]] = None


# population -> hits -> stats
StatsTable = Dict[int, Dict[int, DistributionStats]]


@dataclass(frozen=True)
class ShufflingStats:
    """Per-shuffling tables plus the number of games behind each."""

    tables: Mapping[str, StatsTable] = field(default_factory=dict)
    games: Mapping[str, int] = field(default_factory=dict)

    def table(self, shuffling: str) -> Optional[StatsTable]:
        return self.tables.get(shuffling)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def to_dict(stats: Any) -> Any:
    """Convert records into plain JSON-compatible structures."""
    if isinstance(stats, CellStats):
        return {"count": stats.count, "chance": stats.chance}
    if isinstance(stats, SequenceStats):
        return {"chance": stats.chance, "counts": [to_dict(cell) for cell in stats.counts]}
    if isinstance(stats, DistributionStats):
        payload: Dict[str, Any] = {
            "numGames": stats.num_games,
            "chance": stats.chance,
            "known": [to_dict(sequence) for sequence in stats.known],
        }
        if stats.extrapolated is not None:
            payload["extrapolated"] = [to_dict(sequence) for sequence in stats.extrapolated]
        return payload
    if isinstance(stats, ShufflingStats):
        payload = {}
        for shuffling, table in stats.tables.items():
            payload[shuffling] = to_dict(table)
            payload[f"{shuffling}Games"] = stats.games.get(shuffling, 0)
        return payload
    if isinstance(stats, Mapping):
        return {str(key): to_dict(value) for key, value in stats.items()}
    return stats


__all__ = [
    "CellStats",
    "Chance",
    "DistributionStats",
    "SequenceStats",
    "ShufflingStats",
    "StatsTable",
    "round_half_up",
    "to_dict",
]
