"""Per-cell binomial significance and composite chance scores."""

from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence, Union

from .probability import cumulative_binomial, expected_probability
from .records import CellStats, Chance, SequenceStats, round_half_up

ChanceLike = Union[CellStats, SequenceStats, float, None]


def combine_probabilities(a: float, b: float) -> float:
    """Combine two independent [0, 1] probabilities into one.

    The product of two uniform variables is mapped back onto a uniform scale with
    ``c - c * ln(c)``, so a single very small probability still dominates.
    """
    product = a * b
    if product == 0:
        return 0.0
    return product - product * math.log(product)


def _chance_of(item: ChanceLike) -> Chance:
    if item is None or isinstance(item, (int, float)):
        return item
    return item.chance


def combine_chances(items: Iterable[ChanceLike]) -> Chance:
    """Fold chances left to right, skipping undefined ones. All undefined gives None."""
    combined: Chance = None
    for item in items:
        chance = _chance_of(item)
        if chance is None:
            continue
        combined = chance if combined is None else combine_probabilities(combined, chance)
    return combined


def cell_chance(count: float, num_games: int, probability: float) -> Chance:
    """Two-tailed-style probability of a deviation at least this far from expectation."""
    expected_count = num_games * probability
    if expected_count == 0 or expected_count == num_games:
        return None
    # Unrounded bounds keep extrapolated fractional counts on a continuous scale.
    use_bottom = count < expected_count or count < 0.5
    lower_bound = 0.0 if use_bottom else count
    upper_bound = count if use_bottom else float(num_games)
    tail = cumulative_binomial(num_games, lower_bound, upper_bound, probability)
    return min(tail * 2, 1.0)


def score_counts(counts: Sequence[float], expected: Sequence[float]) -> SequenceStats:
    """Annotate a count vector with per-cell significance and a composite chance."""
    num_games = round_half_up(sum(counts))
    if num_games == 0:
        return SequenceStats(counts=tuple(CellStats(count=count) for count in counts), chance=None)

    cells = tuple(
        CellStats(count=count, chance=cell_chance(count, num_games, expected_probability(expected, index)))
        for index, count in enumerate(counts)
    )
    return SequenceStats(counts=cells, chance=combine_chances(cells))


def rescore(sequence: SequenceStats, expected: Sequence[float]) -> SequenceStats:
    """Recompute every chance of an existing sequence from its raw counts."""
    return score_counts([cell.count for cell in sequence.counts], expected)


def overall_chance(
    known: Sequence[SequenceStats],
    extrapolated: Optional[Sequence[SequenceStats]],
    window: int,
) -> Chance:
    """Composite chance for a bucket: leading extrapolated rows when present, else every known row."""
    if extrapolated is not None:
        return combine_chances(extrapolated[:window])
    return combine_chances(known)


__all__ = [
    "cell_chance",
    "combine_chances",
    "combine_probabilities",
    "overall_chance",
    "rescore",
    "score_counts",
]
