"""Top-N extrapolation of partially revealed sequences."""

from __future__ import annotations

from typing import List, Sequence

from shuffler.aggregation.distribution import Distribution, Leaf, Pair, ShapeMismatchError, Vector
from shuffler.config import EXTRAPOLATION_WINDOW, HAND_SIZE

from .probability import hypergeometric_distribution
from .records import DistributionStats, SequenceStats, round_half_up
from .significance import combine_chances, score_counts


def _rows(distribution: Distribution) -> Sequence[Vector]:
    if not isinstance(distribution, Vector):
        raise ShapeMismatchError(f"Expected a vector of rows, received {type(distribution).__name__}.")
    rows = distribution.items
    for row in rows:
        if not isinstance(row, Vector):
            raise ShapeMismatchError(f"Expected each row to be a vector, received {type(row).__name__}.")
    return rows


def _pair(cell: Distribution) -> Pair:
    if not isinstance(cell, Pair):
        raise ShapeMismatchError(f"Top-N distributions hold (known, first unknown) pairs, found {type(cell).__name__}.")
    return cell


def _leaf(cell: Distribution) -> float:
    if not isinstance(cell, Leaf):
        raise ShapeMismatchError(f"Known-only distributions hold plain counts, found {type(cell).__name__}.")
    return cell.value


def transform_top_n(distribution: Distribution, population: int, hits: int) -> DistributionStats:
    """Score a position x cumulative-hits distribution, with and without extrapolation.

    Args:
        distribution: ``distribution[position][hits_so_far]`` = ``Pair(known, first_unknown)``.
            ``first_unknown`` counts games whose card at ``position`` is the first
            unrevealed one while the revealed cards before it hold ``hits_so_far`` hits.
        population: Number of cards the sequence is drawn from (library or deck size).
        hits: Number of tracked cards in that population.

    Returns:
        DistributionStats with ``known`` (revealed games only) and ``extrapolated``
        (revealed games plus weighted completions of unrevealed ones).
    """
    rows = _rows(distribution)
    known: List[SequenceStats] = []
    extrapolated: List[SequenceStats] = []
    # Weighted game-equivalents still being carried forward, indexed by hits.
    carried: List[float] = []

    for position, row in enumerate(rows):
        expected = hypergeometric_distribution(population, position + 1, hits)
        cards_left = population - position
        cells = [_pair(cell) for cell in row.items]

        current: List[float] = []
        known_counts: List[float] = []
        extrapolated_counts: List[float] = []
        for hits_in_sample, cell in enumerate(cells):
            if hits_in_sample > position + 1:
                continue
            hits_left = hits - hits_in_sample
            misses_left = max(cards_left - hits_left, 0)

            to_miss = (carried[hits_in_sample] if hits_in_sample < len(carried) else 0.0) + cell.first_unknown
            if hits_in_sample == 0:
                to_hit = 0.0
            else:
                previous = hits_in_sample - 1
                to_hit = (carried[previous] if previous < len(carried) else 0.0) + cells[previous].first_unknown

            extra = (to_hit * (hits_left + 1) + to_miss * misses_left) / cards_left
            current.append(extra)
            known_counts.append(cell.known)
            extrapolated_counts.append(cell.known + extra)

        carried = current
        known.append(score_counts(known_counts, expected))
        extrapolated.append(score_counts(extrapolated_counts, expected))

    num_games = 0
    if rows:
        num_games = round_half_up(sum(cell.known + cell.first_unknown for cell in map(_pair, rows[0].items)))

    return DistributionStats(
        num_games=num_games,
        # Early positions only, where extrapolation cannot swamp observed data.
        chance=combine_chances(extrapolated[:EXTRAPOLATION_WINDOW]),
        known=tuple(known),
        extrapolated=tuple(extrapolated),
    )


def hand_sample_sizes(rows: int) -> List[int]:
    """Hand size drawn for each mulligan count, starting from the opening seven."""
    return [HAND_SIZE - mulligans for mulligans in range(rows)]


def transform_known_only(
    distribution: Distribution,
    population: int,
    hits: int,
    sample_sizes: Sequence[int],
) -> DistributionStats:
    """Score a 2D distribution whose rows are fully observed samples of the given sizes."""
    rows = _rows(distribution)
    if len(sample_sizes) < len(rows):
        raise ValueError("A sample size is required for every row of the distribution.")

    known = tuple(
        score_counts(
            [_leaf(cell) for cell in row.items],
            hypergeometric_distribution(population, sample_sizes[index], hits),
        )
        for index, row in enumerate(rows)
    )
    num_games = round_half_up(sum(_leaf(cell) for cell in rows[0].items)) if rows else 0
    return DistributionStats(num_games=num_games, chance=combine_chances(known), known=known)


__all__ = ["hand_sample_sizes", "transform_known_only", "transform_top_n"]
