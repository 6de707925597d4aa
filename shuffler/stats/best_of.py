"""Combine Bo1 and Bo3 statistic trees into a synthetic "all" view."""

from __future__ import annotations

from itertools import zip_longest
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, TypeVar

from shuffler.config import BEST_OF_VALUES, EXTRAPOLATION_WINDOW, SHUFFLING_VALUES

from .probability import hypergeometric_distribution
from .records import CellStats, DistributionStats, SequenceStats, ShufflingStats, StatsTable
from .significance import overall_chance, score_counts

SampleSizeFn = Callable[[int], int]
T = TypeVar("T")
COMBINED_KEY = "all"


def top_n_sample_size(index: int) -> int:
    """Row ``index`` of a top-N distribution covers the top ``index + 1`` cards."""
    return index + 1


def _union(left: Iterable[T], right: Iterable[T]) -> List[T]:
    keys = list(left)
    keys.extend(key for key in right if key not in keys)
    return keys


def _merge_counts(left: Sequence[CellStats], right: Sequence[CellStats]) -> List[float]:
    return [
        (a.count if a is not None else 0) + (b.count if b is not None else 0)
        for a, b in zip_longest(left, right)
    ]


def combine_sequences(
    left: Sequence[SequenceStats],
    right: Sequence[SequenceStats],
    population: int,
    hits: int,
    sample_size_for: SampleSizeFn,
) -> Tuple[SequenceStats, ...]:
    """Sum raw counts row by row and score the sums afresh."""
    combined: List[SequenceStats] = []
    for index, (a, b) in enumerate(zip_longest(left, right)):
        if a is None or b is None:
            combined.append(a if a is not None else b)
            continue
        expected = hypergeometric_distribution(population, sample_size_for(index), hits)
        combined.append(score_counts(_merge_counts(a.counts, b.counts), expected))
    return tuple(combined)


def combine_distribution_stats(
    one: Optional[DistributionStats],
    three: Optional[DistributionStats],
    population: int,
    hits: int,
    sample_size_for: SampleSizeFn = top_n_sample_size,
) -> Optional[DistributionStats]:
    """Merge two transformed records for the same bucket.

    Game totals and counts add up; every chance is recomputed from the merged
    counts since significance scores do not combine linearly.
    """
    if one is None or three is None:
        return one if one is not None else three

    known = combine_sequences(one.known, three.known, population, hits, sample_size_for)
    extrapolated: Optional[Tuple[SequenceStats, ...]]
    if one.extrapolated is not None and three.extrapolated is not None:
        extrapolated = combine_sequences(one.extrapolated, three.extrapolated, population, hits, sample_size_for)
    else:
        extrapolated = one.extrapolated if one.extrapolated is not None else three.extrapolated

    return DistributionStats(
        num_games=one.num_games + three.num_games,
        chance=overall_chance(known, extrapolated, EXTRAPOLATION_WINDOW),
        known=known,
        extrapolated=extrapolated,
    )


def combine_tables(one: StatsTable, three: StatsTable, sample_size_for: SampleSizeFn) -> StatsTable:
    combined: StatsTable = {}
    for population in _union(one, three):
        left: Mapping[int, DistributionStats] = one.get(population, {})
        right: Mapping[int, DistributionStats] = three.get(population, {})
        row: Dict[int, DistributionStats] = {}
        for hits in _union(left, right):
            merged = combine_distribution_stats(left.get(hits), right.get(hits), population, hits, sample_size_for)
            if merged is not None:
                row[hits] = merged
        combined[population] = row
    return combined


def combine_best_of(
    one: Optional[ShufflingStats],
    three: Optional[ShufflingStats],
    sample_size_for: SampleSizeFn = top_n_sample_size,
) -> Optional[ShufflingStats]:
    """Merge Bo1 and Bo3 trees; a lone tree is returned unmodified."""
    if one is None or three is None:
        return one if one is not None else three

    tables: Dict[str, StatsTable] = {}
    games: Dict[str, int] = {}
    shufflings = _union(SHUFFLING_VALUES, _union(one.tables, three.tables))
    for shuffling in shufflings:
        games_one = one.games.get(shuffling, 0)
        games_three = three.games.get(shuffling, 0)
        if games_one and games_three:
            tables[shuffling] = combine_tables(one.tables[shuffling], three.tables[shuffling], sample_size_for)
            games[shuffling] = games_one + games_three
        elif games_one or games_three:
            source = one if games_one else three
            tables[shuffling] = source.tables[shuffling]
            games[shuffling] = games_one or games_three
    return ShufflingStats(tables=tables, games=games)


def with_combined_best_of(
    by_best_of: Mapping[str, ShufflingStats],
    sample_size_for: SampleSizeFn = top_n_sample_size,
) -> Dict[str, ShufflingStats]:
    """Copy of `by_best_of` with the combined entry added when either format is present."""
    result = dict(by_best_of)
    one, three = (by_best_of.get(value) for value in BEST_OF_VALUES)
    combined = combine_best_of(one, three, sample_size_for)
    if combined is not None:
        result[COMBINED_KEY] = combined
    return result


__all__ = [
    "COMBINED_KEY",
    "combine_best_of",
    "combine_distribution_stats",
    "combine_sequences",
    "combine_tables",
    "top_n_sample_size",
    "with_combined_best_of",
]
