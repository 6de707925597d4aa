"""Tests for top-N extrapolation and known-only transforms."""

from __future__ import annotations

from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from shuffler.aggregation.counting import hand_distribution
from shuffler.aggregation.distribution import Leaf, Pair, ShapeMismatchError, from_nested, merge, vector
from shuffler.stats.extrapolation import hand_sample_sizes, transform_known_only, transform_top_n
from shuffler.stats.significance import combine_chances


def _row_total(sequence) -> float:
    return sum(cell.count for cell in sequence.counts)


# ---------------------------------------------------------------------------
# Top-N extrapolation


def test_merged_batches_scenario() -> None:
    first = from_nested([[[0, 0], [30, 5]]], rank=3)
    second = from_nested([[[0, 0], [10, 2]]], rank=3)
    merged = merge(first, second)
    assert merged[0][1] == Pair(40, 7)

    stats = transform_top_n(merged, population=40, hits=17)
    assert stats.num_games == 47
    assert stats.known[0].counts[1].count == 40


def test_unknown_games_are_spread_by_expectation() -> None:
    # Twenty games with nothing revealed, ten cards of which four are hits.
    distribution = vector(
        [
            [Pair(0, 20), Pair(0, 0)],
            [Pair(0, 0), Pair(0, 0), Pair(0, 0)],
        ]
    )
    stats = transform_top_n(distribution, population=10, hits=4)

    assert [cell.count for cell in stats.extrapolated[0].counts] == pytest.approx([12.0, 8.0])
    assert _row_total(stats.extrapolated[1]) == pytest.approx(20.0)
    assert stats.known[0].chance is None


def test_extrapolation_conserves_games() -> None:
    distribution = vector(
        [
            [Pair(5, 20), Pair(3, 0)],
            [Pair(2, 0), Pair(4, 0), Pair(2, 0)],
            [Pair(1, 0), Pair(3, 0), Pair(3, 0), Pair(1, 0)],
        ]
    )
    stats = transform_top_n(distribution, population=10, hits=4)

    for known, extrapolated in zip(stats.known, stats.extrapolated):
        assert _row_total(extrapolated) == pytest.approx(_row_total(known) + 20)


def test_cells_beyond_reachable_hits_are_skipped() -> None:
    distribution = vector([[Pair(1, 0), Pair(1, 0), Pair(0, 0)]])
    stats = transform_top_n(distribution, population=10, hits=4)
    assert len(stats.known[0].counts) == 2
    assert len(stats.extrapolated[0].counts) == 2


def test_top_n_chance_uses_leading_extrapolated_rows() -> None:
    rows = [[Pair(0, 0)] * (min(position + 2, 5)) for position in range(12)]
    rows[0] = [Pair(60, 0), Pair(40, 0)]
    stats = transform_top_n(vector(rows), population=12, hits=4)
    assert stats.chance == pytest.approx(combine_chances(stats.extrapolated[:10]))


def test_top_n_rejects_plain_counts() -> None:
    with pytest.raises(ShapeMismatchError):
        transform_top_n(vector([[Leaf(1), Leaf(2)]]), population=10, hits=4)


def test_top_n_empty_distribution() -> None:
    stats = transform_top_n(vector([]), population=10, hits=4)
    assert stats.num_games == 0
    assert stats.known == ()
    assert stats.chance is None


# ---------------------------------------------------------------------------
# Known-only transforms


def test_hand_sample_sizes_count_down_from_seven() -> None:
    assert hand_sample_sizes(3) == [7, 6, 5]


def test_transform_known_only_scores_each_row() -> None:
    distribution = hand_distribution([(2, 3), (3,), (1,)])
    stats = transform_known_only(distribution, population=40, hits=17, sample_sizes=hand_sample_sizes(7))

    assert stats.num_games == 3
    assert len(stats.known) == 7
    assert [cell.count for cell in stats.known[0].counts][:4] == [0, 1, 1, 1]
    assert stats.known[1].num_games == 1
    assert stats.extrapolated is None
    assert stats.chance == pytest.approx(combine_chances(stats.known))


def test_transform_known_only_requires_sample_sizes() -> None:
    distribution = hand_distribution([(2,)])
    with pytest.raises(ValueError):
        transform_known_only(distribution, population=40, hits=17, sample_sizes=[7, 6])
