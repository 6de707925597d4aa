"""Tests for hypergeometric and binomial-tail probabilities."""

from __future__ import annotations

from pathlib import Path
import sys

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from shuffler.stats.probability import (
    binomial_pmf,
    cumulative_binomial,
    expected_probability,
    hypergeometric_distribution,
)


# ---------------------------------------------------------------------------
# Hypergeometric distribution


@pytest.mark.parametrize(
    "population, sample_size, successes",
    [(40, 7, 17), (60, 7, 24), (33, 12, 14), (10, 8, 5), (5, 0, 2), (4, 4, 4)],
)
def test_hypergeometric_sums_to_one(population: int, sample_size: int, successes: int) -> None:
    values = hypergeometric_distribution(population, sample_size, successes)
    assert len(values) == min(sample_size, successes) + 1
    assert values.sum() == pytest.approx(1.0, abs=1e-9)


def test_hypergeometric_single_draw() -> None:
    values = hypergeometric_distribution(40, 1, 17)
    assert np.allclose(values, [23 / 40, 17 / 40])


def test_hypergeometric_zero_below_minimum_successes() -> None:
    # Five misses in ten cards, so drawing eight always includes at least three hits.
    values = hypergeometric_distribution(10, 8, 5)
    assert np.allclose(values[:3], 0.0)
    assert values[3] > 0


@pytest.mark.parametrize("args", [(-1, 1, 0), (10, 11, 2), (10, 2, 11), (10, -2, 3)])
def test_hypergeometric_rejects_invalid_arguments(args) -> None:
    with pytest.raises(ValueError):
        hypergeometric_distribution(*args)


def test_expected_probability_outside_support_is_zero() -> None:
    expected = [0.25, 0.75]
    assert expected_probability(expected, 1) == 0.75
    assert expected_probability(expected, 2) == 0.0
    assert expected_probability(expected, -1) == 0.0


# ---------------------------------------------------------------------------
# Binomial PMF and interpolated CDF


def test_binomial_pmf_sums_to_one() -> None:
    assert binomial_pmf(10, 0.3).sum() == pytest.approx(1.0)
    assert np.allclose(binomial_pmf(4, 0.5), np.array([1, 4, 6, 4, 1]) / 16)


def test_binomial_pmf_large_trials_stay_finite() -> None:
    masses = binomial_pmf(200_000, 0.4)
    assert np.all(np.isfinite(masses))
    assert masses.sum() == pytest.approx(1.0, abs=1e-6)


def test_binomial_pmf_degenerate_probabilities() -> None:
    assert list(binomial_pmf(3, 0.0)) == [1.0, 0.0, 0.0, 0.0]
    assert list(binomial_pmf(3, 1.0)) == [0.0, 0.0, 0.0, 1.0]
    with pytest.raises(ValueError):
        binomial_pmf(3, 1.5)


def test_cumulative_binomial_is_monotone_and_complete() -> None:
    trials, p = 25, 0.37
    values = [cumulative_binomial(trials, 0, k, p) for k in range(trials + 1)]
    assert all(later >= earlier for earlier, later in zip(values, values[1:]))
    assert cumulative_binomial(trials, 0, trials, p) == pytest.approx(1.0)


def test_cumulative_binomial_interpolates_fractional_bounds() -> None:
    # pmf(4, 0.5) = [1, 4, 6, 4, 1] / 16
    assert cumulative_binomial(4, 0, 1.5, 0.5) == pytest.approx(8 / 16)
    assert cumulative_binomial(4, 2.5, 4, 0.5) == pytest.approx(8 / 16)
    assert cumulative_binomial(4, 1, 1, 0.5) == pytest.approx(4 / 16)


def test_cumulative_binomial_clamps_and_empty_interval() -> None:
    assert cumulative_binomial(4, -3, 10, 0.5) == pytest.approx(1.0)
    assert cumulative_binomial(4, 3, 2, 0.5) == 0.0


def test_cumulative_binomial_point_masses() -> None:
    assert cumulative_binomial(5, 0, 0, 0.0) == pytest.approx(1.0)
    assert cumulative_binomial(5, 1, 5, 0.0) == 0.0
    assert cumulative_binomial(5, 5, 5, 1.0) == pytest.approx(1.0)


def test_cumulative_binomial_small_upper_tail_keeps_precision() -> None:
    tail = cumulative_binomial(1000, 700, 1000, 0.5)
    assert 0.0 < tail < 1e-30
