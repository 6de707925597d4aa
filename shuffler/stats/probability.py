"""Exact hypergeometric and interpolated binomial-tail probabilities."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np


def hypergeometric_distribution(population: int, sample_size: int, successes_in_population: int) -> np.ndarray:
    """Probability mass of drawing k successes, for k in 0..min(sample_size, successes_in_population).

    Args:
        population: Total number of cards the sample is drawn from (N).
        sample_size: Number of cards drawn without replacement (n).
        successes_in_population: Number of tracked cards in the population (K).

    Returns:
        Array whose index is the number of successes in the sample. Values below
        ``max(0, n - (N - K))`` are zero, and the array sums to 1.
    """
    if population < 0 or sample_size < 0 or successes_in_population < 0:
        raise ValueError("Population, sample size and successes must be non-negative.")
    if successes_in_population > population:
        raise ValueError(
            f"Successes in population ({successes_in_population}) cannot exceed population ({population})."
        )
    if sample_size > population:
        raise ValueError(f"Sample size ({sample_size}) cannot exceed population ({population}).")

    misses_in_population = population - successes_in_population
    denominator = math.comb(population, sample_size)
    support = min(sample_size, successes_in_population) + 1
    values = [
        math.comb(successes_in_population, k) * math.comb(misses_in_population, sample_size - k) / denominator
        for k in range(support)
    ]
    return np.asarray(values, dtype=float)


def expected_probability(expected: Sequence[float], index: int) -> float:
    """Return ``expected[index]``, treating indices outside the support as impossible."""
    if 0 <= index < len(expected):
        return float(expected[index])
    return 0.0


def binomial_pmf(trials: int, success_probability: float) -> np.ndarray:
    """Binomial probability mass over 0..trials, computed in log space."""
    if trials < 0:
        raise ValueError("Number of trials must be non-negative.")
    if not 0.0 <= success_probability <= 1.0:
        raise ValueError("Success probability must fall within [0, 1].")

    pmf = np.zeros(trials + 1, dtype=float)
    if success_probability == 0.0:
        pmf[0] = 1.0
        return pmf
    if success_probability == 1.0:
        pmf[trials] = 1.0
        return pmf

    successes = np.arange(trials + 1, dtype=float)
    steps = np.log(np.arange(trials, 0, -1, dtype=float)) - np.log(np.arange(1, trials + 1, dtype=float))
    log_comb = np.concatenate(([0.0], np.cumsum(steps)))
    log_pmf = log_comb + successes * math.log(success_probability) + (trials - successes) * math.log1p(
        -success_probability
    )
    return np.exp(log_pmf)


def cumulative_binomial(
    trials: int,
    lower_bound: float,
    upper_bound: float,
    success_probability: float,
) -> float:
    """Probability that a binomial outcome falls within ``[lower_bound, upper_bound]``.

    Bounds may be fractional. The CDF is linearly interpolated between integer
    points, ``F(x) = CDF(floor(x)) + (x - floor(x)) * pmf(floor(x) + 1)``, and the
    result is ``F(upper_bound) - F(lower_bound - 1)``. The sum is taken directly
    over the covered masses so small upper tails keep their precision.
    """
    trials = int(trials)
    if trials < 0:
        raise ValueError("Number of trials must be non-negative.")
    if not np.isfinite(lower_bound) or not np.isfinite(upper_bound):
        raise ValueError("Bounds must be finite numbers.")

    lower = max(float(lower_bound), 0.0)
    upper = min(float(upper_bound), float(trials))
    if upper < lower:
        return 0.0

    # Trailing zero stands in for pmf(trials + 1).
    masses = np.append(binomial_pmf(trials, success_probability), 0.0)

    upper_floor = math.floor(upper)
    upper_fraction = upper - upper_floor
    shifted = lower - 1.0
    lower_floor = math.floor(shifted)
    lower_fraction = shifted - lower_floor

    total = (
        float(masses[lower_floor + 1 : upper_floor + 1].sum())
        + upper_fraction * float(masses[upper_floor + 1])
        - lower_fraction * float(masses[lower_floor + 1])
    )
    return min(max(total, 0.0), 1.0)


__all__ = [
    "binomial_pmf",
    "cumulative_binomial",
    "expected_probability",
    "hypergeometric_distribution",
]
