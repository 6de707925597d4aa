from .probability import cumulative_binomial, expected_probability, hypergeometric_distribution
from .records import CellStats, DistributionStats, SequenceStats, ShufflingStats, StatsTable, to_dict
from .significance import combine_chances, combine_probabilities, overall_chance, score_counts
from .extrapolation import hand_sample_sizes, transform_known_only, transform_top_n
from .best_of import COMBINED_KEY, combine_best_of, combine_distribution_stats, with_combined_best_of

__all__ = [
    "COMBINED_KEY",
    "CellStats",
    "DistributionStats",
    "SequenceStats",
    "ShufflingStats",
    "StatsTable",
    "combine_best_of",
    "combine_chances",
    "combine_distribution_stats",
    "combine_probabilities",
    "cumulative_binomial",
    "expected_probability",
    "hand_sample_sizes",
    "hypergeometric_distribution",
    "overall_chance",
    "score_counts",
    "to_dict",
    "transform_known_only",
    "transform_top_n",
    "with_combined_best_of",
]
