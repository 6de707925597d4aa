"""Observed vs expected bar charts for one bucket."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from shuffler.stats.probability import expected_probability, hypergeometric_distribution
from shuffler.stats.records import DistributionStats, SequenceStats, round_half_up
from .colors import css_color_from_probability
from .save_config import PlotSaveDestinations, write_figure


def sequence_summary_frame(stats: DistributionStats, extrapolated: bool = False) -> pd.DataFrame:
    """One row per chartable sequence, stopping at the first empty one after the first."""
    sequences = stats.extrapolated if extrapolated and stats.extrapolated is not None else stats.known
    rows: List[Dict[str, object]] = []
    for index, sequence in enumerate(sequences):
        if sequence.num_games == 0 and index != 0:
            break
        rows.append(
            {
                "index": index,
                "num_games": sequence.num_games,
                "chance": sequence.chance,
                "color": css_color_from_probability(sequence.chance, sequence.num_games, 0.6),
            }
        )
    return pd.DataFrame(rows, columns=["index", "num_games", "chance", "color"])


def observed_expected_frame(sequence: SequenceStats, population: int, hits: int, sample: int) -> pd.DataFrame:
    """Observed counts beside the hypergeometric expectation for every reachable count."""
    expected = hypergeometric_distribution(population, sample, hits)
    low = max(sample - (population - hits), 0)
    high = min(sample, hits, len(sequence.counts) - 1)
    counts = list(range(low, high + 1))
    num_games = round_half_up(sum(sequence.counts[count].count for count in counts))
    return pd.DataFrame(
        {
            "count": counts,
            "observed": [sequence.counts[count].count for count in counts],
            "expected": [num_games * expected_probability(expected, count) for count in counts],
            "chance": [sequence.counts[count].chance for count in counts],
        }
    )


def build_observed_expected_chart(frame: pd.DataFrame, title: str, count_label: str = "Hits in sample") -> go.Figure:
    long_df = frame.melt(id_vars=["count"], value_vars=["observed", "expected"], var_name="series", value_name="games")
    fig = px.bar(
        long_df,
        x="count",
        y="games",
        color="series",
        barmode="group",
        title=title,
        labels={"count": count_label, "games": "Games", "series": ""},
        color_discrete_map={"observed": "#fae5d2", "expected": "red"},
    )
    fig.update_layout(xaxis=dict(dtick=1), yaxis=dict(rangemode="tozero"))
    return fig


def plot_observed_expected(
    stats: DistributionStats,
    population: int,
    hits: int,
    index: int,
    sample_size_for: Callable[[int], int],
    extrapolated: bool = False,
    title: str = "",
    save_to: Optional[PlotSaveDestinations] = None,
) -> pd.DataFrame:
    """Chart sequence ``index`` of a bucket and return the plotted frame."""
    sequences = stats.extrapolated if extrapolated and stats.extrapolated is not None else stats.known
    if not 0 <= index < len(sequences):
        raise ValueError(f"Sequence index {index} is out of range; the bucket has {len(sequences)} sequences.")

    frame = observed_expected_frame(sequences[index], population, hits, sample_size_for(index))
    if frame.empty:
        print(f"[report] Nothing to chart for {title}")
        return frame

    write_figure(build_observed_expected_chart(frame, title), save_to)
    if save_to:
        frame.to_csv(save_to.csv_path, index=False)
    return frame


__all__ = [
    "build_observed_expected_chart",
    "observed_expected_frame",
    "plot_observed_expected",
    "sequence_summary_frame",
]
