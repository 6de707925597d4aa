"""Tests for colours, table frames and charts."""

from __future__ import annotations

from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from reports.charts import (
    build_observed_expected_chart,
    observed_expected_frame,
    plot_observed_expected,
    sequence_summary_frame,
)
from reports.colors import css_color_from_probability, progress_to_red
from reports.save_config import PlotSaveConfig
from reports.tables import build_stats_heatmap, plot_stats_table, stats_table_frame
from shuffler.stats.best_of import top_n_sample_size
from shuffler.stats.probability import hypergeometric_distribution
from shuffler.stats.records import DistributionStats, ShufflingStats
from shuffler.stats.significance import score_counts


def _bucket(counts, population: int = 40, hits: int = 17) -> DistributionStats:
    sequence = score_counts(counts, hypergeometric_distribution(population, 1, hits))
    return DistributionStats(num_games=sequence.num_games, chance=sequence.chance, known=(sequence,))


# ---------------------------------------------------------------------------
# Colours


def test_css_color_without_chance() -> None:
    assert css_color_from_probability(None) == "rgba(145, 121, 97, 0.5)"


def test_css_color_likely_outcomes_are_green() -> None:
    assert css_color_from_probability(0.7) == "rgba(0, 255, 0, 1.0)"
    assert css_color_from_probability(0.9, games=2500, max_opacity=0.6) == "rgba(0, 255, 0, 0.3)"


def test_css_color_improbable_outcomes_turn_red() -> None:
    assert css_color_from_probability(1e-9) == "rgba(255, 0, 0, 1.0)"


def test_progress_to_red_curve_points() -> None:
    assert progress_to_red(None) is None
    assert progress_to_red(0.5) == 0.0
    assert progress_to_red(0.1) == pytest.approx(0.5, abs=0.01)
    assert progress_to_red(0.0) == pytest.approx(1.0, abs=1e-6)


# ---------------------------------------------------------------------------
# Tables


def test_stats_table_frame_rows() -> None:
    table = {40: {18: _bucket([5, 5], hits=18), 17: _bucket([23, 17])}, 41: {17: _bucket([0, 0])}}
    frame = stats_table_frame(table)

    assert list(frame[["population", "hits"]].itertuples(index=False, name=None)) == [(40, 17), (40, 18), (41, 17)]
    assert list(frame["num_games"]) == [40, 10, 0]


def test_empty_table_has_no_heatmap() -> None:
    frame = stats_table_frame(None)
    assert frame.empty
    assert build_stats_heatmap(frame, "empty", ("x", "y")) is None


def test_plot_stats_table_writes_html_and_csv(tmp_path: Path) -> None:
    stats = ShufflingStats(tables={"standard": {40: {17: _bucket([23, 17])}}}, games={"standard": 40})
    config = PlotSaveConfig(base_dir=tmp_path, run_tag="run", save_static=False, save_html=True)
    destination = config.for_plot("hands-standard")

    frame = plot_stats_table(stats, "standard", "hands", "hands", save_to=destination)

    assert len(frame) == 1
    assert destination.html_path.exists()
    assert destination.csv_path.exists()
    assert not destination.png_path.exists()


def test_plot_stats_table_without_games(capsys: pytest.CaptureFixture[str]) -> None:
    stats = ShufflingStats(tables={"standard": {}}, games={"standard": 0})
    frame = plot_stats_table(stats, "smoothed", "hands", "hands")
    assert frame.empty
    assert "[report]" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# Charts


def test_observed_expected_frame_matches_expectation() -> None:
    sequence = _bucket([23, 17]).known[0]
    frame = observed_expected_frame(sequence, population=40, hits=17, sample=1)

    assert list(frame["count"]) == [0, 1]
    assert list(frame["observed"]) == [23, 17]
    assert list(frame["expected"]) == pytest.approx([23.0, 17.0])


def test_observed_expected_frame_limits_reachable_counts() -> None:
    sequence = score_counts([0, 0, 4, 6], hypergeometric_distribution(5, 3, 3))
    frame = observed_expected_frame(sequence, population=5, hits=3, sample=3)
    assert list(frame["count"]) == [1, 2, 3]


def test_sequence_summary_stops_at_first_empty_row() -> None:
    rows = tuple(score_counts(counts, [0.5, 0.5]) for counts in ([3, 3], [2, 2], [0, 0], [1, 1]))
    stats = DistributionStats(num_games=6, chance=None, known=rows)
    summary = sequence_summary_frame(stats)
    assert list(summary["index"]) == [0, 1]


def test_build_observed_expected_chart_has_both_series() -> None:
    frame = observed_expected_frame(_bucket([23, 17]).known[0], population=40, hits=17, sample=1)
    fig = build_observed_expected_chart(frame, "chart")
    assert {trace.name for trace in fig.data} == {"observed", "expected"}


def test_plot_observed_expected_rejects_bad_index() -> None:
    with pytest.raises(ValueError):
        plot_observed_expected(_bucket([23, 17]), 40, 17, index=3, sample_size_for=top_n_sample_size)
