"""Plotting and table utilities for shuffler statistics."""

from .charts import observed_expected_frame, plot_observed_expected, sequence_summary_frame
from .colors import css_color_from_probability, progress_to_red
from .save_config import PlotSaveConfig, PlotSaveDestinations, write_figure
from .tables import plot_stats_table, stats_table_frame

__all__ = [
    "css_color_from_probability",
    "observed_expected_frame",
    "plot_observed_expected",
    "plot_stats_table",
    "progress_to_red",
    "sequence_summary_frame",
    "stats_table_frame",
    "PlotSaveConfig",
    "PlotSaveDestinations",
    "write_figure",
]
