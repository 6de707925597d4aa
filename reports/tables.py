"""Significance tables: one cell per (population, hits) bucket."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from shuffler.stats.records import ShufflingStats, StatsTable
from .colors import RED_GREEN_SCALE, css_color_from_probability, progress_to_red
from .save_config import PlotSaveDestinations, write_figure

TABLE_COLUMNS = ["population", "hits", "num_games", "chance", "redness", "color"]

# View kind -> (column axis, row axis)
AXIS_LABELS: Dict[str, Tuple[str, str]] = {
    "library": ("Library size", "Lands in library"),
    "decks": ("Library size", "Lands in library"),
    "hands": ("Deck size", "Lands in deck"),
    "cards": ("Deck size", "Copies of card"),
    "positions": ("Deck size", "Cards in section"),
}


def stats_table_frame(table: Optional[StatsTable]) -> pd.DataFrame:
    """Flatten a stats table into one row per bucket with display colours."""
    rows: List[Dict[str, object]] = []
    for population, row in (table or {}).items():
        for hits, stats in row.items():
            rows.append(
                {
                    "population": population,
                    "hits": hits,
                    "num_games": stats.num_games,
                    "chance": stats.chance,
                    "redness": progress_to_red(stats.chance),
                    "color": css_color_from_probability(stats.chance, stats.num_games, 0.6),
                }
            )
    if not rows:
        return pd.DataFrame(columns=TABLE_COLUMNS)
    return pd.DataFrame(rows, columns=TABLE_COLUMNS).sort_values(["population", "hits"]).reset_index(drop=True)


def build_stats_heatmap(frame: pd.DataFrame, title: str, labels: Tuple[str, str]) -> Optional[go.Figure]:
    """Heatmap of bucket improbability annotated with game counts. Empty frames give None."""
    populated = frame[frame["num_games"] > 0]
    if populated.empty:
        return None

    redness = populated.pivot(index="hits", columns="population", values="redness").astype(float)
    games = populated.pivot(index="hits", columns="population", values="num_games").reindex_like(redness)
    text = [["" if pd.isna(value) else str(int(value)) for value in row] for row in games.to_numpy()]

    column_label, row_label = labels
    fig = px.imshow(
        redness,
        color_continuous_scale=RED_GREEN_SCALE,
        zmin=0.0,
        zmax=1.0,
        aspect="auto",
        title=title,
        labels={"x": column_label, "y": row_label, "color": "Improbability"},
    )
    fig.update_traces(text=text, texttemplate="%{text}")
    return fig


def plot_stats_table(
    stats: ShufflingStats,
    shuffling: str,
    kind: str,
    title: str,
    save_to: Optional[PlotSaveDestinations] = None,
) -> pd.DataFrame:
    """Render the table for one shuffling and return its flattened frame."""
    frame = stats_table_frame(stats.table(shuffling))
    fig = build_stats_heatmap(frame, title, AXIS_LABELS.get(kind, ("Population", "Hits")))
    if fig is None:
        print(f"[report] No {shuffling} games recorded for {title}")
        return frame

    write_figure(fig, save_to)
    if save_to:
        frame.to_csv(save_to.csv_path, index=False)
    return frame


__all__ = ["AXIS_LABELS", "build_stats_heatmap", "plot_stats_table", "stats_table_frame"]
