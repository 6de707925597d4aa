"""Shared configuration for storing Plotly figures on disk."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import plotly.graph_objects as go


@dataclass(frozen=True)
class PlotSaveDestinations:
    """Resolved destinations for saving a single plot."""

    directory: Path
    slug: str
    save_static: bool
    save_html: bool

    def ensure_dir(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    @property
    def png_path(self) -> Path:
        return self.directory / f"{self.slug}.png"

    @property
    def html_path(self) -> Path:
        return self.directory / f"{self.slug}.html"

    @property
    def csv_path(self) -> Path:
        return self.directory / f"{self.slug}.csv"


@dataclass(frozen=True)
class PlotSaveConfig:
    """Factory for per-report destinations under ``base_dir/run_tag``."""

    base_dir: Path
    run_tag: str
    save_static: bool = True
    save_html: bool = True

    def for_plot(self, slug: str) -> PlotSaveDestinations:
        target = self.base_dir / self.run_tag
        return PlotSaveDestinations(
            directory=target,
            slug=slug,
            save_static=self.save_static,
            save_html=self.save_html,
        )


def write_figure(fig: go.Figure, save_to: Optional[PlotSaveDestinations]) -> None:
    """Write a figure to its destinations, or open it when no destination is given."""
    if save_to is None:
        fig.show()
        return
    save_to.ensure_dir()
    if save_to.save_static:
        fig.write_image(str(save_to.png_path), engine="kaleido")
    if save_to.save_html:
        fig.write_html(
            str(save_to.html_path),
            include_plotlyjs="cdn",
            full_html=True,
        )


__all__ = ["PlotSaveConfig", "PlotSaveDestinations", "write_figure"]
