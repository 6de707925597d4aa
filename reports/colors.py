"""Colour heuristic for significance cells.

This is a display curve only. The statistics themselves come from
`shuffler.stats`; nothing here feeds back into them.
"""

from __future__ import annotations

from typing import Optional

FULL_OPACITY_GAMES = 5000
NO_DATA_RGB = (145, 121, 97)

# Fitted through (0.5, 0), (0.9, 0.5) and (1, 1) on the improbability scale.
_CURVE_SCALE = 0.001467411482151848
_CURVE_BASE = 708.081919401527
_CURVE_OFFSET = 0.03904753883392028


def progress_to_red(probability: Optional[float]) -> Optional[float]:
    """Position of a chance on the green -> yellow -> red ramp, from 0 to 1."""
    if probability is None:
        return None
    if probability >= 0.5:
        return 0.0
    improbability = 1 - probability
    progress = _CURVE_SCALE * _CURVE_BASE**improbability - _CURVE_OFFSET
    return min(max(progress, 0.0), 1.0)


def css_color_from_probability(
    probability: Optional[float],
    games: float = FULL_OPACITY_GAMES,
    max_opacity: float = 1.0,
) -> str:
    """CSS rgba colour for a chance; opacity grows with the number of games behind it."""
    progress = progress_to_red(probability)
    if progress is None:
        r, g, b = NO_DATA_RGB
        return f"rgba({r}, {g}, {b}, {max_opacity / 2})"
    opacity = max_opacity * min(games / FULL_OPACITY_GAMES, 1)
    red = round(min(progress * 2, 1) * 255)
    green = round(min((1 - progress) * 2, 1) * 255)
    return f"rgba({red}, {green}, 0, {opacity})"


# Same ramp as css_color_from_probability, for plotly colour scales.
RED_GREEN_SCALE = [[0.0, "rgb(0, 255, 0)"], [0.5, "rgb(255, 255, 0)"], [1.0, "rgb(255, 0, 0)"]]


__all__ = ["RED_GREEN_SCALE", "css_color_from_probability", "progress_to_red"]
