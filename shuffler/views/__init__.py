from .transform import (
    TRANSFORMS,
    StatsView,
    transform_card_stats,
    transform_deck_stats,
    transform_hand_stats,
    transform_land_stats,
    transform_position_stats,
)

__all__ = [
    "StatsView",
    "TRANSFORMS",
    "transform_card_stats",
    "transform_deck_stats",
    "transform_hand_stats",
    "transform_land_stats",
    "transform_position_stats",
]
