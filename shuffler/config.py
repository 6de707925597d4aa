"""Static configuration for aggregation windows, eligibility ranges and store paths."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Tuple, TypedDict


class RangeConfig(TypedDict):
    deck_sizes: Tuple[int, ...]
    lands: Tuple[int, int]


class CollectionConfig(TypedDict):
    collection: str
    ranges: Tuple[RangeConfig, ...]
    max_mulligans: int


# Default directory used by the Typer CLI; callers may override it.
DEFAULT_STORE_ROOT = Path("data/store")

# ---------------------------------------------------------------------------
# Batch window.

EPOCH = datetime(2019, 1, 1, tzinfo=timezone.utc)
BATCH_LIMIT = 2000
SETTLE_SECONDS = 600
UPSERT_BATCH = 100

# ---------------------------------------------------------------------------
# Client releases that changed shuffling or decklist logging.

SMOOTHED_SHUFFLING_RELEASE = datetime(2019, 2, 14, 15, 0, tzinfo=timezone.utc)
# Later games of a match played from this release until the client started reporting its
# tool version may carry untracked sideboard changes.
SIDEBOARD_TRACKING_BROKEN = datetime(2019, 2, 14, 15, 0, tzinfo=timezone.utc)
RELEASES: Tuple[Tuple[datetime, int], ...] = (
    (datetime(2019, 2, 14, 14, 0, tzinfo=timezone.utc), 11),
    (datetime(2019, 3, 27, 12, 0, tzinfo=timezone.utc), 12),
)
LATEST_RELEASE = 13
SMOOTHED_EVENT = "Play"
# Bo1 opening-hand smoothing would bias decklist-position counts.
POSITION_BEST_OF = 3

# ---------------------------------------------------------------------------
# Display.

HAND_SIZE = 7
EXTRAPOLATION_WINDOW = 10
BEST_OF_VALUES: Tuple[str, ...] = ("1", "3")
SHUFFLING_VALUES: Tuple[str, ...] = ("standard", "smoothed")

# ---------------------------------------------------------------------------
# Per-collection eligibility payloads.

LAND_STATS: CollectionConfig = {
    "collection": "land_stats",
    "ranges": (
        {"deck_sizes": (40, 41, 42), "lands": (14, 20)},
        {"deck_sizes": (60, 61, 62), "lands": (18, 28)},
    ),
    "max_mulligans": 3,
}

HAND_STATS: CollectionConfig = {
    "collection": "hand_stats",
    "ranges": (
        {"deck_sizes": tuple(range(40, 51)), "lands": (14, 25)},
        {"deck_sizes": tuple(range(60, 71)), "lands": (18, 32)},
    ),
    "max_mulligans": HAND_SIZE - 1,
}

CARD_STATS: CollectionConfig = {
    "collection": "card_stats",
    "ranges": LAND_STATS["ranges"],
    "max_mulligans": 3,
}

POSITION_STATS: CollectionConfig = {
    "collection": "position_stats",
    "ranges": (
        {"deck_sizes": (40,), "lands": (0, 40)},
        {"deck_sizes": (60,), "lands": (0, 60)},
    ),
    "max_mulligans": HAND_SIZE - 1,
}

# Acceptable decklist section sizes per deck size: (min, ideal, max).
SECTION_TARGETS: Dict[int, Tuple[int, int, int]] = {
    40: (15, 17, 18),
    60: (22, 24, 25),
}

COLLECTIONS: Dict[str, CollectionConfig] = {
    "lands": LAND_STATS,
    "hands": HAND_STATS,
    "cards": CARD_STATS,
    "positions": POSITION_STATS,
}


__all__ = [
    "BATCH_LIMIT",
    "BEST_OF_VALUES",
    "CARD_STATS",
    "COLLECTIONS",
    "CollectionConfig",
    "DEFAULT_STORE_ROOT",
    "EPOCH",
    "EXTRAPOLATION_WINDOW",
    "HAND_SIZE",
    "HAND_STATS",
    "LAND_STATS",
    "LATEST_RELEASE",
    "POSITION_BEST_OF",
    "POSITION_STATS",
    "RELEASES",
    "RangeConfig",
    "SECTION_TARGETS",
    "SETTLE_SECONDS",
    "SHUFFLING_VALUES",
    "SIDEBOARD_TRACKING_BROKEN",
    "SMOOTHED_EVENT",
    "SMOOTHED_SHUFFLING_RELEASE",
    "UPSERT_BATCH",
]
