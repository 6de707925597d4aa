"""Bucket keys and accumulated distribution records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping, NamedTuple, Tuple, Type, Union

from .distribution import Distribution


class LandGroup(NamedTuple):
    """Library-position land counts for one deck and library configuration."""

    deck_size: int
    lands_in_deck: int
    library_size: int
    lands_in_library: int
    best_of: int
    shuffling: str


class HandGroup(NamedTuple):
    """Lands in each drawn hand, per mulligan count."""

    deck_size: int
    lands_in_deck: int
    best_of: int
    shuffling: str


class CardGroup(NamedTuple):
    """Deck-position counts for cards with a given number of copies."""

    deck_size: int
    best_of: int
    shuffling: str
    copies: int
    type: str


class PositionGroup(NamedTuple):
    """Hand counts for one end of the decklist."""

    deck_size: int
    end: str
    num_cards: int
    update: int


class LibraryGroup(NamedTuple):
    """Library configuration with deck and format dimensions merged away."""

    library_size: int
    lands_in_library: int
    shuffling: str


BucketKey = Union[LandGroup, HandGroup, CardGroup, PositionGroup, LibraryGroup]

GROUP_TYPES: Dict[str, Type[Any]] = {
    "lands": LandGroup,
    "hands": HandGroup,
    "cards": CardGroup,
    "positions": PositionGroup,
    "library": LibraryGroup,
}

# Rank of the stored distribution for each analysis kind.
DISTRIBUTION_RANKS: Dict[str, int] = {
    "lands": 3,
    "hands": 2,
    "cards": 3,
    "positions": 2,
    "library": 3,
}


@dataclass(frozen=True)
class AccumulatedRecord:
    """Counts accumulated for one bucket key and the newest game behind them."""

    key: BucketKey
    date: datetime
    distribution: Distribution


def key_to_mapping(key: BucketKey) -> Dict[str, Any]:
    return dict(key._asdict())


def key_from_mapping(kind: str, payload: Mapping[str, Any]) -> BucketKey:
    """Rebuild a bucket key from its stored field mapping."""
    try:
        group_type = GROUP_TYPES[kind]
    except KeyError as exc:
        raise ValueError(f"Unknown analysis kind '{kind}'") from exc
    missing = [name for name in group_type._fields if name not in payload]
    if missing:
        raise ValueError(f"Stored key for '{kind}' is missing fields: {', '.join(missing)}")
    return group_type(**{name: payload[name] for name in group_type._fields})


def key_sort_order(key: BucketKey) -> Tuple[str, ...]:
    return tuple(str(value) for value in key)


__all__ = [
    "AccumulatedRecord",
    "BucketKey",
    "CardGroup",
    "DISTRIBUTION_RANKS",
    "GROUP_TYPES",
    "HandGroup",
    "LandGroup",
    "LibraryGroup",
    "PositionGroup",
    "key_from_mapping",
    "key_sort_order",
    "key_to_mapping",
]
