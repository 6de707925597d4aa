"""Turn grouped per-game samples into count distributions."""

from __future__ import annotations

from bisect import bisect_right
from collections import Counter
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Sequence, Tuple

from shuffler.config import HAND_SIZE, SECTION_TARGETS
from shuffler.store.matches import DeckEntry

from .distribution import Leaf, Pair, Vector, vector

HandCounts = Sequence[Optional[int]]
PositionSet = Tuple[Sequence[int], int]


def land_distribution(library_size: int, lands_in_library: int, land_sets: Sequence[Sequence[int]]) -> Vector:
    """Count library lands by position.

    Each entry of ``land_sets`` lists how many lands were in the top 1, 2, ...
    known cards of one game's library. Row ``p`` covers 0..p+1 lands while the
    library still has lands to reveal, and 0..lands_in_library afterwards.
    """
    known: Counter = Counter()
    first_unknown: Counter = Counter()
    for lands in land_sets:
        for position, count in enumerate(lands):
            known[position, count] += 1
        if lands:
            first_unknown[len(lands), lands[-1]] += 1

    rows = []
    for position in range(library_size):
        width = position + 2 if position < lands_in_library else lands_in_library + 1
        rows.append([Pair(known[position, count], first_unknown[position, count]) for count in range(width)])
    return vector(rows)


def hand_distribution(hand_sets: Sequence[HandCounts]) -> Vector:
    """Count tracked cards per drawn hand, one row per mulligan from seven cards down to one.

    ``None`` entries mark hands that belong to another group and match no column.
    """
    counts: Counter = Counter()
    for hands in hand_sets:
        for mulligans, count in enumerate(hands[:HAND_SIZE]):
            if count is not None:
                counts[mulligans, count] += 1

    return vector(
        [Leaf(counts[mulligans, count]) for count in range(HAND_SIZE - mulligans + 1)]
        for mulligans in range(HAND_SIZE)
    )


def card_distribution(deck_size: int, copies: int, position_sets: Sequence[PositionSet]) -> Vector:
    """Count copies of a card at or above each 1-based deck position.

    Each entry pairs the known positions of one card's copies with the number of
    cards known from the top of the deck in that game.
    """
    known: Counter = Counter()
    first_unknown: Counter = Counter()
    for positions, cards_known in position_sets:
        ordered = sorted(positions)
        for position in range(1, min(deck_size, cards_known + 1) + 1):
            seen = bisect_right(ordered, position)
            if position <= cards_known:
                known[position, seen] += 1
            else:
                first_unknown[position, seen] += 1

    return vector(
        [Pair(known[position, count], first_unknown[position, count]) for count in range(copies + 1)]
        for position in range(1, deck_size + 1)
    )


@dataclass(frozen=True)
class DeckSection:
    """Cards from one end of a decklist whose copies all lie inside that end."""

    end: str
    num_cards: int
    card_ids: FrozenSet[int]


def _pick(candidates: Sequence[Tuple[int, int]], ideal: int) -> Optional[int]:
    """Boundary index whose card count is closest to ideal, ties going to fewer cards."""
    if not candidates:
        return None
    _, index = min(candidates, key=lambda item: (abs(item[0] - ideal), item[0]))
    return index


def select_sections(deck_list: Sequence[DeckEntry], deck_size: int) -> List[DeckSection]:
    """Choose the front and back decklist sections whose hand counts are tracked."""
    targets = SECTION_TARGETS.get(deck_size)
    if targets is None or not deck_list:
        return []
    minimum, ideal, maximum = targets

    boundaries = [0]
    for entry in deck_list:
        boundaries.append(boundaries[-1] + entry.quantity)

    front = _pick([(cards, index) for index, cards in enumerate(boundaries) if minimum <= cards <= maximum], ideal)
    back = _pick(
        [(deck_size - cards, index) for index, cards in enumerate(boundaries) if minimum <= deck_size - cards <= maximum],
        ideal,
    )

    ids = [entry.card_id for entry in deck_list]
    sections: List[DeckSection] = []
    for end, bound in (("front", front), ("back", back)):
        if bound is None:
            continue
        inside = ids[:bound] if end == "front" else ids[bound:]
        outside = ids[bound:] if end == "front" else ids[:bound]
        # Copies of one card split across the bound cannot be told apart in a hand.
        if set(inside) & set(outside):
            continue
        num_cards = boundaries[bound] if end == "front" else boundaries[-1] - boundaries[bound]
        sections.append(DeckSection(end=end, num_cards=num_cards, card_ids=frozenset(inside)))
    return sections


def section_hand_counts(section: DeckSection, hands_drawn: Sequence[Sequence[int]]) -> List[int]:
    return [sum(1 for card in hand if card in section.card_ids) for hand in hands_drawn]


__all__ = [
    "DeckSection",
    "card_distribution",
    "hand_distribution",
    "land_distribution",
    "section_hand_counts",
    "select_sections",
]
