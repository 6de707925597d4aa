"""Turn accumulated records into display trees of scored statistics.

Every transform accepts whatever records are currently stored, including none,
and returns a `StatsView`. A view is a nested mapping with string keys whose
leaves are `ShufflingStats`; `selectors` names the nesting levels so callers can
walk the tree without knowing which analysis produced it.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, DefaultDict, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from shuffler.config import HAND_SIZE, SHUFFLING_VALUES
from shuffler.aggregation.records import AccumulatedRecord, CardGroup, HandGroup, LandGroup, PositionGroup
from shuffler.aggregation.regroup import combine_library_groups
from shuffler.stats.best_of import top_n_sample_size, with_combined_best_of
from shuffler.stats.extrapolation import hand_sample_sizes, transform_known_only, transform_top_n
from shuffler.stats.records import DistributionStats, ShufflingStats, StatsTable

# (shuffling, population, hits, stats)
TableEntry = Tuple[str, int, int, DistributionStats]


def hand_sample_size(index: int) -> int:
    return HAND_SIZE - index


@dataclass(frozen=True)
class StatsView:
    """Scored statistics for one analysis kind."""

    kind: str
    date: Optional[datetime]
    selectors: Tuple[str, ...]
    tree: Any
    sample_size_for: Callable[[int], int] = field(default=top_n_sample_size, compare=False)

    def options(self, choices: Sequence[str] = ()) -> List[str]:
        """Keys available at the level below ``choices``."""
        node = self._walk(choices)
        if not isinstance(node, Mapping):
            return []
        return list(node)

    def select(self, choices: Sequence[str]) -> Optional[ShufflingStats]:
        """ShufflingStats at the end of ``choices``, or None when the branch is absent."""
        if len(choices) != len(self.selectors):
            raise ValueError(
                f"'{self.kind}' statistics are selected by {', '.join(self.selectors) or 'no keys'}; "
                f"received {len(choices)} value(s)."
            )
        node = self._walk(choices)
        return node if isinstance(node, ShufflingStats) else None

    def _walk(self, choices: Sequence[str]) -> Any:
        node = self.tree
        for choice in choices:
            if not isinstance(node, Mapping) or str(choice) not in node:
                return None
            node = node[str(choice)]
        return node


def _latest(records: Sequence[AccumulatedRecord]) -> Optional[datetime]:
    return max((record.date for record in records), default=None)


def _sorted_shufflings(names: Iterable[str]) -> List[str]:
    order = {name: index for index, name in enumerate(SHUFFLING_VALUES)}
    return sorted(set(names), key=lambda name: (order.get(name, len(order)), name))


def build_shuffling_stats(entries: Iterable[TableEntry]) -> ShufflingStats:
    """Group transformed records into shuffling -> population -> hits tables."""
    tables: DefaultDict[str, StatsTable] = defaultdict(dict)
    for shuffling, population, hits, stats in entries:
        tables[shuffling].setdefault(population, {})[hits] = stats

    ordered: Dict[str, StatsTable] = {}
    games: Dict[str, int] = {}
    for shuffling in _sorted_shufflings(tables):
        table = tables[shuffling]
        ordered[shuffling] = {
            population: dict(sorted(table[population].items())) for population in sorted(table)
        }
        games[shuffling] = sum(stats.num_games for row in table.values() for stats in row.values())
    return ShufflingStats(tables=ordered, games=games)


def _by_best_of(
    entries: Iterable[Tuple[int, TableEntry]],
    sample_size_for: Callable[[int], int],
) -> Dict[str, ShufflingStats]:
    grouped: DefaultDict[str, List[TableEntry]] = defaultdict(list)
    for best_of, entry in entries:
        grouped[str(best_of)].append(entry)
    by_best_of = {best_of: build_shuffling_stats(grouped[best_of]) for best_of in sorted(grouped)}
    return with_combined_best_of(by_best_of, sample_size_for)


def transform_land_stats(records: Iterable[AccumulatedRecord]) -> StatsView:
    """Library land statistics for every deck and format, merged per library configuration."""
    records = list(records)
    entries = [
        (record.key.shuffling, record.key.library_size, record.key.lands_in_library,
         transform_top_n(record.distribution, record.key.library_size, record.key.lands_in_library))
        for record in combine_library_groups(records)
    ]
    return StatsView(kind="library", date=_latest(records), selectors=(), tree=build_shuffling_stats(entries))


def transform_deck_stats(records: Iterable[AccumulatedRecord]) -> StatsView:
    """Library land statistics nested deck size -> lands in deck -> format."""
    records = list(records)
    grouped: DefaultDict[Tuple[int, int], List[Tuple[int, TableEntry]]] = defaultdict(list)
    for record in records:
        key = record.key
        if not isinstance(key, LandGroup):
            raise ValueError(f"Deck statistics expect land records, received {type(key).__name__}.")
        stats = transform_top_n(record.distribution, key.library_size, key.lands_in_library)
        grouped[key.deck_size, key.lands_in_deck].append(
            (key.best_of, (key.shuffling, key.library_size, key.lands_in_library, stats))
        )

    tree: Dict[str, Dict[str, Dict[str, ShufflingStats]]] = {}
    for deck_size, lands_in_deck in sorted(grouped):
        tree.setdefault(str(deck_size), {})[str(lands_in_deck)] = _by_best_of(
            grouped[deck_size, lands_in_deck], top_n_sample_size
        )
    return StatsView(
        kind="decks",
        date=_latest(records),
        selectors=("deck_size", "lands_in_deck", "best_of"),
        tree=tree,
    )


def transform_hand_stats(records: Iterable[AccumulatedRecord]) -> StatsView:
    """Opening hand land counts, tables keyed deck size -> lands in deck."""
    records = list(records)
    entries: List[Tuple[int, TableEntry]] = []
    for record in records:
        key = record.key
        if not isinstance(key, HandGroup):
            raise ValueError(f"Hand statistics expect hand records, received {type(key).__name__}.")
        stats = transform_known_only(record.distribution, key.deck_size, key.lands_in_deck, hand_sample_sizes(HAND_SIZE))
        # Early Bo1 standard records hold mulligans only, so the opening hand row is empty.
        if key.best_of == 1 and key.shuffling == "standard" and len(stats.known) > 1:
            stats = replace(stats, num_games=stats.known[1].num_games)
        entries.append((key.best_of, (key.shuffling, key.deck_size, key.lands_in_deck, stats)))

    return StatsView(
        kind="hands",
        date=_latest(records),
        selectors=("best_of",),
        tree=_by_best_of(entries, hand_sample_size),
        sample_size_for=hand_sample_size,
    )


def transform_card_stats(records: Iterable[AccumulatedRecord]) -> StatsView:
    """Deck position of multi-copy cards, tables keyed deck size -> copies."""
    records = list(records)
    grouped: DefaultDict[str, List[Tuple[int, TableEntry]]] = defaultdict(list)
    for record in records:
        key = record.key
        if not isinstance(key, CardGroup):
            raise ValueError(f"Card statistics expect card records, received {type(key).__name__}.")
        stats = transform_top_n(record.distribution, key.deck_size, key.copies)
        grouped[key.type].append((key.best_of, (key.shuffling, key.deck_size, key.copies, stats)))

    tree = {card_type: _by_best_of(grouped[card_type], top_n_sample_size) for card_type in sorted(grouped)}
    return StatsView(kind="cards", date=_latest(records), selectors=("type", "best_of"), tree=tree)


def transform_position_stats(records: Iterable[AccumulatedRecord]) -> StatsView:
    """Hand counts of decklist sections, nested client update -> decklist end.

    Only Bo3 games are collected, so every table sits under standard shuffling.
    """
    records = list(records)
    grouped: DefaultDict[Tuple[int, str], List[TableEntry]] = defaultdict(list)
    for record in records:
        key = record.key
        if not isinstance(key, PositionGroup):
            raise ValueError(f"Position statistics expect position records, received {type(key).__name__}.")
        stats = transform_known_only(record.distribution, key.deck_size, key.num_cards, hand_sample_sizes(HAND_SIZE))
        grouped[key.update, key.end].append(("standard", key.deck_size, key.num_cards, stats))

    tree: Dict[str, Dict[str, ShufflingStats]] = {}
    for update, end in sorted(grouped):
        tree.setdefault(str(update), {})[end] = build_shuffling_stats(grouped[update, end])
    return StatsView(
        kind="positions",
        date=_latest(records),
        selectors=("update", "end"),
        tree=tree,
        sample_size_for=hand_sample_size,
    )


TRANSFORMS: Dict[str, Tuple[str, Callable[[Iterable[AccumulatedRecord]], StatsView]]] = {
    "library": ("lands", transform_land_stats),
    "decks": ("lands", transform_deck_stats),
    "hands": ("hands", transform_hand_stats),
    "cards": ("cards", transform_card_stats),
    "positions": ("positions", transform_position_stats),
}


__all__ = [
    "StatsView",
    "TRANSFORMS",
    "build_shuffling_stats",
    "hand_sample_size",
    "transform_card_stats",
    "transform_deck_stats",
    "transform_hand_stats",
    "transform_land_stats",
    "transform_position_stats",
]
