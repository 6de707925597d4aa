"""Read-side regrouping of accumulated records."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List

from .distribution import Distribution, merge_all
from .records import AccumulatedRecord, LandGroup, LibraryGroup


def combine_library_groups(records: Iterable[AccumulatedRecord]) -> List[AccumulatedRecord]:
    """Merge library-land records that share a library configuration.

    Deck size, lands in deck and match format are summed away. Shorter
    distributions are padded with zeros, so records from different deck sizes
    combine without error.
    """
    grouped: Dict[LibraryGroup, List[AccumulatedRecord]] = defaultdict(list)
    for record in records:
        key = record.key
        if not isinstance(key, LandGroup):
            raise ValueError(f"Library regrouping expects land records, received {type(key).__name__}.")
        grouped[LibraryGroup(key.library_size, key.lands_in_library, key.shuffling)].append(record)

    combined: List[AccumulatedRecord] = []
    for library_key, members in grouped.items():
        distribution: Distribution = merge_all(member.distribution for member in members)
        combined.append(
            AccumulatedRecord(
                key=library_key,
                date=max(member.date for member in members),
                distribution=distribution,
            )
        )
    return combined


__all__ = ["combine_library_groups"]
