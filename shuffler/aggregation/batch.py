"""Periodic batch job folding newly seen matches into accumulated distributions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from shuffler.config import (
    BATCH_LIMIT,
    CARD_STATS,
    EPOCH,
    HAND_STATS,
    LAND_STATS,
    POSITION_STATS,
    SETTLE_SECONDS,
    UPSERT_BATCH,
    CollectionConfig,
)
from shuffler.store.helpers import format_date
from shuffler.store.io import DistributionStore
from shuffler.store.matches import MatchRecord

from .bucketing import GameSample, build_bucket_plan
from .counting import card_distribution, hand_distribution, land_distribution
from .distribution import Distribution, merge
from .records import AccumulatedRecord, BucketKey
from .samples import card_samples, hand_samples, land_samples, position_samples


@dataclass(frozen=True)
class Analysis:
    """How one collection turns matches into per-key count distributions."""

    kind: str
    config: CollectionConfig
    extract: Callable[[MatchRecord, CollectionConfig], Iterable[GameSample[Any]]]
    build: Callable[[Any, List[Any]], Distribution]


ANALYSES: Dict[str, Analysis] = {
    "lands": Analysis(
        kind="lands",
        config=LAND_STATS,
        extract=land_samples,
        build=lambda key, values: land_distribution(key.library_size, key.lands_in_library, values),
    ),
    "hands": Analysis(
        kind="hands",
        config=HAND_STATS,
        extract=hand_samples,
        build=lambda key, values: hand_distribution(values),
    ),
    "cards": Analysis(
        kind="cards",
        config=CARD_STATS,
        extract=card_samples,
        build=lambda key, values: card_distribution(key.deck_size, key.copies, values),
    ),
    "positions": Analysis(
        kind="positions",
        config=POSITION_STATS,
        extract=position_samples,
        build=lambda key, values: hand_distribution(values),
    ),
}


@dataclass(frozen=True)
class BatchReport:
    kind: str
    matches_seen: int
    samples_counted: int
    records_written: int
    high_water: datetime


def select_window(
    matches: Iterable[MatchRecord],
    since: datetime,
    until: datetime,
    limit: int = BATCH_LIMIT,
) -> List[MatchRecord]:
    """Oldest `limit` matches strictly between `since` and `until`."""
    window = sorted((match for match in matches if since < match.date < until), key=lambda match: match.date)
    return window[:limit]


def merge_record(
    existing: Optional[AccumulatedRecord],
    key: BucketKey,
    date: datetime,
    distribution: Distribution,
) -> AccumulatedRecord:
    """Fold a batch's counts into the stored record for the same key."""
    if existing is None:
        return AccumulatedRecord(key=key, date=date, distribution=distribution)
    if existing.key != key:
        raise ValueError(f"Cannot merge records for different keys: {existing.key} and {key}.")
    return AccumulatedRecord(
        key=key,
        date=max(existing.date, date),
        distribution=merge(existing.distribution, distribution),
    )


def run_batch(
    matches: Iterable[MatchRecord],
    store: DistributionStore,
    analysis: Analysis,
    now: Optional[datetime] = None,
    limit: int = BATCH_LIMIT,
    settle_seconds: int = SETTLE_SECONDS,
    upsert_batch: int = UPSERT_BATCH,
) -> BatchReport:
    """Aggregate one window of matches into `store`.

    Only matches newer than the store's high-water mark are read, so each match is
    merged at most once as long as one batch runs at a time per store.
    """
    if store.kind != analysis.kind:
        raise ValueError(f"Store holds '{store.kind}' records but the analysis is '{analysis.kind}'.")

    high_water = store.latest_date() or EPOCH
    until = (now or datetime.now(timezone.utc)) - timedelta(seconds=settle_seconds)
    window = select_window(matches, high_water, until, limit)
    print(f"[aggregate] {analysis.kind}: {len(window)} matches after {format_date(high_water)}")
    if not window:
        return BatchReport(analysis.kind, 0, 0, 0, high_water)

    samples = [sample for match in window for sample in analysis.extract(match, analysis.config)]
    plan = build_bucket_plan(samples)

    updated = [
        merge_record(store.get(key), key, plan.dates[key], analysis.build(key, values))
        for key, values in plan.values.items()
    ]
    written = store.upsert(updated, batch_size=upsert_batch)
    newest = window[-1].date
    store.set_high_water(newest)
    print(
        f"[aggregate] {analysis.kind}: counted {len(samples)} samples into {written} records; "
        f"high-water mark now {format_date(newest)}"
    )
    return BatchReport(analysis.kind, len(window), len(samples), written, newest)


def run_all_batches(
    matches: Sequence[MatchRecord],
    stores: Mapping[str, DistributionStore],
    now: Optional[datetime] = None,
    limit: int = BATCH_LIMIT,
) -> List[BatchReport]:
    """Run every analysis that has a store, in a fixed order."""
    reports: List[BatchReport] = []
    for kind, analysis in ANALYSES.items():
        store = stores.get(kind)
        if store is None:
            continue
        reports.append(run_batch(matches, store, analysis, now=now, limit=limit))
    return reports


__all__ = [
    "ANALYSES",
    "Analysis",
    "BatchReport",
    "merge_record",
    "run_all_batches",
    "run_batch",
    "select_window",
]
