"""Grouping of per-game samples into buckets before they are folded into distributions."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Generic, Iterable, List, TypeVar

from .records import BucketKey

ValueT = TypeVar("ValueT")


@dataclass(frozen=True)
class GameSample(Generic[ValueT]):
    """One game's contribution to the bucket identified by `key`."""

    key: BucketKey
    date: datetime
    value: ValueT


@dataclass(frozen=True)
class BucketPlan(Generic[ValueT]):
    """Samples grouped by bucket key, with the newest date seen per bucket."""

    values: Dict[BucketKey, List[ValueT]]
    dates: Dict[BucketKey, datetime]


def build_bucket_plan(
    samples: Iterable[GameSample[ValueT]],
    key_fn: Callable[[GameSample[ValueT]], BucketKey] = lambda sample: sample.key,
) -> BucketPlan[ValueT]:
    """Group samples by `key_fn`, keeping insertion order within each bucket."""
    buckets: Dict[BucketKey, List[ValueT]] = defaultdict(list)
    dates: Dict[BucketKey, datetime] = {}
    for sample in samples:
        key = key_fn(sample)
        buckets[key].append(sample.value)
        if key not in dates or sample.date > dates[key]:
            dates[key] = sample.date
    return BucketPlan(values=dict(buckets), dates=dates)
