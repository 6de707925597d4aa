"""Key-value stores for accumulated distribution records."""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence

from shuffler.aggregation.distribution import from_nested, to_nested
from shuffler.aggregation.records import (
    DISTRIBUTION_RANKS,
    AccumulatedRecord,
    BucketKey,
    key_from_mapping,
    key_sort_order,
    key_to_mapping,
)
from shuffler.config import UPSERT_BATCH

from .helpers import ensure_mapping, format_date, parse_date


class DistributionStore(Protocol):
    """Storage for one collection of accumulated records, addressed by bucket key."""

    kind: str

    def get(self, key: BucketKey) -> Optional[AccumulatedRecord]:
        """Return the record stored under `key`, or None if absent."""
        ...

    def upsert(self, records: Sequence[AccumulatedRecord], batch_size: int = UPSERT_BATCH) -> int:
        """Insert or replace records by key, leaving every other key untouched."""
        ...

    def records(self) -> List[AccumulatedRecord]:
        ...

    def latest_date(self) -> Optional[datetime]:
        """Newest match date already folded into this collection."""
        ...

    def set_high_water(self, date: datetime) -> None:
        ...


def record_to_payload(record: AccumulatedRecord) -> Dict[str, Any]:
    return {
        "group": key_to_mapping(record.key),
        "date": format_date(record.date),
        "distribution": to_nested(record.distribution),
    }


def record_from_payload(kind: str, payload: Mapping[str, Any]) -> AccumulatedRecord:
    data = ensure_mapping(payload)
    return AccumulatedRecord(
        key=key_from_mapping(kind, ensure_mapping(data.get("group"))),
        date=parse_date(data.get("date")),
        distribution=from_nested(data.get("distribution"), DISTRIBUTION_RANKS[kind]),
    )


class MemoryDistributionStore:
    """In-process store, mostly for tests and one-off reports."""

    def __init__(self, kind: str, records: Iterable[AccumulatedRecord] = ()) -> None:
        if kind not in DISTRIBUTION_RANKS:
            raise ValueError(f"Unknown analysis kind '{kind}'")
        self.kind = kind
        self._records: Dict[BucketKey, AccumulatedRecord] = {record.key: record for record in records}
        self._high_water: Optional[datetime] = None

    def get(self, key: BucketKey) -> Optional[AccumulatedRecord]:
        return self._records.get(key)

    def upsert(self, records: Sequence[AccumulatedRecord], batch_size: int = UPSERT_BATCH) -> int:
        for start in range(0, len(records), batch_size):
            self._write_batch(records[start : start + batch_size])
        return len(records)

    def _write_batch(self, batch: Sequence[AccumulatedRecord]) -> None:
        for record in batch:
            self._records[record.key] = record

    def records(self) -> List[AccumulatedRecord]:
        return sorted(self._records.values(), key=lambda record: key_sort_order(record.key))

    def latest_date(self) -> Optional[datetime]:
        dates = [record.date for record in self._records.values()]
        if self._high_water is not None:
            dates.append(self._high_water)
        return max(dates) if dates else None

    def set_high_water(self, date: datetime) -> None:
        if self._high_water is None or date > self._high_water:
            self._high_water = date

    def __len__(self) -> int:
        return len(self._records)


class JsonDistributionStore(MemoryDistributionStore):
    """Store persisted as one JSON document per collection, rewritten atomically per batch."""

    def __init__(self, path: Path, kind: str) -> None:
        super().__init__(kind)
        self.path = path
        if path.exists():
            self._load()

    def _load(self) -> None:
        try:
            payload = ensure_mapping(json.loads(self.path.read_text(encoding="utf-8")))
        except (json.JSONDecodeError, TypeError) as exc:
            raise RuntimeError(f"Store file {self.path} is not a valid distribution document.") from exc
        stored_kind = payload.get("kind")
        if stored_kind != self.kind:
            raise RuntimeError(f"Store file {self.path} holds '{stored_kind}' records, expected '{self.kind}'.")
        for item in payload.get("records") or ():
            record = record_from_payload(self.kind, item)
            self._records[record.key] = record
        high_water = payload.get("high_water")
        self._high_water = parse_date(high_water) if high_water else None

    def _write_batch(self, batch: Sequence[AccumulatedRecord]) -> None:
        super()._write_batch(batch)
        self.flush()

    def set_high_water(self, date: datetime) -> None:
        super().set_high_water(date)
        self.flush()

    def flush(self) -> None:
        payload = {
            "kind": self.kind,
            "high_water": format_date(self._high_water) if self._high_water else None,
            "records": [record_to_payload(record) for record in self.records()],
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile("w", encoding="utf-8", delete=False, dir=self.path.parent) as tmp:
            tmp.write(json.dumps(payload, indent=2, sort_keys=True))
        os.replace(tmp.name, self.path)


def open_store(root: Path, kind: str, collection: str) -> JsonDistributionStore:
    """Open the JSON store for one collection under `root`."""
    store = JsonDistributionStore(root / f"{collection}.json", kind)
    print(f"[store] Opened {collection} ({len(store)} records) at {store.path}")
    return store


__all__ = [
    "DistributionStore",
    "JsonDistributionStore",
    "MemoryDistributionStore",
    "open_store",
    "record_from_payload",
    "record_to_payload",
]
