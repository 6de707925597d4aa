from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Sequence, Tuple


def ensure_mapping(row: Any) -> Mapping[str, Any]:
    """Guarantee stored rows behave like mappings."""
    if isinstance(row, Mapping):
        return row
    raise TypeError(f"Unexpected row type: {type(row)}")


def to_int(value: Any) -> int:
    """Robustly convert JSON fields to ints."""
    if value is None:
        raise ValueError("Expected integer-like value, received None")
    if isinstance(value, bool):
        return int(value)
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Cannot convert {value!r} to int") from exc


def int_tuple(value: Any) -> Tuple[int, ...]:
    """Return a tuple of ints even when the source is None."""
    if value is None:
        return ()
    if not isinstance(value, Sequence) or isinstance(value, str):
        raise ValueError(f"Expected a list of integers, received {value!r}")
    return tuple(to_int(item) for item in value)


def parse_date(value: Any) -> datetime:
    """Parse an ISO 8601 timestamp, assuming UTC when no offset is given."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value[:-1] + "+00:00" if value.endswith("Z") else value
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(f"Cannot parse date {value!r}") from exc
    else:
        raise ValueError(f"Expected an ISO 8601 date string, received {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_date(value: datetime) -> str:
    """Serialize a timestamp in the sortable millisecond form used by stored records."""
    utc = value.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"
